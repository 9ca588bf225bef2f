"""Tests for daybook.core.config."""

import os

import pytest
import yaml

from daybook.core.config import Config
from daybook.core.exceptions import ConfigurationError


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.get("paths.data_dir").endswith(".daybook")
        assert config.get("heatmap.window_days") == 365
        assert config.get("heatmap.display_weeks") == 53
        assert config.get("search.debounce_seconds") == 0.3
        assert config.get("calendar.week_start") == "sunday"

    def test_custom_data_dir(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        assert config.get("paths.data_dir") == tmp_dir
        assert config.get("paths.log_dir") == os.path.join(tmp_dir, "logs")

    def test_custom_env_prefix(self, monkeypatch, tmp_dir):
        monkeypatch.setenv("MYAPP_API__TOKEN", "secret")
        config = Config(env_prefix="MYAPP_", data_dir=tmp_dir)
        assert config.get("api.token") == "secret"

    def test_yaml_config_file(self, tmp_config_file, tmp_dir):
        config = Config(config_file=tmp_config_file, data_dir=tmp_dir)
        assert config.get("api.token") == "test-token"
        assert config.get("calendar.week_start") == "monday"
        assert config.get("heatmap.window_days") == 365

    def test_env_overrides_file(self, tmp_dir, monkeypatch):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            yaml.dump({"api": {"base_url": "http://file.example"}}, f)

        monkeypatch.setenv("DAYBOOK_API__BASE_URL", "http://env.example")
        config = Config(config_file=config_path, data_dir=tmp_dir)
        assert config.get("api.base_url") == "http://env.example"

    def test_get_missing_key(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "fallback") == "fallback"

    def test_ensure_directories(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        config.ensure_directories()
        assert os.path.isdir(os.path.join(tmp_dir, "logs"))

    def test_extra_defaults(self, tmp_dir):
        config = Config(data_dir=tmp_dir, defaults={"custom": {"key": "value"}})
        assert config.get("custom.key") == "value"


class TestValidated:
    def test_env_strings_are_coerced(self, tmp_dir, monkeypatch):
        monkeypatch.setenv("DAYBOOK_HEATMAP__WINDOW_DAYS", "90")
        monkeypatch.setenv("DAYBOOK_SEARCH__DEBOUNCE_SECONDS", "0.5")
        settings = Config(data_dir=tmp_dir).validated()
        assert settings.heatmap.window_days == 90
        assert settings.search.debounce_seconds == 0.5

    def test_invalid_value_raises_configuration_error(self, tmp_dir, monkeypatch):
        monkeypatch.setenv("DAYBOOK_CALENDAR__WEEK_START", "someday")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            Config(data_dir=tmp_dir).validated()

