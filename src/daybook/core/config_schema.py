"""Pydantic models for config validation.

Opt-in schema validation for ``Config.config_data``.  Call
``Config.validated()`` to obtain a typed ``DaybookConfig`` instance;
environment overrides arrive as strings and are coerced here.
Existing dict-based access continues to work unchanged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

_WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class PathsConfig(BaseModel):
    """File-system paths used by the client."""

    data_dir: Path
    log_dir: Path | None = None

    @field_validator("data_dir", "log_dir", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v


class ApiConfig(BaseModel):
    """Backend connection settings."""

    base_url: str = "http://localhost:8080"
    token: str = ""
    timeout: int = 15

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")


class CalendarConfig(BaseModel):
    week_start: str = "sunday"

    @field_validator("week_start")
    @classmethod
    def _known_weekday(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in _WEEKDAYS:
            raise ValueError(f"week_start must be one of {_WEEKDAYS}, got {v!r}")
        return v

    @property
    def week_start_index(self) -> int:
        """Weekday index as used by ``date.weekday()`` (Monday == 0)."""
        return _WEEKDAYS.index(self.week_start)


class HeatmapSettings(BaseModel):
    """Trailing window fetched from the stats service and the display width."""

    window_days: int = 365
    display_weeks: int = 53

    @field_validator("window_days", "display_weeks")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v


class SearchSettings(BaseModel):
    debounce_seconds: float = 0.3

    @field_validator("debounce_seconds")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("debounce_seconds cannot be negative")
        return v


def _check_level(v: str) -> str:
    v = v.strip().upper()
    if v not in _LOG_LEVELS:
        raise ValueError(f"unknown log level {v!r}")
    return v


class LoggingConfig(BaseModel):
    """Console level, optional explicit log file, and per-module level overrides.

    ``modules`` maps a module prefix such as ``daybook.journal.cache`` to the
    level used for records from it.
    """

    level: str = "WARNING"
    file: str | None = None
    modules: dict[str, str] = {}

    @field_validator("level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        return _check_level(v)

    @field_validator("modules")
    @classmethod
    def _known_module_levels(cls, v: dict[str, str]) -> dict[str, str]:
        return {module: _check_level(level) for module, level in v.items()}


class DaybookConfig(BaseModel):
    """Root configuration model.

    Uses ``extra="allow"`` so consumers can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    paths: PathsConfig = PathsConfig(data_dir=Path("~/.daybook"))
    api: ApiConfig = ApiConfig()
    calendar: CalendarConfig = CalendarConfig()
    heatmap: HeatmapSettings = HeatmapSettings()
    search: SearchSettings = SearchSettings()
    logging: LoggingConfig = LoggingConfig()
