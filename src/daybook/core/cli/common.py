"""Shared setup logic for CLI commands."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable
from datetime import date
from pathlib import Path
from typing import Any

import click

from daybook.core.exceptions import ConfigurationError, DaybookError

DAYBOOK_DIR = Path.home() / ".daybook"
CONFIG_PATH = DAYBOOK_DIR / "config.yaml"


def load_config(ctx: click.Context):
    """Load config from --config, else ~/.daybook/config.yaml, and set up logging.

    The file sink goes to ``logging.file`` when set, else ``daybook.log``
    under ``paths.log_dir``.
    """
    from daybook.core.config import Config
    from daybook.core.utils.logging import log_file_path, setup_logging

    obj = ctx.find_root().obj or {}
    config = Config(config_file=obj.get("config_file") or str(CONFIG_PATH), data_dir=str(DAYBOOK_DIR))
    try:
        settings = config.validated()
    except ConfigurationError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    config.ensure_directories()
    setup_logging(
        level=obj.get("log_level") or settings.logging.level,
        log_file=log_file_path(settings.logging.file, settings.paths.log_dir),
        module_levels=settings.logging.modules,
    )
    return config


def create_backend(config):
    """Create the REST backend. Exits with a hint when no token is configured."""
    from daybook.integrations.api_client import DaybookClient

    if not config.get("api.token"):
        click.echo("No API token configured. Set api.token in the config file or DAYBOOK_API__TOKEN.", err=True)
        sys.exit(1)
    return DaybookClient.from_config(config)


def run_command(fn: Callable[..., Awaitable[Any]], *args: Any) -> Any:
    """Run an async command body, turning daybook errors into a clean exit."""
    try:
        return asyncio.run(fn(*args))
    except DaybookError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def parse_day(value: str | None, param_hint: str) -> date | None:
    """Parse an optional YYYY-MM-DD option value."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter("expected YYYY-MM-DD", param_hint=param_hint) from None
