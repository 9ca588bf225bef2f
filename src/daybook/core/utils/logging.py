"""
Logging configuration using loguru.

Library modules only emit through ``loguru.logger``; the CLI calls
setup_logging() once at startup to pick the sinks.

The cache and the search pipeline log every dropped or parked response at
DEBUG. Turning on DEBUG for just ``daybook.journal.cache`` traces why a day
shows what it shows without the rest of the package's chatter.
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = "<level>[{level.name}]</level> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}"
LOG_FILE_NAME = "daybook.log"


def level_filter(level: str, module_levels: dict[str, str] | None = None) -> dict[str, str]:
    """Loguru filter dict: *level* for everything, overrides per module prefix."""
    levels = {"": level.upper()}
    for module, module_level in (module_levels or {}).items():
        levels[module] = module_level.upper()
    return levels


def log_file_path(log_file: str | None, log_dir: Path | str | None) -> Path | None:
    """An explicit *log_file* wins; otherwise ``daybook.log`` inside *log_dir*."""
    if log_file:
        return Path(log_file).expanduser()
    if log_dir:
        return Path(log_dir).expanduser() / LOG_FILE_NAME
    return None


def setup_logging(
    level: str = "WARNING",
    log_file: str | Path | None = None,
    module_levels: dict[str, str] | None = None,
    fmt: str = CONSOLE_FORMAT,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Configure loguru with console and optional file output.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Path to log file. If None, only logs to stderr.
        module_levels: Per-module overrides, e.g. ``{"daybook.journal.cache": "DEBUG"}``.
        fmt: Loguru format string for the console.
        rotation: Log file rotation size.
        retention: How long to keep rotated logs.
    """
    levels = level_filter(level, module_levels)
    # Sink level is the lowest configured one; the filter applies the rest
    floor = min(logger.level(name).no for name in levels.values())

    logger.remove()
    logger.add(sys.stderr, level=floor, format=fmt, filter=levels)

    if log_file:
        logger.add(
            str(log_file),
            level=floor,
            format=FILE_FORMAT,
            filter=levels,
            rotation=rotation,
            retention=retention,
        )
