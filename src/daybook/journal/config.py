"""Configuration dataclasses for the cache and search pipeline.

These are pure data containers with sensible defaults.
Override them from YAML config, env vars, or constructor args.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .calendar import SUNDAY

if TYPE_CHECKING:
    from daybook.core.config import Config


@dataclass
class CacheConfig:
    """Settings for the temporal cache.

    Attributes:
        heatmap_window_days: Trailing days fetched from the stats service.
        heatmap_display_weeks: Week columns in the heatmap display grid.
        week_start: First weekday of calendar rows (``date.weekday()`` numbering).
    """

    heatmap_window_days: int = 365
    heatmap_display_weeks: int = 53
    week_start: int = SUNDAY

    @classmethod
    def from_config(cls, config: Config) -> CacheConfig:
        validated = config.validated()
        return cls(
            heatmap_window_days=validated.heatmap.window_days,
            heatmap_display_weeks=validated.heatmap.display_weeks,
            week_start=validated.calendar.week_start_index,
        )


@dataclass
class SearchConfig:
    """Settings for the search pipeline.

    Attributes:
        debounce_seconds: Quiet period after the last keystroke before a request.
    """

    debounce_seconds: float = 0.3

    @classmethod
    def from_config(cls, config: Config) -> SearchConfig:
        return cls(debounce_seconds=config.validated().search.debounce_seconds)
