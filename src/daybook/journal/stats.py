"""Lifetime statistics and the small charts built from them.

:class:`Stats` is the server's all-time summary: totals, streaks, a count
per entry type and the most recent entries. The chart helpers are pure and
work on a ``{date: count}`` map such as :meth:`HeatmapSnapshot.counts`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from loguru import logger

from daybook.core.exceptions import TransientFetchError

from .models import Entry, EntryType, entry_from_dict

if TYPE_CHECKING:
    from .store import DaybookBackend

RECENT_LIMIT = 6
WEEKLY_BARS = 8


@dataclass(frozen=True)
class Stats:
    total_entries: int = 0
    active_days: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    by_type: dict[EntryType, int] = field(default_factory=dict)
    recent_entries: tuple[Entry, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Stats:
        by_type: dict[EntryType, int] = {}
        for name, count in (data.get("byType") or {}).items():
            try:
                by_type[EntryType(str(name).upper())] = int(count)
            except ValueError:
                logger.debug(f"Ignoring count for unknown entry type {name!r}")
        return cls(
            total_entries=int(data.get("totalEntries", 0)),
            active_days=int(data.get("activeDays", 0)),
            current_streak=int(data.get("currentStreak", 0)),
            longest_streak=int(data.get("longestStreak", 0)),
            by_type=by_type,
            recent_entries=tuple(entry_from_dict(e) for e in data.get("recentEntries") or []),
        )


@dataclass(frozen=True)
class WeekTotal:
    start: date
    end: date
    count: int

    @property
    def label(self) -> str:
        return f"{self.start:%b} {self.start.day}"


def type_breakdown(stats: Stats) -> list[tuple[EntryType, int]]:
    """Entry types with a non-zero count, largest first."""
    return sorted(((t, n) for t, n in stats.by_type.items() if n > 0), key=lambda item: item[1], reverse=True)


def weekly_totals(counts: Mapping[date, int], today: date, weeks: int = WEEKLY_BARS) -> list[WeekTotal]:
    """Entry totals for *weeks* consecutive 7-day spans, the last one ending today."""
    totals = []
    for i in range(weeks):
        end = today - timedelta(days=(weeks - 1 - i) * 7)
        start = end - timedelta(days=6)
        totals.append(WeekTotal(start, end, sum(n for d, n in counts.items() if start <= d <= end)))
    return totals


def weekday_totals(counts: Mapping[date, int]) -> list[int]:
    """Totals per weekday, indexed like ``date.weekday()`` (Monday first)."""
    totals = [0] * 7
    for day, n in counts.items():
        totals[day.weekday()] += n
    return totals


class StatsService:
    """All-time summary plus the trailing weekly charts."""

    def __init__(self, backend: DaybookBackend, today: Callable[[], date] = date.today):
        self.backend = backend
        self._today = today

    async def overview(self) -> Stats:
        try:
            return await self.backend.fetch_stats()
        except Exception as e:
            logger.warning(f"Failed to load stats: {e}")
            raise TransientFetchError(f"Failed to load stats: {e}") from e

    async def activity(self, weeks: int = WEEKLY_BARS) -> tuple[list[WeekTotal], list[int]]:
        """Weekly bars and weekday totals over the last *weeks* weeks."""
        end = self._today()
        start = end - timedelta(days=weeks * 7 - 1)
        try:
            snapshot = await self.backend.fetch_heatmap(start, end)
        except Exception as e:
            logger.warning(f"Failed to load activity: {e}")
            raise TransientFetchError(f"Failed to load activity: {e}") from e
        counts = snapshot.counts()
        return weekly_totals(counts, end, weeks), weekday_totals(counts)
