"""Activity heatmap and streak aggregation.

Two jobs that share one pass over the window's days:

1. Streaks: the current run of consecutive active days ending at the
   window's last day, and the longest run anywhere in the window.
2. Display grid: week columns of exactly 7 cells aligned to weekday, with
   empty padding at both ends and a month label on the first column in
   which a new month begins.

Counts and streaks reported by the stats service are authoritative; on the
client, :func:`shape_snapshot` only lays that data out for display.
:func:`build_heatmap` computes everything from raw daily counts and is what
the server-side numbers are checked against in tests.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from .calendar import SUNDAY
from .models import parse_date

# Lower bound of count for levels 1..4
LEVEL_THRESHOLDS = (1, 2, 3, 5)


def activity_level(count: int) -> int:
    """Quantize a daily count into 0-4. Monotonic in *count*."""
    level = 0
    for threshold in LEVEL_THRESHOLDS:
        if count >= threshold:
            level += 1
    return level


@dataclass(frozen=True)
class HeatmapDay:
    date: date
    count: int
    level: int

    @classmethod
    def from_count(cls, day: date, count: int) -> HeatmapDay:
        return cls(date=day, count=count, level=activity_level(count))


@dataclass(frozen=True)
class HeatmapSnapshot:
    """Aggregate over the trailing window. Replaced wholesale, never patched."""

    days: tuple[HeatmapDay, ...] = ()
    total_entries: int = 0
    active_days: int = 0
    current_streak: int = 0
    longest_streak: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HeatmapSnapshot:
        days = tuple(
            HeatmapDay(
                date=parse_date(d["date"]),
                count=int(d.get("count", 0)),
                level=int(d["level"]) if d.get("level") is not None else activity_level(int(d.get("count", 0))),
            )
            for d in data.get("data") or []
        )
        return cls(
            days=days,
            total_entries=int(data.get("totalEntries", 0)),
            active_days=int(data.get("activeDays", 0)),
            current_streak=int(data.get("currentStreak", 0)),
            longest_streak=int(data.get("longestStreak", 0)),
        )

    def counts(self) -> dict[date, int]:
        return {d.date: d.count for d in self.days}


@dataclass(frozen=True)
class MonthLabel:
    label: str
    column: int


@dataclass(frozen=True)
class HeatmapView:
    snapshot: HeatmapSnapshot
    weeks: tuple[tuple[HeatmapDay | None, ...], ...]
    month_labels: tuple[MonthLabel, ...]


def compute_streaks(counts: Iterable[int]) -> tuple[int, int]:
    """Return ``(current, longest)`` for counts ordered oldest to newest.

    The current streak ends at the last element: if that day has no
    activity the current streak is 0.
    """
    longest = 0
    run = 0
    for count in counts:
        if count > 0:
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    # run is now the streak ending at the anchor day
    return run, longest


def window_days(window_end: date, window_length_days: int) -> list[date]:
    """Days of the trailing window, oldest first, ending at *window_end*."""
    start = window_end - timedelta(days=window_length_days - 1)
    return [start + timedelta(days=i) for i in range(window_length_days)]


def _week_columns(
    days: list[HeatmapDay], week_start: int
) -> tuple[tuple[tuple[HeatmapDay | None, ...], ...], tuple[MonthLabel, ...]]:
    if not days:
        return (), ()

    columns: list[tuple[HeatmapDay | None, ...]] = []
    column: list[HeatmapDay | None] = [None] * ((days[0].date.weekday() - week_start) % 7)
    for day in days:
        column.append(day)
        if len(column) == 7:
            columns.append(tuple(column))
            column = []
    if column:
        column.extend([None] * (7 - len(column)))
        columns.append(tuple(column))

    labels: list[MonthLabel] = []
    last_month: tuple[int, int] | None = None
    for index, col in enumerate(columns):
        first_real = next(d for d in col if d is not None)
        month = (first_real.date.year, first_real.date.month)
        if month != last_month:
            labels.append(MonthLabel(label=f"{first_real.date:%b}", column=index))
            last_month = month

    return tuple(columns), tuple(labels)


def build_heatmap(
    daily_counts: Mapping[date, int],
    window_end: date,
    window_length_days: int,
    week_start: int = SUNDAY,
) -> HeatmapView:
    """Compute a snapshot and its display grid from raw daily counts.

    Days missing from *daily_counts* count as 0; days outside the window
    are ignored. The input mapping is not modified.
    """
    if window_length_days <= 0:
        raise ValueError("window_length_days must be positive")

    days = [HeatmapDay.from_count(d, max(0, daily_counts.get(d, 0))) for d in window_days(window_end, window_length_days)]
    current, longest = compute_streaks(d.count for d in days)
    snapshot = HeatmapSnapshot(
        days=tuple(days),
        total_entries=sum(d.count for d in days),
        active_days=sum(1 for d in days if d.count > 0),
        current_streak=current,
        longest_streak=longest,
    )
    weeks, labels = _week_columns(days, week_start)
    return HeatmapView(snapshot=snapshot, weeks=weeks, month_labels=labels)


def shape_snapshot(
    snapshot: HeatmapSnapshot,
    window_end: date,
    display_days: int,
    week_start: int = SUNDAY,
) -> HeatmapView:
    """Lay out an authoritative server snapshot for display.

    Totals and streaks are kept exactly as reported; only the grid is
    derived here. Server-provided levels win over local quantization.
    """
    by_date = {d.date: d for d in snapshot.days}
    days = [by_date.get(d) or HeatmapDay(date=d, count=0, level=0) for d in window_days(window_end, display_days)]
    weeks, labels = _week_columns(days, week_start)
    return HeatmapView(snapshot=snapshot, weeks=weeks, month_labels=labels)
