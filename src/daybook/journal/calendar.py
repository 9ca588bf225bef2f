"""Month calendar grid.

Pure date math: no I/O and no cached state. The grid is rebuilt on every
month change because it is cheap and caching it could go stale at midnight.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import StrEnum

MONDAY = 0
SUNDAY = 6

DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass(frozen=True)
class CalendarCell:
    date: date
    in_month: bool
    is_today: bool


@dataclass(frozen=True)
class CalendarGrid:
    """Whole weeks covering one month, in display order."""

    year: int
    month: int
    week_start: int
    cells: tuple[CalendarCell, ...]

    @property
    def weeks(self) -> list[tuple[CalendarCell, ...]]:
        return [self.cells[i : i + 7] for i in range(0, len(self.cells), 7)]

    @property
    def title(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    def day_names(self) -> list[str]:
        return [DAY_NAMES[(self.week_start + i) % 7] for i in range(7)]


def month_bounds(anchor: date) -> tuple[date, date]:
    """First and last day of the month containing *anchor*."""
    first = anchor.replace(day=1)
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
    return first, last


def shift_month(anchor: date, months: int) -> date:
    """First day of the month *months* away from *anchor* (negative = earlier)."""
    index = anchor.year * 12 + (anchor.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


class DatePreset(StrEnum):
    """Named date ranges offered when browsing entries."""

    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    THIS_MONTH = "thisMonth"
    THIS_YEAR = "thisYear"


_TRAILING_DAYS = {DatePreset.LAST_7_DAYS: 7, DatePreset.LAST_30_DAYS: 30, DatePreset.LAST_90_DAYS: 90}


def preset_range(preset: DatePreset | str, today: date) -> tuple[date, date]:
    """Inclusive ``(start, end)`` for *preset* as seen on *today*.

    Trailing presets include today (``7d`` is today and the six days
    before). ``thisMonth`` runs to the month's last day; ``thisYear`` stops
    at today.

    Raises:
        ValueError: For an unknown preset name.
    """
    preset = DatePreset(preset)
    if preset in _TRAILING_DAYS:
        return today - timedelta(days=_TRAILING_DAYS[preset] - 1), today
    if preset is DatePreset.THIS_MONTH:
        return month_bounds(today)
    return today.replace(month=1, day=1), today


def week_start_on_or_before(day: date, week_start: int) -> date:
    return day - timedelta(days=(day.weekday() - week_start) % 7)


def week_end_on_or_after(day: date, week_start: int) -> date:
    week_end = (week_start + 6) % 7
    return day + timedelta(days=(week_end - day.weekday()) % 7)


def build_month_grid(month_anchor: date, today: date, week_start: int = SUNDAY) -> CalendarGrid:
    """Build the display grid for the month containing *month_anchor*.

    The grid starts on the *week_start* weekday on/before the 1st and ends
    on the last weekday of that week on/after the month's last day, so
    ``len(cells)`` is always a multiple of 7.

    Args:
        month_anchor: Any day inside the month to display.
        today: Day to flag with ``is_today``.
        week_start: First column weekday, ``date.weekday()`` numbering.
    """
    first, last = month_bounds(month_anchor)
    start = week_start_on_or_before(first, week_start)
    end = week_end_on_or_after(last, week_start)

    cells = []
    day = start
    while day <= end:
        cells.append(CalendarCell(date=day, in_month=first <= day <= last, is_today=day == today))
        day += timedelta(days=1)

    return CalendarGrid(year=first.year, month=first.month, week_start=week_start, cells=tuple(cells))
