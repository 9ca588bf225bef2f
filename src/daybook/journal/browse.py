"""Browsing entries over a date range.

:class:`EntryBrowser` backs the "all entries" listing: the range comes from
a :class:`~daybook.journal.calendar.DatePreset` (or explicit dates), the
server filters by type, and text filtering happens locally over the loaded
list with :func:`~daybook.journal.search.filter_entries`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date

from loguru import logger

from daybook.core.exceptions import TransientFetchError, ValidationError

from .calendar import DatePreset, preset_range
from .models import Entry, EntryType, date_key
from .search import filter_entries
from .store import DaybookBackend

DEFAULT_PRESET = DatePreset.LAST_30_DAYS


def group_by_date(entries: Iterable[Entry]) -> list[tuple[str, list[Entry]]]:
    """Group entries by day, newest day first; order within a day is kept."""
    groups: dict[str, list[Entry]] = {}
    for entry in entries:
        groups.setdefault(entry.date_key, []).append(entry)
    return sorted(groups.items(), key=lambda item: item[0], reverse=True)


class EntryBrowser:
    """Range-and-type filtered entry listing.

    Args:
        backend: Remote log service.
        today: Clock used to resolve presets.
    """

    def __init__(self, backend: DaybookBackend, today: Callable[[], date] = date.today):
        self.backend = backend
        self._today = today
        self.start: date | None = None
        self.end: date | None = None
        self.entry_type: EntryType | None = None
        self.entries: list[Entry] = []

    async def load_preset(
        self,
        preset: DatePreset | str = DEFAULT_PRESET,
        entry_type: EntryType | None = None,
    ) -> list[Entry]:
        try:
            start, end = preset_range(preset, self._today())
        except ValueError as e:
            raise ValidationError(f"Unknown date preset {preset!r}") from e
        return await self.load(start, end, entry_type)

    async def load(self, start: date, end: date, entry_type: EntryType | None = None) -> list[Entry]:
        """Fetch ``[start, end]`` (optionally one type) and keep it as the current listing.

        Raises:
            ValidationError: If *end* is before *start*.
            TransientFetchError: If the fetch fails; the previous listing is kept.
        """
        if end < start:
            raise ValidationError(f"Range end {date_key(end)} is before start {date_key(start)}")
        try:
            entries = await self.backend.fetch_entries_by_range(start, end, entry_type)
        except Exception as e:
            logger.warning(f"Failed to load entries {date_key(start)}..{date_key(end)}: {e}")
            raise TransientFetchError(f"Failed to load entries: {e}") from e
        self.start, self.end, self.entry_type = start, end, entry_type
        self.entries = list(entries)
        logger.debug(f"Loaded {len(self.entries)} entries for {date_key(start)}..{date_key(end)}")
        return self.entries

    def grouped(self, query: str = "") -> list[tuple[str, list[Entry]]]:
        """Current listing narrowed by *query*, grouped by day (newest first)."""
        return group_by_date(filter_entries(self.entries, query))
