"""DaybookBackend protocol: the contract for the remote log service.

The cache and search pipeline depend only on this protocol. The REST
implementation lives in :mod:`daybook.integrations.api_client`; tests use
an in-memory fake. Every operation may fail independently: callers never
assume success.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from .goals import Goal, GoalDraft, GoalPatch, GoalStatus
from .heatmap import HeatmapSnapshot
from .models import Entry, EntryDraft, EntryPatch, EntryType, Tag
from .stats import Stats


@runtime_checkable
class DaybookBackend(Protocol):
    """Async access to entries, stats, goals and tags on the server."""

    async def fetch_entries_by_date(self, day: date) -> list[Entry]:
        """Return the complete list of entries for *day*."""
        ...

    async def fetch_entries_by_range(
        self, start: date, end: date, entry_type: EntryType | None = None
    ) -> list[Entry]:
        """Return all entries with ``start <= entry_date <= end``, optionally of one type."""
        ...

    async def create_entry(self, draft: EntryDraft) -> Entry: ...

    async def update_entry(self, entry_id: int, patch: EntryPatch) -> Entry: ...

    async def delete_entry(self, entry_id: int) -> None: ...

    async def search_entries(self, query: str) -> list[Entry]: ...

    async def fetch_heatmap(self, start: date, end: date) -> HeatmapSnapshot:
        """Authoritative counts and streaks for ``[start, end]``."""
        ...

    async def fetch_stats(self) -> Stats:
        """All-time totals, per-type counts and the most recent entries."""
        ...

    async def fetch_goals(self, status: GoalStatus | None = None) -> list[Goal]: ...

    async def create_goal(self, draft: GoalDraft) -> Goal: ...

    async def update_goal(self, goal_id: int, patch: GoalPatch) -> Goal: ...

    async def delete_goal(self, goal_id: int) -> None: ...

    async def update_goal_status(self, goal_id: int, status: GoalStatus) -> Goal: ...

    async def add_milestone(self, goal_id: int, title: str) -> Goal: ...

    async def update_milestone(
        self,
        goal_id: int,
        milestone_id: int,
        *,
        title: str | None = None,
        completed: bool | None = None,
    ) -> Goal: ...

    async def delete_milestone(self, goal_id: int, milestone_id: int) -> Goal: ...

    async def fetch_tags(self) -> list[Tag]: ...

    async def create_tag(self, name: str, color: str | None = None) -> Tag: ...

    async def delete_tag(self, tag_id: int) -> None: ...
