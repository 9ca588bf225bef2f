"""Temporal cache: the client's single source of truth for "what is on day D".

Holds a partial, date-keyed view of the remote log (one *bucket* per day,
always the complete list for that day) plus the heatmap snapshot, and keeps
both consistent with the server without refetching everything.

Ordering model: one asyncio loop, every backend call is an await point, so
there are no locks. What can go wrong is the *order in which responses
arrive*. Every write to a bucket carries a ticket drawn from one monotonic
counter at the moment the request (or local mutation) is issued. A response
is installed only if its ticket is newer than the ticket of the last write
applied to that day; otherwise it is stale and dropped. A single-day
response that arrives while a later range load covering its day is still
in flight is parked: the range supersedes it if it succeeds, and the parked
response is installed if the range fails. Tickets keep counting across
``reset()``, and anything issued before the reset is stale.

A bucket created locally for a day that was never loaded is incomplete
until the follow-up day fetch lands. If that fetch fails the partial bucket
is dropped so the day is loaded again on its next selection.

The heatmap is never patched locally. Creates and deletes schedule a full
refresh from the stats service as a background task; the snapshot is
briefly stale and converges when that task resolves.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from dataclasses import fields, replace
from datetime import date, timedelta
from typing import Any

from loguru import logger

from daybook.core.events import BUCKET_UPDATED, HEATMAP_UPDATED, LOAD_FAILED, SELECTION_CHANGED, Event, EventBus
from daybook.core.exceptions import DaybookError, MutationError, TransientFetchError, ValidationError

from .calendar import CalendarGrid, build_month_grid, month_bounds
from .config import CacheConfig
from .heatmap import HeatmapSnapshot, HeatmapView, shape_snapshot
from .models import Entry, EntryDraft, EntryPatch, date_key
from .store import DaybookBackend

Bucket = tuple[Entry, ...]


class TemporalCache:
    """Date-keyed entry cache with lazy day loads and month prefetch.

    Construct one per session; tests build independent instances. Nothing
    is persisted: a fresh instance always re-derives from the backend.

    Args:
        backend: Remote log service.
        config: Heatmap window and calendar settings.
        bus: Optional event bus; updated slices are republished on it.
        today: Clock returning the viewer's current calendar day.
    """

    def __init__(
        self,
        backend: DaybookBackend,
        config: CacheConfig | None = None,
        bus: EventBus | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.backend = backend
        self.config = config or CacheConfig()
        self.bus = bus or EventBus()
        self._today = today
        self._tasks: set[asyncio.Task] = set()
        self._ticket = 0
        self.reset()

    def reset(self) -> None:
        """Drop all cached state and cancel background work.

        Requests issued before the reset that are still awaited elsewhere
        resolve normally but never install into the fresh state.
        """
        for task in self._tasks:
            task.cancel()
        self._tasks = set()
        self._buckets: dict[str, Bucket] = {}
        self._applied: dict[str, int] = {}
        self._pending_ranges: dict[int, tuple[str, str]] = {}
        self._parked: dict[str, tuple[int, Bucket]] = {}
        self._incomplete: dict[str, int] = {}
        self._day_requests: dict[str, asyncio.Task] = {}
        self._reset_ticket = self._ticket
        self._heatmap: HeatmapSnapshot | None = None
        self._heatmap_applied = self._ticket
        self.selected_day: date | None = None
        self.current_month: date = self._today().replace(day=1)
        self.loading_entries = False
        self.loading_heatmap = False
        self.last_error: DaybookError | None = None

    # ── Read access ────────────────────────────────────────────────

    def entries_for(self, day: date) -> Bucket | None:
        """Cached bucket for *day*, or None if the day was never loaded."""
        return self._buckets.get(date_key(day))

    def has_bucket(self, day: date) -> bool:
        return date_key(day) in self._buckets

    @property
    def buckets(self) -> dict[str, Bucket]:
        """Copy of the bucket map; mutating it does not affect the cache."""
        return dict(self._buckets)

    @property
    def heatmap(self) -> HeatmapSnapshot | None:
        return self._heatmap

    def heatmap_view(self) -> HeatmapView | None:
        """Display grid for the current snapshot, ending today."""
        if self._heatmap is None:
            return None
        return shape_snapshot(
            self._heatmap,
            self._today(),
            self.config.heatmap_display_weeks * 7,
            week_start=self.config.week_start,
        )

    def month_grid(self) -> CalendarGrid:
        """Calendar grid for the current month; derived fresh on every call."""
        return build_month_grid(self.current_month, self._today(), week_start=self.config.week_start)

    # ── Selection and loading ──────────────────────────────────────

    def select_day(self, day: date) -> asyncio.Task | None:
        """Select *day*, fetching its bucket in the background if missing.

        The selection takes effect immediately. Returns the fetch task so
        callers may await it, or None when the day is already cached.
        A bucket still waiting for its follow-up fetch after a local create
        does not count as cached. Must be called with a running event loop
        if a fetch is needed.
        """
        self.selected_day = day
        self._publish(SELECTION_CHANGED, {"date": date_key(day)})

        key = date_key(day)
        if key in self._buckets and key not in self._incomplete:
            return None
        if key in self._day_requests:
            return self._day_requests[key]
        return self._request_day(day)

    def _request_day(self, day: date) -> asyncio.Task:
        key = date_key(day)
        ticket = self._next_ticket()
        task = self._spawn(self._load_day(day, ticket))
        requests = self._day_requests
        requests[key] = task

        def _forget(done: asyncio.Task) -> None:
            if requests.get(key) is done:
                del requests[key]

        task.add_done_callback(_forget)
        if key in self._incomplete:
            self._incomplete[key] = ticket
        return task

    def close_panel(self) -> None:
        self.selected_day = None
        self._publish(SELECTION_CHANGED, {"date": None})

    async def _load_day(self, day: date, ticket: int) -> bool:
        key = date_key(day)
        try:
            entries = await self.backend.fetch_entries_by_date(day)
        except Exception as e:
            self._record_failure(TransientFetchError(f"Failed to load entries for {key}: {e}"), key=key)
            if self._incomplete.get(key) == ticket:
                self._drop_partial(key)
            return False
        return self._install(key, tuple(entries), ticket, source="day")

    def _drop_partial(self, key: str) -> None:
        del self._incomplete[key]
        self._buckets.pop(key, None)
        logger.debug(f"Dropped partial bucket for {key}; it reloads on next selection")
        self._publish(BUCKET_UPDATED, {"date": key, "entries": None, "source": "day"})

    async def load_range(self, month_anchor: date) -> dict[str, Bucket]:
        """Fetch a whole month in one request and overwrite its buckets.

        Every day of the month gets a bucket, empty if the server returned
        nothing for it. Days that received a newer write while the request
        was in flight keep that write.

        Returns:
            The month's buckets after the load.

        Raises:
            TransientFetchError: If the request fails; buckets are untouched.
        """
        first, last = month_bounds(month_anchor)
        span = (first.isoformat(), last.isoformat())
        ticket = self._next_ticket()
        pending = self._pending_ranges
        pending[ticket] = span
        self.loading_entries = True
        try:
            entries = await self.backend.fetch_entries_by_range(first, last)
        except Exception as e:
            pending.pop(ticket, None)
            self._release_parked(span)
            err = TransientFetchError(f"Failed to load entries for {first:%Y-%m}: {e}")
            self._record_failure(err, key=f"{first:%Y-%m}")
            raise err from e
        finally:
            pending.pop(ticket, None)
            self.loading_entries = False

        grouped: dict[str, list[Entry]] = {}
        for entry in entries:
            if not first <= entry.entry_date <= last:
                logger.debug(f"Ignoring entry {entry.id} dated {entry.date_key} outside {first:%Y-%m}")
                continue
            grouped.setdefault(entry.date_key, []).append(entry)

        installed = 0
        day = first
        while day <= last:
            key = date_key(day)
            if self._install(key, tuple(grouped.get(key, ())), ticket, source="range"):
                installed += 1
            day += timedelta(days=1)
        self._release_parked(span)
        logger.info(f"Loaded {len(entries)} entries for {first:%Y-%m} ({installed} days installed)")
        return {k: v for k, v in self._buckets.items() if span[0] <= k <= span[1]}

    async def set_current_month(self, month: date) -> dict[str, Bucket]:
        """Navigate to *month* and load it."""
        self.current_month = month.replace(day=1)
        return await self.load_range(self.current_month)

    # ── Local application of server results ────────────────────────

    def apply_create(self, entry: Entry) -> asyncio.Task | None:
        """Append a server-created *entry* to its day and refresh the heatmap.

        If the day was never loaded, the new bucket is marked incomplete and
        immediately followed by a fetch of the full day. Should that fetch
        fail, the partial bucket is dropped rather than kept.

        Returns:
            The scheduled heatmap refresh task (None without a running loop).
        """
        key = entry.date_key
        existing = self._buckets.get(key)
        self._write(key, (existing or ()) + (entry,))
        if existing is None or key in self._incomplete:
            self._incomplete.setdefault(key, 0)
            if self._has_loop():
                self._request_day(entry.entry_date)
        return self._schedule_heatmap_refresh()

    def apply_update(self, entry: Entry) -> bool:
        """Replace the entry with the same id inside its own day's bucket.

        Never moves an entry between days and never touches the heatmap.

        Returns:
            True if an entry was replaced.

        Raises:
            ValidationError: If the entry is cached under a different day.
        """
        key = entry.date_key
        bucket = self._buckets.get(key, ())
        if not any(e.id == entry.id for e in bucket):
            for other_key, other in self._buckets.items():
                if other_key != key and any(e.id == entry.id for e in other):
                    raise ValidationError(
                        f"Entry {entry.id} belongs to {other_key}; moving it to {key} is not supported"
                    )
            logger.debug(f"Update for uncached entry {entry.id} on {key} ignored")
            return False
        self._write(key, tuple(entry if e.id == entry.id else e for e in bucket))
        return True

    def apply_delete(self, entry_id: int, day: date) -> asyncio.Task | None:
        """Remove *entry_id* from *day*'s bucket and refresh the heatmap."""
        self._remove(entry_id, day)
        return self._schedule_heatmap_refresh()

    def _remove(self, entry_id: int, day: date) -> Bucket | None:
        key = date_key(day)
        bucket = self._buckets.get(key)
        if bucket is None:
            return None
        self._write(key, tuple(e for e in bucket if e.id != entry_id))
        return bucket

    # ── Mutations against the backend ──────────────────────────────

    async def create_entry(self, draft: EntryDraft) -> Entry:
        """Validate, create on the server, then apply locally.

        Raises:
            ValidationError: Before any network call, for an invalid draft.
            MutationError: If the server rejects the create.
        """
        draft.validate()
        try:
            entry = await self.backend.create_entry(draft)
        except Exception as e:
            raise MutationError(f"Could not create entry: {e}") from e
        self.apply_create(entry)
        return entry

    async def update_entry(self, entry_id: int, day: date, patch: EntryPatch) -> Entry:
        """Optimistically apply *patch*, confirm with the server, roll back on failure.

        Raises:
            ValidationError: For an invalid patch.
            MutationError: If the server rejects the update (local change reverted).
        """
        patch.validate()
        key = date_key(day)
        previous = next((e for e in self._buckets.get(key, ()) if e.id == entry_id), None)
        optimistic: Bucket | None = None
        if previous is not None:
            self.apply_update(_patched(previous, patch))
            optimistic = self._buckets[key]

        try:
            entry = await self.backend.update_entry(entry_id, patch)
        except Exception as e:
            if previous is not None and self._buckets.get(key) is optimistic:
                self.apply_update(previous)
            raise MutationError(f"Could not update entry {entry_id}: {e}") from e

        if entry.entry_date != day:
            logger.warning(f"Server moved entry {entry_id} from {key} to {entry.date_key}; reloading both days")
            self._remove(entry_id, day)
            self._spawn(self._load_day(entry.entry_date, self._next_ticket()))
            return entry
        self.apply_update(entry)
        return entry

    async def delete_entry(self, entry_id: int, day: date) -> None:
        """Optimistically remove, confirm with the server, restore on failure.

        Raises:
            MutationError: If the server rejects the delete (entry restored).
        """
        key = date_key(day)
        previous = self._remove(entry_id, day)
        optimistic = self._buckets.get(key)
        try:
            await self.backend.delete_entry(entry_id)
        except Exception as e:
            if previous is not None and self._buckets.get(key) is optimistic:
                self._write(key, previous)
            raise MutationError(f"Could not delete entry {entry_id}: {e}") from e
        self._schedule_heatmap_refresh()

    # ── Heatmap ────────────────────────────────────────────────────

    async def refresh_heatmap(self) -> HeatmapSnapshot:
        """Replace the heatmap snapshot with a fresh one from the stats service.

        Raises:
            TransientFetchError: If the fetch fails; the last snapshot is kept.
        """
        ticket = self._next_ticket()
        end = self._today()
        start = end - timedelta(days=self.config.heatmap_window_days - 1)
        self.loading_heatmap = True
        try:
            snapshot = await self.backend.fetch_heatmap(start, end)
        except Exception as e:
            err = TransientFetchError(f"Failed to load heatmap: {e}")
            self._record_failure(err, key="heatmap")
            raise err from e
        finally:
            self.loading_heatmap = False

        if ticket <= self._reset_ticket or ticket < self._heatmap_applied:
            logger.debug(f"Dropping stale heatmap response (ticket {ticket} < {self._heatmap_applied})")
            return self._heatmap or snapshot
        self._heatmap = snapshot
        self._heatmap_applied = ticket
        logger.info(f"Heatmap refreshed: {snapshot.total_entries} entries, streak {snapshot.current_streak}")
        self._publish(HEATMAP_UPDATED, {"snapshot": snapshot})
        return snapshot

    async def _refresh_heatmap_in_background(self) -> None:
        try:
            await self.refresh_heatmap()
        except TransientFetchError:
            pass  # recorded in last_error and published as LOAD_FAILED

    def _schedule_heatmap_refresh(self) -> asyncio.Task | None:
        if not self._has_loop():
            logger.debug("No running loop; heatmap refresh deferred to caller")
            return None
        return self._spawn(self._refresh_heatmap_in_background())

    # ── Background tasks ───────────────────────────────────────────

    async def drain(self) -> None:
        """Wait until all background fetches and refreshes have finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @staticmethod
    def _has_loop() -> bool:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return False
        return True

    # ── Internal ───────────────────────────────────────────────────

    def _next_ticket(self) -> int:
        self._ticket += 1
        return self._ticket

    def _write(self, key: str, bucket: Bucket) -> None:
        """Local mutation: always the newest write for its day."""
        self._install(key, bucket, self._next_ticket(), source="local")

    def _install(self, key: str, bucket: Bucket, ticket: int, *, source: str) -> bool:
        applied = self._applied.get(key, self._reset_ticket)
        if ticket < applied or ticket <= self._reset_ticket:
            logger.debug(f"Dropping stale {source} response for {key} (ticket {ticket} < {applied})")
            return False
        if source == "day":
            covering = max((t for t, (lo, hi) in self._pending_ranges.items() if lo <= key <= hi), default=0)
            if ticket < covering:
                parked = self._parked.get(key)
                if parked is None or parked[0] < ticket:
                    self._parked[key] = (ticket, bucket)
                logger.debug(f"Parking day response for {key} behind range load {covering}")
                return False
        self._buckets[key] = bucket
        self._applied[key] = ticket
        if source != "local":
            self._incomplete.pop(key, None)
        self._publish(BUCKET_UPDATED, {"date": key, "entries": bucket, "source": source})
        return True

    def _release_parked(self, span: tuple[str, str]) -> None:
        """Retry day responses that were held back by a range load over *span*."""
        lo, hi = span
        for key in [k for k in self._parked if lo <= k <= hi]:
            ticket, bucket = self._parked.pop(key)
            self._install(key, bucket, ticket, source="day")

    def _record_failure(self, error: DaybookError, *, key: str) -> None:
        logger.warning(str(error))
        self.last_error = error
        self._publish(LOAD_FAILED, {"key": key, "error": str(error)})

    def _publish(self, name: str, payload: dict[str, Any]) -> None:
        self.bus.emit_sync(Event(name=name, payload=payload, source="cache"))


def _patched(entry: Entry, patch: EntryPatch) -> Entry:
    """Local preview of *entry* with *patch* applied (fields the variant has)."""
    names = {f.name for f in fields(entry)}
    changes: dict[str, Any] = {}
    for name in ("title", "content", "start_time", "end_time", "completed", "mood"):
        value = getattr(patch, name)
        if value is not None and name in names:
            changes[name] = value
    return replace(entry, **changes)
