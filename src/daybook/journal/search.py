"""Debounced entry search.

:class:`SearchPipeline` is a small state machine over the live query::

    IDLE ──keystroke──▶ (timer) ──expires──▶ PENDING ──▶ RESOLVED | FAILED
      ▲                    │
      └──── cleared ───────┘   (timer cancelled, no request issued)

Each keystroke bumps a generation counter. The debounce timer is the only
thing ever cancelled; requests already in flight run to completion, and
their result is dropped on arrival if its generation is no longer current.

:func:`filter_entries` is the local counterpart used to narrow an
already-loaded list without a round trip.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from enum import StrEnum

from loguru import logger

from daybook.core.events import SEARCH_FAILED, SEARCH_RESOLVED, Event, EventBus
from daybook.core.exceptions import StaleResponseError, TransientFetchError

from .config import SearchConfig
from .models import Entry, EntryType

SearchFn = Callable[[str], Awaitable[list[Entry]]]
"""Async callable performing the remote search, e.g. ``backend.search_entries``."""


class SearchState(StrEnum):
    IDLE = "idle"
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


class SearchPipeline:
    """Debounced, stale-safe dispatcher of search requests.

    Args:
        search_fn: Async callable issuing one search request.
        config: Debounce interval.
        bus: Optional event bus for ``search.resolved`` / ``search.failed``.

    Example::

        pipeline = SearchPipeline(backend.search_entries)
        pipeline.set_query("ru")
        pipeline.set_query("run")   # restarts the timer; one request for "run"
        await pipeline.drain()
        pipeline.results
    """

    def __init__(
        self,
        search_fn: SearchFn,
        config: SearchConfig | None = None,
        bus: EventBus | None = None,
    ):
        self._search_fn = search_fn
        self.config = config or SearchConfig()
        self.bus = bus or EventBus()
        self.query = ""
        self.state = SearchState.IDLE
        self.results: list[Entry] | None = None
        self.error: TransientFetchError | None = None
        self.generation = 0
        self.requests_issued = 0
        self._timer: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()

    def set_query(self, text: str) -> None:
        """Handle a keystroke: store *text* and restart the debounce timer.

        Must be called from a running event loop when *text* is non-blank.
        """
        self.query = text
        self.generation += 1
        self._cancel_timer()

        if not text.strip():
            self.state = SearchState.IDLE
            self.results = None
            self.error = None
            return

        self._timer = asyncio.get_running_loop().create_task(self._debounce(text, self.generation))

    def clear(self) -> None:
        self.set_query("")

    async def _debounce(self, text: str, generation: int) -> None:
        await asyncio.sleep(self.config.debounce_seconds)
        # Timer fired: from here on the request is not cancellable
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._dispatch(text.strip(), generation))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _dispatch(self, query: str, generation: int) -> None:
        if self._is_stale(generation):
            logger.debug(f"Skipping search for {query!r}: superseded before dispatch")
            return
        self.state = SearchState.PENDING
        self.requests_issued += 1
        logger.debug(f"Searching for {query!r} (generation {generation})")
        try:
            results = await self._search_fn(query)
        except Exception as e:
            if self._is_stale(generation):
                logger.debug(f"Ignoring failure of superseded search {query!r}: {e}")
                return
            self.error = TransientFetchError(f"Search failed for {query!r}: {e}")
            self.state = SearchState.FAILED
            logger.warning(str(self.error))
            self.bus.emit_sync(Event(name=SEARCH_FAILED, payload={"query": query, "error": str(e)}, source="search"))
            return

        try:
            self._check_current(generation, query)
        except StaleResponseError as e:
            logger.debug(str(e))
            return

        self.results = list(results)
        self.error = None
        self.state = SearchState.RESOLVED
        self.bus.emit_sync(Event(name=SEARCH_RESOLVED, payload={"query": query, "results": self.results}, source="search"))

    def _is_stale(self, generation: int) -> bool:
        return generation != self.generation

    def _check_current(self, generation: int, query: str) -> None:
        if self._is_stale(generation):
            raise StaleResponseError(
                f"Dropping results for {query!r}: live query is {self.query!r} (generation {self.generation})"
            )

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    @property
    def timer_pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    async def drain(self) -> None:
        """Wait for the pending timer (if any) and every in-flight request."""
        while self._timer is not None or self._in_flight:
            timer = self._timer
            if timer is not None:
                await asyncio.gather(timer, return_exceptions=True)
                if self._timer is timer:
                    self._timer = None
            if self._in_flight:
                await asyncio.gather(*list(self._in_flight), return_exceptions=True)


def filter_entries(
    entries: Iterable[Entry],
    query: str = "",
    entry_type: EntryType | None = None,
) -> list[Entry]:
    """Case-insensitive match on title, content and tag names, plus an optional type filter."""
    q = query.strip().lower()
    matched = []
    for entry in entries:
        if entry_type is not None and entry.type is not entry_type:
            continue
        if q:
            haystack = [entry.title, entry.content or "", *(t.name for t in entry.tags)]
            if not any(q in text.lower() for text in haystack):
                continue
        matched.append(entry)
    return matched
