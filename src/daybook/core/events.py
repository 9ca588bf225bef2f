"""Event bus for republishing cache and search updates.

Display layers subscribe to the slices they render (a day bucket, the
heatmap snapshot, search results) instead of polling the store.
Hooks can be sync or async.

Usage::

    from daybook.core.events import BUCKET_UPDATED, Event, EventBus

    bus = EventBus()

    def redraw(event: Event) -> None:
        print(event.payload["date"], len(event.payload["entries"]))

    bus.on(BUCKET_UPDATED, redraw)
    await bus.emit(Event(name=BUCKET_UPDATED, payload={...}, source="cache"))
"""

from __future__ import annotations

import asyncio
import inspect
from collections import defaultdict
from dataclasses import dataclass, field
from time import time
from typing import Any

from loguru import logger

# ---------------------------------------------------------------------------
# Well-known event names
# ---------------------------------------------------------------------------

BUCKET_UPDATED = "cache.bucket.updated"
HEATMAP_UPDATED = "cache.heatmap.updated"
LOAD_FAILED = "cache.load.failed"
SELECTION_CHANGED = "cache.selection.changed"
SEARCH_RESOLVED = "search.resolved"
SEARCH_FAILED = "search.failed"

# Type alias for hook callables (sync or async)
Hook = Any  # Callable[[Event], None] | Callable[[Event], Awaitable[None]]


# ---------------------------------------------------------------------------
# Event model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Event:
    """An immutable event that flows through the bus."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time)
    source: str = ""


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------


class EventBus:
    """Simple pub/sub event bus supporting sync and async hooks."""

    def __init__(self) -> None:
        self._hooks: dict[str, list[Hook]] = defaultdict(list)
        self._wildcard_hooks: list[Hook] = []
        self._background_tasks: set[asyncio.Task] = set()

    def on(self, event_name: str, hook: Hook) -> None:
        """Register *hook* for a specific event name."""
        self._hooks[event_name].append(hook)

    def on_all(self, hook: Hook) -> None:
        """Register *hook* for all events (wildcard)."""
        self._wildcard_hooks.append(hook)

    def off(self, event_name: str, hook: Hook) -> None:
        """Unregister *hook* from a specific event name."""
        try:
            self._hooks[event_name].remove(hook)
        except ValueError:
            pass

    def _hooks_for(self, event: Event) -> list[Hook]:
        hooks = list(self._hooks.get(event.name, []))
        hooks.extend(self._wildcard_hooks)
        return hooks

    async def emit(self, event: Event) -> None:
        """Emit an event, running all matching hooks (async)."""
        for hook in self._hooks_for(event):
            try:
                if inspect.iscoroutinefunction(hook):
                    await hook(event)
                else:
                    hook(event)
            except Exception as exc:
                logger.warning(f"Event hook failed for {event.name}: {exc}")

    def emit_sync(self, event: Event) -> None:
        """Emit from a sync context.

        If a running event loop exists, schedules async hooks as tasks.
        Otherwise, only runs sync hooks (async hooks are skipped).
        """
        loop: asyncio.AbstractEventLoop | None = None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            pass

        for hook in self._hooks_for(event):
            try:
                if inspect.iscoroutinefunction(hook):
                    if loop is not None:
                        task = loop.create_task(hook(event))
                        self._background_tasks.add(task)
                        task.add_done_callback(self._background_tasks.discard)
                    else:
                        logger.debug(f"Skipping async hook {hook!r}, no running event loop")
                else:
                    hook(event)
            except Exception as exc:
                logger.warning(f"Event hook failed for {event.name}: {exc}")
