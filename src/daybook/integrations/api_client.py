"""Daybook REST API client.

Implements :class:`~daybook.journal.store.DaybookBackend` over the server's
JSON API with bearer-token auth. No external dependencies beyond the
standard library; blocking requests run in the default executor so the
event loop stays free while a request is in flight.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.parse
import urllib.request
from datetime import date
from typing import Any

from loguru import logger

from daybook.core.exceptions import APIError
from daybook.journal.goals import Goal, GoalDraft, GoalPatch, GoalStatus
from daybook.journal.heatmap import HeatmapSnapshot
from daybook.journal.models import Entry, EntryDraft, EntryPatch, EntryType, Tag, date_key, entry_from_dict
from daybook.journal.stats import Stats

DEFAULT_API_BASE = "http://localhost:8080"


class DaybookClient:
    """REST backend for entries, stats, goals and tags."""

    def __init__(self, token: str, api_base: str = DEFAULT_API_BASE, timeout: int = 15):
        if not token:
            raise ValueError("token is required")
        self.token = token
        self.timeout = timeout
        self.api_base = api_base.rstrip("/")

    @classmethod
    def from_config(cls, config) -> DaybookClient:
        api = config.validated().api
        return cls(token=api.token, api_base=api.base_url, timeout=api.timeout)

    # ── Transport ──────────────────────────────────────────────────

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.api_base}/{path.lstrip('/')}"
        if params:
            encoded = urllib.parse.urlencode({k: v for k, v in params.items() if v is not None})
            if encoded:
                url = f"{url}?{encoded}"

        data = None
        headers: dict[str, str] = {"Accept": "application/json", "Authorization": f"Bearer {self.token}"}
        if payload is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(payload).encode("utf-8")

        req = urllib.request.Request(url=url, data=data, method=method.upper(), headers=headers)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="ignore") if hasattr(e, "read") else ""
            raise APIError(f"Daybook API {e.code}: {body or e.reason}") from e
        except urllib.error.URLError as e:
            raise APIError(f"Daybook API request failed: {e}") from e

        if not raw:
            return None
        try:
            return json.loads(raw.decode("utf-8", errors="ignore"))
        except json.JSONDecodeError as e:
            raise APIError(f"Daybook API returned invalid JSON for {method} {path}") from e

    async def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        logger.debug(f"{method} {path}")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self._request(method, path, **kwargs))

    @staticmethod
    def _entries(data: Any) -> list[Entry]:
        return [entry_from_dict(item) for item in data or []]

    # ── Entries ────────────────────────────────────────────────────

    async def fetch_entries_by_date(self, day: date) -> list[Entry]:
        return self._entries(await self._call("GET", f"/api/entries/date/{date_key(day)}"))

    async def fetch_entries_by_range(
        self, start: date, end: date, entry_type: EntryType | None = None
    ) -> list[Entry]:
        params = {"start": date_key(start), "end": date_key(end), "type": entry_type.value if entry_type else None}
        data = await self._call("GET", "/api/entries/range", params=params)
        return self._entries(data)

    async def create_entry(self, draft: EntryDraft) -> Entry:
        return entry_from_dict(await self._call("POST", "/api/entries", payload=draft.to_dict()))

    async def update_entry(self, entry_id: int, patch: EntryPatch) -> Entry:
        return entry_from_dict(await self._call("PUT", f"/api/entries/{entry_id}", payload=patch.to_dict()))

    async def delete_entry(self, entry_id: int) -> None:
        await self._call("DELETE", f"/api/entries/{entry_id}")

    async def search_entries(self, query: str) -> list[Entry]:
        return self._entries(await self._call("GET", "/api/entries/search", params={"q": query}))

    # ── Stats ──────────────────────────────────────────────────────

    async def fetch_heatmap(self, start: date, end: date) -> HeatmapSnapshot:
        data = await self._call("GET", "/api/stats/heatmap", params={"start": date_key(start), "end": date_key(end)})
        return HeatmapSnapshot.from_dict(data or {})

    async def fetch_stats(self) -> Stats:
        return Stats.from_dict(await self._call("GET", "/api/stats") or {})

    # ── Goals ──────────────────────────────────────────────────────

    async def fetch_goals(self, status: GoalStatus | None = None) -> list[Goal]:
        data = await self._call("GET", "/api/goals", params={"status": status.value if status else None})
        return [Goal.from_dict(item) for item in data or []]

    async def create_goal(self, draft: GoalDraft) -> Goal:
        return Goal.from_dict(await self._call("POST", "/api/goals", payload=draft.to_dict()))

    async def update_goal(self, goal_id: int, patch: GoalPatch) -> Goal:
        return Goal.from_dict(await self._call("PUT", f"/api/goals/{goal_id}", payload=patch.to_dict()))

    async def delete_goal(self, goal_id: int) -> None:
        await self._call("DELETE", f"/api/goals/{goal_id}")

    async def update_goal_status(self, goal_id: int, status: GoalStatus) -> Goal:
        data = await self._call("PATCH", f"/api/goals/{goal_id}/status", payload={"status": status.value})
        return Goal.from_dict(data)

    async def add_milestone(self, goal_id: int, title: str) -> Goal:
        data = await self._call("POST", f"/api/goals/{goal_id}/milestones", payload={"title": title})
        return Goal.from_dict(data)

    async def update_milestone(
        self,
        goal_id: int,
        milestone_id: int,
        *,
        title: str | None = None,
        completed: bool | None = None,
    ) -> Goal:
        payload: dict[str, Any] = {}
        if title is not None:
            payload["title"] = title
        if completed is not None:
            payload["isCompleted"] = completed
        data = await self._call("PATCH", f"/api/goals/{goal_id}/milestones/{milestone_id}", payload=payload)
        return Goal.from_dict(data)

    async def delete_milestone(self, goal_id: int, milestone_id: int) -> Goal:
        return Goal.from_dict(await self._call("DELETE", f"/api/goals/{goal_id}/milestones/{milestone_id}"))

    # ── Tags ───────────────────────────────────────────────────────

    async def fetch_tags(self) -> list[Tag]:
        return [Tag.from_dict(item) for item in await self._call("GET", "/api/tags") or []]

    async def create_tag(self, name: str, color: str | None = None) -> Tag:
        payload: dict[str, Any] = {"name": name}
        if color is not None:
            payload["color"] = color
        return Tag.from_dict(await self._call("POST", "/api/tags", payload=payload))

    async def delete_tag(self, tag_id: int) -> None:
        await self._call("DELETE", f"/api/tags/{tag_id}")
