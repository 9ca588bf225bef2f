"""Shared test fixtures for daybook."""

import asyncio
import os
import tempfile
from collections import Counter
from dataclasses import replace
from datetime import date, timedelta

import pytest

from daybook.core.exceptions import APIError
from daybook.journal.goals import Goal, GoalStatus, Milestone
from daybook.journal.heatmap import build_heatmap
from daybook.journal.models import Tag, entry_from_dict
from daybook.journal.stats import Stats


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file."""
    import yaml

    config_data = {
        "paths": {
            "data_dir": os.path.join(tmp_dir, "data"),
            "log_dir": os.path.join(tmp_dir, "logs"),
        },
        "api": {
            "base_url": "http://daybook.test/",
            "token": "test-token",
        },
        "calendar": {
            "week_start": "monday",
        },
        "search": {
            "debounce_seconds": 0.05,
        },
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


class FakeBackend:
    """In-memory DaybookBackend.

    Results are computed when a call is issued, so a parked call returns
    the server state as it was at that moment. ``hold(op)`` parks the next
    call of *op* until the returned event is set; ``failing`` names ops
    that raise ``APIError``.
    """

    def __init__(self, entries=(), goals=(), tags=()):
        self.entries = {e.id: e for e in entries}
        self.goals = {g.id: g for g in goals}
        self.tags = {t.id: t for t in tags}
        self.calls = []
        self.failing = set()
        self.relocate = {}  # entry id -> date the server moves it to on update
        self._holds = {}
        self._next_id = 1000

    def hold(self, op):
        gate = asyncio.Event()
        self._holds[op] = gate
        return gate

    def count(self, op):
        return sum(1 for name, _ in self.calls if name == op)

    def add(self, entry):
        self.entries[entry.id] = entry
        return entry

    def _new_id(self):
        self._next_id += 1
        return self._next_id

    async def _call(self, op, args, compute):
        self.calls.append((op, args))
        fail = op in self.failing
        result = None if fail else compute()
        gate = self._holds.pop(op, None)
        if gate is not None:
            await gate.wait()
        if fail:
            raise APIError(f"{op} failed")
        return result

    # ── Entries ──

    async def fetch_entries_by_date(self, day):
        return await self._call(
            "fetch_entries_by_date", (day,), lambda: [e for e in self.entries.values() if e.entry_date == day]
        )

    async def fetch_entries_by_range(self, start, end, entry_type=None):
        return await self._call(
            "fetch_entries_by_range",
            (start, end, entry_type),
            lambda: [
                e
                for e in self.entries.values()
                if start <= e.entry_date <= end and (entry_type is None or e.type is entry_type)
            ],
        )

    async def create_entry(self, draft):
        def compute():
            data = draft.to_dict()
            data["id"] = self._new_id()
            data["tags"] = [{"id": i, "name": name} for i, name in enumerate(draft.tags, 1)]
            return self.add(entry_from_dict(data))

        return await self._call("create_entry", (draft,), compute)

    async def update_entry(self, entry_id, patch):
        def compute():
            data = self.entries[entry_id].to_dict()
            wire = patch.to_dict()
            if "tags" in wire:
                wire["tags"] = [{"id": i, "name": name} for i, name in enumerate(wire["tags"], 1)]
            data.update(wire)
            if entry_id in self.relocate:
                data["entryDate"] = self.relocate[entry_id].isoformat()
            return self.add(entry_from_dict(data))

        return await self._call("update_entry", (entry_id, patch), compute)

    async def delete_entry(self, entry_id):
        return await self._call("delete_entry", (entry_id,), lambda: self.entries.pop(entry_id, None) and None)

    async def search_entries(self, query):
        q = query.lower()
        return await self._call(
            "search_entries", (query,), lambda: [e for e in self.entries.values() if q in e.title.lower()]
        )

    # ── Stats ──

    async def fetch_heatmap(self, start, end):
        def compute():
            counts = {}
            for e in self.entries.values():
                if start <= e.entry_date <= end:
                    counts[e.entry_date] = counts.get(e.entry_date, 0) + 1
            return build_heatmap(counts, end, (end - start).days + 1).snapshot

        return await self._call("fetch_heatmap", (start, end), compute)

    async def fetch_stats(self):
        def compute():
            counts = Counter(e.entry_date for e in self.entries.values())
            heatmap = build_heatmap(counts, max(counts, default=date.today()), 365).snapshot
            by_type = Counter(e.type for e in self.entries.values())
            recent = sorted(self.entries.values(), key=lambda e: (e.entry_date, e.id), reverse=True)
            return Stats(
                total_entries=len(self.entries),
                active_days=len(counts),
                current_streak=heatmap.current_streak,
                longest_streak=heatmap.longest_streak,
                by_type=dict(by_type),
                recent_entries=tuple(recent[:6]),
            )

        return await self._call("fetch_stats", (), compute)

    # ── Goals ──

    async def fetch_goals(self, status=None):
        return await self._call(
            "fetch_goals", (status,), lambda: [g for g in self.goals.values() if status is None or g.status is status]
        )

    def _store_goal(self, goal):
        self.goals[goal.id] = goal
        return goal

    async def create_goal(self, draft):
        def compute():
            goal = Goal(
                id=self._new_id(),
                title=draft.title.strip(),
                type=draft.type,
                description=draft.description,
                color=draft.color,
                target_date=draft.target_date,
            )
            return self._store_goal(goal)

        return await self._call("create_goal", (draft,), compute)

    async def update_goal(self, goal_id, patch):
        def compute():
            changes = {k: v for k, v in vars(patch).items() if v is not None}
            return self._store_goal(replace(self.goals[goal_id], **changes))

        return await self._call("update_goal", (goal_id, patch), compute)

    async def delete_goal(self, goal_id):
        return await self._call("delete_goal", (goal_id,), lambda: self.goals.pop(goal_id) and None)

    async def update_goal_status(self, goal_id, status):
        return await self._call(
            "update_goal_status",
            (goal_id, status),
            lambda: self._store_goal(replace(self.goals[goal_id], status=GoalStatus(status))),
        )

    async def add_milestone(self, goal_id, title):
        def compute():
            goal = self.goals[goal_id]
            milestone = Milestone(id=self._new_id(), title=title)
            return self._store_goal(replace(goal, milestones=goal.milestones + (milestone,)))

        return await self._call("add_milestone", (goal_id, title), compute)

    async def update_milestone(self, goal_id, milestone_id, *, title=None, completed=None):
        def compute():
            goal = self.goals[goal_id]
            milestones = []
            for m in goal.milestones:
                if m.id == milestone_id:
                    m = replace(
                        m,
                        title=title if title is not None else m.title,
                        completed=completed if completed is not None else m.completed,
                    )
                milestones.append(m)
            return self._store_goal(replace(goal, milestones=tuple(milestones)))

        return await self._call("update_milestone", (goal_id, milestone_id), compute)

    async def delete_milestone(self, goal_id, milestone_id):
        def compute():
            goal = self.goals[goal_id]
            return self._store_goal(
                replace(goal, milestones=tuple(m for m in goal.milestones if m.id != milestone_id))
            )

        return await self._call("delete_milestone", (goal_id, milestone_id), compute)

    # ── Tags ──

    async def fetch_tags(self):
        return await self._call("fetch_tags", (), lambda: list(self.tags.values()))

    async def create_tag(self, name, color=None):
        def compute():
            tag = Tag(id=self._new_id(), name=name, color=color or "#818cf8")
            self.tags[tag.id] = tag
            return tag

        return await self._call("create_tag", (name, color), compute)

    async def delete_tag(self, tag_id):
        return await self._call("delete_tag", (tag_id,), lambda: self.tags.pop(tag_id) and None)


@pytest.fixture
def backend():
    """Empty in-memory backend."""
    return FakeBackend()


@pytest.fixture
def today():
    return date(2026, 10, 17)


@pytest.fixture
def sample_goals(today):
    return [
        Goal(
            id=1,
            title="Run a marathon",
            target_date=today - timedelta(days=3),
            milestones=(Milestone(id=11, title="10k", completed=True), Milestone(id=12, title="Half")),
        ),
        Goal(id=2, title="Read 20 books", status=GoalStatus.COMPLETED, target_date=today - timedelta(days=30)),
        Goal(id=3, title="Learn Rust", target_date=today + timedelta(days=2)),
        Goal(id=4, title="Old plan", status=GoalStatus.ARCHIVED),
    ]
