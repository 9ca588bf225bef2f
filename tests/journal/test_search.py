"""Tests for the debounced search pipeline and local filtering."""

import asyncio
from datetime import date

import pytest

from daybook.core.events import SEARCH_FAILED, SEARCH_RESOLVED
from daybook.journal.config import SearchConfig
from daybook.journal.models import ActionEntry, EntryType, NoteEntry, Tag
from daybook.journal.search import SearchPipeline, SearchState, filter_entries

DEBOUNCE = 0.02


def _note(entry_id, title, **kwargs):
    return NoteEntry(id=entry_id, title=title, entry_date=date(2026, 10, 5), **kwargs)


@pytest.fixture
def pipeline(backend):
    backend.add(_note(1, "apple pie"))
    backend.add(_note(2, "abacus lessons"))
    backend.add(_note(3, "banana bread"))
    return SearchPipeline(backend.search_entries, SearchConfig(debounce_seconds=DEBOUNCE))


async def _wait_for(predicate, timeout=1.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.001)


@pytest.mark.smoke
class TestDebounce:
    async def test_rapid_typing_issues_one_request(self, pipeline, backend):
        pipeline.set_query("a")
        pipeline.set_query("ab")
        await pipeline.drain()

        assert backend.calls == [("search_entries", ("ab",))]
        assert pipeline.requests_issued == 1
        assert pipeline.state is SearchState.RESOLVED
        assert [e.title for e in pipeline.results] == ["abacus lessons"]

    async def test_nothing_sent_before_timer_expires(self, pipeline, backend):
        pipeline.set_query("apple")

        assert pipeline.timer_pending
        assert pipeline.state is SearchState.IDLE
        assert backend.calls == []
        await pipeline.drain()
        assert backend.count("search_entries") == 1

    async def test_clearing_cancels_timer(self, pipeline, backend):
        pipeline.set_query("apple")
        pipeline.clear()
        await asyncio.sleep(DEBOUNCE * 3)
        await pipeline.drain()

        assert backend.calls == []
        assert pipeline.state is SearchState.IDLE
        assert pipeline.results is None

    async def test_whitespace_query_is_idle(self, pipeline, backend):
        pipeline.set_query("   ")
        await pipeline.drain()
        assert pipeline.state is SearchState.IDLE
        assert backend.calls == []

    async def test_query_is_trimmed(self, pipeline, backend):
        pipeline.set_query("  banana ")
        await pipeline.drain()
        assert backend.calls == [("search_entries", ("banana",))]


class TestStaleResults:
    async def test_superseded_response_is_discarded(self, pipeline, backend):
        gate = backend.hold("search_entries")
        pipeline.set_query("a")
        await _wait_for(lambda: backend.count("search_entries") == 1)
        assert pipeline.state is SearchState.PENDING

        pipeline.set_query("ab")
        await _wait_for(lambda: pipeline.state is SearchState.RESOLVED)
        gate.set()
        await pipeline.drain()

        assert pipeline.requests_issued == 2
        assert pipeline.query == "ab"
        assert [e.title for e in pipeline.results] == ["abacus lessons"]

    async def test_response_after_clear_is_discarded(self, pipeline, backend):
        gate = backend.hold("search_entries")
        pipeline.set_query("apple")
        await _wait_for(lambda: backend.count("search_entries") == 1)

        pipeline.clear()
        gate.set()
        await pipeline.drain()

        assert pipeline.state is SearchState.IDLE
        assert pipeline.results is None

    async def test_superseded_failure_is_ignored(self, pipeline, backend):
        backend.failing.add("search_entries")
        gate = backend.hold("search_entries")
        pipeline.set_query("a")
        await _wait_for(lambda: backend.count("search_entries") == 1)

        backend.failing.clear()
        pipeline.set_query("apple")
        await _wait_for(lambda: pipeline.state is SearchState.RESOLVED)
        gate.set()
        await pipeline.drain()

        assert pipeline.state is SearchState.RESOLVED
        assert pipeline.error is None

    async def test_dispatch_after_clear_stays_idle(self, pipeline, backend):
        pipeline.set_query("apple")
        generation = pipeline.generation
        pipeline.clear()

        # Timer already fired for "apple" when the clear landed
        await pipeline._dispatch("apple", generation)

        assert pipeline.state is SearchState.IDLE
        assert pipeline.requests_issued == 0
        assert backend.calls == []


class TestFailure:
    async def test_failure_sets_error_and_emits(self, pipeline, backend):
        backend.failing.add("search_entries")
        failed = []
        pipeline.bus.on(SEARCH_FAILED, failed.append)

        pipeline.set_query("apple")
        await pipeline.drain()

        assert pipeline.state is SearchState.FAILED
        assert "apple" in str(pipeline.error)
        assert failed[0].payload["query"] == "apple"

    async def test_retry_after_failure(self, pipeline, backend):
        backend.failing.add("search_entries")
        pipeline.set_query("apple")
        await pipeline.drain()

        backend.failing.clear()
        resolved = []
        pipeline.bus.on(SEARCH_RESOLVED, resolved.append)
        pipeline.set_query("apple")
        await pipeline.drain()

        assert pipeline.state is SearchState.RESOLVED
        assert pipeline.error is None
        assert len(resolved) == 1


class TestFilterEntries:
    def test_matches_title_content_and_tags(self):
        entries = [
            _note(1, "Morning run"),
            _note(2, "Journal", content="Ran along the river"),
            _note(3, "Dinner", tags=(Tag(id=1, name="Running"),)),
            _note(4, "Groceries"),
        ]
        assert [e.id for e in filter_entries(entries, "RUN")] == [1, 3]
        assert [e.id for e in filter_entries(entries, "river")] == [2]

    def test_type_filter(self):
        entries = [_note(1, "a"), ActionEntry(id=2, title="a", entry_date=date(2026, 10, 5))]
        assert [e.id for e in filter_entries(entries, entry_type=EntryType.ACTION)] == [2]

    def test_empty_query_keeps_everything(self):
        entries = [_note(1, "a"), _note(2, "b")]
        assert filter_entries(entries, "  ") == entries
