"""Tests for finresearch.agents.context: the append-only context store."""

import pytest
from pydantic import ValidationError

from finresearch.agents.context import ContextStore


def _store(llm=None, **kwargs):
    store = ContextStore(llm, **kwargs)
    store.record(1, 1, "get_income_statements", {"ticker": "ACME"}, result=[{"revenue": 1}])
    store.record(1, 1, "get_news", {"ticker": "ACME"}, error="timeout")
    store.record(1, 2, "get_prices", {"ticker": "ACME"}, result=[{"close": 10}])
    return store


# ── record ───────────────────────────────────────────────────────────────────


class TestRecord:
    def test_sequential_ids(self):
        store = ContextStore()
        assert store.record(1, 1, "a") == 0
        assert store.record(1, 2, "b") == 1
        assert store.ids == [0, 1]

    def test_entries_keep_provenance(self):
        store = _store()
        entry = store.get(1)
        assert entry.tool_name == "get_news"
        assert entry.error == "timeout"
        assert entry.succeeded is False

    def test_invalid_shape_rejected(self):
        store = ContextStore()
        with pytest.raises(ValidationError):
            store.record("not-an-int", 1, "a")
        assert len(store) == 0

    def test_entries_returns_copy(self):
        store = _store()
        store.entries.clear()
        assert len(store) == 3

    def test_provenance_per_subtask(self):
        store = _store()
        assert [(e.task_id, e.subtask_id) for e in store.entries] == [(1, 1), (1, 1), (1, 2)]


# ── select ───────────────────────────────────────────────────────────────────


class TestSelect:
    @pytest.mark.asyncio
    async def test_model_selection(self, llm):
        llm.queue("SelectedContexts", {"context_ids": [2, 0]})
        store = _store(llm)
        selected = await store.select("revenue", [0, 1, 2])
        assert selected == [0, 2]

    @pytest.mark.asyncio
    async def test_unknown_id_falls_back_to_all(self, llm):
        llm.queue("SelectedContexts", {"context_ids": [0, 7]})
        store = _store(llm)
        assert await store.select("revenue", [0, 1, 2]) == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_id_outside_candidates_falls_back(self, llm):
        llm.queue("SelectedContexts", {"context_ids": [2]})
        store = _store(llm)
        assert await store.select("revenue", [0, 1]) == [0, 1]

    @pytest.mark.asyncio
    async def test_empty_selection_falls_back(self, llm):
        llm.queue("SelectedContexts", {"context_ids": []})
        store = _store(llm)
        assert await store.select("revenue", [0, 1, 2]) == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_malformed_output_falls_back(self, llm):
        llm.queue("SelectedContexts", "not json")
        store = _store(llm)
        assert await store.select("revenue", [0, 1, 2]) == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_single_candidate_skips_model(self, llm):
        store = _store(llm)
        assert await store.select("revenue", [1]) == [1]
        assert llm.calls_for("SelectedContexts") == []

    @pytest.mark.asyncio
    async def test_no_candidates(self, llm):
        store = ContextStore(llm)
        assert await store.select("revenue", []) == []
        assert llm.calls == []

    @pytest.mark.asyncio
    async def test_nonexistent_candidates_dropped(self, llm):
        store = _store(llm)
        assert await store.select("revenue", [2, 99]) == [2]

    @pytest.mark.asyncio
    async def test_prompt_lists_candidates_only(self, llm):
        llm.queue("SelectedContexts", {"context_ids": [0]})
        store = _store(llm)
        await store.select("revenue trend", [0, 2])
        prompt = llm.calls[0]["prompt"]
        assert "revenue trend" in prompt
        assert "[0] get_income_statements" in prompt
        assert "[1]" not in prompt


# ── format_entries ───────────────────────────────────────────────────────────


class TestFormatEntries:
    def test_empty(self):
        assert ContextStore().format_entries([]) == "No data gathered yet."

    def test_includes_errors(self):
        text = _store().format_entries([0, 1])
        assert "revenue" in text
        assert "ERROR (attempt 1): timeout" in text

    def test_truncates_large_results(self):
        store = ContextStore(result_max_chars=20)
        store.record(1, 1, "big", result={"data": "x" * 500})
        text = store.format_entries([0])
        assert "[truncated]" in text
        assert "x" * 100 not in text
