"""Shared test fixtures for the research agent test suite."""

import json
import re
from typing import Any, Dict, List, Optional

import pytest
from pydantic import BaseModel

from finresearch.agents.events import AgentEvent, EventKind, ProgressObserver
from finresearch.agents.executor import RetryPolicy
from finresearch.agents.orchestrator import Agent
from finresearch.agents.tools.base import BaseTool, ToolRegistry


class ScriptedLLM:
    """
    Fake model client that replays scripted responses.

    Structured responses are queued per target model name
    ("ExecutionPlan", "OptimizedToolArgs", "IsDone", "SelectedContexts").
    A queued item may be a dict (encoded as JSON), a raw string, an
    exception (raised) or a callable taking the prompt.
    With nothing queued, SelectedContexts selects every listed entry.
    """

    def __init__(self, chunks: Optional[List[str]] = None, stream_error: Exception = None):
        self.responses: Dict[str, List[Any]] = {}
        self.calls: List[Dict[str, Any]] = []
        self.stream_calls: List[Dict[str, Any]] = []
        self.chunks = chunks if chunks is not None else ["Hello", " world"]
        self.stream_error = stream_error

    def queue(self, name: str, *items: Any) -> "ScriptedLLM":
        self.responses.setdefault(name, []).extend(items)
        return self

    def calls_for(self, name: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["name"] == name]

    async def generate_structured(self, prompt, schema, system_prompt=None, name="response"):
        self.calls.append({"name": name, "prompt": prompt, "system_prompt": system_prompt})
        queued = self.responses.get(name)
        if queued:
            item = queued.pop(0)
        elif name == "SelectedContexts":
            item = {"context_ids": [int(i) for i in re.findall(r"^\[(\d+)\]", prompt, re.M)]}
        else:
            raise AssertionError(f"Unexpected structured call for {name}")

        if callable(item):
            item = item(prompt)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, str):
            return item
        return json.dumps(item)

    async def stream(self, prompt, system_prompt=None):
        self.stream_calls.append({"prompt": prompt, "system_prompt": system_prompt})
        for chunk in self.chunks:
            yield chunk
        if self.stream_error is not None:
            raise self.stream_error


class StatementArgs(BaseModel):
    ticker: str
    period: str = "quarterly"
    limit: int = 4


class ScriptedTool(BaseTool):
    """Tool whose outcomes are scripted: a value is returned, an exception raised."""

    description = "Scripted test tool"
    args_schema = StatementArgs

    def __init__(self, name: str, outcomes: Optional[List[Any]] = None, default: Any = None):
        self.name = name
        self.outcomes = list(outcomes or [])
        self.default = default if default is not None else {"ok": True}
        self.calls: List[Dict[str, Any]] = []

    async def run(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingObserver(ProgressObserver):
    """Keeps every event for assertions."""

    def __init__(self):
        self.events: List[AgentEvent] = []

    async def on_event(self, event: AgentEvent) -> None:
        self.events.append(event)

    @property
    def kinds(self) -> List[EventKind]:
        return [e.kind for e in self.events]

    def of_kind(self, kind: EventKind) -> List[AgentEvent]:
        return [e for e in self.events if e.kind == kind]


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


QUARTERLY_REVENUE = [
    {"report_period": "2026-06-30", "revenue": 1200},
    {"report_period": "2026-03-31", "revenue": 1100},
    {"report_period": "2025-12-31", "revenue": 1050},
    {"report_period": "2025-09-30", "revenue": 1000},
]


def plan_payload(*tasks):
    """Build an ExecutionPlan payload from (id, description, [subtask descriptions])."""
    return {
        "tasks": [
            {
                "id": task_id,
                "description": description,
                "subtasks": [
                    {"id": i, "description": sub} for i, sub in enumerate(subtasks, 1)
                ],
            }
            for task_id, description, subtasks in tasks
        ]
    }


@pytest.fixture
def llm():
    return ScriptedLLM()


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def statements_tool():
    return ScriptedTool("get_income_statements", default=QUARTERLY_REVENUE)


@pytest.fixture
def tools(statements_tool):
    return ToolRegistry([statements_tool, ScriptedTool("get_news", default=[])])


@pytest.fixture
def make_agent(llm, tools, observer, sleep):
    """Build an Agent wired to the fakes with deterministic loop settings."""

    def factory(**overrides):
        kwargs = dict(
            llm_client=llm,
            tools=tools,
            observer=observer,
            planner_max_retries=3,
            max_iterations=5,
            tool_selection_retries=1,
            retry_policy=RetryPolicy(max_attempts=3, backoff_base_ms=200, backoff_multiplier=4.0),
            sleep=sleep,
        )
        kwargs.update(overrides)
        return Agent(**kwargs)

    return factory
