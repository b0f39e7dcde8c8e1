"""
Progress Events - One-way notification channel for agent runs.

The orchestrator and its collaborators publish typed events to a
ProgressObserver and never learn who consumes them (HTTP stream, log,
test harness). Events are delivered in strict program order; every
observer call is awaited before the run continues.

Event sequence for a successful run:

    query-received
    tasks-planned, subtasks-planned
    for each task:    task-start
        for each subtask: subtask-start ... subtask-complete
                      task-complete
    answer-start, answer-chunk*, answer-end
    run-complete

A run that fails ends with a single `error` event instead.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Kinds of progress notifications."""
    QUERY_RECEIVED = "query-received"
    TASKS_PLANNED = "tasks-planned"
    SUBTASKS_PLANNED = "subtasks-planned"
    TASK_START = "task-start"
    TASK_COMPLETE = "task-complete"
    SUBTASK_START = "subtask-start"
    SUBTASK_COMPLETE = "subtask-complete"
    DIAGNOSTIC = "diagnostic"
    STATUS = "status"
    ANSWER_START = "answer-start"
    ANSWER_CHUNK = "answer-chunk"
    ANSWER_END = "answer-end"
    RUN_COMPLETE = "run-complete"
    ERROR = "error"


TERMINAL_EVENTS = frozenset({EventKind.RUN_COMPLETE, EventKind.ERROR})


class AgentEvent(BaseModel):
    """A typed progress notification."""
    kind: EventKind
    payload: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.kind in TERMINAL_EVENTS


class ProgressObserver(ABC):
    """Consumer of agent progress events."""

    @abstractmethod
    async def on_event(self, event: AgentEvent) -> None:
        pass


class LoggingObserver(ProgressObserver):
    """Writes every event to the `finresearch.events` logger."""

    def __init__(self, logger_name: str = "finresearch.events"):
        self._logger = logging.getLogger(logger_name)

    async def on_event(self, event: AgentEvent) -> None:
        if event.kind == EventKind.ANSWER_CHUNK:
            self._logger.debug(f"{event.kind.value}: {event.payload}")
        elif event.kind == EventKind.ERROR:
            self._logger.error(f"{event.kind.value}: {event.payload}")
        else:
            self._logger.info(f"{event.kind.value}: {event.payload}")


class QueueObserver(ProgressObserver):
    """
    Buffers events in an asyncio.Queue for a separate consumer.

    Used by the HTTP layer: the run publishes into the queue while the
    response generator drains it, so the run never blocks on the network.
    """

    def __init__(self, maxsize: int = 0):
        self.queue: "asyncio.Queue[AgentEvent]" = asyncio.Queue(maxsize=maxsize)

    async def on_event(self, event: AgentEvent) -> None:
        await self.queue.put(event)

    async def get(self) -> AgentEvent:
        return await self.queue.get()


class CompositeObserver(ProgressObserver):
    """Fans each event out to several observers, in order."""

    def __init__(self, observers: List[ProgressObserver]):
        self.observers = list(observers)

    async def on_event(self, event: AgentEvent) -> None:
        for observer in self.observers:
            await observer.on_event(event)
