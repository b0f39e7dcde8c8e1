"""
Orchestrator - Coordinates the entire agent pipeline for one query.

RESPONSIBILITY:
The Agent is the main entry point. It sequences planning, execution and
answer synthesis and reports progress through a ProgressObserver.

COMPLETE FLOW:
==============
1. query-received
        │
        ▼
2. TASK PLANNER
   - ExecutionPlan of tasks/subtasks
   - tasks-planned, subtasks-planned
        │
        ▼
3. TASK EXECUTION (plan order, strictly sequential)
   ┌──────────────────────────────────────────────┐
   │  task-start                                  │
   │    TaskExecutor.execute(subtask) per subtask │
   │  task-complete (success = AND of subtasks)   │
   └──────────────────────────────────────────────┘
        │
        ▼
4. ANSWER GENERATOR
   - answer-start, answer-chunk*, answer-end
        │
        ▼
5. Answer appended to history, run-complete

Any unrecovered error ends the run with a single `error` event.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from finresearch.agents.answer_generator import AnswerGenerator
from finresearch.agents.base import CancellationToken
from finresearch.agents.context import ContextStore
from finresearch.agents.events import (
    AgentEvent,
    EventKind,
    LoggingObserver,
    ProgressObserver,
)
from finresearch.agents.executor import RetryPolicy, TaskExecutor
from finresearch.agents.history import MessageHistory
from finresearch.agents.planner import TaskPlanner
from finresearch.agents.tools.base import ToolRegistry
from finresearch.core.exceptions import AppException
from finresearch.models.schemas import ExecutionPlan, PlannedTask

logger = logging.getLogger(__name__)


class Agent:
    """
    Runs one research query at a time to completion.

    The orchestrator manages:
    - Collaborator wiring (planner, executor, answer generator)
    - A fresh ContextStore per run
    - Lifecycle notifications and the terminal error policy

    Concurrent queries need separate Agent instances.
    """

    def __init__(
        self,
        llm_client: Any,
        tools: ToolRegistry,
        observer: Optional[ProgressObserver] = None,
        planner_max_retries: int = 3,
        max_iterations: int = 5,
        tool_selection_retries: int = 1,
        retry_policy: Optional[RetryPolicy] = None,
        context_result_max_chars: int = 8000,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the orchestrator with all dependencies.

        Args:
            llm_client: Client for LLM API calls
            tools: Declared capability set
            observer: Receiver for progress events
            planner_max_retries: Re-prompts allowed for an invalid plan
            max_iterations: Cap on each subtask loop
            tool_selection_retries: Re-prompts allowed for an invalid tool call
            retry_policy: Backoff policy for failing tools
            context_result_max_chars: Truncation bound for results in prompts
            sleep: Awaitable sleep used between tool retries (tests pass a no-op)
        """
        self.llm = llm_client
        self.tools = tools
        self.observer = observer or LoggingObserver()
        self.planner_max_retries = planner_max_retries
        self.max_iterations = max_iterations
        self.tool_selection_retries = tool_selection_retries
        self.retry_policy = retry_policy or RetryPolicy()
        self.context_result_max_chars = context_result_max_chars
        self._sleep = sleep

        self.context_store: Optional[ContextStore] = None
        self.plan: Optional[ExecutionPlan] = None
        self._token: Optional[CancellationToken] = None
        self._running = False

    def cancel(self) -> None:
        """Abort the current run at its next suspension point."""
        if self._token:
            self._token.cancel()

    async def run(
        self,
        query: str,
        history: Optional[MessageHistory] = None,
        token: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        """
        Main entry point - answer one query.

        Never raises for pipeline failures: they surface as a single
        `error` event and the method returns None.

        Args:
            query: User's question
            history: Conversation so far; the new turn pair is appended on success
            token: Optional external cancellation signal

        Returns:
            The answer text, or None if the run failed
        """
        if self._running:
            raise RuntimeError("Agent is already running a query")
        self._running = True
        self._token = token or CancellationToken()
        self.context_store = ContextStore(self.llm, self.context_result_max_chars)
        self.plan = None

        try:
            answer = await self._run_pipeline(query, history)
        except AppException as e:
            logger.error(f"Run failed: {e.error_code} - {e.message}")
            await self._emit(EventKind.ERROR, message=e.message)
            return None
        except Exception as e:
            logger.exception("Unexpected error during run")
            await self._emit(EventKind.ERROR, message=str(e) or type(e).__name__)
            return None
        finally:
            self._running = False

        await self._emit(EventKind.RUN_COMPLETE)
        return answer

    async def _run_pipeline(self, query: str, history: Optional[MessageHistory]) -> str:
        token = self._token
        await self._emit(EventKind.QUERY_RECEIVED, query=query)

        # Step 1: Plan
        planner = TaskPlanner(
            self.llm,
            tool_catalog=self.tools.describe(),
            observer=self.observer,
            max_retries=self.planner_max_retries,
        )
        await self._emit(EventKind.STATUS, message="Planning", active=True)
        try:
            self.plan = await planner.plan(query, history, token)
        finally:
            await self._emit(EventKind.STATUS, message="", active=False)

        # Step 2: Execute tasks
        executor = TaskExecutor(
            self.llm,
            self.tools,
            self.context_store,
            observer=self.observer,
            max_iterations=self.max_iterations,
            tool_selection_retries=self.tool_selection_retries,
            retry_policy=self.retry_policy,
            sleep=self._sleep,
        )
        for task in self.plan.tasks:
            await self._execute_task(executor, task)

        # Step 3: Generate answer
        answer = await self._generate_answer(query, history)

        if history is not None:
            history.add_user_message(query)
            history.add_assistant_message(answer)
        return answer

    async def _execute_task(self, executor: TaskExecutor, task: PlannedTask) -> bool:
        await self._emit(EventKind.TASK_START, taskId=task.id)

        results: List[bool] = []
        for subtask in task.subtasks:
            result = await executor.execute(
                task, subtask, self.context_store.ids, self._token
            )
            results.append(result.success)

        task.refresh_done()
        success = all(results)
        logger.info(f"Task {task.id} complete (success={success})")
        await self._emit(EventKind.TASK_COMPLETE, taskId=task.id, success=success)
        return success

    async def _generate_answer(self, query: str, history: Optional[MessageHistory]) -> str:
        generator = AnswerGenerator(self.llm, self.context_store)
        stream = await generator.synthesize(
            query, history, self.context_store.ids, self._token
        )

        await self._emit(EventKind.ANSWER_START)
        async for chunk in stream:
            await self._emit(EventKind.ANSWER_CHUNK, text=chunk)
        await self._emit(EventKind.ANSWER_END)
        return stream.text

    async def _emit(self, kind: EventKind, **payload: Any) -> None:
        await self.observer.on_event(AgentEvent(kind=kind, payload=payload))
