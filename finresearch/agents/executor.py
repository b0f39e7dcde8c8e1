"""
Task Executor - Drives one subtask to completion with tools.

RESPONSIBILITY:
For a single subtask, repeatedly pick a tool, call it, record what came
back and ask whether the subtask is done. The loop is capped so it
always terminates.

FLOW (one iteration):
1. Select relevant context entries for this subtask
2. Ask the model for a tool call (OptimizedToolArgs); validate it
   against the declared tool set, re-prompting once on invalid output
3. Invoke the tool, retrying failures with exponential backoff
4. Record the result, or each failed attempt, in the Context Store
5. Ask the model for an IsDone verdict
6. Done -> success; cap reached -> failure ("iteration cap exceeded")

Failures here are local to the subtask: they end up as context entries
and a success=False result, never as an exception that stops the run.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from pydantic import ValidationError

from finresearch.agents.base import BaseAgent, AgentRole, CancellationToken
from finresearch.agents.context import ContextStore
from finresearch.agents.events import EventKind, ProgressObserver
from finresearch.agents.prompts import (
    IS_DONE_SYSTEM_PROMPT,
    get_tool_args_system_prompt,
)
from finresearch.agents.tools.base import ToolRegistry
from finresearch.core.exceptions import (
    IterationCapExceeded,
    ToolInvocationError,
    ToolSelectionError,
)
from finresearch.models.schemas import (
    IsDone,
    OptimizedToolArgs,
    PlannedTask,
    SubTask,
    SubTaskResult,
)

logger = logging.getLogger(__name__)


@dataclass
class RetryPolicy:
    """Bounded exponential backoff for tool invocation."""
    max_attempts: int = 3
    backoff_base_ms: int = 200
    backoff_multiplier: float = 4.0

    def delay_after(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number `attempt` (1-based)."""
        return self.backoff_base_ms * (self.backoff_multiplier ** (attempt - 1)) / 1000.0


class TaskExecutor(BaseAgent):
    """
    Executes subtasks through a bounded tool-invocation loop.

    One executor serves one run; it writes into the run's ContextStore.
    """

    role = AgentRole.EXECUTOR

    def __init__(
        self,
        llm_client: Any,
        tools: ToolRegistry,
        context_store: ContextStore,
        observer: Optional[ProgressObserver] = None,
        max_iterations: int = 5,
        tool_selection_retries: int = 1,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        super().__init__(llm_client, observer)
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.tools = tools
        self.context_store = context_store
        self.max_iterations = max_iterations
        self.tool_selection_retries = tool_selection_retries
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    async def execute(
        self,
        task: PlannedTask,
        subtask: SubTask,
        scoped_context_ids: Sequence[int],
        token: Optional[CancellationToken] = None,
    ) -> SubTaskResult:
        """
        Run the loop for one subtask.

        Args:
            task: Parent task (for provenance and prompts)
            subtask: The subtask to complete; its `done` flag is set on success
            scoped_context_ids: Entries gathered before this subtask started
            token: Cancellation signal for the run

        Returns:
            SubTaskResult with success flag and reason
        """
        await self._emit(EventKind.SUBTASK_START, taskId=task.id, subtaskId=subtask.id)

        try:
            result = await self._run_loop(task, subtask, list(scoped_context_ids), token)
        except IterationCapExceeded as e:
            result = SubTaskResult(success=False, reason=e.message, iterations=self.max_iterations)
        except Exception:
            await self._emit(
                EventKind.SUBTASK_COMPLETE, taskId=task.id, subtaskId=subtask.id, success=False
            )
            raise

        if result.success:
            subtask.done = True
            logger.info(f"Subtask {task.id}.{subtask.id} done after {result.iterations} iteration(s)")
        else:
            logger.warning(f"Subtask {task.id}.{subtask.id} failed: {result.reason}")

        await self._emit(
            EventKind.SUBTASK_COMPLETE,
            taskId=task.id,
            subtaskId=subtask.id,
            success=result.success,
        )
        return result

    async def _run_loop(
        self,
        task: PlannedTask,
        subtask: SubTask,
        scoped_ids: List[int],
        token: Optional[CancellationToken],
    ) -> SubTaskResult:
        gathered: List[int] = []
        scope = f"{task.description}: {subtask.description}"

        for iteration in range(1, self.max_iterations + 1):
            if token:
                token.raise_if_cancelled()

            selected = await self.context_store.select(scope, scoped_ids + gathered, token)

            try:
                call = await self._choose_tool(task, subtask, selected, token)
            except ToolSelectionError as e:
                await self._emit(EventKind.DIAGNOSTIC, message=f"Tool selection failed: {e.message}")
                gathered.append(self.context_store.record(
                    task.id, subtask.id, e.tool_name or "tool_selection", error=e.message
                ))
            else:
                if call.tool_name is not None:
                    gathered.extend(await self._invoke_with_retry(task, subtask, call, token))

            review_ids = sorted(set(selected) | set(gathered))
            verdict = await self._check_done(task, subtask, review_ids, token)
            if verdict.done:
                return SubTaskResult(success=True, reason=verdict.reason, iterations=iteration)

        raise IterationCapExceeded(self.max_iterations)

    async def _choose_tool(
        self,
        task: PlannedTask,
        subtask: SubTask,
        context_ids: Sequence[int],
        token: Optional[CancellationToken],
    ) -> OptimizedToolArgs:
        """
        Ask the model for the next tool call and validate it.

        Raises:
            ToolSelectionError: output still invalid after the re-prompts
        """
        system_prompt = get_tool_args_system_prompt(self.tools.describe())
        feedback: Optional[str] = None
        last_error: Optional[ToolSelectionError] = None

        for _ in range(1 + self.tool_selection_retries):
            if token:
                token.raise_if_cancelled()

            prompt = self._build_tool_prompt(task, subtask, context_ids, feedback)
            try:
                call = await self._call_structured(prompt, OptimizedToolArgs, system_prompt)
                if call.tool_name is None:
                    return call
                arguments = self.tools.validate(call.tool_name, call.arguments)
                return OptimizedToolArgs(
                    tool_name=call.tool_name,
                    arguments=arguments,
                    reasoning=call.reasoning,
                )
            except ValidationError as e:
                last_error = ToolSelectionError(f"Malformed tool call: {e}")
            except ToolSelectionError as e:
                last_error = e

            logger.warning(f"Invalid tool call for subtask {task.id}.{subtask.id}: {last_error.message}")
            feedback = last_error.message

        raise last_error

    async def _invoke_with_retry(
        self,
        task: PlannedTask,
        subtask: SubTask,
        call: OptimizedToolArgs,
        token: Optional[CancellationToken],
    ) -> List[int]:
        """
        Invoke a tool, recording every outcome.

        Each failed attempt is recorded as its own context entry so later
        reasoning can see it; the final success (if any) is a new entry.

        Returns:
            Ids of the entries recorded
        """
        recorded: List[int] = []
        policy = self.retry_policy

        await self._emit(EventKind.STATUS, message=f"Calling {call.tool_name}", active=True)
        try:
            for attempt in range(1, policy.max_attempts + 1):
                if token:
                    token.raise_if_cancelled()
                try:
                    data = await self.tools.invoke(call.tool_name, call.arguments)
                except ToolInvocationError as e:
                    recorded.append(self.context_store.record(
                        task.id, subtask.id, call.tool_name, call.arguments,
                        error=e.message, attempt=attempt,
                    ))
                    await self._emit(
                        EventKind.DIAGNOSTIC,
                        message=f"{e.message} (attempt {attempt}/{policy.max_attempts})",
                    )
                    if attempt < policy.max_attempts:
                        await self._sleep(policy.delay_after(attempt))
                    continue

                recorded.append(self.context_store.record(
                    task.id, subtask.id, call.tool_name, call.arguments,
                    result=data, attempt=attempt,
                ))
                return recorded

            logger.warning(
                f"{call.tool_name} failed {policy.max_attempts} times for subtask {task.id}.{subtask.id}"
            )
            return recorded
        finally:
            await self._emit(EventKind.STATUS, message="", active=False)

    async def _check_done(
        self,
        task: PlannedTask,
        subtask: SubTask,
        context_ids: Sequence[int],
        token: Optional[CancellationToken],
    ) -> IsDone:
        if token:
            token.raise_if_cancelled()

        prompt = f"""
Task: {task.description}
Subtask: {subtask.description}

Context gathered:
{self.context_store.format_entries(context_ids)}

Is this subtask complete?
"""
        try:
            return await self._call_structured(prompt, IsDone, IS_DONE_SYSTEM_PROMPT)
        except ValidationError as e:
            logger.warning(f"Unreadable completion verdict, treating as not done: {e}")
            return IsDone(done=False, reason="unreadable verdict")

    def _build_tool_prompt(
        self,
        task: PlannedTask,
        subtask: SubTask,
        context_ids: Sequence[int],
        feedback: Optional[str],
    ) -> str:
        prompt = f"""
Task: {task.description}
Subtask: {subtask.description}

Context gathered so far:
{self.context_store.format_entries(context_ids)}

Choose the next tool call for this subtask.
"""
        if feedback:
            prompt += f"""
Your previous answer was rejected: {feedback}
Use an exact tool name from the list and arguments that match its schema.
"""
        return prompt
