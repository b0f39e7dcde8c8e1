"""
Task Planner - Decomposes a query into an execution plan.

RESPONSIBILITY:
The Planner decides WHAT work answers the question. It turns the user's
query (plus conversation history) into ordered tasks, each with ordered
subtasks, using a schema-constrained model call.

FLOW:
1. Build a prompt from the query, history and tool catalogue
2. Ask the model for an ExecutionPlan
3. Validate (non-empty, unique ids, non-empty descriptions);
   on failure re-prompt with the validation error, up to max_retries
4. Publish the flattened task list, then the subtask plans
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from finresearch.agents.base import BaseAgent, AgentRole, CancellationToken
from finresearch.agents.events import EventKind, ProgressObserver
from finresearch.agents.history import MessageHistory
from finresearch.agents.prompts import get_planning_system_prompt
from finresearch.core.exceptions import PlanningError
from finresearch.models.schemas import ExecutionPlan

logger = logging.getLogger(__name__)


class TaskPlanner(BaseAgent):
    """
    Creates execution plans from user queries.

    A plan that fails validation is never executed: the planner either
    returns a valid ExecutionPlan or raises PlanningError.
    """

    role = AgentRole.PLANNER

    def __init__(
        self,
        llm_client: Any,
        tool_catalog: str = "",
        observer: Optional[ProgressObserver] = None,
        max_retries: int = 3,
    ):
        super().__init__(llm_client, observer)
        self.tool_catalog = tool_catalog
        self.max_retries = max_retries

    async def plan(
        self,
        query: str,
        history: Optional[MessageHistory] = None,
        token: Optional[CancellationToken] = None,
    ) -> ExecutionPlan:
        """
        Produce a validated plan and announce it.

        Args:
            query: Non-empty user query
            history: Prior conversation turns
            token: Cancellation signal for the run

        Returns:
            ExecutionPlan with every done flag false

        Raises:
            PlanningError: no valid plan after all re-prompts
        """
        if not query or not query.strip():
            raise PlanningError("Query must not be empty")

        plan = await self._generate_plan(query.strip(), history, token)

        logger.info(
            f"Planner: {len(plan.tasks)} task(s), "
            f"{sum(len(t.subtasks) for t in plan.tasks)} subtask(s)"
        )
        await self._emit(EventKind.TASKS_PLANNED, tasks=plan.flat_tasks())
        await self._emit(EventKind.SUBTASKS_PLANNED, subtasks=plan.flat_subtask_plans())
        return plan

    async def _generate_plan(
        self,
        query: str,
        history: Optional[MessageHistory],
        token: Optional[CancellationToken],
    ) -> ExecutionPlan:
        system_prompt = get_planning_system_prompt(self.tool_catalog or "(none)")
        feedback: Optional[str] = None
        attempts = 1 + self.max_retries

        for attempt in range(1, attempts + 1):
            if token:
                token.raise_if_cancelled()

            prompt = self._build_prompt(query, history, feedback)
            try:
                plan = await self._call_structured(prompt, ExecutionPlan, system_prompt)
            except ValidationError as e:
                feedback = self._summarise_errors(e)
                logger.warning(f"Planner: attempt {attempt}/{attempts} invalid - {feedback}")
                await self._emit(
                    EventKind.DIAGNOSTIC,
                    message=f"Plan attempt {attempt} rejected: {feedback}",
                )
                continue

            return self._reset_flags(plan)

        raise PlanningError(
            f"Could not produce a valid plan after {attempts} attempts: {feedback}",
            attempts=attempts,
        )

    def _build_prompt(
        self,
        query: str,
        history: Optional[MessageHistory],
        feedback: Optional[str],
    ) -> str:
        """Build the planning prompt."""
        history_text = history.format_for_prompt() if history else ""
        prompt = f"""
Conversation so far:
{history_text or "(none)"}

Query: {query}

Create an execution plan to answer this query.
"""
        if feedback:
            prompt += f"""
Your previous plan was invalid: {feedback}
Return a corrected plan.
"""
        return prompt

    @staticmethod
    def _summarise_errors(error: ValidationError) -> str:
        parts = []
        for item in error.errors():
            loc = ".".join(str(p) for p in item.get("loc", ())) or "plan"
            parts.append(f"{loc}: {item.get('msg')}")
        return "; ".join(parts)

    @staticmethod
    def _reset_flags(plan: ExecutionPlan) -> ExecutionPlan:
        # A fresh plan has no completed work, whatever the model claimed
        for task in plan.tasks:
            task.done = False
            for subtask in task.subtasks:
                subtask.done = False
        return plan
