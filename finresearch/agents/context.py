"""
Context Store - Append-only record of tool outcomes for one run.

RESPONSIBILITY:
Every tool result (or recorded failure) produced while executing a plan
is appended here with its provenance. Downstream decisions (next tool
call, completion verdict, final answer) read a relevance-scoped subset.

FLOW:
1. Executor records an entry -> receives a sequence id
2. A decision point asks select(scope, candidate_ids)
3. The model picks relevant ids; invalid picks fall back to all candidates
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from finresearch.agents.base import BaseAgent, AgentRole, CancellationToken
from finresearch.agents.prompts import CONTEXT_SELECTION_SYSTEM_PROMPT
from finresearch.core.exceptions import ContextSelectionError
from finresearch.models.schemas import ContextEntry, SelectedContexts

logger = logging.getLogger(__name__)


class ContextStore(BaseAgent):
    """
    Accumulates provenance-tagged tool outcomes.

    Entries are never mutated or deleted. Ids are assigned sequentially
    from 0 and are stable for the lifetime of the store, which makes the
    inputs to answer synthesis reproducible.
    """

    role = AgentRole.CONTEXT_SELECTOR

    def __init__(self, llm_client: Any = None, result_max_chars: int = 8000):
        super().__init__(llm_client)
        self.result_max_chars = result_max_chars
        self._entries: List[ContextEntry] = []

    def record(
        self,
        task_id: int,
        subtask_id: int,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
        result: Any = None,
        error: Optional[str] = None,
        attempt: int = 1,
    ) -> int:
        """
        Append an entry and return its sequence id.

        Raises:
            pydantic.ValidationError: the entry shape is invalid
        """
        entry = ContextEntry(
            id=len(self._entries),
            task_id=task_id,
            subtask_id=subtask_id,
            tool_name=tool_name,
            arguments=arguments or {},
            result=result,
            error=error,
            attempt=attempt,
        )
        self._entries.append(entry)
        return entry.id

    def get(self, entry_id: int) -> ContextEntry:
        return self._entries[entry_id]

    @property
    def ids(self) -> List[int]:
        return [e.id for e in self._entries]

    @property
    def entries(self) -> List[ContextEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    async def select(
        self,
        scope_query: str,
        candidate_ids: Sequence[int],
        token: Optional[CancellationToken] = None,
    ) -> List[int]:
        """
        Choose the entries relevant to scope_query.

        The model may only reference candidate_ids. Any invalid output
        (schema failure, unknown ids or an empty selection) is a selection
        failure, and the full candidate set is returned instead.
        """
        candidates = [i for i in dict.fromkeys(candidate_ids) if 0 <= i < len(self._entries)]
        if len(candidates) <= 1 or self.llm is None:
            return candidates

        if token:
            token.raise_if_cancelled()

        prompt = self._build_selection_prompt(scope_query, candidates)
        try:
            selected = await self._call_structured(
                prompt, SelectedContexts, CONTEXT_SELECTION_SYSTEM_PROMPT
            )
            return self._validate_selection(selected, candidates)
        except (ValidationError, ContextSelectionError) as e:
            logger.warning(f"Context selection failed, using all {len(candidates)} candidates: {e}")
            return candidates

    def _validate_selection(
        self, selected: SelectedContexts, candidates: List[int]
    ) -> List[int]:
        if not selected.context_ids:
            raise ContextSelectionError("Model selected no context entries", invalid_ids=[])
        allowed = set(candidates)
        invalid = [i for i in selected.context_ids if i not in allowed]
        if invalid:
            raise ContextSelectionError(
                f"Model referenced unknown context ids {invalid}", invalid_ids=invalid
            )
        chosen = set(selected.context_ids)
        # Keep recording order regardless of the order the model returned
        return [i for i in candidates if i in chosen]

    def _build_selection_prompt(self, scope_query: str, candidates: List[int]) -> str:
        lines = []
        for entry_id in candidates:
            entry = self._entries[entry_id]
            status = "ok" if entry.succeeded else "failed"
            lines.append(
                f"[{entry.id}] {entry.tool_name}({json.dumps(entry.arguments, default=str)}) - {status}"
            )
        listing = "\n".join(lines)
        return f"""
Scope: {scope_query}

Context entries:
{listing}

Select the ids of the entries relevant to the scope.
"""

    def format_entries(self, entry_ids: Sequence[int]) -> str:
        """Render entries for inclusion in a prompt."""
        if not entry_ids:
            return "No data gathered yet."

        formatted = []
        for entry_id in entry_ids:
            entry = self._entries[entry_id]
            if entry.succeeded:
                body = json.dumps(entry.result, default=str)
                if len(body) > self.result_max_chars:
                    body = body[: self.result_max_chars] + " ...[truncated]"
            else:
                body = f"ERROR (attempt {entry.attempt}): {entry.error}"
            formatted.append(f"""
--- Context {entry.id} ---
Tool: {entry.tool_name}
Arguments: {json.dumps(entry.arguments, default=str)}
Result: {body}
""")
        return "\n".join(formatted)
