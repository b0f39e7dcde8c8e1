"""
Answer Generator - Streams the final answer from gathered context.

RESPONSIBILITY:
Once every task has been attempted, the Answer Generator picks the
context relevant to the whole query and streams a single answer.

FLOW:
1. Select context entries scoped to the entire query
2. Build the prompt (history + query + selected data)
3. Start one streaming model call
4. Hand back an AnswerStream: lazy, finite, single-consumption
"""

import logging
from typing import Any, AsyncIterator, List, Optional, Sequence

from finresearch.agents.base import BaseAgent, AgentRole, CancellationToken
from finresearch.agents.context import ContextStore
from finresearch.agents.history import MessageHistory
from finresearch.agents.prompts import get_answer_system_prompt
from finresearch.core.exceptions import AppException, StreamingGenerationError

logger = logging.getLogger(__name__)


class AnswerStream:
    """
    Single-use async iterator over answer chunks.

    Chunks are yielded in the order the model produced them, unbuffered.
    The stream cannot be restarted; `text` holds the concatenation of
    every chunk yielded so far and `completed` turns true once drained.
    """

    def __init__(
        self,
        source: AsyncIterator[str],
        token: Optional[CancellationToken] = None,
    ):
        self._source = source
        self._token = token
        self._consumed = False
        self._chunks: List[str] = []
        self.completed = False

    def __aiter__(self) -> AsyncIterator[str]:
        if self._consumed:
            raise RuntimeError("AnswerStream can only be consumed once")
        self._consumed = True
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[str]:
        try:
            async for chunk in self._source:
                if self._token:
                    self._token.raise_if_cancelled()
                if not chunk:
                    continue
                self._chunks.append(chunk)
                yield chunk
        except AppException:
            raise
        except Exception as e:
            raise StreamingGenerationError(f"Answer stream failed: {e}") from e
        finally:
            # Releases the model's HTTP response when iteration stops early
            aclose = getattr(self._source, "aclose", None)
            if aclose is not None:
                await aclose()
        self.completed = True

    @property
    def text(self) -> str:
        return "".join(self._chunks)


class AnswerGenerator(BaseAgent):
    """
    Generates the final human-readable answer.

    Unlike the executor, selection here is scoped to the whole query
    so the prompt stays bounded even after many subtasks.
    """

    role = AgentRole.ANSWER_GENERATOR

    def __init__(self, llm_client: Any, context_store: ContextStore):
        super().__init__(llm_client)
        self.context_store = context_store

    async def synthesize(
        self,
        query: str,
        history: Optional[MessageHistory],
        context_ids: Sequence[int],
        token: Optional[CancellationToken] = None,
    ) -> AnswerStream:
        """
        Start streaming the answer.

        Args:
            query: The user's query
            history: Prior conversation turns
            context_ids: Every entry recorded during the run

        Returns:
            AnswerStream to be drained by the caller

        Raises:
            StreamingGenerationError: the streaming call could not start
        """
        selected = await self.context_store.select(query, context_ids, token)
        logger.info(f"AnswerGenerator: using {len(selected)} of {len(context_ids)} context entries")

        if token:
            token.raise_if_cancelled()

        prompt = self._build_prompt(query, history, selected)
        try:
            source = self._stream_llm(prompt, get_answer_system_prompt())
        except Exception as e:
            raise StreamingGenerationError(f"Could not start answer stream: {e}") from e
        return AnswerStream(source, token)

    def _build_prompt(
        self,
        query: str,
        history: Optional[MessageHistory],
        context_ids: Sequence[int],
    ) -> str:
        """Build the answer generation prompt."""
        history_text = history.format_for_prompt() if history else ""

        if not context_ids:
            return f"""
Conversation so far:
{history_text or "(none)"}

Query: {query}

No financial data was retrieved for this query. Answer from general
knowledge if you can, and say clearly that no live data was available.
"""

        return f"""
Conversation so far:
{history_text or "(none)"}

Query: {query}

Data gathered:
{self.context_store.format_entries(context_ids)}

Based on this data, answer the query.
"""
