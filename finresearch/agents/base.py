"""
Base classes for the agent architecture.

All agents inherit from BaseAgent to share the model-call helpers and
the progress channel. The model capability is injected; agents never
talk to a provider directly.
"""

from abc import ABC
from typing import Any, AsyncIterator, Optional, Protocol, Type, TypeVar
from enum import Enum

from pydantic import BaseModel

from finresearch.agents.events import (
    AgentEvent,
    EventKind,
    LoggingObserver,
    ProgressObserver,
)
from finresearch.core.exceptions import RunCancelledError


ModelT = TypeVar("ModelT", bound=BaseModel)


class AgentRole(Enum):
    """Defines the role of each agent in the system."""
    PLANNER = "planner"
    EXECUTOR = "executor"
    ANSWER_GENERATOR = "answer_generator"
    CONTEXT_SELECTOR = "context_selector"


class LLMClient(Protocol):
    """
    Generative-model capability consumed by the agents.

    Two call shapes:
    - generate_structured: JSON text conforming to a JSON schema
    - stream: lazy, finite sequence of text fragments
    """

    async def generate_structured(
        self,
        prompt: str,
        schema: dict,
        system_prompt: Optional[str] = None,
        name: str = "response",
    ) -> str:
        ...

    def stream(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> AsyncIterator[str]:
        ...


class CancellationToken:
    """
    Cooperative cancellation signal shared by one run.

    Components call raise_if_cancelled() before each model or tool call,
    so a cancelled run stops at the next suspension point.
    """

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RunCancelledError()


class BaseAgent(ABC):
    """
    Base class for all agents.

    Agents are LLM-powered components that make decisions:
    - TaskPlanner: Decomposes a query into tasks and subtasks
    - TaskExecutor: Chooses and invokes tools until a subtask is done
    - AnswerGenerator: Streams the final answer from gathered context
    """

    role: AgentRole

    def __init__(
        self,
        llm_client: Any,
        observer: Optional[ProgressObserver] = None,
    ):
        """
        Initialize agent with LLM client.

        Args:
            llm_client: Client for making LLM API calls
            observer: Receiver for progress events (logs them if omitted)
        """
        self.llm = llm_client
        self.observer = observer or LoggingObserver()

    async def _emit(self, kind: EventKind, **payload: Any) -> None:
        """Publish a progress event."""
        await self.observer.on_event(AgentEvent(kind=kind, payload=payload))

    async def _call_structured(
        self,
        prompt: str,
        output_model: Type[ModelT],
        system_prompt: Optional[str] = None,
    ) -> ModelT:
        """
        Make a schema-constrained call to the LLM.

        Returns:
            A validated instance of output_model

        Raises:
            pydantic.ValidationError: if the output does not fit the schema
        """
        raw = await self.llm.generate_structured(
            prompt,
            output_model.model_json_schema(),
            system_prompt,
            output_model.__name__,
        )
        return output_model.model_validate_json(raw)

    def _stream_llm(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """Start a streaming free-text call to the LLM."""
        return self.llm.stream(prompt, system_prompt)
