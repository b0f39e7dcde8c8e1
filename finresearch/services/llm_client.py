"""
LLM Client - OpenAI-backed generative model capability.

RESPONSIBILITY:
Implements the two call shapes the agents depend on:
- generate_structured: JSON text constrained by a JSON schema
  (OpenAI Structured Outputs via response_format)
- stream: token stream as an async iterator of text fragments

This is the only module that imports the `openai` package. Validation of
structured output happens in the agents, not here.
"""

import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional

import openai

logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    """Configuration for the model client."""
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: str = "gpt-4.1"
    timeout_seconds: float = 120.0
    temperature: float = 0.0


class OpenAIClient:
    """
    Thin async wrapper over the OpenAI chat completions API.

    Works with any OpenAI-compatible endpoint through `base_url`.
    """

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        client: Optional[openai.AsyncOpenAI] = None
    ):
        self.config = config or LLMConfig()
        if client is None:
            kwargs: Dict[str, Any] = {"timeout": self.config.timeout_seconds}
            if self.config.api_key:
                kwargs["api_key"] = self.config.api_key
            if self.config.base_url:
                kwargs["base_url"] = self.config.base_url
            client = openai.AsyncOpenAI(**kwargs)
        self._client = client
        logger.info(f"Initialized OpenAIClient with model: {self.config.model}")

    @staticmethod
    def _messages(prompt: str, system_prompt: Optional[str]) -> List[Dict[str, str]]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    async def generate_structured(
        self,
        prompt: str,
        schema: dict,
        system_prompt: Optional[str] = None,
        name: str = "response",
    ) -> str:
        """
        Completion constrained to a JSON schema.

        Non-strict mode: pydantic schemas with free-form objects (tool
        arguments) are not expressible in strict mode.

        Returns:
            Raw JSON text (may still fail validation)
        """
        response = await self._client.chat.completions.create(
            model=self.config.model,
            messages=self._messages(prompt, system_prompt),
            temperature=self.config.temperature,
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": name,
                    "schema": schema,
                    "strict": False,
                },
            },
        )
        message = response.choices[0].message
        if getattr(message, "refusal", None):
            logger.warning(f"Model refused structured output: {message.refusal}")
        return message.content or ""

    async def stream(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """Stream text fragments in arrival order."""
        stream = await self._client.chat.completions.create(
            model=self.config.model,
            messages=self._messages(prompt, system_prompt),
            temperature=self.config.temperature,
            stream=True,
        )
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta
