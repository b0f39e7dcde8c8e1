"""
Dependencies - Dependency injection for services and components.

Provides singleton instances of the stateless services and a factory
for per-run Agent instances. An Agent serves one query at a time, so
every HTTP request gets its own.
"""

from functools import lru_cache
from typing import Callable, Optional

from finresearch.agents.events import ProgressObserver
from finresearch.agents.executor import RetryPolicy
from finresearch.agents.orchestrator import Agent
from finresearch.agents.tools import ToolRegistry, build_finance_tools
from finresearch.core.config import get_settings
from finresearch.services.financial_datasets import (
    FinancialDatasetsConfig,
    FinancialDatasetsService,
)
from finresearch.services.llm_client import LLMConfig, OpenAIClient


AgentFactory = Callable[[Optional[ProgressObserver]], Agent]


@lru_cache()
def get_llm_client() -> OpenAIClient:
    """Get the shared model client."""
    settings = get_settings()
    config = LLMConfig(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        model=settings.default_model,
        timeout_seconds=settings.llm_timeout_seconds
    )
    return OpenAIClient(config=config)


@lru_cache()
def get_financial_datasets_service() -> FinancialDatasetsService:
    """Get the shared data provider client."""
    settings = get_settings()
    config = FinancialDatasetsConfig(
        api_key=settings.financial_datasets_api_key,
        base_url=settings.financial_datasets_base_url,
        timeout_seconds=settings.financial_datasets_timeout_seconds
    )
    return FinancialDatasetsService(config=config)


@lru_cache()
def get_tool_registry() -> ToolRegistry:
    """Get the declared tool set."""
    return ToolRegistry(build_finance_tools(get_financial_datasets_service()))


def get_agent_factory() -> AgentFactory:
    """
    Get a factory that builds a fresh Agent for one run.

    Loop constants come from settings so deployments can tune them.
    """
    settings = get_settings()
    llm_client = get_llm_client()
    tools = get_tool_registry()
    retry_policy = RetryPolicy(
        max_attempts=settings.tool_max_attempts,
        backoff_base_ms=settings.tool_backoff_base_ms,
        backoff_multiplier=settings.tool_backoff_multiplier
    )

    def factory(observer: Optional[ProgressObserver] = None) -> Agent:
        return Agent(
            llm_client=llm_client,
            tools=tools,
            observer=observer,
            planner_max_retries=settings.planner_max_retries,
            max_iterations=settings.executor_max_iterations,
            tool_selection_retries=settings.tool_selection_retries,
            retry_policy=retry_policy,
            context_result_max_chars=settings.context_result_max_chars
        )

    return factory
