"""
Services Layer for the Financial Research Agent
===============================================

Services wrap the external collaborators the agents depend on:

- OpenAIClient: Generative model (structured output + streaming)
- FinancialDatasetsService: Market and fundamentals data provider

DEPENDENCY FLOW:
----------------
    OpenAIClient ──────────────► Planner / Executor / AnswerGenerator
    FinancialDatasetsService ──► Finance tools ──► TaskExecutor
"""

from finresearch.services.llm_client import OpenAIClient, LLMConfig
from finresearch.services.financial_datasets import (
    FinancialDatasetsService,
    FinancialDatasetsConfig,
)

__all__ = [
    "OpenAIClient",
    "LLMConfig",
    "FinancialDatasetsService",
    "FinancialDatasetsConfig",
]
