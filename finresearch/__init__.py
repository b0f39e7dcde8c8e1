"""
Financial Research Agent
========================

An autonomous research agent that answers questions about public
companies: it plans tasks, gathers data through financial tools under
LLM guidance, and streams a synthesized answer.

Components:
- agents: Agent architecture (Planner, Executor, Context Store, Answer Generator)
- services: External collaborators (OpenAI model client, data provider)
- api: FastAPI endpoints (SSE chat stream, health)
- models: Pydantic data models
- core: Configuration, errors and dependencies
"""

__version__ = "1.0.0"
