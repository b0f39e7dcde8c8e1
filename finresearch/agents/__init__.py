"""
Agent Architecture for the Financial Research Agent
===================================================

FLOW OVERVIEW:
--------------
1. User submits a research question (plus prior conversation)
2. TaskPlanner decomposes it into tasks, each with ordered subtasks
3. TaskExecutor works each subtask in a bounded loop:
   select context -> choose tool -> invoke -> record -> done?
4. ContextStore accumulates every tool outcome for the run
5. AnswerGenerator selects relevant context and streams the answer
6. Agent (the orchestrator) sequences all of it and emits progress events

ARCHITECTURE:
-------------
                    ┌─────────────────┐
                    │  User Question  │
                    └────────┬────────┘
                             │
                    ┌────────▼────────┐
                    │   TaskPlanner   │  ← ExecutionPlan
                    └────────┬────────┘
                             │
                    ┌────────▼────────┐      ┌──────────────┐
                    │  TaskExecutor   │ ◄──► │ ToolRegistry │
                    └────────┬────────┘      └──────────────┘
                             │ record / select
                    ┌────────▼────────┐
                    │  ContextStore   │
                    └────────┬────────┘
                             │
                    ┌────────▼────────┐
                    │ AnswerGenerator │  ← streamed chunks
                    └────────┬────────┘
                             │
                    ┌────────▼────────┐
                    │  Final Answer   │
                    └─────────────────┘

USAGE:
------
    from finresearch.agents import Agent, ToolRegistry, build_finance_tools

    agent = Agent(
        llm_client=my_llm_client,
        tools=ToolRegistry(build_finance_tools(my_data_service)),
        observer=my_observer,
    )

    answer = await agent.run("What was Acme's revenue over the last 4 quarters?")
"""

from finresearch.agents.base import BaseAgent, AgentRole, CancellationToken, LLMClient
from finresearch.agents.events import (
    AgentEvent,
    EventKind,
    ProgressObserver,
    LoggingObserver,
    QueueObserver,
    CompositeObserver,
)
from finresearch.agents.history import MessageHistory
from finresearch.agents.context import ContextStore
from finresearch.agents.planner import TaskPlanner
from finresearch.agents.executor import TaskExecutor, RetryPolicy
from finresearch.agents.answer_generator import AnswerGenerator, AnswerStream
from finresearch.agents.orchestrator import Agent
from finresearch.agents.tools import BaseTool, ToolRegistry, build_finance_tools

__all__ = [
    # Base classes
    "BaseAgent",
    "AgentRole",
    "CancellationToken",
    "LLMClient",
    # Events
    "AgentEvent",
    "EventKind",
    "ProgressObserver",
    "LoggingObserver",
    "QueueObserver",
    "CompositeObserver",
    # Components
    "MessageHistory",
    "ContextStore",
    "TaskPlanner",
    "TaskExecutor",
    "RetryPolicy",
    "AnswerGenerator",
    "AnswerStream",
    "Agent",
    # Tools
    "BaseTool",
    "ToolRegistry",
    "build_finance_tools",
]
