"""
Data Models for the Financial Research Agent
============================================

Organized into three categories:
- schemas: Core domain models (plan, context, verdicts)
- requests: API request validation models
- responses: API response models
"""

from finresearch.models.schemas import (
    MessageRole,
    Message,
    Task,
    SubTask,
    PlannedTask,
    ExecutionPlan,
    ContextEntry,
    SelectedContexts,
    OptimizedToolArgs,
    IsDone,
    SubTaskResult,
)

from finresearch.models.requests import ChatRequest

from finresearch.models.responses import (
    HealthResponse,
    ErrorResponse,
)

__all__ = [
    # Schemas
    "MessageRole",
    "Message",
    "Task",
    "SubTask",
    "PlannedTask",
    "ExecutionPlan",
    "ContextEntry",
    "SelectedContexts",
    "OptimizedToolArgs",
    "IsDone",
    "SubTaskResult",
    # Requests
    "ChatRequest",
    # Responses
    "HealthResponse",
    "ErrorResponse",
]
