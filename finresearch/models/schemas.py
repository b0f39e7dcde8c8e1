"""
Core Domain Schemas - Shared data models used across the application.

Plan models double as the target shapes for schema-constrained model
output, so their validators encode the plan invariants (unique ids,
non-empty descriptions) and a malformed plan fails validation.
"""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from enum import Enum


class MessageRole(str, Enum):
    """Author of a conversation turn."""
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single conversation turn."""
    role: MessageRole
    content: str


class SubTask(BaseModel):
    """A step of a planned task, executed by the TaskExecutor."""
    id: int
    description: str = Field(..., min_length=1)
    done: bool = False

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("description must not be blank")
        return v.strip()


class Task(BaseModel):
    """A unit of planned work."""
    id: int = Field(..., ge=0)
    description: str = Field(..., min_length=1)
    done: bool = False

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("description must not be blank")
        return v.strip()


class PlannedTask(Task):
    """A task together with its ordered subtasks."""
    subtasks: List[SubTask] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_unique_subtask_ids(self) -> "PlannedTask":
        seen = set()
        for subtask in self.subtasks:
            if subtask.id in seen:
                raise ValueError(
                    f"duplicate subtask id {subtask.id} in task {self.id}"
                )
            seen.add(subtask.id)
        return self

    def as_task(self) -> Task:
        return Task(id=self.id, description=self.description, done=self.done)

    def refresh_done(self) -> bool:
        """Mark the task done once every subtask is done. Returns the flag."""
        if not self.done and all(s.done for s in self.subtasks):
            self.done = True
        return self.done


class ExecutionPlan(BaseModel):
    """Ordered tasks produced by the planner."""
    tasks: List[PlannedTask] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_unique_task_ids(self) -> "ExecutionPlan":
        seen = set()
        for task in self.tasks:
            if task.id in seen:
                raise ValueError(f"duplicate task id {task.id}")
            seen.add(task.id)
        return self

    def flat_tasks(self) -> List[Dict[str, Any]]:
        return [t.as_task().model_dump() for t in self.tasks]

    def flat_subtask_plans(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": t.id,
                "description": t.description,
                "subtasks": [s.model_dump() for s in t.subtasks],
            }
            for t in self.tasks
        ]


class ContextEntry(BaseModel):
    """
    A provenance-tagged tool outcome.

    Entries are frozen: a correction is recorded as a new entry.
    """
    model_config = {"frozen": True}

    id: int
    task_id: int
    subtask_id: int
    tool_name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)
    result: Any = None
    error: Optional[str] = None
    attempt: int = 1
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    @property
    def succeeded(self) -> bool:
        return self.error is None


class SelectedContexts(BaseModel):
    """Context entry ids chosen as relevant by the model."""
    context_ids: List[int] = Field(default_factory=list)


class OptimizedToolArgs(BaseModel):
    """
    The model's tool choice for one executor iteration.

    A null tool_name means the subtask can be answered from the context
    already gathered and no tool is invoked this iteration.
    """
    tool_name: Optional[str] = None
    arguments: Dict[str, Any] = Field(default_factory=dict)
    reasoning: str = ""


class IsDone(BaseModel):
    """Model verdict on whether a subtask is complete."""
    done: bool
    reason: str = ""


class SubTaskResult(BaseModel):
    """Outcome of executing one subtask."""
    success: bool
    reason: str = ""
    iterations: int = 0
