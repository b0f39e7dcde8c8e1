"""
Application Exceptions - Error taxonomy for the research agent.

The agent pipeline distinguishes run-fatal errors from failures that stay
local to a subtask:

- PlanningError            fatal, raised before any execution starts
- StreamingGenerationError fatal, answer synthesis failed outright
- RunCancelledError        fatal, the caller aborted the run
- ToolSelectionError       subtask-local, recorded as context
- ToolInvocationError      subtask-local, retried then recorded as context
- IterationCapExceeded     subtask-local, subtask marked failed
- ContextSelectionError    recovered by falling back to all candidates

The HTTP layer maps every AppException to a uniform JSON error body.
"""

from typing import Optional


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: dict = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class PlanningError(AppException):
    """Raised when no valid execution plan could be produced."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(
            message=message,
            error_code="PLANNING_ERROR",
            status_code=502,
            details={"attempts": attempts}
        )


class ToolSelectionError(AppException):
    """Raised when the model proposes an unusable tool call."""

    def __init__(self, message: str, tool_name: Optional[str] = None):
        self.tool_name = tool_name
        super().__init__(
            message=message,
            error_code="TOOL_SELECTION_ERROR",
            status_code=422,
            details={"tool_name": tool_name} if tool_name else {}
        )


class UnknownToolError(ToolSelectionError):
    """Raised when a tool name is not in the declared capability set."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}", tool_name=tool_name)
        self.error_code = "UNKNOWN_TOOL"


class ToolInvocationError(AppException):
    """Raised when a tool call fails."""

    def __init__(self, tool_name: str, message: str, attempts: int = 1):
        self.tool_name = tool_name
        self.attempts = attempts
        super().__init__(
            message=f"{tool_name} failed: {message}",
            error_code="TOOL_INVOCATION_ERROR",
            status_code=502,
            details={"tool_name": tool_name, "attempts": attempts}
        )


class IterationCapExceeded(AppException):
    """Raised when a subtask loop reaches its iteration cap."""

    def __init__(self, max_iterations: int):
        super().__init__(
            message="iteration cap exceeded",
            error_code="ITERATION_CAP_EXCEEDED",
            status_code=500,
            details={"max_iterations": max_iterations}
        )


class ContextSelectionError(AppException):
    """Raised when the model references context entries that do not exist."""

    def __init__(self, message: str, invalid_ids: Optional[list] = None):
        super().__init__(
            message=message,
            error_code="CONTEXT_SELECTION_ERROR",
            status_code=500,
            details={"invalid_ids": invalid_ids or []}
        )


class StreamingGenerationError(AppException):
    """Raised when the answer stream cannot be produced."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="STREAMING_GENERATION_ERROR",
            status_code=502
        )


class RunCancelledError(AppException):
    """Raised at the next suspension point after a run is cancelled."""

    def __init__(self):
        super().__init__(
            message="Run cancelled",
            error_code="RUN_CANCELLED",
            status_code=499
        )


class DataProviderError(AppException):
    """Raised when the financial data provider returns an error."""

    def __init__(self, message: str, status_code: int = 502, path: str = None):
        super().__init__(
            message=message,
            error_code="DATA_PROVIDER_ERROR",
            status_code=status_code,
            details={"path": path} if path else {}
        )
