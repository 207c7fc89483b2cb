"""
Tool (capability) exceptions.
"""

from typing import Any, Dict, List, Optional

from llm_task_agent.exceptions.base import TaskAgentError


class ToolError(TaskAgentError):
    """Base exception for capability errors."""

    def __init__(self, message: str, tool: Optional[str] = None, details: dict | None = None):
        merged = {"tool": tool} if tool else {}
        merged.update(details or {})
        super().__init__(message, merged)
        self.tool = tool


class ToolRegistrationError(ToolError):
    """
    Capability rejected at registration time.

    Raised for duplicate names, missing descriptions or a parameter
    schema that is not a pydantic model.
    """
    pass


class ToolValidationError(ToolError):
    """
    Arguments do not match the capability's declared schema.

    Attributes:
        errors: Field-level validation errors
    """

    def __init__(
        self,
        message: str,
        tool: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message, tool, {"errors": errors} if errors else None)
        self.errors = errors or []


class UnknownToolError(ToolValidationError):
    """No capability is registered under the requested name."""

    def __init__(self, tool: str, available: Optional[List[str]] = None):
        super().__init__(
            f"Unknown tool: '{tool}'. Available: {', '.join(available or [])}",
            tool,
        )
        self.available = available or []


class HandlerError(ToolError):
    """
    A capability handler raised while executing.

    Attributes:
        cause: The original exception, if any
    """

    def __init__(self, message: str, tool: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, tool, {"cause": type(cause).__name__} if cause else None)
        self.cause = cause
