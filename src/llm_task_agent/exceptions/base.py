"""
Base exceptions for LLM Task Agent.
"""

from typing import Any, Dict

from llm_task_agent.utils.serialization import to_jsonable


class TaskAgentError(Exception):
    """
    Base exception for all LLM Task Agent errors.

    All custom exceptions inherit from this class, making it easy
    to catch any error from the library.

    Attributes:
        message: Human-readable error message
        details: Optional additional error details
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-ready description of the error.

        Used for ``error_details`` in run.json and by the CLI error output.
        """
        return {
            "type": type(self).__name__,
            "message": self.message,
            "details": to_jsonable(self.details),
        }


def describe_error(error: BaseException) -> Dict[str, Any]:
    """``to_dict()`` for any exception; foreign errors get empty details."""
    if isinstance(error, TaskAgentError):
        return error.to_dict()
    return {"type": type(error).__name__, "message": str(error), "details": {}}


class ConfigurationError(TaskAgentError):
    """Error in settings, environment variables or configuration files."""
    pass


class InitializationError(TaskAgentError):
    """Raised when a component fails to initialize properly."""
    pass
