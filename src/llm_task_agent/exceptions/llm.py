"""
LLM-related exceptions.
"""

from llm_task_agent.exceptions.base import TaskAgentError


class LLMError(TaskAgentError):
    """Base exception for LLM-related errors."""
    pass


class LLMConnectionError(LLMError):
    """
    Error connecting to the LLM provider.

    Raised when the HTTP request fails, times out, or returns an error status.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, {"status_code": status_code} if status_code else None)
        self.status_code = status_code


class InvalidResponseError(LLMError):
    """
    Invalid response from LLM.

    Raised when the LLM response cannot be parsed or does not match
    the requested schema.
    """

    def __init__(self, message: str, raw_response: str | None = None):
        super().__init__(message, {"raw_response": raw_response[:500] if raw_response else None})
        self.raw_response = raw_response


class PlannerError(LLMError):
    """
    The planning oracle could not produce a decision.

    Wraps transport failures, timeouts and unparsable planning output.
    The orchestrator treats it as fatal for the run.
    """
    pass
