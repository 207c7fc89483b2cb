"""
Exceptions module - Custom exception hierarchy.

This module defines all custom exceptions used throughout the LLM Task Agent,
providing clear error types for different failure scenarios.

Budget exhaustion and loop detection are not exceptions: they are ordinary
termination reasons reported on run results.
"""

from llm_task_agent.exceptions.base import (
    TaskAgentError,
    ConfigurationError,
    InitializationError,
    describe_error,
)
from llm_task_agent.exceptions.llm import (
    LLMError,
    LLMConnectionError,
    InvalidResponseError,
    PlannerError,
)
from llm_task_agent.exceptions.tool import (
    ToolError,
    ToolRegistrationError,
    ToolValidationError,
    UnknownToolError,
    HandlerError,
)
from llm_task_agent.exceptions.browser import (
    BrowserError,
    BrowserLaunchError,
    BrowserConnectionError,
    NavigationError,
    AtomicActionError,
)

__all__ = [
    # Base exceptions
    "TaskAgentError",
    "ConfigurationError",
    "InitializationError",
    "describe_error",
    # LLM exceptions
    "LLMError",
    "LLMConnectionError",
    "InvalidResponseError",
    "PlannerError",
    # Tool exceptions
    "ToolError",
    "ToolRegistrationError",
    "ToolValidationError",
    "UnknownToolError",
    "HandlerError",
    # Browser exceptions
    "BrowserError",
    "BrowserLaunchError",
    "BrowserConnectionError",
    "NavigationError",
    "AtomicActionError",
]
