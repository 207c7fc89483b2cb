"""
Browser-related exceptions.
"""

from llm_task_agent.exceptions.base import TaskAgentError


class BrowserError(TaskAgentError):
    """Base exception for browser-related errors."""
    pass


class BrowserLaunchError(BrowserError):
    """
    Error launching the browser.

    Raised when the browser fails to start, which could be due to
    missing browser binaries or invalid launch options.
    """
    pass


class BrowserConnectionError(BrowserError):
    """
    Error connecting to the browser.

    Raised when a page is requested before the browser was launched.
    """
    pass


class NavigationError(BrowserError):
    """
    Error during page navigation.

    Raised when navigation fails: invalid URL, network error
    or navigation timeout.
    """

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message, {"url": url} if url else None)
        self.url = url


class AtomicActionError(BrowserError):
    """
    A single atomic browser action failed.

    Attributes:
        method: The atomic method that failed (GOTO, ACT, ...)
        instruction: The instruction it was executed with
    """

    def __init__(self, message: str, method: str, instruction: str | None = None):
        super().__init__(message, {"method": method, "instruction": instruction})
        self.method = method
        self.instruction = instruction
