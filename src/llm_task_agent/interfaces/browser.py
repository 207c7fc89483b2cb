"""
Browser Interface - Abstract base classes for browser automation engines.

This module defines the contract the browser capability relies on.
The default implementation lives in ``llm_task_agent.browsers``.

Example:
    >>> from llm_task_agent.browsers import PlaywrightBrowser
    >>> browser = PlaywrightBrowser()
    >>> await browser.launch(headless=True)
    >>> page = await browser.new_page()
    >>> await page.goto("https://example.com")
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, List, Optional, Union


class BrowserType(Enum):
    """Supported browser types."""
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


class IPage(ABC):
    """
    Abstract interface for browser page operations.

    Covers navigation, element interaction and content extraction.
    """

    @property
    @abstractmethod
    def url(self) -> str:
        """Get the current page URL."""
        ...

    @abstractmethod
    async def title(self) -> str:
        """Get the current page title."""
        ...

    # Navigation
    @abstractmethod
    async def goto(self, url: str, **options: Any) -> None:
        """
        Navigate to a URL.

        Args:
            url: The URL to navigate to
            **options: Navigation options (e.g., wait_until, timeout)

        Raises:
            NavigationError: If navigation fails
        """
        ...

    @abstractmethod
    async def go_back(self, **options: Any) -> None:
        """Navigate back in history."""
        ...

    # Interaction
    @abstractmethod
    async def click(self, selector: str, **options: Any) -> None:
        """Click the element matching ``selector``."""
        ...

    @abstractmethod
    async def fill(self, selector: str, value: str, **options: Any) -> None:
        """Fill an input matching ``selector`` with ``value``."""
        ...

    @abstractmethod
    async def press(self, selector: str, key: str, **options: Any) -> None:
        """Press a key on the element matching ``selector``."""
        ...

    @abstractmethod
    async def hover(self, selector: str, **options: Any) -> None:
        """Hover over the element matching ``selector``."""
        ...

    @abstractmethod
    async def select_option(
        self,
        selector: str,
        value: Union[str, List[str]],
        **options: Any,
    ) -> List[str]:
        """Select option(s) in a <select> element."""
        ...

    # Content
    @abstractmethod
    async def content(self) -> str:
        """Get the full HTML content of the page."""
        ...

    @abstractmethod
    async def evaluate(self, expression: str, *args: Any) -> Any:
        """Execute JavaScript in the page context and return the result."""
        ...

    @abstractmethod
    async def screenshot(self, path: Optional[Any] = None, full_page: bool = False, **options: Any) -> bytes:
        """Take a screenshot and return PNG bytes."""
        ...

    @abstractmethod
    async def wait_for_timeout(self, timeout: int) -> None:
        """Wait for ``timeout`` milliseconds."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the page."""
        ...


class IBrowser(ABC):
    """
    Abstract interface for browser lifecycle management.
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Check if the browser is connected."""
        ...

    @abstractmethod
    async def launch(
        self,
        headless: bool = True,
        browser_type: BrowserType = BrowserType.CHROMIUM,
        **options: Any,
    ) -> None:
        """
        Launch the browser.

        Raises:
            BrowserLaunchError: If the browser cannot be started
        """
        ...

    @abstractmethod
    async def new_page(self, **options: Any) -> IPage:
        """Create a new page in the default context."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the browser and release all resources."""
        ...
