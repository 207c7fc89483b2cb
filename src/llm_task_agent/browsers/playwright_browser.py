"""
Playwright Browser - Implementation of IBrowser using Playwright.

This module provides a Playwright-based implementation of the browser interface.
"""

from typing import Any, List, Optional, Union
import logging

from llm_task_agent.interfaces.browser import (
    IBrowser,
    IPage,
    BrowserType,
)
from llm_task_agent.exceptions.browser import (
    BrowserLaunchError,
    BrowserConnectionError,
    NavigationError,
)

logger = logging.getLogger(__name__)


class PlaywrightPage(IPage):
    """
    Playwright implementation of IPage.

    Wraps a Playwright Page for navigation and interaction.
    """

    def __init__(self, page: Any):
        """
        Initialize the page wrapper.

        Args:
            page: Playwright Page object
        """
        self._page = page

    @property
    def url(self) -> str:
        """Get current URL."""
        return self._page.url

    async def title(self) -> str:
        """Get page title."""
        return await self._page.title()

    async def goto(self, url: str, **options: Any) -> None:
        """Navigate to URL."""
        try:
            await self._page.goto(url, **options)
        except Exception as e:
            raise NavigationError(f"Failed to navigate to {url}: {e}", url=url) from e

    async def go_back(self, **options: Any) -> None:
        """Go back."""
        await self._page.go_back(**options)

    async def click(self, selector: str, **options: Any) -> None:
        """Click element."""
        await self._page.click(selector, **options)

    async def fill(self, selector: str, value: str, **options: Any) -> None:
        """Fill input."""
        await self._page.fill(selector, value, **options)

    async def press(self, selector: str, key: str, **options: Any) -> None:
        """Press key."""
        await self._page.press(selector, key, **options)

    async def hover(self, selector: str, **options: Any) -> None:
        """Hover over element."""
        await self._page.hover(selector, **options)

    async def select_option(
        self,
        selector: str,
        value: Union[str, List[str]],
        **options: Any,
    ) -> List[str]:
        """Select option."""
        result = await self._page.select_option(selector, value, **options)
        return result if isinstance(result, list) else [result]

    async def content(self) -> str:
        """Get page HTML."""
        return await self._page.content()

    async def evaluate(self, expression: str, *args: Any) -> Any:
        """Execute JavaScript."""
        return await self._page.evaluate(expression, *args)

    async def screenshot(
        self,
        path: Optional[Any] = None,
        full_page: bool = False,
        **options: Any,
    ) -> bytes:
        """Take screenshot."""
        return await self._page.screenshot(path=path, full_page=full_page, **options)

    async def wait_for_timeout(self, timeout: int) -> None:
        """Wait for timeout."""
        await self._page.wait_for_timeout(timeout)

    async def close(self) -> None:
        """Close page."""
        await self._page.close()


class PlaywrightBrowser(IBrowser):
    """
    Playwright implementation of IBrowser.

    Example:
        >>> browser = PlaywrightBrowser()
        >>> await browser.launch(headless=True)
        >>> page = await browser.new_page()
        >>> await page.goto("https://example.com")
        >>> await browser.close()
    """

    def __init__(self):
        """Initialize the browser (not launched yet)."""
        self._playwright: Any = None
        self._browser: Any = None
        self._default_context: Any = None

    @property
    def is_connected(self) -> bool:
        """Check if browser is connected."""
        return self._browser is not None and self._browser.is_connected()

    async def launch(
        self,
        headless: bool = True,
        browser_type: BrowserType = BrowserType.CHROMIUM,
        **options: Any,
    ) -> None:
        """
        Launch the browser.

        Args:
            headless: Whether to run headless
            browser_type: Type of browser to launch
            **options: Additional Playwright launch options
        """
        try:
            from playwright.async_api import async_playwright

            self._playwright = await async_playwright().start()

            browser_launchers = {
                BrowserType.CHROMIUM: self._playwright.chromium,
                BrowserType.FIREFOX: self._playwright.firefox,
                BrowserType.WEBKIT: self._playwright.webkit,
            }
            launcher = browser_launchers.get(browser_type, self._playwright.chromium)

            self._browser = await launcher.launch(
                headless=headless,
                **options,
            )

            logger.info(f"Launched {browser_type.value} browser (headless={headless})")

        except Exception as e:
            raise BrowserLaunchError(f"Failed to launch browser: {e}") from e

    async def new_page(self, **options: Any) -> IPage:
        """
        Create a new page.

        Args:
            **options: Context options (viewport, etc.)

        Returns:
            New page instance
        """
        if not self._browser:
            raise BrowserConnectionError("Browser not launched. Call launch() first.")

        if not self._default_context:
            self._default_context = await self._browser.new_context(**options)

        page = await self._default_context.new_page()
        return PlaywrightPage(page)

    async def close(self) -> None:
        """Close the browser and cleanup."""
        if self._default_context:
            await self._default_context.close()
            self._default_context = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.info("Browser closed")
