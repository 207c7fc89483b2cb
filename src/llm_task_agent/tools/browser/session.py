"""
Browser Session Manager - Reference-counted, exclusive browser access.

One browser and one page are shared by every browser dispatch of an
agent. ``acquire()`` hands out an exclusive lease; the browser is
launched on first use and closed when the last lease is released, unless
``keep_warm`` is set, in which case it stays open until ``shutdown()``.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from llm_task_agent.interfaces.browser import BrowserType, IBrowser, IPage

logger = logging.getLogger(__name__)


def _default_browser_factory() -> IBrowser:
    from llm_task_agent.browsers.playwright_browser import PlaywrightBrowser
    return PlaywrightBrowser()


class BrowserLease:
    """
    Exclusive handle on the shared page for one dispatch.

    ``close()`` tears the browser down, for use after an action failure
    has left the page in an unknown state.
    """

    def __init__(self, manager: "BrowserSessionManager", page: IPage):
        self._manager = manager
        self._page = page
        self.closed = False

    @property
    def page(self) -> IPage:
        return self._page

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        await self._manager._teardown()


class BrowserSessionManager:
    """
    Owns the browser for an agent.

    Example:
        >>> manager = BrowserSessionManager(headless=True)
        >>> async with manager.acquire() as lease:
        ...     await lease.page.goto("https://example.com")
        >>> await manager.shutdown()
    """

    def __init__(
        self,
        browser_factory: Optional[Callable[[], IBrowser]] = None,
        headless: bool = True,
        browser_type: BrowserType = BrowserType.CHROMIUM,
        viewport: Optional[dict] = None,
        keep_warm: bool = False,
    ):
        """
        Initialize the manager (nothing is launched yet).

        Args:
            browser_factory: Creates an unlaunched browser (defaults to Playwright)
            headless: Launch headless
            browser_type: Browser engine
            viewport: Viewport size for the page context
            keep_warm: Keep the browser open when no lease is held
        """
        self._factory = browser_factory or _default_browser_factory
        self._headless = headless
        self._browser_type = browser_type
        self._viewport = viewport
        self._keep_warm = keep_warm

        self._browser: Optional[IBrowser] = None
        self._page: Optional[IPage] = None
        self._refs = 0
        self._exclusive = asyncio.Lock()
        self._state = asyncio.Lock()

    @property
    def ref_count(self) -> int:
        return self._refs

    @property
    def is_open(self) -> bool:
        return self._browser is not None

    async def _ensure_page(self) -> IPage:
        async with self._state:
            if self._browser is None:
                browser = self._factory()
                await browser.launch(headless=self._headless, browser_type=self._browser_type)
                self._browser = browser
                logger.debug("Browser session started")
            if self._page is None:
                options = {"viewport": self._viewport} if self._viewport else {}
                self._page = await self._browser.new_page(**options)
            return self._page

    async def _teardown(self) -> None:
        async with self._state:
            browser, self._browser, self._page = self._browser, None, None
            if browser is not None:
                await browser.close()
                logger.debug("Browser session closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[BrowserLease]:
        """
        Exclusive access to the shared page for the duration of the block.

        Raises:
            BrowserLaunchError: If the browser cannot be started
        """
        self._refs += 1
        try:
            async with self._exclusive:
                page = await self._ensure_page()
                lease = BrowserLease(self, page)
                yield lease
        finally:
            self._refs -= 1
            if self._refs == 0 and not self._keep_warm:
                await self._teardown()

    async def shutdown(self) -> None:
        """Close the browser regardless of keep_warm."""
        await self._teardown()
