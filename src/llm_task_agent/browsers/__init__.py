"""
Browsers - Concrete implementations of the browser interface.
"""

from llm_task_agent.browsers.playwright_browser import PlaywrightBrowser, PlaywrightPage

__all__ = [
    "PlaywrightBrowser",
    "PlaywrightPage",
]
