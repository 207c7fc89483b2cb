"""
Browser capability - atomic-action loop over a shared, reference-counted session.
"""

from llm_task_agent.tools.browser.schemas import (
    DATA_METHODS,
    AtomicDecision,
    AtomicMethod,
    BrowserExitReason,
    BrowserResult,
    BrowserStep,
    ExtractedData,
)
from llm_task_agent.tools.browser.dom import DOMSimplifier, SimplifiedElement
from llm_task_agent.tools.browser.page_actions import PageActions
from llm_task_agent.tools.browser.session import BrowserLease, BrowserSessionManager
from llm_task_agent.tools.browser.engine import BrowserActionEngine
from llm_task_agent.tools.browser.tool import BrowserParams, BrowserTool

__all__ = [
    "DATA_METHODS",
    "AtomicDecision",
    "AtomicMethod",
    "BrowserExitReason",
    "BrowserResult",
    "BrowserStep",
    "ExtractedData",
    "DOMSimplifier",
    "SimplifiedElement",
    "PageActions",
    "BrowserLease",
    "BrowserSessionManager",
    "BrowserActionEngine",
    "BrowserParams",
    "BrowserTool",
]
