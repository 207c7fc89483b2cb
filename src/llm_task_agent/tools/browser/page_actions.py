"""
Page Actions - Execute one atomic method against a page.

EXTRACT, ACT, OBSERVE and AI_HANDLE consult the oracle; the rest are
direct page operations. Failures are raised as AtomicActionError so the
engine can close the session and propagate.
"""

import base64
import logging
import re
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from llm_task_agent.exceptions.base import TaskAgentError
from llm_task_agent.exceptions.browser import AtomicActionError
from llm_task_agent.interfaces.llm import Message
from llm_task_agent.tools.browser.dom import DOMSimplifier, SimplifiedElement
from llm_task_agent.tools.browser.prompts import (
    ACT_USER,
    AI_HANDLE_USER,
    EXTRACT_USER,
    OBSERVE_USER,
)
from llm_task_agent.tools.browser.schemas import AtomicMethod, ElementAction, ElementSelection
from llm_task_agent.utils.serialization import truncate

if TYPE_CHECKING:
    from llm_task_agent.interfaces.browser import IPage
    from llm_task_agent.interfaces.oracle import IOracle

logger = logging.getLogger(__name__)

DEFAULT_WAIT_MS = 1000
MAX_WAIT_MS = 30000


def normalize_url(url: str) -> str:
    """Prefix bare hosts with https://."""
    url = url.strip()
    if not re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", url) and not url.startswith("about:"):
        return f"https://{url}"
    return url


def parse_wait_ms(instruction: Optional[str]) -> int:
    """Milliseconds from a WAIT instruction, defaulting to one second."""
    match = re.search(r"\d+", instruction or "")
    if not match:
        return DEFAULT_WAIT_MS
    return min(int(match.group()), MAX_WAIT_MS)


class PageActions:
    """
    Atomic operations over one page.

    Example:
        >>> actions = PageActions(page, oracle)
        >>> await actions.run(AtomicMethod.GOTO, "https://example.com")
        >>> title = await actions.run(AtomicMethod.EXTRACT, "the page title")
    """

    def __init__(
        self,
        page: "IPage",
        oracle: "IOracle",
        model: Optional[str] = None,
        navigation_timeout_ms: int = 60000,
        max_html_chars: int = 100000,
        simplifier: Optional[DOMSimplifier] = None,
    ):
        self._page = page
        self._oracle = oracle
        self._model = model
        self._navigation_timeout_ms = navigation_timeout_ms
        self._max_html_chars = max_html_chars
        self._simplifier = simplifier or DOMSimplifier()

    @property
    def page(self) -> "IPage":
        return self._page

    async def run(self, method: AtomicMethod, instruction: Optional[str] = None) -> Any:
        """
        Execute ``method`` and return its raw result.

        Raises:
            AtomicActionError: If the action fails or is not executable
        """
        handlers = {
            AtomicMethod.GOTO: self.goto,
            AtomicMethod.ACT: self.act,
            AtomicMethod.EXTRACT: self.extract,
            AtomicMethod.OBSERVE: self.observe,
            AtomicMethod.HTML: self.html,
            AtomicMethod.SCREENSHOT: self.screenshot,
            AtomicMethod.WAIT: self.wait,
            AtomicMethod.NAVBACK: self.navback,
            AtomicMethod.AI_HANDLE: self.ai_handle,
        }
        handler = handlers.get(method)
        if handler is None:
            raise AtomicActionError(f"Unsupported atomic method: {method.value}", method.value, instruction)

        try:
            return await handler(instruction)
        except AtomicActionError:
            raise
        except TaskAgentError as e:
            raise AtomicActionError(e.message, method.value, instruction) from e
        except Exception as e:
            raise AtomicActionError(f"{method.value} failed: {e}", method.value, instruction) from e

    async def goto(self, instruction: Optional[str]) -> None:
        if not instruction:
            raise AtomicActionError("GOTO requires a URL", AtomicMethod.GOTO.value)
        url = normalize_url(instruction)
        await self._page.goto(url, wait_until="commit", timeout=self._navigation_timeout_ms)
        logger.info(f"Navigated to {url}")

    async def act(self, instruction: Optional[str]) -> str:
        if not instruction:
            raise AtomicActionError("ACT requires an instruction", AtomicMethod.ACT.value)

        elements = await self._simplifier.interactive_elements(self._page)
        if not elements:
            raise AtomicActionError("No interactive elements on the page", AtomicMethod.ACT.value, instruction)

        prompt = ACT_USER.format(
            instruction=instruction,
            url=self._page.url,
            elements=DOMSimplifier.format_elements(elements),
        )
        choice = await self._oracle.complete_object(
            [Message.user(prompt)], ElementAction, model=self._model
        )
        element = self._element_at(elements, choice.index, instruction)
        await self._perform(element, choice)

        performed = f"{choice.action} {element.to_line()}"
        logger.info(f"ACT: {performed}")
        return performed

    def _element_at(
        self,
        elements: List[SimplifiedElement],
        index: int,
        instruction: str,
    ) -> SimplifiedElement:
        if 0 <= index < len(elements):
            return elements[index]
        raise AtomicActionError(
            f"Element index {index} out of range (0-{len(elements) - 1})",
            AtomicMethod.ACT.value,
            instruction,
        )

    async def _perform(self, element: SimplifiedElement, choice: ElementAction) -> None:
        selector = element.selector
        if choice.action == "click":
            await self._page.click(selector)
        elif choice.action == "fill":
            await self._page.fill(selector, choice.value or "")
        elif choice.action == "press":
            await self._page.press(selector, choice.value or "Enter")
        elif choice.action == "hover":
            await self._page.hover(selector)
        elif choice.action == "select":
            await self._page.select_option(selector, choice.value or "")

    async def extract(self, instruction: Optional[str]) -> str:
        if not instruction:
            raise AtomicActionError("EXTRACT method requires an instruction", AtomicMethod.EXTRACT.value)
        html = await self._page.content()
        prompt = EXTRACT_USER.format(
            instruction=instruction,
            html=truncate(html, self._max_html_chars),
        )
        return await self._oracle.complete_text([Message.user(prompt)], model=self._model)

    async def observe(self, instruction: Optional[str]) -> List[Dict[str, Any]]:
        elements = await self._simplifier.interactive_elements(self._page)
        if instruction and elements:
            prompt = OBSERVE_USER.format(
                instruction=instruction,
                elements=DOMSimplifier.format_elements(elements),
            )
            selection = await self._oracle.complete_object(
                [Message.user(prompt)], ElementSelection, model=self._model
            )
            wanted = set(selection.indices)
            elements = [e for e in elements if e.index in wanted]
        return [e.to_dict() for e in elements]

    async def html(self, instruction: Optional[str] = None) -> str:
        return await self._page.content()

    async def screenshot(self, instruction: Optional[str] = None) -> str:
        data = await self._page.screenshot(full_page=True, type="png")
        return base64.b64encode(data).decode("ascii")

    async def wait(self, instruction: Optional[str]) -> None:
        await self._page.wait_for_timeout(parse_wait_ms(instruction))

    async def navback(self, instruction: Optional[str] = None) -> None:
        await self._page.go_back()

    async def ai_handle(self, instruction: Optional[str]) -> str:
        prompt = AI_HANDLE_USER.format(instruction=instruction or "")
        return await self._oracle.complete_text([Message.user(prompt)], model=self._model)
