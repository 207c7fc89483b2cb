"""
Pytest configuration and fixtures.
"""

from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Optional, Type

import pytest
from pydantic import BaseModel

from llm_task_agent.interfaces.browser import BrowserType, IBrowser, IPage
from llm_task_agent.interfaces.llm import Message
from llm_task_agent.interfaces.oracle import IOracle


class ScriptedOracle(IOracle):
    """
    Oracle that replays queued answers.

    Structured answers are queued per schema class; ``always`` sets an
    answer returned whenever that schema's queue is empty. Queued
    exceptions are raised instead of returned.
    """

    def __init__(self, vision: bool = False):
        self._objects: Dict[type, Deque[Any]] = defaultdict(deque)
        self._defaults: Dict[type, Any] = {}
        self._texts: Deque[Any] = deque()
        self._vision = vision
        self.calls: List[Dict[str, Any]] = []

    def push(self, *answers: Any, schema: Optional[type] = None) -> "ScriptedOracle":
        for answer in answers:
            key = schema or type(answer)
            self._objects[key].append(answer)
        return self

    def always(self, answer: BaseModel) -> "ScriptedOracle":
        self._defaults[type(answer)] = answer
        return self

    def push_text(self, *answers: Any) -> "ScriptedOracle":
        self._texts.extend(answers)
        return self

    def calls_for(self, schema: Optional[type]) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["schema"] is schema]

    @property
    def supports_vision(self) -> bool:
        return self._vision

    async def complete_object(
        self,
        messages: List[Message],
        schema: Type[BaseModel],
        model: Optional[str] = None,
    ) -> BaseModel:
        self.calls.append({"schema": schema, "messages": messages, "model": model})
        queue = self._objects[schema]
        if queue:
            answer = queue.popleft()
        elif schema in self._defaults:
            answer = self._defaults[schema]
        else:
            raise AssertionError(f"No scripted answer for {schema.__name__}")
        if isinstance(answer, BaseException):
            raise answer
        return answer

    async def complete_text(
        self,
        messages: List[Message],
        model: Optional[str] = None,
    ) -> str:
        self.calls.append({"schema": None, "messages": messages, "model": model})
        if not self._texts:
            raise AssertionError("No scripted text answer")
        answer = self._texts.popleft()
        if isinstance(answer, BaseException):
            raise answer
        return answer


class FakePage(IPage):
    """In-memory page that records every call."""

    def __init__(
        self,
        html: str = "<html><head><title>Example Domain</title></head><body></body></html>",
        elements: Optional[List[Dict[str, Any]]] = None,
    ):
        self._url = "about:blank"
        self.html = html
        self.elements = elements or []
        self.calls: List[tuple] = []
        self.goto_error: Optional[Exception] = None
        self.closed = False

    @property
    def url(self) -> str:
        return self._url

    async def title(self) -> str:
        return "Example Domain"

    async def goto(self, url: str, **options: Any) -> None:
        self.calls.append(("goto", url, options))
        if self.goto_error is not None:
            raise self.goto_error
        self._url = url

    async def go_back(self, **options: Any) -> None:
        self.calls.append(("go_back",))

    async def click(self, selector: str, **options: Any) -> None:
        self.calls.append(("click", selector))

    async def fill(self, selector: str, value: str, **options: Any) -> None:
        self.calls.append(("fill", selector, value))

    async def press(self, selector: str, key: str, **options: Any) -> None:
        self.calls.append(("press", selector, key))

    async def hover(self, selector: str, **options: Any) -> None:
        self.calls.append(("hover", selector))

    async def select_option(self, selector: str, value: Any = None, **options: Any) -> List[str]:
        self.calls.append(("select_option", selector, value))
        return [value]

    async def content(self) -> str:
        self.calls.append(("content",))
        return self.html

    async def evaluate(self, expression: str, *args: Any) -> Any:
        self.calls.append(("evaluate",) + args)
        return self.elements

    async def screenshot(self, path: Optional[Any] = None, full_page: bool = False, **options: Any) -> bytes:
        self.calls.append(("screenshot", full_page))
        return b"\x89PNG fake"

    async def wait_for_timeout(self, timeout: int) -> None:
        self.calls.append(("wait_for_timeout", timeout))

    async def close(self) -> None:
        self.closed = True


class FakeBrowser(IBrowser):
    """Browser handing out one FakePage; counts launches and closes."""

    def __init__(self, page: Optional[FakePage] = None):
        self.page = page or FakePage()
        self.launched = False
        self.closed = False
        self.launch_options: Dict[str, Any] = {}

    @property
    def is_connected(self) -> bool:
        return self.launched and not self.closed

    async def launch(
        self,
        headless: bool = True,
        browser_type: BrowserType = BrowserType.CHROMIUM,
        **options: Any,
    ) -> None:
        self.launched = True
        self.launch_options = {"headless": headless, "browser_type": browser_type, **options}

    async def new_page(self, **options: Any) -> IPage:
        return self.page

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings():
    """Provide test settings."""
    from llm_task_agent.config import Settings, AgentSettings, BrowserSettings, LLMSettings

    return Settings(
        llm=LLMSettings(model="gpt-4o-mini", use_vision=False),
        agent=AgentSettings(max_steps=5, persist_step_artifacts=False),
        browser=BrowserSettings(headless=True, max_steps=10),
    )


@pytest.fixture
def oracle() -> ScriptedOracle:
    """Provide an oracle with no scripted answers."""
    return ScriptedOracle()


@pytest.fixture
def vision_oracle() -> ScriptedOracle:
    """Provide an oracle that accepts screenshots."""
    return ScriptedOracle(vision=True)


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage()


@pytest.fixture
def fake_browser(fake_page) -> FakeBrowser:
    return FakeBrowser(fake_page)


@pytest.fixture
def sessions(fake_browser):
    """Session manager backed by the fake browser."""
    from llm_task_agent.tools.browser.session import BrowserSessionManager

    return BrowserSessionManager(browser_factory=lambda: fake_browser)
