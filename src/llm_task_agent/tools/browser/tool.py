"""
Browser Tool - The browser capability exposed to the planner.
"""

from typing import Optional, TYPE_CHECKING
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from llm_task_agent.config.settings import BrowserSettings
from llm_task_agent.tools.base import Capability
from llm_task_agent.tools.browser.engine import BrowserActionEngine
from llm_task_agent.tools.browser.schemas import BrowserResult

if TYPE_CHECKING:
    from llm_task_agent.interfaces.oracle import IOracle
    from llm_task_agent.tools.browser.session import BrowserSessionManager


class BrowserParams(BaseModel):
    """Arguments for the browser tool."""
    goal: str = Field(min_length=1, description="What to accomplish in the browser")
    url: Optional[str] = Field(default=None, description="Optional http(s) URL to start from")

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"url must be an absolute http(s) URL, got {value!r}")
        return value


class BrowserTool(Capability):
    """
    Browser capability backed by the atomic-action engine.

    Example:
        >>> tool = BrowserTool(sessions, oracle)
        >>> result = await tool.execute(BrowserParams(goal="Read the headline", url="https://example.com"))
        >>> result.goal_completed
        True
    """

    name = "browser"
    description = (
        "Interact with web pages: navigate, click, fill forms and extract content. "
        "Give a goal and optionally a starting URL."
    )
    parameter_schema = BrowserParams

    def __init__(
        self,
        sessions: "BrowserSessionManager",
        oracle: "IOracle",
        settings: Optional[BrowserSettings] = None,
        model: Optional[str] = None,
        use_vision: bool = True,
    ):
        self._sessions = sessions
        self._engine = BrowserActionEngine(
            sessions,
            oracle,
            settings=settings,
            model=model,
            use_vision=use_vision,
        )

    @property
    def engine(self) -> BrowserActionEngine:
        return self._engine

    async def execute(self, args: BrowserParams) -> BrowserResult:
        return await self._engine.run(args.goal, url=args.url)

    async def close(self) -> None:
        await self._sessions.shutdown()
