"""
Search Tool - Web search through the Exa neural search API.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

from llm_task_agent.exceptions.base import ConfigurationError
from llm_task_agent.tools.base import Capability

logger = logging.getLogger(__name__)


class SearchParams(BaseModel):
    """Arguments for the search tool."""
    query: str = Field(min_length=1, description="The search query")
    num_results: int = Field(default=5, ge=1, le=25, description="Number of results")


class SearchResultItem(BaseModel):
    """One search hit."""
    title: str = ""
    url: str
    content: str = ""


class SearchTool(Capability):
    """
    Exa search capability.

    Example:
        >>> tool = SearchTool(api_key="...")
        >>> results = await tool.execute(SearchParams(query="python asyncio"))
        >>> results[0].url
    """

    name = "search"
    description = "Search the web to get the latest information on any topic."
    parameter_schema = SearchParams

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://api.exa.ai",
        default_num_results: int = 5,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the search tool.

        Args:
            api_key: Exa API key (reads EXA_API_KEY if not set)
            base_url: Exa API base URL
            default_num_results: Result count used when the call keeps the default
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._api_key = api_key or os.environ.get("EXA_API_KEY")
        self._default_num_results = default_num_results
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def execute(self, args: SearchParams) -> List[SearchResultItem]:
        if not self._api_key:
            raise ConfigurationError("EXA_API_KEY is not set; search is unavailable")

        num_results = args.num_results
        if "num_results" not in args.model_fields_set:
            num_results = self._default_num_results

        body: Dict[str, Any] = {
            "query": args.query,
            "type": "neural",
            "numResults": num_results,
            "contents": {"text": True},
        }
        logger.info(f"Searching: {args.query!r} ({num_results} results)")

        response = await self._client.post(
            "/search",
            json=body,
            headers={"x-api-key": self._api_key},
        )
        response.raise_for_status()
        data = response.json()

        results = [
            SearchResultItem(
                title=item.get("title") or "",
                url=item["url"],
                content=item.get("text") or "",
            )
            for item in data.get("results", [])
            if item.get("url")
        ]
        logger.debug(f"Search returned {len(results)} result(s)")
        return results

    async def close(self) -> None:
        await self._client.aclose()
