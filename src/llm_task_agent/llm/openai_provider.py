"""
OpenAI-compatible LLM Provider.

Supports any OpenAI-compatible API including:
- OpenAI
- Azure OpenAI
- Local servers (LM Studio, Ollama, etc.)
"""

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from llm_task_agent.exceptions.llm import LLMConnectionError, InvalidResponseError
from llm_task_agent.interfaces.llm import (
    ILLMProvider,
    Message,
    MessageRole,
    LLMResponse,
    Usage,
)

logger = logging.getLogger(__name__)


class OpenAIProvider(ILLMProvider):
    """
    OpenAI-compatible LLM provider.

    Works with any OpenAI-compatible API endpoint.

    Example:
        >>> provider = OpenAIProvider(
        ...     base_url="https://api.openai.com",
        ...     model="gpt-4o"
        ... )
        >>> response = await provider.complete([
        ...     Message.user("Hello!")
        ... ])
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: Optional[str] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the provider.

        Args:
            base_url: Base URL for the API (no /v1 suffix needed)
            model: Model to use for completions
            api_key: Optional API key (reads from OPENAI_API_KEY env var if not set)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._base_url = base_url.rstrip("/")
        if self._base_url.endswith("/v1"):
            self._base_url = self._base_url[:-3]
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY", "not-needed")
        self._model = model
        self._timeout = timeout

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def name(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return self._model

    @property
    def supports_vision(self) -> bool:
        return True

    @staticmethod
    def _format_message(msg: Message) -> Dict[str, Any]:
        role = msg.role.value if isinstance(msg.role, MessageRole) else msg.role
        if not msg.images:
            return {"role": role, "content": msg.content}
        parts: List[Dict[str, Any]] = [{"type": "text", "text": msg.content}]
        for image in msg.images:
            parts.append({"type": "image_url", "image_url": {"url": image.to_url()}})
        return {"role": role, "content": parts}

    async def complete(
        self,
        messages: List[Message],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate a completion."""
        model = model or self._model

        body: Dict[str, Any] = {
            "model": model,
            "messages": [self._format_message(m) for m in messages],
            "temperature": temperature,
        }
        if max_tokens:
            body["max_tokens"] = max_tokens
        body.update(kwargs)

        logger.debug(f"Calling OpenAI API: {model}")

        try:
            response = await self._client.post("/v1/chat/completions", json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error: {e.response.status_code} - {e.response.text[:200]}")
            raise LLMConnectionError(
                f"LLM request failed with status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Error calling OpenAI API: {e}")
            raise LLMConnectionError(f"LLM request failed: {e}") from e

        try:
            data = response.json()
            choice = data["choices"][0]
            message = choice["message"]
        except (ValueError, KeyError, IndexError) as e:
            raise InvalidResponseError(f"Malformed completion payload: {e}", response.text) from e

        usage_data = data.get("usage") or {}
        usage = Usage(
            prompt_tokens=usage_data.get("prompt_tokens", 0),
            completion_tokens=usage_data.get("completion_tokens", 0),
            total_tokens=usage_data.get("total_tokens", 0),
        )

        return LLMResponse(
            content=message.get("content") or "",
            model=data.get("model", model),
            usage=usage,
            finish_reason=choice.get("finish_reason") or "stop",
            raw_response=data,
        )

    async def health_check(self) -> bool:
        """Check if the API is available."""
        try:
            response = await self._client.get("/v1/models")
        except httpx.HTTPError as e:
            logger.debug(f"Health check failed: {e}")
            return False
        return response.status_code == 200

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
