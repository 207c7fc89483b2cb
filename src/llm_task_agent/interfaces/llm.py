"""
LLM Provider Interface - Abstract base classes for chat-completion backends.

This module defines the contract that LLM providers must follow to be used
by the oracle.

Example:
    >>> from llm_task_agent.llm import OpenAIProvider
    >>> provider = OpenAIProvider(base_url="https://api.openai.com", model="gpt-4o")
    >>> response = await provider.complete([Message.user("Hello")])
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class MessageRole(Enum):
    """Role of a message in the conversation."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class ImageContent:
    """
    Image content for vision-capable models.

    Attributes:
        data: Base64-encoded image data or URL
        media_type: MIME type (e.g., 'image/png', 'image/jpeg')
        is_url: Whether data is a URL (True) or base64 data (False)
    """
    data: str
    media_type: str = "image/png"
    is_url: bool = False

    def to_url(self) -> str:
        """Render as an image URL (data URL for inline images)."""
        if self.is_url:
            return self.data
        return f"data:{self.media_type};base64,{self.data}"


@dataclass
class Message:
    """
    A message in the LLM conversation.

    Attributes:
        role: The role of the message sender
        content: The text content of the message
        images: Optional list of images for vision models
    """
    role: MessageRole
    content: str
    images: Optional[List[ImageContent]] = None

    @classmethod
    def system(cls, content: str) -> "Message":
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str, images: Optional[List[ImageContent]] = None) -> "Message":
        """Create a user message."""
        return cls(role=MessageRole.USER, content=content, images=images)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        """Create an assistant message."""
        return cls(role=MessageRole.ASSISTANT, content=content)


@dataclass
class Usage:
    """
    Token usage information from an LLM response.

    Attributes:
        prompt_tokens: Number of tokens in the prompt
        completion_tokens: Number of tokens in the completion
        total_tokens: Total tokens used
    """
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary."""
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class LLMResponse:
    """
    Response from an LLM completion request.

    Attributes:
        content: The text content of the response
        model: The model that generated the response
        usage: Token usage information
        finish_reason: Reason the completion finished ('stop', 'length')
        raw_response: The original response object from the provider
    """
    content: str
    model: str
    usage: Usage
    finish_reason: str = "stop"
    raw_response: Any = None


class ILLMProvider(ABC):
    """
    Abstract interface for LLM providers.

    Implementations handle authentication, request formatting,
    and response parsing for their specific provider.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 'openai')."""
        ...

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Model used when a call does not name one."""
        ...

    @property
    @abstractmethod
    def supports_vision(self) -> bool:
        """Whether image inputs are accepted."""
        ...

    @abstractmethod
    async def complete(
        self,
        messages: List[Message],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Generate a completion for the given messages.

        Args:
            messages: List of messages in the conversation
            model: Model to use (defaults to provider's default model)
            temperature: Sampling temperature
            max_tokens: Maximum tokens in the response
            **kwargs: Provider-specific options

        Returns:
            The LLM's response

        Raises:
            LLMConnectionError: If the request fails
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the provider is available and properly configured.

        Returns:
            True if the provider is healthy
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        return None
