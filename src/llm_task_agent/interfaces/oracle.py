"""
Oracle Interface - typed access to a language model.

Every call site that needs a decision asks for a specific pydantic model
(``complete_object``) or for free text (``complete_text``). Implementations
are responsible for prompting, parsing and validation.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel

from llm_task_agent.interfaces.llm import Message

T = TypeVar("T", bound=BaseModel)


class IOracle(ABC):
    """Abstract oracle used by the planner, dispatcher and browser engine."""

    @abstractmethod
    async def complete_object(
        self,
        messages: List[Message],
        schema: Type[T],
        model: Optional[str] = None,
    ) -> T:
        """
        Ask for a structured answer.

        Args:
            messages: Conversation to send
            schema: Pydantic model the answer must validate against
            model: Model override

        Returns:
            A validated instance of ``schema``

        Raises:
            InvalidResponseError: If the answer is not valid JSON for ``schema``
            LLMConnectionError: If the backend is unreachable
        """
        ...

    @abstractmethod
    async def complete_text(
        self,
        messages: List[Message],
        model: Optional[str] = None,
    ) -> str:
        """
        Ask for a free-text answer.

        Raises:
            LLMConnectionError: If the backend is unreachable
        """
        ...

    @property
    def supports_vision(self) -> bool:
        """Whether screenshots may be attached to messages."""
        return False
