"""
LLM Oracle - typed completions over a chat provider.

The oracle turns free-form model output into validated pydantic models.
Models wrap JSON in markdown fences or surround it with prose often
enough that extraction is tolerant, but validation is strict.
"""

import json
import logging
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from llm_task_agent.exceptions.llm import InvalidResponseError
from llm_task_agent.interfaces.llm import ILLMProvider, Message
from llm_task_agent.interfaces.oracle import IOracle

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

JSON_INSTRUCTION = """Respond ONLY with a JSON object that validates against this JSON schema:
{schema}
Do not add explanations or markdown outside the JSON object."""


def extract_json(text: str) -> str:
    """
    Pull the JSON payload out of a model reply.

    Handles ```json fences, bare ``` fences and prose around an object.
    """
    json_text = text.strip()
    if "```json" in json_text:
        start = json_text.find("```json") + 7
        end = json_text.find("```", start)
        json_text = json_text[start:end if end != -1 else None].strip()
    elif "```" in json_text:
        start = json_text.find("```") + 3
        end = json_text.find("```", start)
        json_text = json_text[start:end if end != -1 else None].strip()

    if not json_text.startswith("{"):
        first, last = json_text.find("{"), json_text.rfind("}")
        if first != -1 and last > first:
            json_text = json_text[first:last + 1]
    return json_text


def parse_object(text: str, schema: Type[T]) -> T:
    """
    Parse ``text`` into ``schema``.

    Raises:
        InvalidResponseError: On empty output, invalid JSON or schema mismatch
    """
    if not text or not text.strip():
        raise InvalidResponseError(f"Empty response for {schema.__name__}", text)

    try:
        data = json.loads(extract_json(text))
    except json.JSONDecodeError as e:
        raise InvalidResponseError(f"JSON parse error for {schema.__name__}: {e}", text) from e

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise InvalidResponseError(
            f"Response does not match {schema.__name__}: {e.error_count()} error(s)", text
        ) from e


class LLMOracle(IOracle):
    """
    Oracle backed by an ILLMProvider.

    Example:
        >>> oracle = LLMOracle(OpenAIProvider(base_url=..., model="gpt-4o"))
        >>> decision = await oracle.complete_object(messages, PlanningResponse)
    """

    def __init__(
        self,
        provider: ILLMProvider,
        temperature: float = 0.2,
        max_tokens: Optional[int] = None,
        use_vision: bool = True,
    ):
        self._provider = provider
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._use_vision = use_vision

    @property
    def provider(self) -> ILLMProvider:
        return self._provider

    @property
    def supports_vision(self) -> bool:
        return self._use_vision and self._provider.supports_vision

    def _prepare(self, messages: List[Message]) -> List[Message]:
        if self.supports_vision:
            return list(messages)
        # Drop images the backend cannot take
        return [Message(role=m.role, content=m.content) for m in messages]

    async def complete_text(
        self,
        messages: List[Message],
        model: Optional[str] = None,
    ) -> str:
        response = await self._provider.complete(
            self._prepare(messages),
            model=model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        logger.debug(f"Oracle text completion: {response.usage.total_tokens} tokens")
        return response.content.strip()

    async def complete_object(
        self,
        messages: List[Message],
        schema: Type[T],
        model: Optional[str] = None,
    ) -> T:
        instruction = JSON_INSTRUCTION.format(
            schema=json.dumps(schema.model_json_schema(), indent=2)
        )
        prepared = [Message.system(instruction)] + self._prepare(messages)
        response = await self._provider.complete(
            prepared,
            model=model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        logger.debug(
            f"Oracle {schema.__name__} completion: {response.usage.total_tokens} tokens"
        )
        return parse_object(response.content, schema)
