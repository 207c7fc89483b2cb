"""
Tool Registry - Name to capability mapping, checked at registration.
"""

import inspect
import logging
from typing import Any, Dict, Iterator, List

from pydantic import BaseModel

from llm_task_agent.exceptions.tool import ToolRegistrationError, UnknownToolError
from llm_task_agent.tools.base import Capability

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Registry of capability instances.

    Every contract violation is reported when a capability is registered,
    never at dispatch time.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(SearchTool(api_key="..."))
        >>> registry.get("search").description
    """

    def __init__(self) -> None:
        self._tools: Dict[str, Capability] = {}

    def register(self, capability: Capability) -> Capability:
        """
        Register a capability instance.

        Args:
            capability: The capability to add

        Returns:
            The same capability

        Raises:
            ToolRegistrationError: If the capability breaks the contract
        """
        if not isinstance(capability, Capability):
            raise ToolRegistrationError(
                f"{type(capability).__name__} does not implement Capability"
            )

        name = capability.name
        if not name or not isinstance(name, str):
            raise ToolRegistrationError(
                f"{type(capability).__name__} has no name"
            )
        if name in self._tools:
            raise ToolRegistrationError(f"Tool '{name}' is already registered", tool=name)
        if not capability.description:
            raise ToolRegistrationError(f"Tool '{name}' has no description", tool=name)

        schema = getattr(capability, "parameter_schema", None)
        if not (inspect.isclass(schema) and issubclass(schema, BaseModel)):
            raise ToolRegistrationError(
                f"Tool '{name}' parameter_schema must be a pydantic model class",
                tool=name,
            )

        self._tools[name] = capability
        logger.debug(f"Registered tool: {name}")
        return capability

    def unregister(self, name: str) -> None:
        """Remove a capability; unknown names are ignored."""
        self._tools.pop(name, None)

    def get(self, name: str) -> Capability:
        """
        Look up a capability by name.

        Raises:
            UnknownToolError: If no capability has that name
        """
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name, self.names()) from None

    def names(self) -> List[str]:
        """Registered names, in registration order."""
        return list(self._tools)

    def list(self) -> List[Capability]:
        return list(self._tools.values())

    def describe(self) -> List[Dict[str, Any]]:
        """Planner-facing descriptions of every capability."""
        return [tool.describe() for tool in self._tools.values()]

    async def close(self) -> None:
        """Close every registered capability."""
        for tool in self._tools.values():
            await tool.close()

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Capability]:
        return iter(list(self._tools.values()))

    def __len__(self) -> int:
        return len(self._tools)
