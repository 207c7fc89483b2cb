"""
Capability Interface - the contract every tool implements.

A capability declares a name, a one-line description for the planner and
a pydantic model describing its arguments. The dispatcher validates
arguments against that model before ``execute`` is called, so handlers
receive an instance of their own schema.

Example:
    >>> class EchoParams(BaseModel):
    ...     text: str
    >>>
    >>> class EchoTool(Capability):
    ...     name = "echo"
    ...     description = "Return the text unchanged"
    ...     parameter_schema = EchoParams
    ...
    ...     async def execute(self, args: EchoParams) -> str:
    ...         return args.text
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Type

from pydantic import BaseModel


class Capability(ABC):
    """Abstract base class for tools the dispatcher can invoke."""

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    parameter_schema: ClassVar[Type[BaseModel]]

    @abstractmethod
    async def execute(self, args: Any) -> Any:
        """
        Run the capability.

        Args:
            args: A validated instance of ``parameter_schema``

        Returns:
            Any value the dispatcher can normalize to JSON
        """
        ...

    def describe(self) -> Dict[str, Any]:
        """Name, description and JSON schema, as shown to the planner."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameter_schema.model_json_schema(),
        }

    async def close(self) -> None:
        """Release resources held by the capability."""
        return None
