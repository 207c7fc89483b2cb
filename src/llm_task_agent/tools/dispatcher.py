"""
Tool Dispatcher - Validate and execute exactly one capability per step.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, TYPE_CHECKING
import logging
import time

from pydantic import BaseModel, Field, ValidationError

from llm_task_agent.exceptions.base import TaskAgentError
from llm_task_agent.exceptions.llm import PlannerError
from llm_task_agent.exceptions.tool import HandlerError, ToolValidationError
from llm_task_agent.interfaces.llm import Message
from llm_task_agent.tools.prompts import build_tool_selection_prompt
from llm_task_agent.tools.registry import ToolRegistry
from llm_task_agent.utils.serialization import to_jsonable

if TYPE_CHECKING:
    from llm_task_agent.core.planner import Step
    from llm_task_agent.interfaces.oracle import IOracle

logger = logging.getLogger(__name__)


class ToolInvocation(BaseModel):
    """Oracle-selected tool call for a step that named no tool."""
    tool: str = Field(description="Name of one available tool")
    arguments: Dict[str, Any] = Field(default_factory=dict)


@dataclass
class DispatchResult:
    """
    Outcome of a successful dispatch.

    Attributes:
        tool: Capability that ran
        data: JSON-ready handler output
        arguments: Validated arguments the handler received
        duration_ms: Handler wall time
    """
    tool: str
    data: Any
    arguments: Dict[str, Any]
    duration_ms: float = 0.0


class ToolDispatcher:
    """
    Resolve a step to one capability call and run it.

    Example:
        >>> dispatcher = ToolDispatcher(registry, oracle)
        >>> result = await dispatcher.execute(step)
        >>> memory.add_result(step.id, result.tool, result.data)
    """

    def __init__(
        self,
        registry: ToolRegistry,
        oracle: Optional["IOracle"] = None,
        model: Optional[str] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            registry: Capabilities available for dispatch
            oracle: Oracle used to pick a tool when a step names none
            model: Dispatch model override
        """
        self._registry = registry
        self._oracle = oracle
        self._model = model

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def resolve(self, step: "Step") -> ToolInvocation:
        """
        Determine the tool and raw arguments for ``step``.

        Raises:
            PlannerError: If tool selection through the oracle fails
        """
        if step.tool:
            return ToolInvocation(tool=step.tool, arguments=dict(step.params or {}))

        if self._oracle is None:
            raise PlannerError(f"Step {step.id} names no tool and no oracle is available")

        system, user = build_tool_selection_prompt(step.description, self._registry.describe())
        try:
            invocation = await self._oracle.complete_object(
                [Message.system(system), Message.user(user)],
                ToolInvocation,
                model=self._model,
            )
        except Exception as e:
            raise PlannerError(f"Tool selection failed for step {step.id}: {e}") from e

        logger.debug(f"Selected tool '{invocation.tool}' for step {step.id}")
        return invocation

    def validate(self, tool: str, arguments: Dict[str, Any]) -> BaseModel:
        """
        Validate ``arguments`` against the capability's schema.

        Raises:
            UnknownToolError: If ``tool`` is not registered
            ToolValidationError: If the arguments do not match
        """
        capability = self._registry.get(tool)
        try:
            return capability.parameter_schema.model_validate(arguments)
        except ValidationError as e:
            errors = [
                {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                for err in e.errors()
            ]
            raise ToolValidationError(
                f"Invalid arguments for '{tool}': {e.error_count()} error(s)",
                tool=tool,
                errors=errors,
            ) from e

    async def execute(self, step: "Step") -> DispatchResult:
        """
        Run the capability for ``step``.

        Args:
            step: The running step

        Returns:
            DispatchResult with normalized data

        Raises:
            PlannerError: If tool selection fails
            ToolValidationError: If the tool is unknown or arguments are invalid
            HandlerError: If the handler raises
        """
        invocation = await self.resolve(step)
        args = self.validate(invocation.tool, invocation.arguments)
        capability = self._registry.get(invocation.tool)

        logger.info(f"Step {step.id}: executing {invocation.tool}")
        start = time.perf_counter()
        try:
            raw = await capability.execute(args)
        except (HandlerError, ToolValidationError):
            raise
        except TaskAgentError as e:
            raise HandlerError(
                f"Tool '{invocation.tool}' failed: {e.message}",
                tool=invocation.tool,
                cause=e,
            ) from e
        except Exception as e:
            raise HandlerError(
                f"Tool '{invocation.tool}' failed: {e}",
                tool=invocation.tool,
                cause=e,
            ) from e
        duration = (time.perf_counter() - start) * 1000

        logger.debug(f"Step {step.id}: {invocation.tool} finished in {duration:.0f}ms")
        return DispatchResult(
            tool=invocation.tool,
            data=to_jsonable(raw),
            arguments=to_jsonable(args),
            duration_ms=duration,
        )
