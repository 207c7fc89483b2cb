"""
Planner - Next-step decisions using the oracle.

The planner never plans ahead: each call looks at the goal and the
progress so far and answers either "the goal is satisfied" or "do this
next". Failures are surfaced as PlannerError without retrying.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union, TYPE_CHECKING
import logging

from pydantic import BaseModel, Field

from llm_task_agent.core.prompts import build_planning_prompt
from llm_task_agent.exceptions.llm import PlannerError
from llm_task_agent.interfaces.llm import Message

if TYPE_CHECKING:
    from llm_task_agent.interfaces.oracle import IOracle
    from llm_task_agent.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

MISSING_DESCRIPTION = "[planner returned no step description]"


class StepStatus(Enum):
    """Lifecycle of a step."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Step:
    """
    A single unit of work chosen by the planner.

    Attributes:
        id: Sequential step id, strictly increasing within a run
        description: What the step should accomplish
        status: Lifecycle state
        tool: Capability named by the planner (None = let the dispatcher choose)
        params: Arguments for the capability
        error: Failure message, set only when status is FAILED
        result: JSON-ready handler output once completed
    """
    id: int
    description: str
    status: StepStatus = StepStatus.PENDING
    tool: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    result: Any = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (StepStatus.COMPLETED, StepStatus.FAILED)

    def start(self) -> None:
        if self.status is not StepStatus.PENDING:
            raise ValueError(f"Step {self.id} cannot start from {self.status.value}")
        self.status = StepStatus.RUNNING

    def complete(self, result: Any = None) -> None:
        if self.status is not StepStatus.RUNNING:
            raise ValueError(f"Step {self.id} cannot complete from {self.status.value}")
        self.status = StepStatus.COMPLETED
        self.result = result

    def fail(self, error: str) -> None:
        if self.is_terminal:
            raise ValueError(f"Step {self.id} is already {self.status.value}")
        self.status = StepStatus.FAILED
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "description": self.description,
            "status": self.status.value,
            "tool": self.tool,
            "params": self.params,
            "error": self.error,
            "result": self.result,
        }


# =============================================================================
# ORACLE SCHEMAS
# =============================================================================

class PlannedStep(BaseModel):
    """Next step as proposed by the oracle."""
    description: Optional[str] = None
    tool: Optional[str] = Field(default=None, description="Name of one available tool")
    params: Dict[str, Any] = Field(default_factory=dict, description="Arguments for the tool")


class PlanningResponse(BaseModel):
    """Structured planning answer."""
    is_complete: bool
    reason: str = ""
    next_step: Optional[PlannedStep] = None


# =============================================================================
# DECISIONS
# =============================================================================

@dataclass(frozen=True)
class GoalSatisfied:
    """The planner judged the goal achieved."""
    reason: str


@dataclass(frozen=True)
class NextStep:
    """The planner chose another step."""
    step: Step
    reason: str = ""


PlannerDecision = Union[GoalSatisfied, NextStep]


class StepPlanner:
    """
    Ask the oracle for the next step or a completion verdict.

    Example:
        >>> planner = StepPlanner(oracle, registry, model="gpt-4o")
        >>> decision = await planner.decide(goal, memory.get_formatted_context(), step_id=1)
        >>> if isinstance(decision, NextStep):
        ...     print(decision.step.description)
    """

    def __init__(
        self,
        oracle: "IOracle",
        registry: Optional["ToolRegistry"] = None,
        model: Optional[str] = None,
    ):
        """
        Initialize the planner.

        Args:
            oracle: Oracle used for planning calls
            registry: Registry whose capabilities are offered to the oracle
            model: Planner model override
        """
        self._oracle = oracle
        self._registry = registry
        self._model = model

    def _tool_descriptions(self) -> List[Dict[str, Any]]:
        return self._registry.describe() if self._registry is not None else []

    async def decide(self, goal: str, context: str, step_id: int) -> PlannerDecision:
        """
        Decide what happens next.

        Args:
            goal: The overall task
            context: Rendered progress from the memory store
            step_id: Id to assign if a new step is produced

        Returns:
            GoalSatisfied or NextStep

        Raises:
            PlannerError: If the oracle fails or returns unusable output
        """
        system, user = build_planning_prompt(goal, context, self._tool_descriptions(), step_id)
        messages = [Message.system(system), Message.user(user)]

        try:
            response = await self._oracle.complete_object(
                messages, PlanningResponse, model=self._model
            )
        except Exception as e:
            logger.error(f"Planning failed for step {step_id}: {e}")
            raise PlannerError(f"Planner could not decide step {step_id}: {e}") from e

        if response.is_complete:
            logger.info(f"Planner: goal satisfied ({response.reason})")
            return GoalSatisfied(reason=response.reason)

        planned = response.next_step or PlannedStep()
        description = (planned.description or "").strip() or MISSING_DESCRIPTION
        if description == MISSING_DESCRIPTION:
            logger.warning(f"Planner returned no description for step {step_id}")

        step = Step(
            id=step_id,
            description=description,
            tool=planned.tool or None,
            params=dict(planned.params),
        )
        logger.info(f"Planner: step {step_id} -> {step.tool or '?'}: {description}")
        return NextStep(step=step, reason=response.reason)
