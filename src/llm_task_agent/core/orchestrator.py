"""
Orchestrator - The outer plan / dispatch / record loop.

Each iteration:

1. Check the step budget (before asking the planner).
2. Ask the planner for the next step or a completion verdict.
3. Dispatch the step to exactly one capability.
4. Record the result in the memory store (and optional artifacts).

The first planner or dispatch failure ends the run; nothing is retried.
Every termination produces a RunResult with one human-readable message.
Step artifacts, todo tracking and step hooks are best effort: their
failures are logged and the run carries on.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypeVar, TYPE_CHECKING
import logging
import time
import uuid

from llm_task_agent.config.settings import AgentSettings
from llm_task_agent.core.planner import GoalSatisfied, Step, StepPlanner
from llm_task_agent.exceptions.base import describe_error
from llm_task_agent.exceptions.llm import PlannerError
from llm_task_agent.memory.memory_store import MemoryStore

if TYPE_CHECKING:
    from llm_task_agent.core.subtasks import SubtaskTracker
    from llm_task_agent.reporting.artifacts import ArtifactStore
    from llm_task_agent.tools.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

StepHook = Callable[[Step], None]

T = TypeVar("T")


class RunState(Enum):
    """Where the outer loop currently is."""
    IDLE = "idle"
    PLANNING = "planning"
    DISPATCHING = "dispatching"
    RECORDING = "recording"
    COMPLETED = "completed"
    FAILED = "failed"


class TerminationReason(str, Enum):
    """Why a run ended."""
    GOAL_SATISFIED = "goal-satisfied"
    BUDGET_EXHAUSTED = "budget-exhausted"
    HANDLER_ERROR = "handler-error"
    PLANNER_ERROR = "planner-error"


@dataclass
class RunBudget:
    """
    Step budget for one run.

    ``current_step`` counts dispatched steps and never exceeds ``max_steps``.
    """
    max_steps: int
    current_step: int = 0

    @property
    def exhausted(self) -> bool:
        return self.current_step >= self.max_steps

    @property
    def remaining(self) -> int:
        return max(self.max_steps - self.current_step, 0)

    def consume(self) -> int:
        """Take one step from the budget and return its 1-based number."""
        if self.exhausted:
            raise ValueError(f"Step budget of {self.max_steps} already used")
        self.current_step += 1
        return self.current_step


@dataclass
class RunResult:
    """
    Outcome of one run.

    Attributes:
        goal: The task as given
        termination: Why the run ended
        message: One human-readable sentence describing the ending
        steps: Every dispatched step, in order
        memory: The run's memory store
        completion_reason: Planner's reason, verbatim, when the goal was satisfied
        error: Error text for planner/handler failures
        error_details: Type, message and details of that error
        duration_seconds: Wall time of the run
        run_id: Identifier of the run (and its artifact directory)
    """
    goal: str
    termination: TerminationReason
    message: str
    steps: List[Step]
    memory: MemoryStore
    completion_reason: Optional[str] = None
    error: Optional[str] = None
    error_details: Optional[Dict[str, Any]] = None
    duration_seconds: float = 0.0
    run_id: str = ""

    @property
    def success(self) -> bool:
        return self.termination is TerminationReason.GOAL_SATISFIED

    @property
    def is_fatal(self) -> bool:
        return self.termination in (TerminationReason.HANDLER_ERROR, TerminationReason.PLANNER_ERROR)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (the run.json payload)."""
        return {
            "run_id": self.run_id,
            "goal": self.goal,
            "termination": self.termination.value,
            "message": self.message,
            "completion_reason": self.completion_reason,
            "error": self.error,
            "error_details": self.error_details,
            "duration_seconds": round(self.duration_seconds, 3),
            "steps": [step.to_dict() for step in self.steps],
            "data": self.memory.to_records(),
        }


def new_run_id() -> str:
    """Sortable, collision-resistant run id, e.g. ``20240101-120000-1a2b3c``."""
    return f"{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:6]}"


@dataclass
class _RunContext:
    goal: str
    run_id: str
    budget: RunBudget
    memory: MemoryStore
    started: float
    steps: List[Step] = field(default_factory=list)


class Orchestrator:
    """
    Drive planner, dispatcher and memory store to a bounded termination.

    Example:
        >>> orchestrator = Orchestrator(planner, dispatcher, AgentSettings(max_steps=10))
        >>> result = await orchestrator.run("Find the latest Python release")
        >>> result.termination, result.message
    """

    def __init__(
        self,
        planner: StepPlanner,
        dispatcher: "ToolDispatcher",
        settings: Optional[AgentSettings] = None,
        artifacts: Optional["ArtifactStore"] = None,
        subtasks: Optional["SubtaskTracker"] = None,
        on_step_start: Optional[StepHook] = None,
        on_step_end: Optional[StepHook] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            planner: Next-step planner
            dispatcher: Capability dispatcher
            settings: Outer-loop settings (defaults to AgentSettings())
            artifacts: Where step snapshots go (None = not persisted)
            subtasks: todo.md tracker (None = not tracked)
            on_step_start: Called when a step starts running
            on_step_end: Called when a step completes or fails
        """
        self._planner = planner
        self._dispatcher = dispatcher
        self._settings = settings or AgentSettings()
        self._artifacts = artifacts
        self._subtasks = subtasks
        self._on_step_start = on_step_start
        self._on_step_end = on_step_end
        self._state = RunState.IDLE

    @property
    def state(self) -> RunState:
        return self._state

    async def run(
        self,
        goal: str,
        run_id: Optional[str] = None,
        memory: Optional[MemoryStore] = None,
    ) -> RunResult:
        """
        Run the loop for ``goal`` until it terminates.

        Args:
            goal: Natural-language task
            run_id: Identifier for the run (generated if not given)
            memory: Store to record into (a fresh one if not given)

        Returns:
            RunResult; planner and handler failures are reported there, not raised
        """
        ctx = _RunContext(
            goal=goal,
            run_id=run_id or new_run_id(),
            budget=RunBudget(self._settings.max_steps),
            memory=memory if memory is not None else MemoryStore(),
            started=time.perf_counter(),
        )
        logger.info(f"Run {ctx.run_id}: {goal!r} (max {ctx.budget.max_steps} steps)")

        while True:
            if ctx.budget.exhausted:
                self._state = RunState.COMPLETED
                return self._finish(
                    ctx,
                    TerminationReason.BUDGET_EXHAUSTED,
                    f"Stopped after reaching the maximum of {ctx.budget.max_steps} steps "
                    f"without the goal being satisfied",
                )

            self._state = RunState.PLANNING
            step_id = ctx.budget.current_step + 1
            try:
                decision = await self._planner.decide(goal, self._context(ctx.memory), step_id)
            except PlannerError as e:
                return self._fail(ctx, TerminationReason.PLANNER_ERROR, f"Planning failed: {e.message}", e)

            if isinstance(decision, GoalSatisfied):
                self._state = RunState.COMPLETED
                count = len(ctx.steps)
                result = self._finish(
                    ctx,
                    TerminationReason.GOAL_SATISFIED,
                    f"Goal satisfied after {count} step{'s' if count != 1 else ''}",
                )
                result.completion_reason = decision.reason
                return result

            step = decision.step
            if self._subtasks is not None:
                self._best_effort("Recording planner reasoning", lambda: self._subtasks.add_reasoning(decision.reason))

            failure = await self._dispatch(ctx, step)
            if failure is not None:
                return failure

    async def _dispatch(self, ctx: _RunContext, step: Step) -> Optional[RunResult]:
        ctx.budget.consume()
        step.start()
        ctx.steps.append(step)
        subtask = None
        if self._subtasks is not None:
            subtask = self._best_effort("Adding subtask", lambda: self._subtasks.add(step.description))
        self._notify(self._on_step_start, step)

        self._state = RunState.DISPATCHING
        try:
            dispatched = await self._dispatcher.execute(step)
        except PlannerError as e:
            self._close_failed(step, e.message, subtask)
            return self._fail(ctx, TerminationReason.PLANNER_ERROR, f"Step {step.id} could not be resolved: {e.message}", e)
        except Exception as e:
            message = getattr(e, "message", None) or str(e)
            self._close_failed(step, message, subtask)
            return self._fail(ctx, TerminationReason.HANDLER_ERROR, f"Step {step.id} failed: {message}", e)

        self._state = RunState.RECORDING
        step.tool = dispatched.tool
        step.params = dispatched.arguments
        step.complete(dispatched.data)
        ctx.memory.add_result(step.id, dispatched.tool, dispatched.data)
        logger.info(f"Step {step.id} completed ({dispatched.tool}, {dispatched.duration_ms:.0f}ms)")

        self._persist(step)
        if subtask is not None:
            self._best_effort("Updating subtask", lambda: self._subtasks.update(subtask, completed=True))
        self._notify(self._on_step_end, step)
        return None

    def _context(self, memory: MemoryStore) -> str:
        if self._settings.concise_context:
            return memory.get_concise_context(self._settings.context_max_entries)
        return memory.get_formatted_context()

    def _close_failed(self, step: Step, message: str, subtask: Optional[int]) -> None:
        step.fail(message)
        logger.error(f"Step {step.id} failed: {message}")
        self._persist(step)
        if subtask is not None:
            self._best_effort(
                "Updating subtask",
                lambda: self._subtasks.update(subtask, completed=False, note=f"failed: {message}"),
            )
        self._notify(self._on_step_end, step)

    def _persist(self, step: Step) -> None:
        if self._artifacts is not None and self._settings.persist_step_artifacts:
            self._best_effort(
                f"Writing artifact for step {step.id}",
                lambda: self._artifacts.write_json(f"steps/step-{step.id}.json", step.to_dict()),
            )

    def _notify(self, hook: Optional[StepHook], step: Step) -> None:
        if hook is not None:
            self._best_effort(f"Step hook for step {step.id}", lambda: hook(step))

    @staticmethod
    def _best_effort(action: str, func: Callable[[], T]) -> Optional[T]:
        try:
            return func()
        except Exception as e:
            logger.warning(f"{action} failed: {e}")
            return None

    def _fail(
        self,
        ctx: _RunContext,
        reason: TerminationReason,
        message: str,
        error: Exception,
    ) -> RunResult:
        self._state = RunState.FAILED
        result = self._finish(ctx, reason, message)
        result.error = str(error)
        result.error_details = describe_error(error)
        return result

    def _finish(self, ctx: _RunContext, reason: TerminationReason, message: str) -> RunResult:
        duration = time.perf_counter() - ctx.started
        log = logger.info if reason in (
            TerminationReason.GOAL_SATISFIED, TerminationReason.BUDGET_EXHAUSTED
        ) else logger.error
        log(f"Run {ctx.run_id} ended ({reason.value}): {message}")
        return RunResult(
            goal=ctx.goal,
            termination=reason,
            message=message,
            steps=ctx.steps,
            memory=ctx.memory,
            duration_seconds=duration,
            run_id=ctx.run_id,
        )
