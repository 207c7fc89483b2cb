"""
Core module - Planning and the outer task loop.

This module contains the Agent facade, the step planner and the
orchestrator that drives planner, dispatcher and memory store.
"""

from llm_task_agent.core.agent import Agent
from llm_task_agent.core.planner import (
    GoalSatisfied,
    NextStep,
    PlannerDecision,
    Step,
    StepPlanner,
    StepStatus,
)
from llm_task_agent.core.orchestrator import (
    Orchestrator,
    RunBudget,
    RunResult,
    RunState,
    TerminationReason,
)
from llm_task_agent.core.subtasks import SubtaskTracker

__all__ = [
    "Agent",
    "GoalSatisfied",
    "NextStep",
    "PlannerDecision",
    "Step",
    "StepPlanner",
    "StepStatus",
    "Orchestrator",
    "RunBudget",
    "RunResult",
    "RunState",
    "TerminationReason",
    "SubtaskTracker",
]
