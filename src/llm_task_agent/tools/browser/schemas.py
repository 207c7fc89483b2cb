"""
Browser Schemas - Data types for the atomic-action loop.

Pydantic models are what the oracle must return. Dataclasses are the
engine's own records.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class AtomicMethod(str, Enum):
    """The closed set of atomic browser operations."""
    GOTO = "GOTO"
    ACT = "ACT"
    EXTRACT = "EXTRACT"
    OBSERVE = "OBSERVE"
    HTML = "HTML"
    SCREENSHOT = "SCREENSHOT"
    WAIT = "WAIT"
    NAVBACK = "NAVBACK"
    AI_HANDLE = "AI_HANDLE"
    CLOSE = "CLOSE"


# Methods whose raw output becomes an ExtractedData record
DATA_METHODS = {AtomicMethod.EXTRACT, AtomicMethod.HTML, AtomicMethod.OBSERVE}


class BrowserExitReason(str, Enum):
    """Why the atomic-action loop stopped."""
    GOAL_COMPLETED = "goal-completed"
    DATA_SUFFICIENT = "data-sufficient"
    LOOP_DETECTED = "loop-detected"
    MAX_STEPS = "max-steps"


# =============================================================================
# ORACLE SCHEMAS
# =============================================================================

class AtomicDecision(BaseModel):
    """Next atomic action chosen by the oracle."""
    text: str = Field(default="", description="Short description of the action")
    reasoning: str = Field(default="", description="Why this action moves toward the goal")
    method: AtomicMethod
    instruction: Optional[str] = Field(default=None, description="The instruction for the method")

    @field_validator("method", mode="before")
    @classmethod
    def _normalize_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class ElementAction(BaseModel):
    """Element interaction chosen for an ACT instruction."""
    index: int = Field(description="Index of the element in the list")
    action: Literal["click", "fill", "press", "hover", "select"] = "click"
    value: Optional[str] = Field(default=None, description="Text to fill, key to press or option to select")
    reasoning: str = ""


class ElementSelection(BaseModel):
    """Elements relevant to an OBSERVE instruction."""
    indices: List[int] = Field(default_factory=list)


class SufficiencyVerdict(BaseModel):
    """Answer to "is the collected data enough for the goal?"."""
    sufficient: bool
    reason: str = ""


class ResultsSummary(BaseModel):
    """Concise summary of everything the loop collected."""
    summary: str


# =============================================================================
# ENGINE RECORDS
# =============================================================================

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class BrowserStep:
    """
    One atomic step, as decided and (unless it ended the loop) executed.

    Attributes:
        text: Short description of the action
        reasoning: Oracle reasoning
        method: Atomic method
        instruction: Method-dependent instruction
        result: Raw result of execution (None for actions without output)
        timestamp: ISO time the step was decided
        url: Page URL when the step was decided
    """
    text: str
    reasoning: str
    method: AtomicMethod
    instruction: Optional[str] = None
    result: Any = None
    timestamp: str = field(default_factory=_now)
    url: Optional[str] = None

    @classmethod
    def from_decision(cls, decision: AtomicDecision, url: Optional[str]) -> "BrowserStep":
        return cls(
            text=decision.text,
            reasoning=decision.reasoning,
            method=decision.method,
            instruction=decision.instruction,
            url=url,
        )

    @property
    def action_key(self) -> tuple[str, Optional[str]]:
        """Identity used for repeated-action detection."""
        return (self.method.value, self.instruction)


@dataclass
class ExtractedData:
    """
    Structured output of a data-producing step.

    Attributes:
        type: Lower-case method name, or 'ai_analysis'
        content: The data
        metadata: tool, instruction, timestamp and url
    """
    type: str
    content: Any
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BrowserResult:
    """
    Aggregate result of one browser dispatch.

    Attributes:
        message: Human-readable termination summary
        steps: Every decided step, in order
        total_steps: Number of steps (GOTO, executed steps and the final decision)
        results: Extracted data, in order
        summary: Oracle summary of the results
        goal_completed: True when CLOSE was chosen or the data was judged sufficient
        exit_reason: Why the loop stopped
    """
    message: str
    steps: List[BrowserStep]
    total_steps: int
    results: List[ExtractedData] = field(default_factory=list)
    summary: Optional[str] = None
    goal_completed: bool = False
    exit_reason: BrowserExitReason = BrowserExitReason.MAX_STEPS
