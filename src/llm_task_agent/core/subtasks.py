"""
Subtask Tracker - Markdown checklist of the steps taken in a run.

The orchestrator adds a subtask when a step starts and ticks it off when
the step completes, so ``todo.md`` shows progress while the run is live.
Planner reasoning is appended under a ``## Reasoning`` section.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
import logging

from llm_task_agent.reporting.artifacts import ArtifactStore

logger = logging.getLogger(__name__)

TODO_FILE = "todo.md"


@dataclass
class Subtask:
    description: str
    completed: bool = False
    note: Optional[str] = None

    def to_line(self, index: int) -> str:
        mark = "[x]" if self.completed else "[ ]"
        line = f"{index}. {mark} {self.description}"
        if self.note:
            line += f" - *{self.note}*"
        return line


class SubtaskTracker:
    """
    Keep ``todo.md`` in the run directory in sync with the run.

    Example:
        >>> tracker = SubtaskTracker(store, task="Compare Python web frameworks")
        >>> index = tracker.add("Search for benchmarks")
        >>> tracker.update(index, completed=True)
    """

    def __init__(self, store: ArtifactStore, task: str):
        self._store = store
        self._task = task
        self._created = datetime.now(timezone.utc).isoformat()
        self._subtasks: List[Subtask] = []
        self._reasoning: List[str] = []
        self._write()

    @property
    def subtasks(self) -> List[Subtask]:
        return list(self._subtasks)

    def add(self, description: str) -> int:
        """Append a pending subtask; returns its 1-based index."""
        self._subtasks.append(Subtask(description))
        self._write()
        return len(self._subtasks)

    def update(self, index: int, completed: bool, note: Optional[str] = None) -> None:
        """
        Set the status of subtask ``index`` (1-based).

        Raises:
            IndexError: If there is no such subtask
        """
        if not 1 <= index <= len(self._subtasks):
            raise IndexError(f"No subtask {index} (have {len(self._subtasks)})")
        subtask = self._subtasks[index - 1]
        subtask.completed = completed
        if note:
            subtask.note = note
        self._write()

    def add_reasoning(self, reasoning: str) -> None:
        if not reasoning:
            return
        stamp = datetime.now(timezone.utc).isoformat()
        self._reasoning.append(f"{stamp}: {reasoning}")
        self._write()

    def render(self) -> str:
        lines = [f"# Task: {self._task}", "", f"Created: {self._created}", "", "## Subtasks", ""]
        lines.extend(s.to_line(i) for i, s in enumerate(self._subtasks, start=1))
        if self._reasoning:
            lines.extend(["", "## Reasoning", ""])
            lines.append("\n\n".join(self._reasoning))
        return "\n".join(lines) + "\n"

    def _write(self) -> None:
        self._store.write_file(TODO_FILE, self.render())
