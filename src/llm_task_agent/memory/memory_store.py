"""
Memory Store - Append-only log of step outcomes for one run.

Every dispatched step appends one DataEntry. Entries are indexed by
capability type and by step id so the planner and the report generator
can look results up without scanning, while the chronological log stays
the single source of truth.

Example:
    >>> memory = MemoryStore()
    >>> memory.add_result(1, "search", [{"title": "Python", "url": "..."}])
    >>> memory.get_results_by_step_id(1)[0].type
    'search'
    >>> print(memory.get_formatted_context())
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import json
import logging
import time

from llm_task_agent.utils.serialization import to_jsonable, truncate

logger = logging.getLogger(__name__)

FIRST_STEP_CONTEXT = "This is the first step, so there are no previous results."


@dataclass(frozen=True)
class DataEntry:
    """
    One recorded step outcome.

    Attributes:
        step_id: Id of the step that produced the data
        type: Capability name that produced it
        data: Opaque payload returned by the capability
        timestamp: Epoch seconds, non-decreasing within a store
    """
    step_id: int
    type: str
    data: Any
    timestamp: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "step_id": self.step_id,
            "type": self.type,
            "data": self.data,
            "timestamp": self.timestamp,
        }


def _dumps(data: Any, indent: Optional[int] = None) -> str:
    # Formatting never raises: payloads that cannot become JSON render via str()
    try:
        return json.dumps(to_jsonable(data), indent=indent, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError) as e:
        logger.debug(f"Rendering unserializable payload as text: {e}")
        return str(data)


class MemoryStore:
    """
    Indexed, append-only store of step results.

    The type and step indices hold references into the chronological log,
    so every entry in an index is also in the log, in the same order.
    """

    def __init__(self, summary_threshold: int = 500, value_preview_chars: int = 100):
        """
        Initialize an empty store.

        Args:
            summary_threshold: Serialized size above which concise context summarizes
            value_preview_chars: Length kept for long string values in summaries
        """
        self._entries: List[DataEntry] = []
        self._by_type: Dict[str, List[DataEntry]] = {}
        self._by_step: Dict[int, List[DataEntry]] = {}
        self._summary_threshold = summary_threshold
        self._value_preview_chars = value_preview_chars

    def add_result(self, step_id: int, type: str, data: Any) -> DataEntry:
        """
        Append a result to the log and both indices.

        No deduplication is performed: adding the same payload twice
        yields two entries.

        Args:
            step_id: Step that produced the data
            type: Capability name
            data: Payload

        Returns:
            The stored entry
        """
        now = time.time()
        if self._entries and now < self._entries[-1].timestamp:
            now = self._entries[-1].timestamp

        entry = DataEntry(step_id=step_id, type=type, data=data, timestamp=now)
        self._entries.append(entry)
        self._by_type.setdefault(type, []).append(entry)
        self._by_step.setdefault(step_id, []).append(entry)

        logger.debug(f"Stored result for step {step_id} ({type})")
        return entry

    def get_results_by_type(self, type: str) -> List[DataEntry]:
        """All entries produced by capability ``type``, oldest first."""
        return list(self._by_type.get(type, []))

    def get_results_by_step_id(self, step_id: int) -> List[DataEntry]:
        """All entries added for ``step_id``, in insertion order."""
        return list(self._by_step.get(step_id, []))

    def get_latest_result_of_type(self, type: str) -> Optional[DataEntry]:
        """Most recent entry of ``type``, or None."""
        entries = self._by_type.get(type)
        return entries[-1] if entries else None

    def get_latest_results(self, limit: int = 5) -> List[DataEntry]:
        """The last ``limit`` entries in chronological order."""
        if limit <= 0:
            return []
        return self._entries[-limit:]

    def get_all_data(self) -> List[DataEntry]:
        """Copy of the full chronological log."""
        return list(self._entries)

    def get_type_counts(self) -> Dict[str, int]:
        """Number of entries per capability type, in first-use order."""
        return {type_name: len(entries) for type_name, entries in self._by_type.items()}

    def has_results_for_step(self, step_id: int) -> bool:
        return bool(self._by_step.get(step_id))

    def clear_step_data(self, step_id: int) -> None:
        """
        Remove every entry recorded for ``step_id``.

        Args:
            step_id: Step whose results should be dropped
        """
        removed = self._by_step.pop(step_id, [])
        if not removed:
            return

        self._entries = [e for e in self._entries if e.step_id != step_id]
        for type_name in {e.type for e in removed}:
            remaining = [e for e in self._by_type[type_name] if e.step_id != step_id]
            if remaining:
                self._by_type[type_name] = remaining
            else:
                del self._by_type[type_name]

        logger.debug(f"Cleared {len(removed)} result(s) for step {step_id}")

    def get_formatted_context(self) -> str:
        """
        Render the whole log as planner context.

        Returns:
            Step-by-step prose with pretty-printed results, or the
            first-step sentinel when the store is empty
        """
        if not self._entries:
            return FIRST_STEP_CONTEXT

        context = "Progress so far:\n\n"
        for entry in self._entries:
            context += f"Step {entry.step_id}: {entry.type} operation\n"
            context += f"Results:\n{_dumps(entry.data, indent=2)}\n\n"
        return context

    def get_concise_context(self, max_entries: int = 5) -> str:
        """
        Render only the most recent entries, summarizing large payloads.

        Args:
            max_entries: Number of recent entries to include

        Returns:
            Bounded planner context
        """
        if not self._entries:
            return FIRST_STEP_CONTEXT

        recent = self.get_latest_results(max_entries)
        context = (
            f"Progress so far ({len(self._entries)} total steps, "
            f"showing last {len(recent)}):\n\n"
        )
        for entry in recent:
            context += f"Step {entry.step_id}: {entry.type} operation\n"
            serialized = _dumps(entry.data)
            if len(serialized) > self._summary_threshold:
                context += f"Results: [Large data: {len(serialized)} chars, showing summary]\n"
                context += f"{self._summarize(entry.data)}\n\n"
            else:
                context += f"Results:\n{serialized}\n\n"
        return context

    def _summarize(self, data: Any) -> str:
        if isinstance(data, dict):
            items = list(data.items())
        elif isinstance(data, (list, tuple)):
            items = list(enumerate(data))
        else:
            return truncate(str(data), self._value_preview_chars)

        lines = []
        for key, value in items:
            if isinstance(value, str) and len(value) > self._value_preview_chars:
                lines.append(f'{key}: "{truncate(value, self._value_preview_chars)}"')
            else:
                lines.append(f"{key}: {truncate(_dumps(value), self._value_preview_chars)}")
        return "\n".join(lines)

    def to_records(self) -> List[Dict[str, Any]]:
        """JSON-ready list of all entries, for run artifacts."""
        return [entry.to_dict() for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)
