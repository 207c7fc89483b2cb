"""
Memory module - Per-run store of step outcomes.
"""

from llm_task_agent.memory.memory_store import DataEntry, MemoryStore, FIRST_STEP_CONTEXT

__all__ = [
    "DataEntry",
    "MemoryStore",
    "FIRST_STEP_CONTEXT",
]
