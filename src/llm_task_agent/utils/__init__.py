"""
Utilities module - Common utility functions.
"""

from llm_task_agent.utils.logging import setup_logging, get_logger
from llm_task_agent.utils.serialization import to_jsonable, truncate

__all__ = [
    "setup_logging",
    "get_logger",
    "to_jsonable",
    "truncate",
]
