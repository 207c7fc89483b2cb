"""
LLM Task Agent - A step-wise task orchestrator driven by large language models.

Given a natural-language goal, the agent repeatedly asks a planning oracle
for the next step, dispatches it to one capability (web search, browser,
files, Python code), records the outcome and feeds it back into planning
until the goal is satisfied or a budget runs out.

Example:
    >>> from llm_task_agent import Agent
    >>> async with Agent() as agent:
    ...     result = await agent.run("Find the release date of Python 3.13")
"""

__version__ = "0.1.0"

# Public API exports
from llm_task_agent.core.agent import Agent
from llm_task_agent.core.orchestrator import RunResult, TerminationReason
from llm_task_agent.config.settings import Settings

__all__ = [
    "Agent",
    "RunResult",
    "TerminationReason",
    "Settings",
    "__version__",
]
