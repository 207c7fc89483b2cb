"""
Interfaces module - Abstract contracts for pluggable collaborators.
"""

from llm_task_agent.interfaces.llm import (
    ILLMProvider,
    ImageContent,
    LLMResponse,
    Message,
    MessageRole,
    Usage,
)
from llm_task_agent.interfaces.oracle import IOracle
from llm_task_agent.interfaces.browser import BrowserType, IBrowser, IPage

__all__ = [
    "ILLMProvider",
    "ImageContent",
    "LLMResponse",
    "Message",
    "MessageRole",
    "Usage",
    "IOracle",
    "BrowserType",
    "IBrowser",
    "IPage",
]
