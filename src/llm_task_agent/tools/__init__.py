"""
Tools module - Capabilities, their registry and the step dispatcher.
"""

from llm_task_agent.tools.base import Capability
from llm_task_agent.tools.registry import ToolRegistry
from llm_task_agent.tools.dispatcher import DispatchResult, ToolDispatcher, ToolInvocation
from llm_task_agent.tools.search import SearchParams, SearchResultItem, SearchTool
from llm_task_agent.tools.file_ops import FileOperationParams, FileOperationResult, FileOperationsTool
from llm_task_agent.tools.code_executor import CodeExecutionParams, CodeExecutionResult, CodeExecutorTool
from llm_task_agent.tools.browser import BrowserParams, BrowserResult, BrowserSessionManager, BrowserTool

__all__ = [
    "Capability",
    "ToolRegistry",
    "DispatchResult",
    "ToolDispatcher",
    "ToolInvocation",
    "SearchParams",
    "SearchResultItem",
    "SearchTool",
    "FileOperationParams",
    "FileOperationResult",
    "FileOperationsTool",
    "CodeExecutionParams",
    "CodeExecutionResult",
    "CodeExecutorTool",
    "BrowserParams",
    "BrowserResult",
    "BrowserSessionManager",
    "BrowserTool",
]
