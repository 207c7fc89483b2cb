"""
LLM Providers - Concrete implementations of the LLM and oracle interfaces.
"""

from llm_task_agent.llm.openai_provider import OpenAIProvider
from llm_task_agent.llm.oracle import LLMOracle, extract_json, parse_object

__all__ = [
    "OpenAIProvider",
    "LLMOracle",
    "extract_json",
    "parse_object",
]
