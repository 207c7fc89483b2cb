"""
Configuration module - Centralized settings management.

This module provides type-safe configuration management using Pydantic,
supporting environment variables, YAML files, and CLI arguments.

Usage:
    from llm_task_agent.config import get_settings, load_config

    # Get global settings (loaded once)
    settings = get_settings()

    # Or load fresh settings with overrides
    settings = load_config(agent={"max_steps": 5})

Environment Variables:
    LLM_TASK_AGENT__LLM__MODEL=gpt-4o
    LLM_TASK_AGENT__LLM__BASE_URL=https://api.openai.com
    LLM_TASK_AGENT__AGENT__MAX_STEPS=10
    LLM_TASK_AGENT__BROWSER__HEADLESS=false
    OPENAI_API_KEY=sk-...
    EXA_API_KEY=...
"""

from llm_task_agent.config.settings import (
    Settings,
    LLMSettings,
    AgentSettings,
    BrowserSettings,
    SearchSettings,
    ToolSettings,
    LoggingSettings,
)
from llm_task_agent.config.loader import ConfigLoader, load_config

# Global settings singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Settings are loaded once from environment variables and config files.
    Call reset_settings() to reload.

    Returns:
        Global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    """Reset the global settings (forces reload on next get_settings())."""
    global _settings
    _settings = None


__all__ = [
    "Settings",
    "LLMSettings",
    "AgentSettings",
    "BrowserSettings",
    "SearchSettings",
    "ToolSettings",
    "LoggingSettings",
    "ConfigLoader",
    "load_config",
    "get_settings",
    "reset_settings",
]
