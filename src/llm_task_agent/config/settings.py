"""
Settings - Pydantic models for type-safe configuration.

This module defines all configuration settings as Pydantic models,
providing validation, type hints, and automatic environment variable loading.

Example:
    >>> from llm_task_agent.config import Settings, load_config
    >>> settings = load_config()  # Loads from env, yaml, and defaults
    >>> print(settings.agent.max_steps)
    20
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseModel):
    """
    Oracle (LLM) settings.

    Attributes:
        model: Default model name/identifier
        api_key: API key (falls back to OPENAI_API_KEY if not set)
        base_url: OpenAI-compatible API endpoint URL
        temperature: Sampling temperature
        max_tokens: Maximum tokens in response
        timeout: Request timeout in seconds
        use_vision: Attach screenshots to browser decisions
    """
    model: str = "gpt-4o"
    api_key: Optional[SecretStr] = None
    base_url: str = "https://api.openai.com"
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4096, ge=1, le=128000)
    timeout: int = Field(default=60, ge=5, le=600)
    use_vision: bool = True


class AgentSettings(BaseModel):
    """
    Outer-loop (orchestrator) settings.

    Attributes:
        max_steps: Maximum number of dispatched steps per run
        planner_model: Model used for next-step planning (None = llm.model)
        dispatch_model: Model used for tool selection and browser decisions
        enable_subtask_tracking: Maintain a todo.md checklist in the run directory
        concise_context: Feed the planner the bounded concise context
        context_max_entries: Entries kept by the concise context
        persist_step_artifacts: Write steps/step-<id>.json after every step
        output_dir: Base directory for run artifacts
        generate_report: Write report.md at the end of a run
    """
    max_steps: int = Field(default=20, ge=1, le=200)
    planner_model: Optional[str] = None
    dispatch_model: Optional[str] = None
    enable_subtask_tracking: bool = False
    concise_context: bool = False
    context_max_entries: int = Field(default=5, ge=1, le=100)
    persist_step_artifacts: bool = True
    output_dir: str = "./output"
    generate_report: bool = True


class BrowserSettings(BaseModel):
    """
    Browser automation and inner-loop settings.

    Attributes:
        headless: Run browser in headless mode
        browser_type: Playwright browser type
        navigation_timeout_ms: Timeout for GOTO navigations
        viewport_width: Browser viewport width in pixels
        viewport_height: Browser viewport height in pixels
        max_steps: Maximum atomic actions per browser invocation
        loop_threshold: Consecutive repeats of one action that stop the loop
        history_window: Previous steps shown to the oracle
        screenshot_every: Attach a screenshot every N steps (vision only)
        early_exit_check: Ask the oracle whether gathered data already suffices
        max_html_chars: Truncation limit for HTML sent to the oracle
        keep_warm: Keep the browser open between browser invocations
    """
    headless: bool = True
    browser_type: Literal["chromium", "firefox", "webkit"] = "chromium"
    navigation_timeout_ms: int = Field(default=60000, ge=1000, le=300000)
    viewport_width: int = Field(default=1280, ge=320, le=3840)
    viewport_height: int = Field(default=720, ge=240, le=2160)
    max_steps: int = Field(default=10, ge=1, le=100)
    loop_threshold: int = Field(default=3, ge=1, le=20)
    history_window: int = Field(default=5, ge=0, le=50)
    screenshot_every: int = Field(default=2, ge=1, le=50)
    early_exit_check: bool = False
    max_html_chars: int = Field(default=100000, ge=1000)
    keep_warm: bool = False


class SearchSettings(BaseModel):
    """
    Web search (Exa) settings.

    Attributes:
        api_key: Exa API key (falls back to EXA_API_KEY if not set)
        base_url: Exa API base URL
        num_results: Default number of results per query
        timeout: Request timeout in seconds
    """
    api_key: Optional[SecretStr] = None
    base_url: str = "https://api.exa.ai"
    num_results: int = Field(default=5, ge=1, le=100)
    timeout: int = Field(default=30, ge=1, le=300)


class ToolSettings(BaseModel):
    """
    Local tool settings.

    Attributes:
        workspace_dir: Root directory for file operations
        code_timeout_seconds: Default timeout for code execution
        python_executable: Interpreter for code execution (None = current)
    """
    workspace_dir: str = "./workspace"
    code_timeout_seconds: float = Field(default=30.0, gt=0, le=600)
    python_executable: Optional[str] = None


class LoggingSettings(BaseModel):
    """
    Logging configuration.

    Attributes:
        level: Log level
        format: Log format string
        file: Log file path (None for console only)
        json_format: Use JSON format for logs
    """
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    json_format: bool = False


class Settings(BaseSettings):
    """
    Root settings container - single source of truth for all configuration.

    Settings are loaded in this priority order (highest to lowest):
    1. Explicit values passed to constructor
    2. Environment variables (prefixed with LLM_TASK_AGENT__)
    3. Config file (YAML)
    4. Default values

    Example:
        >>> settings = Settings()  # Load from env vars
        >>> settings = Settings(agent=AgentSettings(max_steps=5))  # Override
    """

    model_config = SettingsConfigDict(
        env_prefix="LLM_TASK_AGENT__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    llm: LLMSettings = Field(default_factory=LLMSettings)
    agent: AgentSettings = Field(default_factory=AgentSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    tools: ToolSettings = Field(default_factory=ToolSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    debug: bool = False

    @property
    def planner_model(self) -> str:
        """Model used by the step planner."""
        return self.agent.planner_model or self.llm.model

    @property
    def dispatch_model(self) -> str:
        """Model used for tool selection and browser decisions."""
        return self.agent.dispatch_model or self.llm.model

    def merge_with(self, overrides: dict) -> "Settings":
        """
        Create a new Settings instance with overrides applied.

        Args:
            overrides: Dictionary of values to override

        Returns:
            New Settings instance with overrides applied
        """
        current = self.model_dump()

        def deep_merge(base: dict, updates: dict) -> dict:
            for key, value in updates.items():
                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    deep_merge(base[key], value)
                else:
                    base[key] = value
            return base

        merged = deep_merge(current, overrides)
        return Settings(**merged)
