"""
Agent - Entry point that wires configuration to a running orchestrator.

The Agent owns every long-lived resource of a session (LLM client, tool
clients, browser session) and releases them in ``close()``.

Example:
    >>> from llm_task_agent import Agent
    >>> async with Agent() as agent:
    ...     result = await agent.run("Summarize today's top Python news")
    ...     print(result.termination.value, result.message)
"""

from pathlib import Path
from typing import Any, Optional, TYPE_CHECKING
import logging

from llm_task_agent.core.orchestrator import Orchestrator, RunResult, StepHook, new_run_id
from llm_task_agent.core.planner import StepPlanner
from llm_task_agent.core.subtasks import SubtaskTracker
from llm_task_agent.interfaces.browser import BrowserType
from llm_task_agent.llm.openai_provider import OpenAIProvider
from llm_task_agent.llm.oracle import LLMOracle
from llm_task_agent.reporting.artifacts import ArtifactStore
from llm_task_agent.reporting.run_report import ReportGenerator
from llm_task_agent.tools.browser.session import BrowserSessionManager
from llm_task_agent.tools.browser.tool import BrowserTool
from llm_task_agent.tools.code_executor import CodeExecutorTool
from llm_task_agent.tools.dispatcher import ToolDispatcher
from llm_task_agent.tools.file_ops import FileOperationsTool
from llm_task_agent.tools.registry import ToolRegistry
from llm_task_agent.tools.search import SearchTool

if TYPE_CHECKING:
    from llm_task_agent.config.settings import Settings
    from llm_task_agent.interfaces.llm import ILLMProvider
    from llm_task_agent.interfaces.oracle import IOracle

logger = logging.getLogger(__name__)


class Agent:
    """
    Task agent: planner, dispatcher and the base capability set.

    Components not passed in are created from settings on ``initialize()``.
    """

    def __init__(
        self,
        settings: Optional["Settings"] = None,
        llm_provider: Optional["ILLMProvider"] = None,
        oracle: Optional["IOracle"] = None,
        registry: Optional[ToolRegistry] = None,
        sessions: Optional[BrowserSessionManager] = None,
    ):
        """
        Initialize the Agent.

        Args:
            settings: Configuration settings (loads defaults if None)
            llm_provider: Chat-completion provider (OpenAI-compatible if None)
            oracle: Oracle (wraps the provider if None)
            registry: Capabilities (search, browser, file, code if None)
            sessions: Browser session manager (Playwright if None)
        """
        self._settings = settings
        self._llm_provider = llm_provider
        self._oracle = oracle
        self._registry = registry
        self._sessions = sessions
        self._is_initialized = False
        self._last_output_dir: Optional[Path] = None

    @property
    def settings(self) -> "Settings":
        """Get the current settings, loading defaults if needed."""
        if self._settings is None:
            from llm_task_agent.config import load_config
            self._settings = load_config()
        return self._settings

    @property
    def oracle(self) -> "IOracle":
        if self._oracle is None:
            raise RuntimeError("Agent not initialized. Use 'async with agent:' or call 'await agent.initialize()'")
        return self._oracle

    @property
    def registry(self) -> ToolRegistry:
        if self._registry is None:
            raise RuntimeError("Agent not initialized. Use 'async with agent:' or call 'await agent.initialize()'")
        return self._registry

    @property
    def last_output_dir(self) -> Optional[Path]:
        """Run directory of the most recent ``run()``."""
        return self._last_output_dir

    async def initialize(self) -> None:
        """Create the provider, oracle, session manager and tools. Launches nothing."""
        if self._is_initialized:
            return

        settings = self.settings
        logger.info("Initializing agent...")

        if self._oracle is None:
            if self._llm_provider is None:
                self._llm_provider = OpenAIProvider(
                    base_url=settings.llm.base_url,
                    model=settings.llm.model,
                    api_key=settings.llm.api_key.get_secret_value() if settings.llm.api_key else None,
                    timeout=float(settings.llm.timeout),
                )
            self._oracle = LLMOracle(
                self._llm_provider,
                temperature=settings.llm.temperature,
                max_tokens=settings.llm.max_tokens,
                use_vision=settings.llm.use_vision,
            )

        if self._sessions is None:
            self._sessions = BrowserSessionManager(
                headless=settings.browser.headless,
                browser_type=BrowserType(settings.browser.browser_type),
                viewport={
                    "width": settings.browser.viewport_width,
                    "height": settings.browser.viewport_height,
                },
                keep_warm=settings.browser.keep_warm,
            )

        if self._registry is None:
            self._registry = self._build_registry()

        self._is_initialized = True
        logger.info(f"Agent initialized with tools: {', '.join(self._registry.names())}")

    def _build_registry(self) -> ToolRegistry:
        settings = self.settings
        registry = ToolRegistry()
        registry.register(SearchTool(
            api_key=settings.search.api_key.get_secret_value() if settings.search.api_key else None,
            base_url=settings.search.base_url,
            default_num_results=settings.search.num_results,
            timeout=float(settings.search.timeout),
        ))
        registry.register(BrowserTool(
            self._sessions,
            self._oracle,
            settings=settings.browser,
            model=settings.dispatch_model,
            use_vision=settings.llm.use_vision,
        ))
        registry.register(FileOperationsTool(workspace_dir=settings.tools.workspace_dir))
        registry.register(CodeExecutorTool(
            timeout_seconds=settings.tools.code_timeout_seconds,
            python_executable=settings.tools.python_executable,
            oracle=self._oracle,
            model=settings.dispatch_model,
        ))
        return registry

    async def run(
        self,
        task: str,
        max_steps: Optional[int] = None,
        on_step_start: Optional[StepHook] = None,
        on_step_end: Optional[StepHook] = None,
    ) -> RunResult:
        """
        Execute a natural language task.

        Args:
            task: Natural language description of the task
            max_steps: Override for settings.agent.max_steps
            on_step_start: Called when a step starts running
            on_step_end: Called when a step completes or fails

        Returns:
            RunResult with the outcome of the task
        """
        await self.initialize()
        settings = self.settings
        agent_settings = settings.agent
        if max_steps is not None:
            agent_settings = agent_settings.model_copy(update={"max_steps": max_steps})

        run_id = new_run_id()
        store = ArtifactStore(agent_settings.output_dir, run_id)
        self._last_output_dir = store.output_dir
        subtasks = SubtaskTracker(store, task) if agent_settings.enable_subtask_tracking else None

        orchestrator = Orchestrator(
            StepPlanner(self.oracle, self.registry, model=settings.planner_model),
            ToolDispatcher(self.registry, self.oracle, model=settings.dispatch_model),
            settings=agent_settings,
            artifacts=store,
            subtasks=subtasks,
            on_step_start=on_step_start,
            on_step_end=on_step_end,
        )
        result = await orchestrator.run(task, run_id=run_id)

        generator = ReportGenerator(store, oracle=self.oracle, model=settings.planner_model)
        await generator.generate(result, with_report=agent_settings.generate_report)
        return result

    async def close(self) -> None:
        """Close the browser session, tool clients and the LLM client."""
        if self._sessions is not None:
            await self._sessions.shutdown()
        if self._registry is not None:
            await self._registry.close()
        if self._llm_provider is not None:
            await self._llm_provider.close()
        self._is_initialized = False
        logger.info("Agent closed")

    async def __aenter__(self) -> "Agent":
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
