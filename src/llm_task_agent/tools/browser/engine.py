"""
Browser Action Engine - The atomic-action inner loop.

One call to ``run()`` turns a browsing goal into a bounded sequence of
atomic actions against the shared page:

1. A known start URL is opened with GOTO without asking the oracle.
2. While the step budget allows, the oracle picks the next atomic method.
3. CLOSE ends the loop as completed; the same action chosen again and
   again ends it as a loop.
4. Everything else is executed; EXTRACT, HTML, OBSERVE and AI_HANDLE
   outputs are collected as ExtractedData.

Action failures close the browser session and propagate; nothing is
retried here.
"""

import base64
from typing import Any, List, Optional, TYPE_CHECKING
import logging

from llm_task_agent.config.settings import BrowserSettings
from llm_task_agent.exceptions.browser import AtomicActionError
from llm_task_agent.interfaces.llm import ImageContent, Message
from llm_task_agent.tools.browser.page_actions import PageActions
from llm_task_agent.tools.browser.prompts import (
    SUFFICIENCY_USER,
    SUMMARY_USER,
    build_step_prompt,
    format_results,
)
from llm_task_agent.tools.browser.schemas import (
    DATA_METHODS,
    AtomicDecision,
    AtomicMethod,
    BrowserExitReason,
    BrowserResult,
    BrowserStep,
    ExtractedData,
    ResultsSummary,
    SufficiencyVerdict,
    _now,
)

if TYPE_CHECKING:
    from llm_task_agent.interfaces.browser import IPage
    from llm_task_agent.interfaces.oracle import IOracle
    from llm_task_agent.tools.browser.session import BrowserSessionManager

logger = logging.getLogger(__name__)


class BrowserActionEngine:
    """
    Run the atomic-action loop for one browsing goal.

    Example:
        >>> engine = BrowserActionEngine(sessions, oracle, BrowserSettings(max_steps=10))
        >>> result = await engine.run("Find the page title", url="https://example.com")
        >>> result.total_steps, [r.type for r in result.results]
        (3, ['extract'])
    """

    def __init__(
        self,
        sessions: "BrowserSessionManager",
        oracle: "IOracle",
        settings: Optional[BrowserSettings] = None,
        model: Optional[str] = None,
        use_vision: bool = True,
    ):
        """
        Initialize the engine.

        Args:
            sessions: Source of exclusive page leases
            oracle: Oracle for decisions, extraction and summaries
            settings: Budgets and cadence (defaults to BrowserSettings())
            model: Model used for every oracle call of the loop
            use_vision: Attach periodic screenshots to decisions
        """
        self._sessions = sessions
        self._oracle = oracle
        self._settings = settings or BrowserSettings()
        self._model = model
        self._use_vision = use_vision

    async def run(self, goal: str, url: Optional[str] = None) -> BrowserResult:
        """
        Pursue ``goal`` in the browser.

        Args:
            goal: What the browsing session should accomplish
            url: Optional start URL, opened before the first decision

        Returns:
            Aggregated BrowserResult

        Raises:
            AtomicActionError: If an atomic action fails (the session is closed)
        """
        logger.info(f"Browser goal: {goal!r}" + (f" from {url}" if url else ""))

        async with self._sessions.acquire() as lease:
            actions = PageActions(
                lease.page,
                self._oracle,
                model=self._model,
                navigation_timeout_ms=self._settings.navigation_timeout_ms,
                max_html_chars=self._settings.max_html_chars,
            )
            try:
                steps, results, reason = await self._loop(goal, url, lease.page, actions)
            except AtomicActionError as e:
                logger.error(f"Browser action failed, closing session: {e}")
                await lease.close()
                raise

        summary = await self._summarize(goal, results) if results else None
        return self._build_result(steps, results, reason, summary)

    async def _loop(
        self,
        goal: str,
        url: Optional[str],
        page: "IPage",
        actions: PageActions,
    ) -> tuple[List[BrowserStep], List[ExtractedData], BrowserExitReason]:
        steps: List[BrowserStep] = []
        results: List[ExtractedData] = []
        last_key: Optional[tuple] = None
        repeats = 0
        previous_result: Any = None
        decisions = 0

        if url:
            step = BrowserStep(
                text=f"Navigating to {url}",
                reasoning=goal,
                method=AtomicMethod.GOTO,
                instruction=url,
                url=page.url,
            )
            steps.append(step)
            await actions.run(AtomicMethod.GOTO, url)

        while len(steps) < self._settings.max_steps:
            decision = await self._decide(goal, page, steps, previous_result, decisions)
            decisions += 1

            step = BrowserStep.from_decision(decision, page.url)
            steps.append(step)
            logger.info(
                f"Browser step {len(steps)}: {step.method.value} {step.instruction or ''}".rstrip()
            )

            if step.method is AtomicMethod.CLOSE:
                return steps, results, BrowserExitReason.GOAL_COMPLETED

            if step.action_key == last_key:
                repeats += 1
                if repeats >= self._settings.loop_threshold:
                    logger.warning(
                        f"Same action repeated {repeats} times ({step.method.value}:{step.instruction}); stopping"
                    )
                    return steps, results, BrowserExitReason.LOOP_DETECTED
            else:
                repeats = 0
                last_key = step.action_key

            step.result = await actions.run(step.method, step.instruction)
            previous_result = step.result

            if step.method is AtomicMethod.AI_HANDLE:
                results.append(self._structure("ai_analysis", step, page))
            elif step.method in DATA_METHODS:
                results.append(self._structure(step.method.value.lower(), step, page))
            else:
                continue

            if self._settings.early_exit_check and await self._is_sufficient(goal, results):
                return steps, results, BrowserExitReason.DATA_SUFFICIENT

        logger.warning(f"Reached maximum browser steps ({self._settings.max_steps})")
        return steps, results, BrowserExitReason.MAX_STEPS

    async def _decide(
        self,
        goal: str,
        page: "IPage",
        steps: List[BrowserStep],
        previous_result: Any,
        decision_index: int,
    ) -> AtomicDecision:
        system, user = build_step_prompt(
            goal,
            page.url,
            steps,
            self._settings.history_window,
            previous_result,
        )
        images = None
        if decision_index % self._settings.screenshot_every == 0:
            images = await self._vision_snapshot(page)

        return await self._oracle.complete_object(
            [Message.system(system), Message.user(user, images=images)],
            AtomicDecision,
            model=self._model,
        )

    async def _vision_snapshot(self, page: "IPage") -> Optional[List[ImageContent]]:
        if not (self._use_vision and self._oracle.supports_vision):
            return None
        if not page.url or page.url.startswith("about:"):
            return None
        try:
            data = await page.screenshot(full_page=False, type="png")
        except Exception as e:
            logger.warning(f"Screenshot for decision failed: {e}")
            return None
        return [ImageContent(data=base64.b64encode(data).decode("ascii"))]

    @staticmethod
    def _structure(type_: str, step: BrowserStep, page: "IPage") -> ExtractedData:
        return ExtractedData(
            type=type_,
            content=step.result,
            metadata={
                "tool": step.method.value,
                "instruction": step.instruction,
                "timestamp": _now(),
                "url": page.url,
            },
        )

    async def _is_sufficient(self, goal: str, results: List[ExtractedData]) -> bool:
        prompt = SUFFICIENCY_USER.format(goal=goal, data=format_results(results))
        verdict = await self._oracle.complete_object(
            [Message.user(prompt)], SufficiencyVerdict, model=self._model
        )
        if verdict.sufficient:
            logger.info(f"Collected data judged sufficient: {verdict.reason}")
        return verdict.sufficient

    async def _summarize(self, goal: str, results: List[ExtractedData]) -> str:
        prompt = SUMMARY_USER.format(goal=goal, data=format_results(results))
        response = await self._oracle.complete_object(
            [Message.user(prompt)], ResultsSummary, model=self._model
        )
        return response.summary

    @staticmethod
    def _build_result(
        steps: List[BrowserStep],
        results: List[ExtractedData],
        reason: BrowserExitReason,
        summary: Optional[str],
    ) -> BrowserResult:
        total = len(steps)
        messages = {
            BrowserExitReason.GOAL_COMPLETED: "Task completed successfully",
            BrowserExitReason.DATA_SUFFICIENT: (
                "Task completed successfully (collected data is sufficient for the goal)"
            ),
            BrowserExitReason.LOOP_DETECTED: f"Task terminated after {total} steps (detected repetitive actions)",
            BrowserExitReason.MAX_STEPS: f"Task terminated after {total} steps (reached maximum steps)",
        }
        return BrowserResult(
            message=messages[reason],
            steps=steps,
            total_steps=total,
            results=results,
            summary=summary,
            goal_completed=reason in (BrowserExitReason.GOAL_COMPLETED, BrowserExitReason.DATA_SUFFICIENT),
            exit_reason=reason,
        )
