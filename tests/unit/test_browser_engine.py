"""
Tests for the browser atomic-action loop.
"""

import pytest

from llm_task_agent.config import BrowserSettings
from llm_task_agent.exceptions import AtomicActionError
from llm_task_agent.tools.browser import (
    BrowserActionEngine,
    BrowserParams,
    BrowserSessionManager,
    BrowserTool,
)
from llm_task_agent.tools.browser.schemas import (
    AtomicDecision,
    AtomicMethod,
    BrowserExitReason,
    ResultsSummary,
    SufficiencyVerdict,
)


def decision(method: str, instruction: str | None = None, text: str = "") -> AtomicDecision:
    return AtomicDecision(text=text or method.lower(), reasoning="", method=method, instruction=instruction)


@pytest.fixture
def browser_settings():
    return BrowserSettings(max_steps=10, loop_threshold=3)


@pytest.fixture
def engine(sessions, oracle, browser_settings):
    return BrowserActionEngine(sessions, oracle, browser_settings, use_vision=False)


class TestAtomicDecision:
    """Test decision parsing."""

    def test_method_is_case_insensitive(self):
        """Test lower-case method names are accepted."""
        assert AtomicDecision(method=" extract ", instruction="x").method is AtomicMethod.EXTRACT

    def test_unknown_method_rejected(self):
        """Test methods outside the closed set fail validation."""
        with pytest.raises(ValueError):
            AtomicDecision(method="TELEPORT")


class TestCompletion:
    """Test the CLOSE path."""

    @pytest.mark.asyncio
    async def test_goto_extract_close(self, engine, oracle, fake_page, fake_browser):
        """Test start URL, one extraction and CLOSE give three steps and one result."""
        oracle.push(decision("EXTRACT", "the page title"), decision("CLOSE"))
        oracle.push_text("Example Domain")
        oracle.push(ResultsSummary(summary="The title is Example Domain"))

        result = await engine.run("Find the page title", url="https://example.com")

        assert result.total_steps == 3
        assert [s.method for s in result.steps] == [
            AtomicMethod.GOTO, AtomicMethod.EXTRACT, AtomicMethod.CLOSE,
        ]
        assert result.goal_completed
        assert result.exit_reason is BrowserExitReason.GOAL_COMPLETED
        assert result.message == "Task completed successfully"
        assert result.summary == "The title is Example Domain"

        assert len(result.results) == 1
        extracted = result.results[0]
        assert extracted.type == "extract"
        assert extracted.content == "Example Domain"
        assert extracted.metadata["tool"] == "EXTRACT"
        assert extracted.metadata["instruction"] == "the page title"
        assert extracted.metadata["url"] == "https://example.com"
        assert extracted.metadata["timestamp"]

    @pytest.mark.asyncio
    async def test_start_url_recorded_before_navigation(self, engine, oracle, fake_page):
        """Test the GOTO step records the URL the page had before navigating."""
        oracle.push(decision("CLOSE"))

        result = await engine.run("Open it", url="https://example.com")

        goto = result.steps[0]
        assert goto.instruction == "https://example.com"
        assert goto.url == "about:blank"
        assert fake_page.calls[0][0] == "goto"
        assert fake_page.calls[0][1] == "https://example.com"
        assert len(oracle.calls_for(AtomicDecision)) == 1

    @pytest.mark.asyncio
    async def test_no_results_skips_summary(self, engine, oracle):
        """Test the summary call happens only when data was collected."""
        oracle.push(decision("WAIT", "10"), decision("CLOSE"))

        result = await engine.run("Just wait")

        assert result.results == []
        assert result.summary is None
        assert oracle.calls_for(ResultsSummary) == []
        assert result.total_steps == 2

    @pytest.mark.asyncio
    async def test_session_released_after_run(self, engine, oracle, fake_browser, sessions):
        """Test the browser is closed once the only lease is released."""
        oracle.push(decision("CLOSE"))

        await engine.run("Nothing")

        assert fake_browser.launched
        assert fake_browser.closed
        assert sessions.ref_count == 0


class TestDataMethods:
    """Test which methods produce ExtractedData."""

    @pytest.mark.asyncio
    async def test_ai_handle_is_analysis(self, engine, oracle):
        """Test AI_HANDLE output is typed ai_analysis."""
        oracle.push(decision("AI_HANDLE", "Compare the two prices"), decision("CLOSE"))
        oracle.push_text("The first is cheaper")
        oracle.push(ResultsSummary(summary="First is cheaper"))

        result = await engine.run("Compare prices")

        assert result.results[0].type == "ai_analysis"
        assert result.results[0].content == "The first is cheaper"
        assert result.results[0].metadata["tool"] == "AI_HANDLE"

    @pytest.mark.asyncio
    async def test_html_and_observe(self, engine, oracle, fake_page):
        """Test HTML and OBSERVE results are collected with their own types."""
        fake_page.elements = [{"tag": "a", "selector": "#home", "text": "Home", "href": "/"}]
        oracle.push(decision("HTML"), decision("OBSERVE"), decision("CLOSE"))
        oracle.push(ResultsSummary(summary="ok"))

        result = await engine.run("Look around", url="https://example.com")

        assert [r.type for r in result.results] == ["html", "observe"]
        assert result.results[0].content == fake_page.html
        assert result.results[1].content == [
            {"index": 0, "tag": "a", "selector": "#home", "text": "Home", "href": "/"}
        ]

    @pytest.mark.asyncio
    async def test_non_data_methods_not_collected(self, engine, oracle, fake_page):
        """Test WAIT, NAVBACK and SCREENSHOT produce no ExtractedData."""
        oracle.push(decision("WAIT", "250"), decision("NAVBACK"), decision("SCREENSHOT"), decision("CLOSE"))

        result = await engine.run("Wander", url="https://example.com")

        assert result.results == []
        assert ("wait_for_timeout", 250) in fake_page.calls
        assert ("go_back",) in fake_page.calls
        assert ("screenshot", True) in fake_page.calls

    @pytest.mark.asyncio
    async def test_previous_result_shown_to_oracle(self, engine, oracle):
        """Test the next decision sees the previous step's result."""
        oracle.push(decision("EXTRACT", "price"), decision("CLOSE"))
        oracle.push_text("$42")
        oracle.push(ResultsSummary(summary="$42"))

        await engine.run("Find price", url="https://example.com")

        second_prompt = oracle.calls_for(AtomicDecision)[1]["messages"][-1].content
        assert "The result of the previous step is: $42" in second_prompt
        assert "Method Used: EXTRACT" in second_prompt


class TestBudgets:
    """Test loop detection and the step budget."""

    @pytest.mark.asyncio
    async def test_loop_detected(self, engine, oracle, fake_page):
        """Test the same action four times stops before the fourth execution."""
        oracle.always(decision("WAIT", "100"))

        result = await engine.run("Wait forever")

        waits = [c for c in fake_page.calls if c[0] == "wait_for_timeout"]
        assert len(oracle.calls_for(AtomicDecision)) == 4
        assert len(waits) == 3
        assert result.exit_reason is BrowserExitReason.LOOP_DETECTED
        assert not result.goal_completed
        assert result.total_steps == 4
        assert result.message == "Task terminated after 4 steps (detected repetitive actions)"

    @pytest.mark.asyncio
    async def test_different_instruction_resets_counter(self, engine, oracle):
        """Test a different action in between resets the repeat count."""
        oracle.push(
            decision("WAIT", "100"),
            decision("WAIT", "100"),
            decision("WAIT", "200"),
            decision("WAIT", "100"),
            decision("WAIT", "100"),
            decision("CLOSE"),
        )

        result = await engine.run("Wait a bit")

        assert result.exit_reason is BrowserExitReason.GOAL_COMPLETED
        assert result.total_steps == 6

    @pytest.mark.asyncio
    async def test_max_steps(self, sessions, oracle):
        """Test alternating actions run until the step budget is used."""
        engine = BrowserActionEngine(sessions, oracle, BrowserSettings(max_steps=4), use_vision=False)
        oracle.push(*[decision("WAIT", str(100 + i)) for i in range(10)])

        result = await engine.run("Keep waiting")

        assert result.exit_reason is BrowserExitReason.MAX_STEPS
        assert result.total_steps == 4
        assert len(oracle.calls_for(AtomicDecision)) == 4
        assert result.message == "Task terminated after 4 steps (reached maximum steps)"

    @pytest.mark.asyncio
    async def test_start_url_counts_toward_budget(self, sessions, oracle):
        """Test the initial GOTO uses one step of the budget."""
        engine = BrowserActionEngine(sessions, oracle, BrowserSettings(max_steps=2), use_vision=False)
        oracle.always(decision("WAIT", "100"))

        result = await engine.run("Wait", url="https://example.com")

        assert result.total_steps == 2
        assert len(oracle.calls_for(AtomicDecision)) == 1

    @pytest.mark.asyncio
    async def test_early_exit_on_sufficient_data(self, sessions, oracle):
        """Test the loop stops once the oracle judges the data sufficient."""
        engine = BrowserActionEngine(
            sessions, oracle, BrowserSettings(early_exit_check=True), use_vision=False
        )
        oracle.push(decision("EXTRACT", "the title"))
        oracle.push_text("Example Domain")
        oracle.push(SufficiencyVerdict(sufficient=True, reason="Title found"))
        oracle.push(ResultsSummary(summary="Example Domain"))

        result = await engine.run("Find the title", url="https://example.com")

        assert result.exit_reason is BrowserExitReason.DATA_SUFFICIENT
        assert result.goal_completed
        assert result.total_steps == 2
        assert "sufficient" in result.message

    @pytest.mark.asyncio
    async def test_early_exit_disabled_by_default(self, engine, oracle):
        """Test no sufficiency question is asked unless enabled."""
        oracle.push(decision("EXTRACT", "the title"), decision("CLOSE"))
        oracle.push_text("Example Domain")
        oracle.push(ResultsSummary(summary="Example Domain"))

        await engine.run("Find the title", url="https://example.com")

        assert oracle.calls_for(SufficiencyVerdict) == []


class TestFailures:
    """Test action failures."""

    @pytest.mark.asyncio
    async def test_navigation_failure_closes_session(self, engine, fake_page, fake_browser):
        """Test a failing GOTO closes the browser and propagates."""
        fake_page.goto_error = RuntimeError("net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(AtomicActionError) as exc_info:
            await engine.run("Open", url="https://nowhere.invalid")

        assert exc_info.value.method == "GOTO"
        assert fake_browser.closed

    @pytest.mark.asyncio
    async def test_act_without_elements_fails(self, engine, oracle, fake_browser):
        """Test ACT on a page with no interactive elements raises."""
        oracle.push(decision("ACT", "click login"))

        with pytest.raises(AtomicActionError, match="No interactive elements"):
            await engine.run("Log in", url="https://example.com")
        assert fake_browser.closed

    @pytest.mark.asyncio
    async def test_extract_without_instruction_fails(self, engine, oracle):
        """Test EXTRACT needs an instruction."""
        oracle.push(decision("EXTRACT"))

        with pytest.raises(AtomicActionError, match="requires an instruction"):
            await engine.run("Extract", url="https://example.com")


class TestVision:
    """Test screenshot attachment for vision-capable oracles."""

    @pytest.mark.asyncio
    async def test_screenshot_attached_on_loaded_page(self, sessions, vision_oracle, fake_page):
        """Test the first decision on a loaded page carries a screenshot."""
        engine = BrowserActionEngine(sessions, vision_oracle, BrowserSettings(), use_vision=True)
        vision_oracle.push(decision("CLOSE"))

        await engine.run("Look", url="https://example.com")

        message = vision_oracle.calls_for(AtomicDecision)[0]["messages"][-1]
        assert message.images is not None
        assert ("screenshot", False) in fake_page.calls

    @pytest.mark.asyncio
    async def test_no_screenshot_on_blank_page(self, sessions, vision_oracle, fake_page):
        """Test about:blank is never screenshotted."""
        engine = BrowserActionEngine(sessions, vision_oracle, BrowserSettings(), use_vision=True)
        vision_oracle.push(decision("CLOSE"))

        await engine.run("Look")

        assert vision_oracle.calls_for(AtomicDecision)[0]["messages"][-1].images is None

    @pytest.mark.asyncio
    async def test_vision_disabled(self, engine, oracle, fake_page):
        """Test no screenshot is taken when vision is off."""
        oracle.push(decision("CLOSE"))

        await engine.run("Look", url="https://example.com")

        assert not any(c[0] == "screenshot" for c in fake_page.calls)


class TestBrowserTool:
    """Test the capability wrapper."""

    @pytest.mark.parametrize("url", ["ftp://example.com", "example.com", "https://"])
    def test_invalid_url_rejected(self, url):
        """Test only absolute http(s) URLs are accepted."""
        with pytest.raises(ValueError):
            BrowserParams(goal="x", url=url)

    def test_blank_url_is_none(self):
        """Test an empty url means no start page."""
        assert BrowserParams(goal="x", url="  ").url is None

    def test_empty_goal_rejected(self):
        """Test a goal is required."""
        with pytest.raises(ValueError):
            BrowserParams(goal="")

    @pytest.mark.asyncio
    async def test_execute_runs_engine(self, oracle, fake_browser):
        """Test execute delegates to the engine and close shuts the session."""
        sessions = BrowserSessionManager(browser_factory=lambda: fake_browser, keep_warm=True)
        tool = BrowserTool(sessions, oracle, use_vision=False)
        oracle.push(decision("CLOSE"))

        result = await tool.execute(BrowserParams(goal="Open", url="https://example.com"))

        assert result.goal_completed
        assert not fake_browser.closed

        await tool.close()
        assert fake_browser.closed
