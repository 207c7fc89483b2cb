"""
Tests for the reporting module.
"""

import json

import pytest

from llm_task_agent.core.orchestrator import RunResult, TerminationReason
from llm_task_agent.core.planner import Step
from llm_task_agent.core.subtasks import TODO_FILE, SubtaskTracker
from llm_task_agent.exceptions import LLMConnectionError, TaskAgentError
from llm_task_agent.memory import MemoryStore
from llm_task_agent.reporting import REPORT_FILE, RUN_FILE, ArtifactStore, ReportGenerator


@pytest.fixture
def store(tmp_path):
    return ArtifactStore(tmp_path, "run-1")


@pytest.fixture
def finished_run():
    memory = MemoryStore()
    step = Step(id=1, description="Search for Python", tool="search", params={"query": "python"})
    step.start()
    step.complete([{"title": "Python", "url": "https://python.org"}])
    memory.add_result(1, "search", step.result)
    return RunResult(
        goal="Find Python",
        termination=TerminationReason.GOAL_SATISFIED,
        message="Goal satisfied after 1 step",
        steps=[step],
        memory=memory,
        completion_reason="Found the homepage",
        duration_seconds=1.5,
        run_id="run-1",
    )


class TestArtifactStore:
    """Test run directory file access."""

    def test_creates_run_directory(self, tmp_path, store):
        """Test the run directory exists under the output dir."""
        assert store.output_dir == (tmp_path / "run-1").resolve()
        assert store.output_dir.is_dir()

    def test_write_and_read(self, store):
        """Test nested writes create parent directories."""
        store.write_file("steps/a.txt", "hello")

        assert store.exists("steps/a.txt")
        assert store.read_file("steps/a.txt") == "hello"

    def test_write_json(self, store):
        """Test JSON is indented and round-trips."""
        store.write_json("data.json", {"a": [1, 2]})

        assert json.loads(store.read_file("data.json")) == {"a": [1, 2]}
        assert "\n  " in store.read_file("data.json")

    def test_escape_rejected(self, store):
        """Test paths outside the run directory are rejected."""
        with pytest.raises(TaskAgentError):
            store.write_file("../elsewhere.txt", "x")


class TestReportGenerator:
    """Test run.json and report.md."""

    @pytest.mark.asyncio
    async def test_generate_without_oracle(self, store, finished_run):
        """Test both artifacts are written and the report has no answer."""
        paths = await ReportGenerator(store).generate(finished_run)

        assert paths["run"].name == RUN_FILE
        assert paths["report"].name == REPORT_FILE
        run = json.loads(store.read_file(RUN_FILE))
        assert run["termination"] == "goal-satisfied"
        assert run["data"][0]["type"] == "search"

        report = store.read_file(REPORT_FILE)
        assert report.startswith("# Task Report: Find Python")
        assert "- **Termination:** goal-satisfied" in report
        assert "- **Completion reason:** Found the homepage" in report
        assert "- **Tool usage:** `search`: 1" in report
        assert "### Step 1: Search for Python" in report
        assert "https://python.org" in report
        assert "## Answer" not in report

    @pytest.mark.asyncio
    async def test_without_report(self, store, finished_run):
        """Test with_report=False only writes run.json."""
        paths = await ReportGenerator(store).generate(finished_run, with_report=False)

        assert "report" not in paths
        assert not store.exists(REPORT_FILE)

    @pytest.mark.asyncio
    async def test_final_answer(self, store, finished_run, oracle):
        """Test the oracle's answer is included."""
        oracle.push_text("Python lives at python.org")
        generator = ReportGenerator(store, oracle, model="answer-model")

        await generator.generate(finished_run)

        report = store.read_file(REPORT_FILE)
        assert "## Answer\n\nPython lives at python.org" in report
        call = oracle.calls_for(None)[0]
        assert call["model"] == "answer-model"
        assert "Find Python" in call["messages"][-1].content

    @pytest.mark.asyncio
    async def test_final_answer_failure_noted(self, store, finished_run, oracle):
        """Test an oracle failure is noted in the report instead of raising."""
        oracle.push_text(LLMConnectionError("timeout"))

        await ReportGenerator(store, oracle).generate(finished_run)

        assert "_Final answer unavailable: timeout_" in store.read_file(REPORT_FILE)

    @pytest.mark.asyncio
    async def test_no_answer_for_empty_memory(self, store, oracle):
        """Test no answer is requested when nothing was recorded."""
        result = RunResult(
            goal="Endless",
            termination=TerminationReason.PLANNER_ERROR,
            message="Planning failed: garbage",
            steps=[],
            memory=MemoryStore(),
            error="garbage",
        )

        await ReportGenerator(store, oracle).generate(result)

        report = store.read_file(REPORT_FILE)
        assert oracle.calls == []
        assert "No steps were executed." in report
        assert "- **Error:** garbage" in report

    def test_tool_usage_counts(self, finished_run, store):
        """Test the report counts recorded results per tool in first-use order."""
        finished_run.memory.add_result(2, "browser", {"summary": "ok"})
        finished_run.memory.add_result(3, "search", [])

        report = ReportGenerator(store).render(finished_run)

        assert "- **Tool usage:** `search`: 2, `browser`: 1" in report

    def test_no_tool_usage_without_results(self, finished_run, store):
        finished_run.memory.clear_step_data(1)

        assert "Tool usage" not in ReportGenerator(store).render(finished_run)

    def test_long_results_truncated(self, finished_run, store):
        """Test step results are cut to the preview length."""
        finished_run.steps[0].result = "x" * 2000

        report = ReportGenerator(store, result_preview_chars=100).render(finished_run)

        assert "x" * 2000 not in report


class TestSubtaskTracker:
    """Test the todo.md checklist."""

    def test_written_on_creation(self, store):
        """Test todo.md exists as soon as the tracker does."""
        SubtaskTracker(store, "Compare frameworks")

        todo = store.read_file(TODO_FILE)
        assert todo.startswith("# Task: Compare frameworks")
        assert "## Subtasks" in todo

    def test_add_and_update(self, store):
        """Test subtasks are numbered and ticked off."""
        tracker = SubtaskTracker(store, "Compare frameworks")
        first = tracker.add("Search benchmarks")
        second = tracker.add("Read docs")

        tracker.update(first, completed=True)
        tracker.update(second, completed=False, note="failed: timeout")

        todo = store.read_file(TODO_FILE)
        assert "1. [x] Search benchmarks" in todo
        assert "2. [ ] Read docs - *failed: timeout*" in todo

    def test_update_unknown_index(self, store):
        """Test updating a missing subtask raises IndexError."""
        tracker = SubtaskTracker(store, "Task")

        with pytest.raises(IndexError):
            tracker.update(1, completed=True)

    def test_reasoning_section(self, store):
        """Test reasoning is appended and empty text ignored."""
        tracker = SubtaskTracker(store, "Task")
        tracker.add_reasoning("")
        assert "## Reasoning" not in store.read_file(TODO_FILE)

        tracker.add_reasoning("Need benchmark numbers first")
        assert "Need benchmark numbers first" in store.read_file(TODO_FILE)
