"""
Run Report - run.json and a markdown report for a finished run.

The report is a thin consumer of the memory store: it lists the steps,
the termination and, when an oracle is available, a final answer written
from every recorded result.
"""

from pathlib import Path
from typing import Optional, TYPE_CHECKING
import json
import logging

from llm_task_agent.exceptions.llm import LLMError
from llm_task_agent.interfaces.llm import Message
from llm_task_agent.reporting.artifacts import ArtifactStore
from llm_task_agent.reporting.prompts import build_answer_prompt
from llm_task_agent.utils.serialization import truncate

if TYPE_CHECKING:
    from llm_task_agent.core.orchestrator import RunResult
    from llm_task_agent.interfaces.oracle import IOracle

logger = logging.getLogger(__name__)

RUN_FILE = "run.json"
REPORT_FILE = "report.md"


class ReportGenerator:
    """
    Write the artifacts of a finished run.

    Example:
        >>> generator = ReportGenerator(store, oracle=oracle)
        >>> paths = await generator.generate(result)
        >>> print(store.read_file("report.md"))
    """

    def __init__(
        self,
        store: ArtifactStore,
        oracle: Optional["IOracle"] = None,
        model: Optional[str] = None,
        result_preview_chars: int = 500,
    ):
        """
        Initialize the generator.

        Args:
            store: Run directory
            oracle: Oracle for the final answer (None = no answer section)
            model: Model for the final answer
            result_preview_chars: Length of each step result shown in the report
        """
        self._store = store
        self._oracle = oracle
        self._model = model
        self._preview_chars = result_preview_chars

    def write_run(self, result: "RunResult") -> Path:
        """Write run.json."""
        return self._store.write_json(RUN_FILE, result.to_dict())

    async def generate(self, result: "RunResult", with_report: bool = True) -> dict[str, Path]:
        """
        Write run.json and, if requested, report.md.

        Returns:
            Mapping of artifact name to path
        """
        paths = {"run": self.write_run(result)}
        if with_report:
            answer = await self._final_answer(result)
            paths["report"] = self._store.write_file(REPORT_FILE, self.render(result, answer))
        logger.info(f"Run artifacts written to {self._store.output_dir}")
        return paths

    async def _final_answer(self, result: "RunResult") -> Optional[str]:
        if self._oracle is None or len(result.memory) == 0:
            return None
        system, user = build_answer_prompt(result.goal, result.memory.to_records())
        try:
            return await self._oracle.complete_text(
                [Message.system(system), Message.user(user)], model=self._model
            )
        except LLMError as e:
            logger.error(f"Final answer generation failed: {e}")
            return f"_Final answer unavailable: {e.message}_"

    def render(self, result: "RunResult", answer: Optional[str] = None) -> str:
        """Markdown report for ``result``."""
        lines = [
            f"# Task Report: {result.goal}",
            "",
            f"- **Run:** `{result.run_id}`",
            f"- **Termination:** {result.termination.value}",
            f"- **Outcome:** {result.message}",
            f"- **Steps:** {len(result.steps)}",
            f"- **Duration:** {result.duration_seconds:.1f}s",
        ]
        usage = result.memory.get_type_counts()
        if usage:
            counts = ", ".join(f"`{name}`: {count}" for name, count in usage.items())
            lines.append(f"- **Tool usage:** {counts}")
        if result.completion_reason:
            lines.append(f"- **Completion reason:** {result.completion_reason}")
        if result.error:
            lines.append(f"- **Error:** {result.error}")

        if answer:
            lines.extend(["", "## Answer", "", answer.strip()])

        lines.extend(["", "## Steps", ""])
        if not result.steps:
            lines.append("No steps were executed.")
        for step in result.steps:
            lines.append(f"### Step {step.id}: {step.description}")
            lines.append("")
            lines.append(f"- Tool: `{step.tool or '-'}`")
            lines.append(f"- Status: {step.status.value}")
            if step.error:
                lines.append(f"- Error: {step.error}")
            if step.result is not None:
                rendered = json.dumps(step.result, indent=2, default=str, ensure_ascii=False)
                lines.extend(["", "```json", truncate(rendered, self._preview_chars), "```"])
            lines.append("")
        return "\n".join(lines).rstrip() + "\n"
