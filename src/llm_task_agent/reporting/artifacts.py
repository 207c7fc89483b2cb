"""
Artifact Store - Files written for a run (run.json, report.md, step snapshots).
"""

from pathlib import Path
from typing import Any
import json
import logging

from llm_task_agent.exceptions.base import TaskAgentError
from llm_task_agent.utils.serialization import to_jsonable

logger = logging.getLogger(__name__)


class ArtifactStore:
    """
    Read and write files under ``output_dir/<run_id>/``.

    Example:
        >>> store = ArtifactStore(output_dir="./output", run_id="20240101-120000-ab12cd")
        >>> store.write_json("steps/step-1.json", step.to_dict())
        >>> store.read_file("steps/step-1.json")
    """

    def __init__(self, output_dir: str | Path, run_id: str):
        """
        Initialize the store and create the run directory.

        Args:
            output_dir: Base output directory
            run_id: Unique run identifier
        """
        self.run_id = run_id
        self.output_dir = (Path(output_dir) / run_id).resolve()
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, path: str | Path) -> Path:
        """
        Absolute path of ``path`` inside the run directory.

        Raises:
            TaskAgentError: If the path escapes the run directory
        """
        target = (self.output_dir / path).resolve()
        if target != self.output_dir and self.output_dir not in target.parents:
            raise TaskAgentError(f"Artifact path outside run directory: {path}")
        return target

    def write_file(self, path: str | Path, content: str) -> Path:
        """Write text, creating parent directories."""
        target = self.path_for(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        logger.debug(f"Wrote artifact {target}")
        return target

    def read_file(self, path: str | Path) -> str:
        return self.path_for(path).read_text(encoding="utf-8")

    def write_json(self, path: str | Path, data: Any) -> Path:
        """Write ``data`` as indented JSON (any object via to_jsonable)."""
        return self.write_file(
            path,
            json.dumps(to_jsonable(data), indent=2, ensure_ascii=False),
        )

    def exists(self, path: str | Path) -> bool:
        return self.path_for(path).exists()
