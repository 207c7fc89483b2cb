"""
File Operations Tool - Read, write and list files inside a workspace.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from llm_task_agent.exceptions.tool import ToolValidationError
from llm_task_agent.tools.base import Capability

logger = logging.getLogger(__name__)


class FileOperationParams(BaseModel):
    """Arguments for the file tool."""
    operation: Literal["read", "write", "list"]
    path: str = Field(min_length=1, description="Path relative to the workspace")
    content: Optional[str] = Field(default=None, description="Text to write (write only)")
    encoding: str = "utf-8"

    @model_validator(mode="after")
    def _content_for_write(self) -> "FileOperationParams":
        if self.operation == "write" and self.content is None:
            raise ValueError("content is required for write operation")
        return self


@dataclass
class FileOperationResult:
    """
    Result of a file operation.

    Attributes:
        success: Whether the operation succeeded
        message: Human-readable outcome
        data: File text (read) or directory entries (list)
    """
    success: bool
    message: str
    data: Any = None


class FileOperationsTool(Capability):
    """
    Local file capability rooted at a workspace directory.

    Paths that resolve outside the workspace are rejected.
    """

    name = "file_operations"
    description = "Read, write, or list files in the agent workspace."
    parameter_schema = FileOperationParams

    def __init__(self, workspace_dir: str | Path = "./workspace"):
        self._root = Path(workspace_dir).expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    def resolve_path(self, path: str) -> Path:
        """
        Resolve ``path`` inside the workspace.

        Raises:
            ToolValidationError: If the path escapes the workspace
        """
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self._root / candidate
        resolved = candidate.resolve()
        if resolved != self._root and self._root not in resolved.parents:
            raise ToolValidationError(
                f"Path is outside the workspace: {path}",
                tool=self.name,
                errors=[{"loc": ["path"], "msg": "outside workspace", "type": "value_error"}],
            )
        return resolved

    async def execute(self, args: FileOperationParams) -> FileOperationResult:
        target = self.resolve_path(args.path)
        logger.info(f"File {args.operation}: {target}")

        if args.operation == "read":
            return await asyncio.to_thread(self._read, target, args.encoding)
        if args.operation == "write":
            return await asyncio.to_thread(self._write, target, args.content or "", args.encoding)
        return await asyncio.to_thread(self._list, target)

    def _read(self, target: Path, encoding: str) -> FileOperationResult:
        if not target.is_file():
            return FileOperationResult(False, f"File does not exist or is not readable: {target}")
        data = target.read_text(encoding=encoding)
        return FileOperationResult(True, f"Successfully read file: {target}", data)

    def _write(self, target: Path, content: str, encoding: str) -> FileOperationResult:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding=encoding)
        return FileOperationResult(True, f"Successfully wrote to file: {target}")

    def _list(self, target: Path) -> FileOperationResult:
        if not target.exists():
            return FileOperationResult(False, f"Directory does not exist or is not readable: {target}")
        if not target.is_dir():
            return FileOperationResult(False, f"Path is not a directory: {target}")

        entries: List[Dict[str, Any]] = []
        for child in sorted(target.iterdir()):
            stats = child.stat()
            entries.append({
                "name": child.name,
                "path": str(child.relative_to(self._root)),
                "is_directory": child.is_dir(),
                "size": stats.st_size,
                "modified": datetime.fromtimestamp(stats.st_mtime).isoformat(),
            })
        return FileOperationResult(True, f"Successfully listed directory: {target}", entries)
