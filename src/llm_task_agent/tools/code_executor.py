"""
Code Execution Tool - Run Python scripts in an isolated subprocess.

The script runs with ``python -I`` (no user site-packages, no environment
variables influencing the interpreter) inside a fresh temporary directory.
A step may carry the code itself or only a description, in which case the
oracle writes the script first.
"""

import asyncio
import logging
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from pydantic import BaseModel, Field, model_validator

from llm_task_agent.interfaces.llm import Message
from llm_task_agent.tools.base import Capability
from llm_task_agent.utils.serialization import truncate

if TYPE_CHECKING:
    from llm_task_agent.interfaces.oracle import IOracle

logger = logging.getLogger(__name__)

MAX_OUTPUT_CHARS = 20000

CODE_GENERATION_PROMPT = """Write a self-contained Python 3 script that accomplishes this task:

{description}

Use only the standard library. Print the final result to stdout."""


class CodeExecutionParams(BaseModel):
    """Arguments for the code execution tool."""
    code: Optional[str] = Field(default=None, description="Python source to run")
    description: Optional[str] = Field(
        default=None, description="What the code should do (used when no code is given)"
    )
    timeout_seconds: Optional[float] = Field(default=None, gt=0, le=600)

    @model_validator(mode="after")
    def _code_or_description(self) -> "CodeExecutionParams":
        if not (self.code or self.description):
            raise ValueError("either code or description is required")
        return self


class GeneratedCode(BaseModel):
    """Script written by the oracle."""
    code: str


@dataclass
class CodeExecutionResult:
    """
    Outcome of one script run.

    Attributes:
        success: Exit code was zero and the run did not time out
        stdout: Captured standard output (truncated)
        stderr: Captured standard error (truncated)
        exit_code: Process exit code (None when killed on timeout)
        timed_out: Whether the timeout was hit
        code: The script that ran
    """
    success: bool
    stdout: str
    stderr: str
    exit_code: Optional[int]
    timed_out: bool = False
    code: str = ""


class CodeExecutorTool(Capability):
    """
    Python code execution capability.

    Example:
        >>> tool = CodeExecutorTool(timeout_seconds=10)
        >>> result = await tool.execute(CodeExecutionParams(code="print(6 * 7)"))
        >>> result.stdout
        '42\\n'
    """

    name = "code_execution"
    description = (
        "Run a Python script for calculations or data processing and return its output. "
        "Provide 'code', or a 'description' of what the script should do."
    )
    parameter_schema = CodeExecutionParams

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        python_executable: Optional[str] = None,
        oracle: Optional["IOracle"] = None,
        model: Optional[str] = None,
    ):
        self._timeout = timeout_seconds
        self._python = python_executable or sys.executable
        self._oracle = oracle
        self._model = model

    async def _generate(self, description: str) -> str:
        if self._oracle is None:
            raise ValueError("No code given and no oracle available to write it")
        prompt = CODE_GENERATION_PROMPT.format(description=description)
        generated = await self._oracle.complete_object(
            [Message.user(prompt)], GeneratedCode, model=self._model
        )
        return generated.code

    async def execute(self, args: CodeExecutionParams) -> CodeExecutionResult:
        code = args.code or await self._generate(args.description or "")
        timeout = args.timeout_seconds or self._timeout

        with tempfile.TemporaryDirectory(prefix="task-agent-code-") as workdir:
            script = Path(workdir) / "script.py"
            script.write_text(code, encoding="utf-8")

            process = await asyncio.create_subprocess_exec(
                self._python, "-I", str(script),
                cwd=workdir,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            try:
                stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
            except asyncio.TimeoutError:
                process.kill()
                stdout, stderr = await process.communicate()
                logger.warning(f"Code execution timed out after {timeout}s")
                return CodeExecutionResult(
                    success=False,
                    stdout=truncate(stdout.decode(errors="replace"), MAX_OUTPUT_CHARS),
                    stderr=truncate(stderr.decode(errors="replace"), MAX_OUTPUT_CHARS),
                    exit_code=None,
                    timed_out=True,
                    code=code,
                )

        exit_code = process.returncode
        logger.info(f"Code execution finished with exit code {exit_code}")
        return CodeExecutionResult(
            success=exit_code == 0,
            stdout=truncate(stdout.decode(errors="replace"), MAX_OUTPUT_CHARS),
            stderr=truncate(stderr.decode(errors="replace"), MAX_OUTPUT_CHARS),
            exit_code=exit_code,
            code=code,
        )
