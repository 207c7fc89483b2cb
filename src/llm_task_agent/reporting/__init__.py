"""
Reporting module for llm-task-agent.

Writes the per-run output directory: run.json, report.md, step snapshots.
"""

from llm_task_agent.reporting.artifacts import ArtifactStore
from llm_task_agent.reporting.run_report import REPORT_FILE, RUN_FILE, ReportGenerator

__all__ = [
    "ArtifactStore",
    "ReportGenerator",
    "REPORT_FILE",
    "RUN_FILE",
]
