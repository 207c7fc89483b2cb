"""
Prompt Templates - Final answer written into the run report.
"""

import json
from typing import Any, Dict, List, Optional

# =============================================================================
# FINAL ANSWER PROMPT
# =============================================================================

ANSWER_SYSTEM = "You write clear, well-structured final answers from research data."

ANSWER_USER = """Generate a comprehensive final answer for the task below.

Task: {goal}

Research Data:
{data}

Your answer should:
1. Directly address the goal of the task
2. Synthesize the most relevant findings from the research data
3. Present conclusions that are supported by the gathered information
4. Acknowledge any limitations or gaps in the data

Respond in Markdown."""


def build_answer_prompt(
    goal: str,
    data: List[Dict[str, Any]],
    max_chars: Optional[int] = 60000,
) -> tuple[str, str]:
    """Build the final answer prompt over all recorded results."""
    data_str = json.dumps(data, indent=2, default=str, ensure_ascii=False)
    if max_chars and len(data_str) > max_chars:
        data_str = data_str[:max_chars] + "\n... (truncated)"
    return ANSWER_SYSTEM, ANSWER_USER.format(goal=goal, data=data_str)
