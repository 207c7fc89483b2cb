"""
Prompt Templates - LLM prompts for the browser atomic-action loop.
"""

import json
from typing import Any, List, Optional

from llm_task_agent.tools.browser.schemas import BrowserStep, ExtractedData
from llm_task_agent.utils.serialization import to_jsonable, truncate

# =============================================================================
# NEXT ATOMIC STEP
# =============================================================================

STEP_SYSTEM = """You control a web browser one atomic action at a time.

Choose the appropriate method:
- GOTO: Navigate to a URL (instruction = the URL)
- ACT: One interaction such as a click or typing (instruction = one clear action, e.g. "click the login button")
- EXTRACT: Get specific content (instruction = what to extract, e.g. "the main heading")
- OBSERVE: List visible interactive elements (instruction optional, narrows the list)
- HTML: Get the complete page source. No instruction needed
- SCREENSHOT: Capture the page. No instruction needed
- WAIT: Wait a number of milliseconds (instruction = milliseconds)
- NAVBACK: Go back to the previous page
- AI_HANDLE: Reasoning that needs no browser interaction (analysis, summarization)
- CLOSE: The goal has been achieved, all necessary information is collected, or no more browser interaction is needed

Best practices:
- One atomic action per step. DON'T "log in and purchase the first item"; DO "click the login button"
- Avoid broad instructions like "find something interesting on the page"
- Do not repeat an action that already produced its result

MOST IMPORTANT: after each step evaluate whether the goal has been achieved
based on the results so far. If it has, return CLOSE."""

STEP_USER = """Goal: "{goal}"
Current URL: {url}
{review}
{history}
{previous_result}
Determine the immediate next step to take to achieve the goal."""

REVIEW_NOTICE = (
    "IMPORTANT: Review previous steps and their results. "
    "If these results satisfy the goal, return CLOSE."
)

# =============================================================================
# PAGE ACTIONS
# =============================================================================

EXTRACT_USER = """Extract the following from this HTML: {instruction}

HTML content:
{html}"""

AI_HANDLE_USER = """Task: {instruction}

Please analyze and provide a detailed response."""

ACT_USER = """Perform this action on the page: "{instruction}"

URL: {url}
Interactive elements:
{elements}

Pick the element index and the interaction (click, fill, press, hover, select).
For fill give the text, for press the key, for select the option value."""

OBSERVE_USER = """Which of these elements are relevant to: "{instruction}"?

Interactive elements:
{elements}

Return the indices of the relevant elements."""

# =============================================================================
# LOOP EXIT
# =============================================================================

SUFFICIENCY_USER = """Goal: "{goal}"

Data collected so far:
{data}

Is this data already sufficient to accomplish the goal?"""

SUMMARY_USER = """Given the following extracted data and the original goal: "{goal}",
provide a concise summary of the findings:

{data}"""


def _preview(result: Any, limit: int = 100) -> str:
    if isinstance(result, str):
        return truncate(result, limit)
    return "Data extracted"


def format_history(steps: List[BrowserStep], window: int) -> str:
    """Render the last ``window`` steps, each result cut to 100 chars."""
    if not steps or window <= 0:
        return ""

    recent = steps[-window:]
    offset = len(steps) - len(recent)
    lines = ["Previous steps taken:"]
    for i, step in enumerate(recent, start=offset + 1):
        lines.append(f"Step {i}:")
        lines.append(f"- Action: {step.text}")
        lines.append(f"- Reasoning: {step.reasoning}")
        lines.append(f"- Method Used: {step.method.value}")
        lines.append(f"- Instruction: {step.instruction or ''}")
        if step.result is not None:
            lines.append(f"- Result: {_preview(step.result)}")
    return "\n".join(lines)


def build_step_prompt(
    goal: str,
    url: str,
    steps: List[BrowserStep],
    window: int,
    previous_result: Optional[Any] = None,
    max_result_chars: int = 2000,
) -> tuple[str, str]:
    """Build the next-atomic-step prompt."""
    has_results = any(step.result is not None for step in steps)
    previous = ""
    if previous_result is not None:
        rendered = previous_result if isinstance(previous_result, str) else json.dumps(
            to_jsonable(previous_result), ensure_ascii=False
        )
        previous = f"The result of the previous step is: {truncate(rendered, max_result_chars)}\n"

    user_prompt = STEP_USER.format(
        goal=goal,
        url=url or "(no page loaded)",
        review=REVIEW_NOTICE if has_results else "",
        history=format_history(steps, window),
        previous_result=previous,
    )
    return STEP_SYSTEM, user_prompt


def format_results(results: List[ExtractedData], max_chars: int = 20000) -> str:
    data = json.dumps(to_jsonable(results), indent=2, ensure_ascii=False)
    return truncate(data, max_chars)
