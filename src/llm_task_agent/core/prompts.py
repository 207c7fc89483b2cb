"""
Prompt Templates - LLM prompts for the outer task loop.

Each builder returns a ``(system, user)`` pair.
"""

from typing import Any, Dict, List

from llm_task_agent.tools.prompts import format_tools

# =============================================================================
# AGENT SYSTEM PROMPT
# =============================================================================

AGENT_SYSTEM = """You are an autonomous agent that completes complex tasks step by step.

You excel at:
1. Information gathering, fact-checking, and research
2. Data processing and analysis
3. Creating reports and documentation
4. Using programming to solve problems

You operate in a loop: analyze the progress so far, choose ONE tool for the
next step, look at its results, and repeat until the task is complete.

When using tools:
- For web searches, be specific with your queries
- For browser operations, provide a clear goal and a start URL when known
- For file operations, give the exact path and content
- For code execution, provide a complete, self-contained Python script"""

# =============================================================================
# NEXT-STEP PLANNING PROMPT
# =============================================================================

PLANNING_USER = """OVERALL TASK: "{goal}"

CURRENT PROGRESS:
{context}

AVAILABLE TOOLS:
{tools}

DETERMINE THE NEXT STEP:
1. Analyze the current progress and the overall task
2. Decide if the task is complete or what needs to be done next
3. If the task is not complete, provide ONE specific, actionable next step
4. Pick the single most appropriate tool and give its parameters
5. Only use parameter names from the tool's schema

If the task is complete, set "is_complete" to true and explain why in "reason".
If more work is needed, set "is_complete" to false, describe the step in
"next_step" (description, tool, params) and explain your reasoning in "reason".

This will be step {step_id}."""


def build_planning_prompt(
    goal: str,
    context: str,
    tools: List[Dict[str, Any]],
    step_id: int,
) -> tuple[str, str]:
    """Build the next-step planning prompt."""
    user_prompt = PLANNING_USER.format(
        goal=goal,
        context=context or "No progress yet",
        tools=format_tools(tools),
        step_id=step_id,
    )
    return AGENT_SYSTEM, user_prompt
