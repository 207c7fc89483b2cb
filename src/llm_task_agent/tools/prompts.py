"""
Prompt Templates - Tool descriptions and tool selection.
"""

import json
from typing import Any, Dict, List

TOOL_SELECTION_SYSTEM = """You translate a task step into exactly ONE tool call.
Use only tool names and parameter names that appear in the tool list."""

TOOL_SELECTION_USER = """Choose the tool call that performs this step:

STEP: "{description}"

AVAILABLE TOOLS:
{tools}

Return the tool name and arguments matching the tool's parameter schema."""


def format_tools(tools: List[Dict[str, Any]]) -> str:
    """Render tool descriptions with their parameter schemas."""
    if not tools:
        return "No tools available."

    lines = []
    for tool in tools:
        schema = tool.get("parameters", {})
        lines.append(f"- {tool['name']}: {tool['description']}")
        lines.append(f"  parameters: {json.dumps(schema.get('properties', {}))}")
        required = schema.get("required", [])
        if required:
            lines.append(f"  required: {', '.join(required)}")
    return "\n".join(lines)


def build_tool_selection_prompt(
    description: str,
    tools: List[Dict[str, Any]],
) -> tuple[str, str]:
    """Build the prompt used when a step names no tool."""
    user_prompt = TOOL_SELECTION_USER.format(
        description=description,
        tools=format_tools(tools),
    )
    return TOOL_SELECTION_SYSTEM, user_prompt
