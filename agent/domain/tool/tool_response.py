from typing import Any
import json

from domain.models.conversation import Turn
from domain.models.protocol import ToolInvocation
from domain.tool.base_tool import ToolResult


def _format_argument(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def format_tool_response(invocation: ToolInvocation, result: ToolResult) -> str:
    """Summarize a tool call for the model, e.g. ``[weather for 'Oslo'] Result: ...``"""

    arguments = ", ".join(f"'{_format_argument(value)}'" for value in invocation.parameters.values())
    header = f"[{invocation.name} for {arguments}]" if arguments else f"[{invocation.name}]"

    if result.success:
        return f"{header} Result: {result.result if result.result is not None else ''}"
    return f"{header} Error: {result.error or 'Tool reported failure without an error message'}"


def format_tool_turn(invocation: ToolInvocation, result: ToolResult) -> Turn:
    return Turn.user(format_tool_response(invocation, result))
