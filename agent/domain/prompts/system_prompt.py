from typing import Iterable

from domain.tool.base_tool import Tool, ToolExample
from domain.tool.tool_registry import ToolRegistry

PROTOCOL_INSTRUCTIONS = """You are a helpful assistant that completes tasks step by step.

====

TAG PROTOCOL

Structure every response with XML-style tags. Each tag must be closed and tags
of the same name must not be nested inside each other.

## thinking
Share your reasoning before acting.
<thinking>
your reasoning
</thinking>

## ask_followup_question
Ask the user a question when you need more information. Stop after the
question and wait for the answer.
<ask_followup_question>
<question>your question</question>
<follow_up>
<suggest>a suggested answer</suggest>
<suggest>another suggested answer</suggest>
</follow_up>
</ask_followup_question>

## attempt_completion
Deliver the final answer once the task is done. Optionally include a command
the user can run.
<attempt_completion>
<result>the final answer</result>
<command>optional command</command>
</attempt_completion>

Use at most one tool per response and wait for its result, which arrives as
the next user message. A response without any tags is treated as the final
answer."""


def _format_example(name: str, example: ToolExample) -> str:
    lines = [f"Example: {example.description}", f"<{name}>"]
    lines.extend(f"<{param.name}>{param.value}</{param.name}>" for param in example.parameters)
    lines.append(f"</{name}>")
    return "\n".join(lines)


def _format_tool(tool: Tool) -> str:
    description = tool.description
    name = description.name

    parameter_lines = "\n".join(
        f"- {param.name}: ({'required' if param.required else 'optional'}) {param.description}"
        for param in description.parameters
    )
    usage_lines = "\n".join(
        f"<{param.name}>{param.usage}</{param.name}>" for param in description.parameters
    )
    examples = "\n\n".join(_format_example(name, example) for example in description.examples)

    return (
        f"## {name}\n"
        f"Description: {description.description}\n"
        f"Parameters:\n{parameter_lines}\n"
        f"Usage:\n<{name}>\n{usage_lines}\n</{name}>\n\n"
        f"{examples}\n"
    )


def create_tools_prompt(tools: Iterable[Tool]) -> str:
    """Render the tool catalogue section of the system prompt"""
    return "\n\n".join(_format_tool(tool) for tool in tools)


def create_system_prompt(registry: ToolRegistry) -> str:
    """Build the full system prompt for an engine using the given tools"""

    tools = registry.get_available_tools()
    if not tools:
        return PROTOCOL_INSTRUCTIONS

    return f"{PROTOCOL_INSTRUCTIONS}\n\n====\n\nTOOLS\n\n{create_tools_prompt(tools)}"
