"""Shared fixtures for the engine test suite."""

import asyncio
from typing import Any, Dict, List, Tuple

import pytest

from domain.completion.completion_provider import CompletionProvider
from domain.context.memory.conversation_store import InMemoryConversationStore
from domain.models.conversation import Turn
from domain.models.protocol import FollowupQuestion, ToolInvocation
from domain.models.sub_agent import SubAgentEvent
from domain.streaming.event_sink import EventSink
from domain.tool.base_tool import Tool, ToolDescription, ToolParameter, ToolResult
from domain.tool.tool_registry import ToolRegistry
from infrastructure.config.settings import Settings


class RecordingEventSink(EventSink):
    """Keeps every event as a (name, payload) pair."""

    def __init__(self):
        self.events: List[Tuple[str, Any]] = []

    def of(self, name: str) -> List[Any]:
        return [payload for event, payload in self.events if event == name]

    @property
    def names(self) -> List[str]:
        return [event for event, _ in self.events]

    async def thinking(self, text: str) -> None:
        self.events.append(("thinking", text))

    async def question_from_assistant(self, question: FollowupQuestion) -> None:
        self.events.append(("question", question))

    async def tool_call_from_assistant(self, invocation: ToolInvocation) -> None:
        self.events.append(("tool_call", invocation))

    async def answer_from_assistant(self, answer: str) -> None:
        self.events.append(("answer", answer))

    async def sub_agent_started(self, event: SubAgentEvent) -> None:
        self.events.append(("sub_agent_started", event))

    async def sub_agent_completed(self, event: SubAgentEvent) -> None:
        self.events.append(("sub_agent_completed", event))

    async def sub_agent_failed(self, event: SubAgentEvent) -> None:
        self.events.append(("sub_agent_failed", event))


class EchoTool(Tool):
    description = ToolDescription(
        name="echo",
        description="Echo the text back",
        parameters=[ToolParameter(name="text", description="Text to echo", usage="text", required=True)],
    )

    def __init__(self):
        super().__init__()
        self.calls: List[Dict[str, Any]] = []

    async def execute(self, parameters: Dict[str, Any]) -> ToolResult:
        self.calls.append(parameters)
        return ToolResult(success=True, result=str(parameters.get("text", "")))


class FailingTool(Tool):
    description = ToolDescription(name="failing", description="Always reports failure")

    async def execute(self, parameters: Dict[str, Any]) -> ToolResult:
        return ToolResult(success=False, error="boom")


class ExplodingTool(Tool):
    description = ToolDescription(name="exploding", description="Raises instead of reporting")

    async def execute(self, parameters: Dict[str, Any]) -> ToolResult:
        raise RuntimeError("tool crashed")


class PromptRoutedProvider(CompletionProvider):
    """Scripts keyed by the first turn of the conversation.

    Lets concurrent engines share one provider deterministically. A script
    entry that is an exception is raised; the last entry repeats once the
    script runs out.
    """

    def __init__(self, scripts: Dict[str, List[Any]]):
        self.scripts = scripts
        self.positions: Dict[str, int] = {}
        self.calls: List[str] = []

    async def generate_text(self, system_prompt: str, conversation: List[Turn]) -> str:
        key = conversation[0].content
        self.calls.append(key)
        await asyncio.sleep(0)

        script = self.scripts[key]
        position = self.positions.get(key, 0)
        self.positions[key] = position + 1
        step = script[min(position, len(script) - 1)]

        if isinstance(step, BaseException):
            raise step
        return step


@pytest.fixture
def sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def echo_tool() -> EchoTool:
    return EchoTool()


@pytest.fixture
def registry(echo_tool) -> ToolRegistry:
    return ToolRegistry([echo_tool, FailingTool(), ExplodingTool()])


@pytest.fixture
def store() -> InMemoryConversationStore:
    return InMemoryConversationStore()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(_env_file=None, max_iterations=5, conversations_dir=str(tmp_path / "conversations"))


@pytest.fixture
def routed_provider():
    return PromptRoutedProvider
