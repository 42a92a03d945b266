from typing import Any, Awaitable, Callable, Dict, List
import structlog
from enum import Enum

from domain.models.protocol import FollowupQuestion, ToolInvocation
from domain.models.sub_agent import SubAgentEvent

logger = structlog.get_logger(__name__)

EventHandler = Callable[[Any], Awaitable[None]]


class EventType(str, Enum):
    """Events an engine or fan-out coordinator emits"""
    THINKING = "thinking"
    QUESTION_FROM_ASSISTANT = "question_from_assistant"
    TOOL_CALL_FROM_ASSISTANT = "tool_call_from_assistant"
    ANSWER_FROM_ASSISTANT = "answer_from_assistant"
    SUB_AGENT_STARTED = "sub_agent_started"
    SUB_AGENT_COMPLETED = "sub_agent_completed"
    SUB_AGENT_FAILED = "sub_agent_failed"


class EventSink:
    """Observer the engine reports to. Every method is a no-op by default."""

    async def thinking(self, text: str) -> None:
        pass

    async def question_from_assistant(self, question: FollowupQuestion) -> None:
        pass

    async def tool_call_from_assistant(self, invocation: ToolInvocation) -> None:
        pass

    async def answer_from_assistant(self, answer: str) -> None:
        pass

    async def sub_agent_started(self, event: SubAgentEvent) -> None:
        pass

    async def sub_agent_completed(self, event: SubAgentEvent) -> None:
        pass

    async def sub_agent_failed(self, event: SubAgentEvent) -> None:
        pass


class StreamingEventSink(EventSink):
    """Fans events out to handlers registered per event type.

    A handler that raises is logged and skipped; the remaining handlers and
    the engine carry on. Delivery is not guaranteed.
    """

    def __init__(self):
        self.event_handlers: Dict[EventType, List[EventHandler]] = {}

    def register_event_handler(self, event_type: EventType, handler: EventHandler):
        """Register a handler for one event type"""

        if event_type not in self.event_handlers:
            self.event_handlers[event_type] = []
        self.event_handlers[event_type].append(handler)

    async def emit(self, event_type: EventType, data: Any):
        """Deliver an event to its registered handlers"""

        for handler in self.event_handlers.get(event_type, []):
            try:
                await handler(data)
            except Exception as e:
                logger.error("Error in event handler",
                             event_type=event_type.value,
                             error=str(e))

    async def thinking(self, text: str) -> None:
        await self.emit(EventType.THINKING, text)

    async def question_from_assistant(self, question: FollowupQuestion) -> None:
        await self.emit(EventType.QUESTION_FROM_ASSISTANT, question)

    async def tool_call_from_assistant(self, invocation: ToolInvocation) -> None:
        await self.emit(EventType.TOOL_CALL_FROM_ASSISTANT, invocation)

    async def answer_from_assistant(self, answer: str) -> None:
        await self.emit(EventType.ANSWER_FROM_ASSISTANT, answer)

    async def sub_agent_started(self, event: SubAgentEvent) -> None:
        await self.emit(EventType.SUB_AGENT_STARTED, event)

    async def sub_agent_completed(self, event: SubAgentEvent) -> None:
        await self.emit(EventType.SUB_AGENT_COMPLETED, event)

    async def sub_agent_failed(self, event: SubAgentEvent) -> None:
        await self.emit(EventType.SUB_AGENT_FAILED, event)


class LoggingEventSink(EventSink):
    """Writes every event to the structured log"""

    def __init__(self, name: str = "events"):
        self.logger = structlog.get_logger(name)

    async def thinking(self, text: str) -> None:
        self.logger.info("Assistant thinking", text=text)

    async def question_from_assistant(self, question: FollowupQuestion) -> None:
        self.logger.info("Assistant asked a question", question=question.question, options=question.options)

    async def tool_call_from_assistant(self, invocation: ToolInvocation) -> None:
        self.logger.info("Assistant called a tool", tool_name=invocation.name, parameters=invocation.parameters)

    async def answer_from_assistant(self, answer: str) -> None:
        self.logger.info("Assistant answered", answer=answer)

    async def sub_agent_started(self, event: SubAgentEvent) -> None:
        self.logger.info("Sub-agent started", sub_agent_id=event.id, prompt=event.prompt)

    async def sub_agent_completed(self, event: SubAgentEvent) -> None:
        self.logger.info("Sub-agent completed", sub_agent_id=event.id, prompt=event.prompt)

    async def sub_agent_failed(self, event: SubAgentEvent) -> None:
        self.logger.warning("Sub-agent failed", sub_agent_id=event.id, prompt=event.prompt, error=event.error)
