import pytest

from domain.models.protocol import FollowupQuestion, ToolInvocation
from domain.models.sub_agent import SubAgentEvent, SubAgentStatus
from domain.streaming.event_sink import EventSink, EventType, LoggingEventSink, StreamingEventSink


@pytest.mark.asyncio
async def test_base_sink_ignores_events():
    sink = EventSink()

    await sink.thinking("quiet")
    await sink.answer_from_assistant("nobody listens")


@pytest.mark.asyncio
async def test_streaming_sink_routes_by_event_type():
    sink = StreamingEventSink()
    answers, questions = [], []

    async def on_answer(answer):
        answers.append(answer)

    async def on_question(question):
        questions.append(question)

    sink.register_event_handler(EventType.ANSWER_FROM_ASSISTANT, on_answer)
    sink.register_event_handler(EventType.QUESTION_FROM_ASSISTANT, on_question)

    await sink.answer_from_assistant("42")
    await sink.question_from_assistant(FollowupQuestion(question="Why?"))
    await sink.thinking("unhandled")

    assert answers == ["42"]
    assert questions == [FollowupQuestion(question="Why?")]


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_others():
    sink = StreamingEventSink()
    received = []

    async def broken(invocation):
        raise RuntimeError("handler bug")

    async def working(invocation):
        received.append(invocation.name)

    sink.register_event_handler(EventType.TOOL_CALL_FROM_ASSISTANT, broken)
    sink.register_event_handler(EventType.TOOL_CALL_FROM_ASSISTANT, working)

    await sink.tool_call_from_assistant(ToolInvocation(name="weather", parameters={}))

    assert received == ["weather"]


@pytest.mark.asyncio
async def test_logging_sink_handles_every_event():
    sink = LoggingEventSink()
    event = SubAgentEvent(id="conv_1", prompt="p", index=0)

    await sink.thinking("t")
    await sink.question_from_assistant(FollowupQuestion(question="q", options=["a"]))
    await sink.tool_call_from_assistant(ToolInvocation(name="weather", parameters={"location": "Oslo"}))
    await sink.answer_from_assistant("done")
    await sink.sub_agent_started(event)
    await sink.sub_agent_completed(event.finish(SubAgentStatus.COMPLETED, result="ok"))
    await sink.sub_agent_failed(event.finish(SubAgentStatus.FAILED, error="bad"))


def test_sub_agent_event_finish_returns_copy():
    event = SubAgentEvent(id="conv_1", prompt="p", index=2)

    finished = event.finish(SubAgentStatus.COMPLETED, result="ok")

    assert event.status == SubAgentStatus.STARTED
    assert event.end_time is None
    assert finished.status == SubAgentStatus.COMPLETED
    assert finished.result == "ok"
    assert finished.end_time >= finished.start_time
