from typing import List, Optional
from dataclasses import dataclass
import asyncio
import json
import structlog

from domain.models.sub_agent import SubAgentEvent, SubAgentStatus
from domain.orchestration.core.conversation_engine import ConversationEngine
from domain.orchestration.core.engine_factory import EngineFactory
from domain.streaming.event_sink import EventSink
from domain.tool.base_tool import ToolResult

logger = structlog.get_logger(__name__)

NO_ANSWER = "did not provide a final answer"


class _AnswerCollector(EventSink):
    """Private sink that keeps a sub-agent's final answer"""

    def __init__(self):
        self.answer: Optional[str] = None

    async def answer_from_assistant(self, answer: str) -> None:
        self.answer = answer


@dataclass
class SubAgentRun:
    index: int
    prompt: str
    engine: ConversationEngine
    collector: _AnswerCollector
    event: SubAgentEvent
    answer: Optional[str] = None
    error: Optional[str] = None
    failure: Optional[str] = None

    @property
    def label(self) -> str:
        return f"Sub-agent {self.index + 1}"


class FanOutCoordinator:
    """Runs one independent engine per prompt and aggregates the answers.

    Engines run concurrently and share only the factory's read-only
    configuration. Each is bound to a fresh conversation record. There is
    no way to stop a sub-agent early, and a sub-agent that asks a follow-up
    question waits until someone answers it through its engine.
    """

    def __init__(self, engine_factory: EngineFactory, event_sink: Optional[EventSink] = None):
        self.engine_factory = engine_factory
        self.event_sink = event_sink or EventSink()

    async def execute(self, prompts: List[str]) -> ToolResult:
        """Run all prompts and build the combined result"""

        if not prompts:
            raise ValueError("At least one prompt is required")

        runs = [await self._prepare(index, prompt) for index, prompt in enumerate(prompts)]

        await asyncio.gather(*(self._run_sub_agent(run) for run in runs))

        return self._aggregate(runs)

    async def _prepare(self, index: int, prompt: str) -> SubAgentRun:
        conversation = await self.engine_factory.conversation_store.create_empty_conversation()
        collector = _AnswerCollector()
        engine = self.engine_factory.create(prompt, collector, conversation_id=conversation.id)

        return SubAgentRun(
            index=index,
            prompt=prompt,
            engine=engine,
            collector=collector,
            event=SubAgentEvent(id=conversation.id, prompt=prompt, index=index)
        )

    async def _notify(self, handler_name: str, event: SubAgentEvent):
        # Lifecycle events are best effort and never affect the aggregated result
        try:
            await getattr(self.event_sink, handler_name)(event)
        except Exception as e:
            logger.error("Error in sub-agent event handler",
                         handler=handler_name,
                         index=event.index + 1,
                         error=str(e))

    async def _run_sub_agent(self, run: SubAgentRun):
        logger.info("Starting sub-agent", index=run.index + 1, prompt=run.prompt)
        await self._notify("sub_agent_started", run.event)

        try:
            await run.engine.run()
        except Exception as e:
            run.error = str(e) or type(e).__name__
            run.failure = f"{run.label} failed: {run.error}"
            logger.error("Sub-agent error", index=run.index + 1, error=run.error)
        else:
            run.answer = run.collector.answer
            if run.answer is None:
                run.error = NO_ANSWER
                run.failure = f"{run.label} {NO_ANSWER}"

        if run.answer is not None:
            logger.info("Sub-agent completed", index=run.index + 1, answer=run.answer[:100])
            await self._notify(
                "sub_agent_completed", run.event.finish(SubAgentStatus.COMPLETED, result=run.answer)
            )
        else:
            await self._notify(
                "sub_agent_failed", run.event.finish(SubAgentStatus.FAILED, error=run.error)
            )

    def _aggregate(self, runs: List[SubAgentRun]) -> ToolResult:
        results = []
        errors = []

        for run in runs:
            if run.answer is not None:
                results.append(f"{run.label} ({run.prompt}):\n{run.answer}")
            else:
                errors.append(run.failure)

        if not results:
            return ToolResult(success=False, error="All sub-agents failed:\n" + "\n".join(errors))

        result = json.dumps(results, indent=2, ensure_ascii=False)
        if errors:
            result = f"{result}\n\nErrors:\n" + "\n".join(errors)

        return ToolResult(success=True, result=result)
