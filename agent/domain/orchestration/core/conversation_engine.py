"""Conversation engine: drives one model conversation to completion.

Each step asks the completion provider for the next assistant message,
extracts its tag fragments and acts on them in document order:

    thinking               -> thinking event
    ask_followup_question  -> question event, wait on the answer gate,
                              append the answer, start the next step
    attempt_completion     -> answer event, done
    <registered tool>      -> tool call event, run the tool, append the result
    anything else          -> unknown directive (policy decides)

A message without any tags is taken as the final answer. Every step,
including the one that follows an answered question, uses up one unit of
the iteration limit.
"""
from typing import List, Optional
from enum import Enum
import uuid
import structlog

from domain.completion.completion_provider import CompletionProvider
from domain.context.memory.conversation_store import ConversationStore
from domain.exceptions import EngineError, IterationsExhaustedError, UnknownDirectiveError
from domain.models.conversation import Turn
from domain.models.engine_state import EngineState, EngineStatus, TerminationPolicy
from domain.models.protocol import Fragment, FollowupQuestion
from domain.orchestration.core.answer_gate import AnswerGate
from domain.prompts.system_prompt import create_system_prompt
from domain.protocol.directive_decoders import (
    COMPLETION_TAG, FOLLOWUP_QUESTION_TAG, THINKING_TAG,
    decode_completion, decode_followup_question, decode_thought
)
from domain.protocol.tag_extractor import extract_fragments
from domain.streaming.event_sink import EventSink
from domain.tool.tool_executor import ToolDispatcher
from domain.tool.tool_registry import ToolRegistry
from domain.tool.tool_response import format_tool_turn
from infrastructure.observability.logging import agent_logger, metrics

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ITERATIONS = 10


class StepOutcome(str, Enum):
    """What the engine does after handling one model response"""
    CONTINUE = "continue"
    ANSWERED = "answered"
    COMPLETED = "completed"


class ConversationEngine:
    """Bounded state machine for a single conversation"""

    def __init__(
        self,
        prompt: str,
        provider: CompletionProvider,
        tools: ToolRegistry,
        event_sink: Optional[EventSink] = None,
        *,
        system_prompt: Optional[str] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        conversation_history: Optional[List[Turn]] = None,
        conversation_store: Optional[ConversationStore] = None,
        conversation_id: Optional[str] = None,
        exhaustion_policy: TerminationPolicy = TerminationPolicy.SILENT,
        unknown_directive_policy: TerminationPolicy = TerminationPolicy.SILENT,
        engine_id: Optional[str] = None
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")

        self.prompt = prompt
        self.provider = provider
        self.tools = tools
        self.event_sink = event_sink or EventSink()
        self.system_prompt = system_prompt if system_prompt is not None else create_system_prompt(tools)
        self.max_iterations = max_iterations
        self.conversation_store = conversation_store
        self.conversation_id = conversation_id
        self.exhaustion_policy = exhaustion_policy
        self.unknown_directive_policy = unknown_directive_policy

        self.dispatcher = ToolDispatcher(tools)
        self.state = EngineState(engine_id=engine_id or f"engine_{uuid.uuid4().hex[:12]}")
        self._gate = AnswerGate()

        if conversation_history:
            self._turns: List[Turn] = [turn.model_copy() for turn in conversation_history]
        else:
            self._turns = [Turn.user(prompt)]

    @property
    def engine_id(self) -> str:
        return self.state.engine_id

    @property
    def status(self) -> EngineStatus:
        return self.state.status

    @property
    def conversation(self) -> List[Turn]:
        """Copy of the conversation so far"""
        return list(self._turns)

    @property
    def final_answer(self) -> Optional[str]:
        return self.state.final_answer

    async def run(self) -> None:
        """Run the conversation until it completes, is exhausted or fails.

        Results are delivered through the event sink. Errors from the
        completion provider, tools or the conversation store propagate.
        """
        if self.state.status != EngineStatus.IDLE:
            raise EngineError(f"Engine {self.engine_id} has already been started")

        with structlog.contextvars.bound_contextvars(engine_id=self.engine_id):
            self._transition(EngineStatus.RUNNING)
            logger.info("Running task", prompt=self.prompt, history_length=len(self._turns))

            try:
                await self.tools.initialize_all()
                await self._start_persistence()
                with structlog.contextvars.bound_contextvars(conversation_id=self.conversation_id):
                    await self._run_loop()
            except Exception as e:
                if not self.state.status.is_terminal:
                    self.state.error = str(e)
                    self._transition(EngineStatus.FAILED)
                    logger.error("Engine failed", error=str(e), error_type=type(e).__name__)
                raise

    def answer_from_user(self, answer: str) -> bool:
        """Answer the question the engine is waiting on.

        Returns False, and drops the answer, when no question is pending.
        """
        accepted = self._gate.submit(answer)
        if not accepted:
            logger.warning("Answer received while no question is pending", engine_id=self.engine_id)
        return accepted

    async def _run_loop(self):
        while self.state.iteration_count < self.max_iterations:
            self.state.iteration_count += 1
            metrics.increment_counter("engine.iterations")
            logger.debug("Iteration", iteration=self.state.iteration_count)

            response = await self.provider.generate_text(self.system_prompt, list(self._turns))
            self.state.pending_answer = None
            self._turns.append(Turn.assistant(response))

            fragments = extract_fragments(response)
            if not fragments:
                # Untagged prose is the final answer
                await self._complete(response)
                await self._persist()
                return

            outcome = await self._process_fragments(fragments)
            await self._persist()

            if outcome == StepOutcome.COMPLETED:
                return

        await self._exhaust()

    async def _process_fragments(self, fragments: List[Fragment]) -> StepOutcome:
        for fragment in fragments:
            tag_name = fragment.tag_name

            if tag_name == THINKING_TAG:
                thought = decode_thought(fragment.content)
                logger.info("Thinking", text=thought)
                await self.event_sink.thinking(thought)
                continue

            if tag_name == FOLLOWUP_QUESTION_TAG:
                # The rest of this response is abandoned once answered
                await self._ask(decode_followup_question(fragment.content))
                return StepOutcome.ANSWERED

            if tag_name == COMPLETION_TAG:
                completion = decode_completion(fragment.content)
                logger.info("Finished task", result=completion.result, command=completion.command)
                await self._complete(completion.as_answer())
                return StepOutcome.COMPLETED

            invocation = self.dispatcher.resolve(fragment)
            if invocation is None:
                self._handle_unknown_directive(fragment)
                continue

            logger.info("Executing tool", tool_name=invocation.name, parameters=invocation.parameters)
            await self.event_sink.tool_call_from_assistant(invocation)

            result = await self.dispatcher.invoke(invocation)
            tool_turn = format_tool_turn(invocation, result)
            self._turns.append(tool_turn)
            logger.info("Tool response", tool_name=invocation.name, content=tool_turn.content)

        return StepOutcome.CONTINUE

    async def _ask(self, question: FollowupQuestion):
        answer_future = self._gate.open()
        self._transition(EngineStatus.AWAITING_ANSWER)

        try:
            await self.event_sink.question_from_assistant(question)
            answer = await answer_future
        finally:
            self._gate.reset()

        # Pending until the model has responded to it
        self.state.pending_answer = answer
        self._turns.append(Turn.user(answer))
        logger.info("User answered", answer=answer)

        self._transition(EngineStatus.RUNNING)

    async def _complete(self, answer: str):
        self.state.final_answer = answer
        await self.event_sink.answer_from_assistant(answer)
        self._transition(EngineStatus.COMPLETED)
        agent_logger.log_agent_event("completed", self.engine_id, self.state.get_state_summary())

    def _handle_unknown_directive(self, fragment: Fragment):
        metrics.increment_counter("engine.unknown_directives")

        if self.unknown_directive_policy == TerminationPolicy.FAIL:
            raise UnknownDirectiveError(fragment.tag_name)

        # No turn is appended, so the model never learns the tag was ignored
        logger.warning("Tool not found", tag_name=fragment.tag_name)

    async def _exhaust(self):
        self._transition(EngineStatus.EXHAUSTED)
        logger.warning("Iteration limit reached", max_iterations=self.max_iterations)
        agent_logger.log_agent_event("exhausted", self.engine_id, self.state.get_state_summary())

        if self.exhaustion_policy == TerminationPolicy.FAIL:
            raise IterationsExhaustedError(self.max_iterations, engine_id=self.engine_id)

    async def _start_persistence(self):
        if self.conversation_store is None:
            return

        if self.conversation_id is None:
            record = await self.conversation_store.start_new_conversation(self._turns)
            self.conversation_id = record.id
        else:
            await self._persist()

    async def _persist(self):
        if self.conversation_store is None or self.conversation_id is None:
            return
        await self.conversation_store.update_conversation(self.conversation_id, self._turns)

    def _transition(self, status: EngineStatus):
        previous = self.state.status
        self.state.update_status(status)
        agent_logger.log_state_transition(
            engine_id=self.engine_id,
            from_status=previous.value,
            to_status=status.value,
            iteration=self.state.iteration_count
        )
