from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Union
import asyncio
import structlog

from domain.exceptions import CompletionProviderError
from domain.models.conversation import Turn

logger = structlog.get_logger(__name__)

ScriptStep = Union[str, BaseException, Callable[[List[Turn]], str]]


class CompletionProvider(ABC):
    """Model backend the engine asks for the next assistant message.

    Transport, auth and rate-limit failures are raised to the caller; any
    retry policy belongs to the implementation.
    """

    @property
    def model_name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    async def generate_text(self, system_prompt: str, conversation: List[Turn]) -> str:
        """Generate the next assistant message for the conversation"""
        pass


class ScriptedCompletionProvider(CompletionProvider):
    """Plays back a fixed script of responses, for development and tests.

    Each step is either the response text, an exception to raise, or a
    callable that receives the conversation and returns the text.
    """

    def __init__(self, responses: Iterable[ScriptStep], latency: float = 0.0):
        self.responses: List[ScriptStep] = list(responses)
        self.latency = latency
        self.calls: List[Dict[str, Any]] = []
        self._position = 0

    @property
    def model_name(self) -> str:
        return "scripted"

    @property
    def remaining(self) -> int:
        return len(self.responses) - self._position

    async def generate_text(self, system_prompt: str, conversation: List[Turn]) -> str:
        self.calls.append({
            "system_prompt": system_prompt,
            "conversation": [turn.model_copy() for turn in conversation]
        })

        if self.latency:
            await asyncio.sleep(self.latency)

        if self._position >= len(self.responses):
            raise CompletionProviderError(
                f"Scripted provider exhausted after {len(self.responses)} responses"
            )

        step = self.responses[self._position]
        self._position += 1
        logger.debug("Playing scripted response", position=self._position)

        if isinstance(step, BaseException):
            raise step
        if callable(step):
            return step(conversation)
        return step
