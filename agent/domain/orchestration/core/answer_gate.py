from typing import Optional
import asyncio
import threading

from domain.exceptions import EngineError


class AnswerGate:
    """One-shot handshake between an engine asking a question and whoever answers it.

    The engine opens the gate and awaits the returned future; an external
    actor calls ``submit()``. Only one question can be outstanding at a
    time. There is no timeout: an unanswered question suspends the waiter
    until the answer arrives. ``submit()`` may be called from another
    thread.
    """

    def __init__(self):
        self._future: Optional[asyncio.Future] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()

    @property
    def awaiting(self) -> bool:
        with self._lock:
            return self._future is not None

    def open(self) -> asyncio.Future:
        """Open the gate for a new question and return the answer future"""

        loop = asyncio.get_running_loop()
        with self._lock:
            if self._future is not None:
                raise EngineError("A question is already awaiting an answer")
            self._loop = loop
            self._future = loop.create_future()
            return self._future

    async def wait(self) -> str:
        """Open the gate and suspend until an answer is submitted"""
        return await self.open()

    def submit(self, answer: str) -> bool:
        """Answer the outstanding question; returns False if none is pending"""

        with self._lock:
            future, loop = self._future, self._loop
            if future is None or future.done():
                return False
            # Detach now so a second submit cannot answer the same question
            self._future = None

        loop.call_soon_threadsafe(self._resolve, future, answer)
        return True

    def reset(self):
        """Drop an outstanding question without answering it"""

        with self._lock:
            future, self._future = self._future, None

        if future is not None and not future.done():
            future.cancel()

    @staticmethod
    def _resolve(future: asyncio.Future, answer: str):
        if not future.done():
            future.set_result(answer)
