from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional
import asyncio
import random
import string
import time
import structlog

from domain.exceptions import ConversationNotFoundError
from domain.models.conversation import ConversationRecord, Role, Turn, utc_now

logger = structlog.get_logger(__name__)

DEFAULT_TITLE = "New Conversation"
TITLE_LENGTH = 50


def generate_conversation_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"conv_{int(time.time() * 1000)}_{suffix}"


def generate_title(turns: List[Turn]) -> str:
    """Derive a title from the first line of the first user turn"""

    for turn in turns:
        if turn.role == Role.USER:
            title = turn.content.strip().split("\n")[0][:TITLE_LENGTH]
            return f"{title}..." if len(title) == TITLE_LENGTH else title
    return DEFAULT_TITLE


class ConversationStore(ABC):
    """Persistence collaborator that mirrors engine conversations"""

    async def create_empty_conversation(self) -> ConversationRecord:
        """Create a conversation with no turns"""
        return await self.start_new_conversation([])

    async def start_new_conversation(
        self,
        turns: Optional[List[Turn]] = None,
        title: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> ConversationRecord:
        """Start and persist a new conversation"""

        initial_turns = list(turns or [])
        conversation = ConversationRecord(
            id=generate_conversation_id(),
            title=title or generate_title(initial_turns),
            turns=initial_turns,
            metadata=metadata or {}
        )
        await self.save_conversation(conversation)

        logger.info("Started new conversation", **conversation.get_summary())
        return conversation

    async def update_conversation(
        self,
        conversation_id: str,
        turns: List[Turn],
        update_title: bool = False
    ) -> ConversationRecord:
        """Replace the turns of an existing conversation"""

        conversation = await self.get_conversation(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)

        conversation.turns = list(turns)
        conversation.updated_at = utc_now()

        if update_title and turns:
            conversation.title = generate_title(conversation.turns)

        await self.save_conversation(conversation)
        return conversation

    @abstractmethod
    async def save_conversation(self, conversation: ConversationRecord) -> None:
        pass

    @abstractmethod
    async def get_conversation(self, conversation_id: str) -> Optional[ConversationRecord]:
        pass

    @abstractmethod
    async def list_conversations(self) -> List[ConversationRecord]:
        """All conversations, most recently updated first"""
        pass

    @abstractmethod
    async def delete_conversation(self, conversation_id: str) -> bool:
        pass


class InMemoryConversationStore(ConversationStore):
    """Keeps conversations for the lifetime of the process"""

    def __init__(self):
        self.conversations: Dict[str, ConversationRecord] = {}
        self._lock = asyncio.Lock()

    async def save_conversation(self, conversation: ConversationRecord) -> None:
        async with self._lock:
            self.conversations[conversation.id] = conversation.model_copy(deep=True)

    async def get_conversation(self, conversation_id: str) -> Optional[ConversationRecord]:
        async with self._lock:
            conversation = self.conversations.get(conversation_id)
            return conversation.model_copy(deep=True) if conversation else None

    async def list_conversations(self) -> List[ConversationRecord]:
        async with self._lock:
            conversations = [c.model_copy(deep=True) for c in self.conversations.values()]
        return sorted(conversations, key=lambda c: c.updated_at, reverse=True)

    async def delete_conversation(self, conversation_id: str) -> bool:
        async with self._lock:
            return self.conversations.pop(conversation_id, None) is not None
