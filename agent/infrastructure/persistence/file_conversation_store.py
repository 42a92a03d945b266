from typing import List, Optional, Union
from pathlib import Path
import asyncio
import structlog

from pydantic import ValidationError

from domain.context.memory.conversation_store import ConversationStore
from domain.models.conversation import ConversationRecord

logger = structlog.get_logger(__name__)


class FileConversationStore(ConversationStore):
    """Stores each conversation as ``<id>.json`` under a directory.

    Disk access runs in worker threads so concurrent engines do not stall
    the event loop while persisting.
    """

    def __init__(self, conversations_dir: Union[str, Path]):
        self.conversations_dir = Path(conversations_dir)
        self._lock = asyncio.Lock()

    def _conversation_path(self, conversation_id: str) -> Path:
        return self.conversations_dir / f"{conversation_id}.json"

    def _read(self, path: Path) -> Optional[ConversationRecord]:
        try:
            return ConversationRecord.model_validate_json(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValidationError) as e:
            logger.warning("Skipping unreadable conversation file", path=str(path), error=str(e))
            return None

    def _write(self, conversation: ConversationRecord):
        self.conversations_dir.mkdir(parents=True, exist_ok=True)
        self._conversation_path(conversation.id).write_text(
            conversation.model_dump_json(indent=2), encoding="utf-8"
        )

    def _read_all(self) -> List[ConversationRecord]:
        if not self.conversations_dir.exists():
            return []
        return [
            conversation
            for conversation in (self._read(path) for path in self.conversations_dir.glob("*.json"))
            if conversation is not None
        ]

    def _delete(self, conversation_id: str) -> bool:
        path = self._conversation_path(conversation_id)
        if not path.exists():
            return False
        path.unlink()
        return True

    async def save_conversation(self, conversation: ConversationRecord) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write, conversation)

    async def get_conversation(self, conversation_id: str) -> Optional[ConversationRecord]:
        async with self._lock:
            return await asyncio.to_thread(self._read, self._conversation_path(conversation_id))

    async def list_conversations(self) -> List[ConversationRecord]:
        async with self._lock:
            conversations = await asyncio.to_thread(self._read_all)

        return sorted(conversations, key=lambda c: c.updated_at, reverse=True)

    async def delete_conversation(self, conversation_id: str) -> bool:
        async with self._lock:
            return await asyncio.to_thread(self._delete, conversation_id)
