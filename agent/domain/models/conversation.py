from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime, timezone
from enum import Enum


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    """Author of a conversation turn"""
    USER = "user"
    ASSISTANT = "assistant"


class Turn(BaseModel):
    """One role-tagged message in a conversation.

    Roles usually alternate, but nothing enforces it: tool results and user
    answers are both appended as user turns, so consumers must tolerate
    repeated roles.
    """
    role: Role
    content: str
    timestamp: Optional[datetime] = Field(default_factory=utc_now)

    @classmethod
    def user(cls, content: str) -> "Turn":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Turn":
        return cls(role=Role.ASSISTANT, content=content)


class ConversationRecord(BaseModel):
    """A persisted conversation with its metadata"""
    id: str = Field(description="Unique conversation identifier")
    title: str = Field(description="Human-readable title")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    turns: List[Turn] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary without the turn contents"""
        return {
            "id": self.id,
            "title": self.title,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "turn_count": len(self.turns),
            "metadata": self.metadata
        }
