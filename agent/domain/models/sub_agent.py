from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum

from domain.models.conversation import utc_now


class SubAgentStatus(str, Enum):
    """Sub-agent lifecycle status"""
    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


class SubAgentEvent(BaseModel):
    """Lifecycle notification for one fan-out sub-agent"""
    id: str = Field(description="Conversation id bound to the sub-agent")
    prompt: str
    index: int = Field(description="Position of the prompt in the batch")
    status: SubAgentStatus = Field(default=SubAgentStatus.STARTED)
    start_time: datetime = Field(default_factory=utc_now)
    end_time: Optional[datetime] = None
    result: Optional[str] = None
    error: Optional[str] = None

    def finish(self, status: SubAgentStatus, result: Optional[str] = None,
               error: Optional[str] = None) -> "SubAgentEvent":
        """Return a copy of this event marking the sub-agent as settled"""
        return self.model_copy(update={
            "status": status,
            "end_time": utc_now(),
            "result": result,
            "error": error
        })
