from typing import Dict, Any, Optional
from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum

from domain.models.conversation import utc_now


class EngineStatus(str, Enum):
    """Conversation engine lifecycle"""
    IDLE = "idle"
    RUNNING = "running"
    AWAITING_ANSWER = "awaiting_answer"
    COMPLETED = "completed"
    EXHAUSTED = "exhausted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (EngineStatus.COMPLETED, EngineStatus.EXHAUSTED, EngineStatus.FAILED)


class TerminationPolicy(str, Enum):
    """How the engine reports exhaustion and unknown directives"""
    SILENT = "silent"
    FAIL = "fail"


class EngineState(BaseModel):
    """Mutable bookkeeping for one engine run"""
    engine_id: str
    status: EngineStatus = Field(default=EngineStatus.IDLE)
    iteration_count: int = 0
    awaiting_answer: bool = False
    pending_answer: Optional[str] = None
    final_answer: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    last_activity: datetime = Field(default_factory=utc_now)

    def update_status(self, status: EngineStatus):
        """Update engine status"""
        self.status = status
        self.awaiting_answer = status == EngineStatus.AWAITING_ANSWER
        self.last_activity = utc_now()

    def get_state_summary(self) -> Dict[str, Any]:
        """Get a summary of the current state"""
        return {
            "engine_id": self.engine_id,
            "status": self.status.value,
            "iteration_count": self.iteration_count,
            "awaiting_answer": self.awaiting_answer,
            "has_final_answer": self.final_answer is not None,
            "last_activity": self.last_activity.isoformat()
        }
