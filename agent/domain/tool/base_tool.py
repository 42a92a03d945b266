from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
import asyncio
from pydantic import BaseModel, Field

from domain.models.conversation import utc_now


class ToolParameter(BaseModel):
    """A parameter the model passes as a child tag"""
    name: str
    description: str
    usage: str = Field(description="Placeholder text shown in the usage block")
    required: bool = False


class ToolExampleParameter(BaseModel):
    name: str
    value: str


class ToolExample(BaseModel):
    description: str
    parameters: List[ToolExampleParameter] = Field(default_factory=list)


class ToolDescription(BaseModel):
    """Everything the system prompt needs to teach the model a tool"""
    name: str = Field(description="Tag name the model uses to invoke the tool")
    description: str
    category: str = "general"
    parameters: List[ToolParameter] = Field(default_factory=list)
    examples: List[ToolExample] = Field(default_factory=list)


class ToolResult(BaseModel):
    """Outcome reported by a tool"""
    success: bool
    result: Optional[str] = None
    error: Optional[str] = None


class Tool(ABC):
    """Base class for tools the model can invoke"""

    description: ToolDescription

    def __init__(self):
        self.created_at = utc_now()
        self.last_active = utc_now()
        self.initialized = False
        self._initialize_lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return self.description.name

    async def initialize(self) -> None:
        """Prepare any resources the tool needs"""
        pass

    async def ensure_initialized(self):
        """Run ``initialize`` once, even when engines start concurrently"""

        async with self._initialize_lock:
            if not self.initialized:
                await self.initialize()
                self.initialized = True

    @abstractmethod
    async def execute(self, parameters: Dict[str, Any]) -> ToolResult:
        """Run the tool with decoded parameters"""
        pass

    def update_activity(self):
        """Update last activity timestamp"""
        self.last_active = utc_now()

    def get_info(self) -> Dict[str, Any]:
        """Get tool information"""
        return {
            "name": self.name,
            "description": self.description.description,
            "category": self.description.category,
            "initialized": self.initialized,
            "created_at": self.created_at.isoformat(),
            "last_active": self.last_active.isoformat()
        }
