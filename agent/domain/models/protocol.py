from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field


class Fragment(BaseModel):
    """A tag name and the raw text between its opening and closing markers"""
    tag_name: str
    content: str


class ToolInvocation(BaseModel):
    """A decoded request from the model to run a registered tool"""
    name: str
    parameters: Dict[str, Any] = Field(default_factory=dict)


class FollowupQuestion(BaseModel):
    """A question the model asks the user, with suggested answers"""
    question: str = ""
    options: List[str] = Field(default_factory=list, description="Non-blank suggestions in source order")


class CompletionDirective(BaseModel):
    """The model's final answer, optionally with a command to run"""
    result: str = ""
    command: Optional[str] = None

    def as_answer(self) -> str:
        """Render the directive as a single human-readable answer"""
        if self.command:
            return f"{self.result} (Command: {self.command})"
        return self.result
