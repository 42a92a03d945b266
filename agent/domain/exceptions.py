from typing import Optional


class EngineError(Exception):
    """Base error raised by the conversation engine and its collaborators"""


class IterationsExhaustedError(EngineError):
    """Raised when an engine runs out of iterations under the fail policy"""

    def __init__(self, max_iterations: int, engine_id: Optional[str] = None):
        self.max_iterations = max_iterations
        self.engine_id = engine_id
        super().__init__(f"Conversation did not complete within {max_iterations} iterations")


class UnknownDirectiveError(EngineError):
    """Raised for an unmatched tag name under the fail policy"""

    def __init__(self, tag_name: str):
        self.tag_name = tag_name
        super().__init__(f"Unknown directive: {tag_name}")


class CompletionProviderError(EngineError):
    """Raised by completion providers that cannot produce a response"""


class ConversationNotFoundError(EngineError):
    """Raised when a persisted conversation does not exist"""

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(f"Conversation with ID {conversation_id} not found")
