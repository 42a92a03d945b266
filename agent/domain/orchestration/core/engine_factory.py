from typing import List, Optional

from domain.completion.completion_provider import CompletionProvider
from domain.context.memory.conversation_store import ConversationStore, InMemoryConversationStore
from domain.orchestration.core.conversation_engine import ConversationEngine
from domain.models.conversation import Turn
from domain.prompts.system_prompt import create_system_prompt
from domain.streaming.event_sink import EventSink
from domain.tool.tool_registry import ToolRegistry
from infrastructure.config.settings import Settings, get_settings


class EngineFactory:
    """Builds engines that share one read-only provider, tool set and settings"""

    def __init__(
        self,
        provider: CompletionProvider,
        tools: ToolRegistry,
        settings: Optional[Settings] = None,
        conversation_store: Optional[ConversationStore] = None,
        system_prompt: Optional[str] = None
    ):
        self.provider = provider
        self.tools = tools
        self.settings = settings or get_settings()
        self.conversation_store = conversation_store or InMemoryConversationStore()
        self.system_prompt = system_prompt or create_system_prompt(tools)

    def create(
        self,
        prompt: str,
        event_sink: Optional[EventSink] = None,
        conversation_id: Optional[str] = None,
        conversation_history: Optional[List[Turn]] = None
    ) -> ConversationEngine:
        """Create an engine for one prompt"""

        return ConversationEngine(
            prompt,
            self.provider,
            self.tools,
            event_sink,
            system_prompt=self.system_prompt,
            max_iterations=self.settings.max_iterations,
            conversation_history=conversation_history,
            conversation_store=self.conversation_store,
            conversation_id=conversation_id,
            exhaustion_policy=self.settings.exhaustion_policy,
            unknown_directive_policy=self.settings.unknown_directive_policy
        )
