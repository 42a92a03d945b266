from typing import Optional

from domain.completion.completion_provider import CompletionProvider
from domain.context.memory.conversation_store import ConversationStore
from domain.orchestration.core.engine_factory import EngineFactory
from domain.orchestration.subagent.fan_out import FanOutCoordinator
from domain.orchestration.subagent.sub_agents_tool import SubAgentsTool
from domain.streaming.event_sink import EventSink
from domain.tool.builtin import build_default_registry
from domain.tool.tool_registry import ToolRegistry
from infrastructure.config.settings import Settings, get_settings
from infrastructure.observability.logging import setup_logging
from infrastructure.persistence.file_conversation_store import FileConversationStore


def create_engine_factory(
    provider: CompletionProvider,
    settings: Optional[Settings] = None,
    conversation_store: Optional[ConversationStore] = None,
    event_sink: Optional[EventSink] = None,
    base_tools: Optional[ToolRegistry] = None
) -> EngineFactory:
    """Wire the top-level engine factory.

    Top-level engines get the base tools plus ``subAgents``; the sub-agents
    it spawns only get the base tools. ``event_sink`` receives the sub-agent
    lifecycle events. Without an explicit store, conversations are written
    to ``settings.conversations_dir``.
    """
    settings = settings or get_settings()
    if base_tools is None:
        base_tools = build_default_registry()
    if conversation_store is None:
        conversation_store = FileConversationStore(settings.conversations_dir)

    sub_agent_factory = EngineFactory(provider, base_tools, settings, conversation_store)
    coordinator = FanOutCoordinator(sub_agent_factory, event_sink)

    tools = base_tools.copy()
    tools.register_tool(SubAgentsTool(coordinator))

    return EngineFactory(provider, tools, settings, sub_agent_factory.conversation_store)


def configure_logging(settings: Optional[Settings] = None):
    settings = settings or get_settings()
    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        service_name=settings.service_name
    )
