import json

import pytest
import structlog

from domain.completion.completion_provider import ScriptedCompletionProvider
from domain.models.conversation import Role
from domain.orchestration.bootstrap import configure_logging, create_engine_factory
from domain.orchestration.subagent.sub_agents_tool import SubAgentsTool
from domain.tool.builtin.weather import WeatherTool
from domain.tool.tool_registry import ToolRegistry
from infrastructure.config.settings import Settings
from infrastructure.persistence.file_conversation_store import FileConversationStore

PROMPTS_REQUIRED = "Prompts array is required and must contain at least one prompt for sub-agents execution"


class FailingCoordinator:
    async def execute(self, prompts):
        raise RuntimeError("coordinator down")


@pytest.mark.asyncio
@pytest.mark.parametrize("parameters", [{}, {"prompts": []}, {"prompts": "not a list"}, {"prompts": None}])
async def test_invalid_prompts_are_rejected(parameters, routed_provider, settings):
    factory = create_engine_factory(routed_provider({}), settings)
    tool = factory.tools.get_tool("subAgents")

    result = await tool.execute(parameters)

    assert result.success is False
    assert result.error == PROMPTS_REQUIRED


@pytest.mark.asyncio
async def test_coordinator_errors_become_tool_failures():
    tool = SubAgentsTool(FailingCoordinator())

    result = await tool.execute({"prompts": ["a"]})

    assert result.success is False
    assert result.error == "Failed to execute sub-agents: coordinator down"


def test_sub_agents_cannot_spawn_sub_agents(routed_provider, settings):
    factory = create_engine_factory(routed_provider({}), settings)
    tool = factory.tools.get_tool("subAgents")

    assert "weather" in factory.tools
    assert "randomNumber" in factory.tools
    assert "subAgents" not in tool.coordinator.engine_factory.tools
    assert tool.coordinator.engine_factory.conversation_store is factory.conversation_store


def test_base_tools_are_not_modified(routed_provider, settings):
    base_tools = ToolRegistry([WeatherTool()])

    factory = create_engine_factory(routed_provider({}), settings, base_tools=base_tools)

    assert "subAgents" in factory.tools
    assert "subAgents" not in base_tools


@pytest.mark.asyncio
async def test_engine_fans_out_through_the_tool(routed_provider, settings, sink):
    provider = routed_provider({
        "Compare two cities": [
            '<subAgents><prompts>["Weather in Oslo", "Weather in Rome"]</prompts></subAgents>',
            "<attempt_completion><result>Both are cloudy</result></attempt_completion>",
        ],
        "Weather in Oslo": [
            "<weather><location>Oslo</location></weather>",
            "<attempt_completion><result>Oslo is cloudy</result></attempt_completion>",
        ],
        "Weather in Rome": [
            "<attempt_completion><result>Rome is cloudy</result></attempt_completion>",
        ],
    })
    factory = create_engine_factory(provider, settings, event_sink=sink)
    engine = factory.create("Compare two cities", sink)

    await engine.run()

    assert sink.of("answer") == ["Both are cloudy"]
    assert len(sink.of("sub_agent_completed")) == 2

    tool_turn = engine.conversation[2]
    assert tool_turn.role == Role.USER
    header, payload = tool_turn.content.split(" Result: ", 1)
    assert header == "[subAgents for '[\"Weather in Oslo\", \"Weather in Rome\"]']"
    assert json.loads(payload) == [
        "Sub-agent 1 (Weather in Oslo):\nOslo is cloudy",
        "Sub-agent 2 (Weather in Rome):\nRome is cloudy",
    ]


@pytest.mark.asyncio
async def test_scripted_provider_drives_a_top_level_engine(settings):
    provider = ScriptedCompletionProvider(["<weather><location>Oslo</location></weather>", "Cloudy"])
    factory = create_engine_factory(provider, settings)
    engine = factory.create("Weather?")

    await engine.run()

    assert engine.final_answer == "Cloudy"
    assert engine.conversation[2].content == (
        "[weather for 'Oslo'] Result: It is currently 20 degrees and cloudy in Oslo"
    )


def test_configure_logging_accepts_console_format():
    try:
        configure_logging(Settings(_env_file=None, log_format="console", log_level="DEBUG"))
        structlog.get_logger("test").info("configured")
    finally:
        structlog.reset_defaults()
        structlog.contextvars.clear_contextvars()


@pytest.mark.asyncio
async def test_conversations_are_written_to_configured_directory(tmp_path):
    settings = Settings(_env_file=None, conversations_dir=str(tmp_path / "history"))
    factory = create_engine_factory(ScriptedCompletionProvider(["Done"]), settings)

    assert isinstance(factory.conversation_store, FileConversationStore)

    engine = factory.create("Remember me")
    await engine.run()

    assert (tmp_path / "history" / f"{engine.conversation_id}.json").exists()


def test_explicit_store_wins_over_configured_directory(routed_provider, settings, store):
    factory = create_engine_factory(routed_provider({}), settings, conversation_store=store)

    assert factory.conversation_store is store
