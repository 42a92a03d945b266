import asyncio

import pytest

from domain.tool.base_tool import Tool, ToolDescription, ToolResult
from domain.tool.builtin import RandomNumberTool, WeatherTool, build_default_registry
from domain.tool.tool_registry import ToolRegistry


class RenamedWeatherTool(Tool):
    description = ToolDescription(name="weather", description="Replacement forecast", category="replacement")

    async def execute(self, parameters):
        return ToolResult(success=True, result="replaced")


class SlowStartingTool(Tool):
    description = ToolDescription(name="slow", description="Needs setup before use")

    def __init__(self):
        super().__init__()
        self.initialize_calls = 0

    async def initialize(self):
        self.initialize_calls += 1
        await asyncio.sleep(0)

    async def execute(self, parameters):
        return ToolResult(success=True, result="ready")


def test_register_and_lookup():
    registry = ToolRegistry([WeatherTool()])

    assert "weather" in registry
    assert "randomNumber" not in registry
    assert isinstance(registry.get_tool("weather"), WeatherTool)
    assert registry.get_tool("missing") is None
    assert len(registry) == 1


def test_registering_same_name_replaces_tool():
    registry = ToolRegistry([WeatherTool()])

    registry.register_tool(RenamedWeatherTool())

    assert len(registry) == 1
    assert isinstance(registry.get_tool("weather"), RenamedWeatherTool)


def test_search_tools_matches_name_and_description():
    registry = build_default_registry()

    assert [t.name for t in registry.search_tools("RANDOM")] == ["randomNumber"]
    assert [t.name for t in registry.search_tools("location")] == ["weather"]
    assert registry.search_tools("nothing like this") == []


def test_copy_is_independent():
    registry = build_default_registry()
    copied = registry.copy()

    copied.register_tool(RenamedWeatherTool())

    assert isinstance(registry.get_tool("weather"), WeatherTool)
    assert isinstance(copied.get_tool("weather"), RenamedWeatherTool)


@pytest.mark.asyncio
async def test_initialize_all_runs_each_tool_once():
    tool = SlowStartingTool()
    registry = ToolRegistry([tool, RandomNumberTool()])

    await asyncio.gather(registry.initialize_all(), registry.copy().initialize_all())
    await registry.initialize_all()

    assert tool.initialize_calls == 1
    assert all(t.initialized for t in registry.get_available_tools())


def test_tool_info():
    info = WeatherTool().get_info()

    assert info["name"] == "weather"
    assert info["category"] == "information"
    assert info["initialized"] is False
