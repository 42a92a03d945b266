from domain.tool.builtin.random_number import RandomNumberTool
from domain.tool.builtin.weather import WeatherTool
from domain.tool.tool_registry import ToolRegistry


def build_default_registry() -> ToolRegistry:
    """Registry with the built-in tools sub-agents may use"""
    return ToolRegistry([WeatherTool(), RandomNumberTool()])


__all__ = ["RandomNumberTool", "WeatherTool", "build_default_registry"]
