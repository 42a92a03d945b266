from typing import Dict, List, Optional, Iterable

from domain.tool.base_tool import Tool


class ToolRegistry:
    """Registry of the tools available to one engine configuration.

    Registries are passed explicitly to the engine; there is no global
    registry to look tools up from.
    """

    def __init__(self, tools: Optional[Iterable[Tool]] = None):
        self.tools: Dict[str, Tool] = {}

        for tool in tools or []:
            self.register_tool(tool)

    def register_tool(self, tool: Tool):
        """Register a new tool, replacing any tool with the same name"""
        self.tools[tool.name] = tool

    def get_tool(self, tool_name: str) -> Optional[Tool]:
        """Get a tool by the tag name the model uses for it"""

        return self.tools.get(tool_name)

    def get_available_tools(self) -> List[Tool]:
        """Get all registered tools in registration order"""

        return list(self.tools.values())

    def search_tools(self, query: str) -> List[Tool]:
        """Search tools by name or description"""

        query_lower = query.lower()
        matching_tools = []

        for tool in self.tools.values():
            name = tool.name.lower()
            description = tool.description.description.lower()

            if query_lower in name or query_lower in description:
                matching_tools.append(tool)

        return matching_tools

    async def initialize_all(self):
        """Initialize every registered tool that has not been initialized yet"""

        for tool in self.tools.values():
            await tool.ensure_initialized()

    def copy(self) -> "ToolRegistry":
        return ToolRegistry(self.tools.values())

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self.tools

    def __len__(self) -> int:
        return len(self.tools)
