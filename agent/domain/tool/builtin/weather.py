from typing import Dict, Any

from domain.tool.base_tool import (
    Tool, ToolDescription, ToolExample, ToolExampleParameter, ToolParameter, ToolResult
)


class WeatherTool(Tool):
    """Canned weather report, useful for exercising the tool loop"""

    description = ToolDescription(
        name="weather",
        description="Get the weather in a specific location",
        category="information",
        parameters=[
            ToolParameter(
                name="location",
                description="The location to get the weather for",
                usage="location to get the weather for",
                required=True
            )
        ],
        examples=[
            ToolExample(
                description="Get the weather in Copenhagen, Denmark",
                parameters=[ToolExampleParameter(name="location", value="Copenhagen, Denmark")]
            )
        ]
    )

    async def execute(self, parameters: Dict[str, Any]) -> ToolResult:
        location = parameters.get("location")
        if not location:
            return ToolResult(success=False, error="location is required")

        return ToolResult(success=True, result=f"It is currently 20 degrees and cloudy in {location}")
