from typing import Dict, Any, Optional
import random

from domain.tool.base_tool import (
    Tool, ToolDescription, ToolExample, ToolExampleParameter, ToolParameter, ToolResult
)


class RandomNumberTool(Tool):
    """Draws an integer from an inclusive range"""

    description = ToolDescription(
        name="randomNumber",
        description="Generate a random number between a minimum and maximum value",
        category="utility",
        parameters=[
            ToolParameter(name="min", description="The minimum value of the random number", usage="minimum value"),
            ToolParameter(name="max", description="The maximum value of the random number", usage="maximum value"),
        ],
        examples=[
            ToolExample(
                description="Generate a random number between 1 and 10",
                parameters=[
                    ToolExampleParameter(name="min", value="1"),
                    ToolExampleParameter(name="max", value="10"),
                ]
            )
        ]
    )

    def __init__(self, rng: Optional[random.Random] = None):
        super().__init__()
        self.rng = rng or random.Random()

    async def execute(self, parameters: Dict[str, Any]) -> ToolResult:
        try:
            low = int(parameters.get("min") or 0)
            high = int(parameters.get("max") or 100)
        except (TypeError, ValueError):
            return ToolResult(success=False, error="min and max must be integers")

        if low > high:
            return ToolResult(success=False, error=f"min ({low}) is greater than max ({high})")

        return ToolResult(success=True, result=str(self.rng.randint(low, high)))
