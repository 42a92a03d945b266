from typing import Dict, Any
import structlog

from domain.orchestration.subagent.fan_out import FanOutCoordinator
from domain.tool.base_tool import (
    Tool, ToolDescription, ToolExample, ToolExampleParameter, ToolParameter, ToolResult
)

logger = structlog.get_logger(__name__)


class SubAgentsTool(Tool):
    """Lets the model fan a batch of prompts out to parallel sub-agents.

    The coordinator's engines are built from their own registry, which
    should not contain this tool, so sub-agents cannot spawn sub-agents.
    """

    description = ToolDescription(
        name="subAgents",
        description=(
            "Start multiple sub-agents to handle different tasks or questions. A single sub-agent "
            "takes a prompt and returns an answer in form of a string. The sub-agents will be "
            "executed in parallel and the results will be returned as an array of strings."
        ),
        category="orchestration",
        parameters=[
            ToolParameter(
                name="prompts",
                description="Array of prompts or questions for the sub-agents to handle",
                usage="Array of specific tasks or questions you want the sub-agents to work on",
                required=True
            )
        ],
        examples=[
            ToolExample(
                description="Start multiple sub-agents to analyze different aspects of a problem",
                parameters=[ToolExampleParameter(
                    name="prompts",
                    value='["Analyze this code for performance issues", "Check for security vulnerabilities"]'
                )]
            ),
            ToolExample(
                description="Start sub-agents to handle different parts of a project",
                parameters=[ToolExampleParameter(
                    name="prompts",
                    value='["Create a project plan", "Design the database schema", "Plan the API endpoints"]'
                )]
            )
        ]
    )

    def __init__(self, coordinator: FanOutCoordinator):
        super().__init__()
        self.coordinator = coordinator

    async def execute(self, parameters: Dict[str, Any]) -> ToolResult:
        prompts = parameters.get("prompts")

        if not isinstance(prompts, list) or len(prompts) == 0:
            return ToolResult(
                success=False,
                error="Prompts array is required and must contain at least one prompt for sub-agents execution"
            )

        try:
            return await self.coordinator.execute([str(prompt) for prompt in prompts])
        except Exception as e:
            logger.error("Failed to execute sub-agents", error=str(e))
            return ToolResult(success=False, error=f"Failed to execute sub-agents: {e}")
