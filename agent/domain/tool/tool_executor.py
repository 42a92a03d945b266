from typing import Optional
import time
import structlog

from domain.models.protocol import Fragment, ToolInvocation
from domain.protocol.directive_decoders import RESERVED_TAGS
from domain.protocol.parameter_decoder import decode_parameters
from domain.tool.base_tool import ToolResult
from domain.tool.tool_registry import ToolRegistry
from infrastructure.observability.logging import agent_logger, metrics

logger = structlog.get_logger(__name__)


class ToolDispatcher:
    """Resolves tool fragments against a registry and runs the tools.

    Resolution and invocation are separate steps so the engine can announce
    a tool call before it executes.
    """

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    def resolve(self, fragment: Fragment) -> Optional[ToolInvocation]:
        """Decode a fragment into an invocation, or None if no tool matches"""

        if fragment.tag_name in RESERVED_TAGS or fragment.tag_name not in self.registry:
            logger.debug("No tool registered for tag", tag_name=fragment.tag_name)
            return None

        return ToolInvocation(
            name=fragment.tag_name,
            parameters=decode_parameters(fragment.content)
        )

    async def invoke(self, invocation: ToolInvocation) -> ToolResult:
        """Execute a resolved invocation.

        The tool's own result is returned unmodified. Exceptions raised by
        the tool are not caught here.
        """
        tool = self.registry.get_tool(invocation.name)
        if tool is None:
            raise KeyError(f"Tool not registered: {invocation.name}")

        started = time.perf_counter()
        result = await tool.execute(invocation.parameters)
        duration_ms = (time.perf_counter() - started) * 1000

        tool.update_activity()
        metrics.record_latency("tool_execution", duration_ms, tags={"tool": invocation.name})
        agent_logger.log_tool_execution(
            tool_name=invocation.name,
            input_data=invocation.parameters,
            output_data={"result": result.result} if result.success else None,
            duration_ms=duration_ms,
            success=result.success,
            error=result.error
        )

        return result
