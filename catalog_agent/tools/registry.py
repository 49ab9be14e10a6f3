"""Tools registry for managing agent tools."""

import asyncio
import json
from typing import Any

from catalog_agent.models.agent import AgentContext
from catalog_agent.models.messages import ToolCall
from catalog_agent.tools.base import (
    ToolArgumentsError,
    ToolDefinition,
    ToolError,
    ToolExecutionError,
    ToolTimeoutError,
    UnknownToolError,
)
from catalog_agent.utils.logging import get_logger

logger = get_logger(__name__)


class ToolsRegistry:
    """Registry mapping tool names to their schema and handler."""

    def __init__(self, tools: list[ToolDefinition] | None = None, timeout_seconds: float | None = None):
        """Initialize tools registry.

        Args:
            tools: Tools to register up front
            timeout_seconds: Per-call handler timeout, None to wait indefinitely
        """
        self.timeout_seconds = timeout_seconds
        self._tools: dict[str, ToolDefinition] = {}

        for tool in tools or []:
            self.register_tool(tool)

    def register_tool(self, tool: ToolDefinition) -> None:
        """Register a new tool in the registry."""
        if tool.name in self._tools:
            logger.warning(f"Replacing already registered tool: {tool.name}")
        self._tools[tool.name] = tool

    def get_tool(self, name: str) -> ToolDefinition:
        """Look up a tool by name.

        Raises:
            UnknownToolError: If no tool has that name
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool

    def get_function_schemas(self) -> list[dict[str, Any]]:
        """Get the schemas of all tools in the backend ``tools`` format."""
        return [tool.to_function_schema() for tool in self._tools.values()]

    def get_tool_names(self) -> list[str]:
        """Get list of all registered tool names."""
        return list(self._tools.keys())

    def has_tool(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    async def execute(self, call: ToolCall, context: AgentContext) -> Any:
        """Resolve one tool call: look up, parse arguments, run the handler.

        Args:
            call: Tool call issued by the backend
            context: Execution context for the current turn

        Returns:
            Raw handler result

        Raises:
            UnknownToolError: Tool is not registered
            ToolArgumentsError: Arguments are malformed or invalid
            ToolExecutionError: Handler failed or timed out
        """
        tool = self.get_tool(call.name)

        try:
            raw_arguments = call.parse_arguments()
        except ValueError as e:  # json.JSONDecodeError is a ValueError
            raise ToolArgumentsError(call.name, f"Malformed JSON arguments for {call.name}: {e}") from e

        arguments = tool.parse_input(raw_arguments)

        try:
            if self.timeout_seconds is None:
                return await tool.handler(arguments, context)
            return await asyncio.wait_for(tool.handler(arguments, context), timeout=self.timeout_seconds)
        except TimeoutError as e:
            raise ToolTimeoutError(call.name, f"Tool {call.name} timed out after {self.timeout_seconds}s") from e
        except ToolError:
            raise
        except Exception as e:
            raise ToolExecutionError(call.name, f"Tool execution failed: {e}") from e


def tool_error_content(error: ToolError) -> str:
    """Serialize a tool error as the content of a tool message."""
    return json.dumps(error.to_payload(), ensure_ascii=False)
