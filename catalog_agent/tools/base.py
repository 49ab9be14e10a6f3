"""Base types and definitions for tools."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from catalog_agent.models.agent import AgentContext

ToolHandler = Callable[[BaseModel, AgentContext], Awaitable[Any]]


class ToolError(Exception):
    """Base class for failures while resolving a tool call."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(message)
        self.tool_name = tool_name
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        """Structured error object returned to the model."""
        return {"error": self.message, "tool": self.tool_name}


class UnknownToolError(ToolError):
    """The backend requested a tool that is not registered."""

    def __init__(self, tool_name: str):
        super().__init__(tool_name, f"Unknown tool: {tool_name}")


class ToolArgumentsError(ToolError):
    """Tool arguments were not valid JSON or failed schema validation."""


class ToolExecutionError(ToolError):
    """The tool handler raised while executing."""


class ToolTimeoutError(ToolExecutionError):
    """The tool handler did not finish within the configured timeout."""


@dataclass
class ToolDefinition:
    """Definition of a tool available to the agent."""

    name: str
    description: str
    input_schema_class: type[BaseModel]
    handler: ToolHandler

    def get_json_schema(self) -> dict[str, Any]:
        """Get JSON schema for this tool's input."""
        schema = self.input_schema_class.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        return schema

    def to_function_schema(self) -> dict[str, Any]:
        """Tool advertisement in the chat-completions ``tools`` format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.get_json_schema(),
            },
        }

    def parse_input(self, raw_input: dict[str, Any]) -> BaseModel:
        """Parse and validate tool input.

        Raises:
            ToolArgumentsError: If the input does not match the schema
        """
        try:
            return self.input_schema_class.model_validate(raw_input)
        except ValidationError as e:
            raise ToolArgumentsError(self.name, f"Invalid arguments for {self.name}: {e}") from e
