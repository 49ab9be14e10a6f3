"""Conversation message models.

Each role has its own model so that role-specific fields cannot be mixed:
only assistant turns carry ``tool_calls`` and only tool turns carry
``tool_call_id``/``name``. ``Message`` is the discriminated union over all four.
"""

import json
from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


def _now() -> datetime:
    return datetime.now(UTC)


class ToolCall(BaseModel):
    """A backend-issued request to invoke a named tool."""

    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    arguments: str = "{}"

    def parse_arguments(self) -> dict[str, Any]:
        """Decode the serialized argument payload.

        Raises:
            ValueError: If the payload is not a JSON object
        """
        if not self.arguments or not self.arguments.strip():
            return {}

        parsed = json.loads(self.arguments)
        if not isinstance(parsed, dict):
            raise ValueError(f"Tool arguments must be a JSON object, got {type(parsed).__name__}")
        return parsed

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "ToolCall":
        function = data.get("function") or {}
        return cls(id=data["id"], name=function["name"], arguments=function.get("arguments") or "{}")


class _MessageBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timestamp: datetime = Field(default_factory=_now)


class SystemMessage(_MessageBase):
    """System prompt turn."""

    role: Literal["system"] = "system"
    content: str

    def to_wire(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}


class UserMessage(_MessageBase):
    """User turn."""

    role: Literal["user"] = "user"
    content: str

    def to_wire(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}


class AssistantMessage(_MessageBase):
    """Assistant turn, either a final answer or a set of tool calls."""

    role: Literal["assistant"] = "assistant"
    content: str | None = None
    tool_calls: list[ToolCall] = Field(default_factory=list)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def to_wire(self) -> dict[str, Any]:
        # Null content is only accepted alongside tool calls
        if not self.tool_calls:
            return {"role": self.role, "content": self.content or ""}
        return {
            "role": self.role,
            "content": self.content or None,
            "tool_calls": [call.to_wire() for call in self.tool_calls],
        }


class ToolMessage(_MessageBase):
    """Result of one tool call, answering the call with the same id."""

    role: Literal["tool"] = "tool"
    content: str
    tool_call_id: str
    name: str

    def to_wire(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
            "tool_call_id": self.tool_call_id,
            "name": self.name,
        }


Message = Annotated[
    SystemMessage | UserMessage | AssistantMessage | ToolMessage,
    Field(discriminator="role"),
]

_message_adapter: TypeAdapter[Message] = TypeAdapter(Message)


def parse_message(data: dict[str, Any]) -> Message:
    """Validate a raw dictionary into the matching message model."""
    return _message_adapter.validate_python(data)


def to_wire_messages(messages: list[Message]) -> list[dict[str, Any]]:
    """Render messages in the chat-completions request format."""
    return [message.to_wire() for message in messages]
