"""Agent contract models: execution context and responses."""

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

AgentRole = Literal["product_agent", "customer_support", "billing_admin", "general"]
AgentStatus = Literal["complete", "requires_info", "error"]
Language = Literal["es", "en", "it"]


class AttachedFile(BaseModel):
    """Metadata for a file the caller attached to a message."""

    name: str
    content_type: str = "application/octet-stream"
    size: int | None = None


class AgentContext(BaseModel):
    """Per-turn execution context threaded into every tool call.

    The orchestration loop treats it as opaque.
    """

    user_id: str | None = None
    language: Language = "es"
    current_product_id: str | None = None
    session_data: dict[str, Any] = Field(default_factory=dict)
    files: list[AttachedFile] = Field(default_factory=list)


class SuggestedAction(BaseModel):
    """Follow-up action the UI may offer to the user."""

    label: str
    action: str
    payload: dict[str, Any] | None = None


class AgentResponse(BaseModel):
    """Well-formed result of one conversational turn."""

    content: str
    status: AgentStatus
    suggested_actions: list[SuggestedAction] | None = None
    missing_fields: list[str] | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def error(cls, content: str) -> "AgentResponse":
        return cls(content=content, status="error")
