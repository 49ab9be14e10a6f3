"""Request and response models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, Field

from catalog_agent.models.agent import AgentContext, AgentResponse


class ChatRequest(BaseModel):
    """Request model for the agent chat endpoint."""

    message: str = Field(..., min_length=1)
    role: str = "product_agent"
    session_id: str | None = None
    context: AgentContext = Field(default_factory=AgentContext)


class ChatResponse(AgentResponse):
    """Agent response enriched with the session it belongs to."""

    session_id: str


class ClearSessionResponse(BaseModel):
    """Response model for session eviction."""

    success: bool
    evicted: int


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str
