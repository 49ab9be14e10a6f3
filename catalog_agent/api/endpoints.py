"""API endpoints for the catalog agent service."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from catalog_agent import __version__
from catalog_agent.models.conversation import ChatRequest, ChatResponse, ClearSessionResponse, HealthResponse
from catalog_agent.services.agent_registry import AgentRegistry, get_agent_registry
from catalog_agent.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

RegistryDep = Annotated[AgentRegistry, Depends(get_agent_registry)]


@router.post("/agents/chat", response_model=ChatResponse, tags=["Agents"])
async def chat(request: ChatRequest, registry: RegistryDep) -> ChatResponse:
    """Send a message to the session's agent for the requested role.

    Agent failures come back as a normal response with ``status="error"``.
    """
    session_id = request.session_id or registry.generate_session_id()

    try:
        agent = registry.get_agent(request.role, session_id)
    except Exception as e:
        logger.error(f"Failed to create agent {request.role} for session {session_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create agent") from e

    logger.info(f"Processing message for session {session_id} ({request.role}): {request.message[:50]}...")
    response = await agent.process_message(request.message, request.context)
    logger.info(f"Agent responded for session {session_id} with status {response.status}")

    return ChatResponse(**response.model_dump(), session_id=session_id)


@router.delete("/agents/sessions/{session_id}", response_model=ClearSessionResponse, tags=["Agents"])
async def clear_session(session_id: str, registry: RegistryDep) -> ClearSessionResponse:
    """Drop every agent of a session, discarding their histories."""
    evicted = registry.evict(session_id)
    return ClearSessionResponse(success=True, evicted=evicted)


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
    )
