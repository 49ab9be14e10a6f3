"""LLM service for high-level backend access used by the agent loop."""

import asyncio
from typing import Any

from catalog_agent.clients import get_llm_backend
from catalog_agent.clients.base import LLMBackend, LLMBackendError
from catalog_agent.config import get_agent_config
from catalog_agent.models.llm import LLMResponse
from catalog_agent.models.messages import Message
from catalog_agent.utils.logging import get_logger

logger = get_logger(__name__)


class LLMService:
    """Provider-agnostic access to the configured LLM backend."""

    def __init__(self, backend: LLMBackend | None = None, timeout_seconds: float | None = None):
        """Initialize LLM service.

        Args:
            backend: LLM backend (defaults to the process-wide backend, resolved on first use)
            timeout_seconds: Per-call timeout, None to wait indefinitely
        """
        self._backend = backend
        self.timeout_seconds = timeout_seconds

    @property
    def backend(self) -> LLMBackend:
        if self._backend is None:
            self._backend = get_llm_backend()
        return self._backend

    async def complete(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Send one request to the backend.

        Raises:
            LLMBackendError: If the call fails or times out
        """
        logger.debug(f"Calling LLM with {len(messages)} messages and {len(tools) if tools else 0} tools")
        request = self.backend.create_completion(messages, tools=tools, temperature=temperature)

        if self.timeout_seconds is None:
            return await request

        try:
            return await asyncio.wait_for(request, timeout=self.timeout_seconds)
        except TimeoutError as e:
            raise LLMBackendError(f"LLM backend call timed out after {self.timeout_seconds}s") from e


_llm_service: LLMService | None = None


def get_llm_service() -> LLMService:
    """Get or create LLM service instance."""
    global _llm_service
    if _llm_service is None:
        _llm_service = LLMService(timeout_seconds=get_agent_config().backend_timeout_seconds)
    return _llm_service
