"""LLM backend interface and errors shared by all providers."""

import re
from typing import Any, Protocol

from catalog_agent.models.llm import LLMResponse
from catalog_agent.models.messages import Message

# Backend error messages produced when the conversation breaks tool-call adjacency
PROTOCOL_VIOLATION_PATTERNS: list[re.Pattern[str]] = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"role 'tool' must be a response to a preced",
        r"tool_calls.*must be followed by tool messages",
        r"tool_call_id.*(not found|did not have response|missing)",
        r"insufficient tool messages following tool_calls",
        r"tool_use.*ids were found without.*tool_result",
        r"unexpected .?tool_use_id.? found in .?tool_result",
        r"orphan(ed)? tool (message|result)",
    )
]


def matches_protocol_violation(message: str) -> bool:
    """Check whether a backend error message signals an invalid tool-call sequence."""
    return any(pattern.search(message) for pattern in PROTOCOL_VIOLATION_PATTERNS)


class LLMBackendError(Exception):
    """The backend call could not be completed (network, auth, rate limit, bad request)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ProtocolViolationError(LLMBackendError):
    """The backend rejected the conversation because of its tool-call ordering."""


class LLMBackend(Protocol):
    """Chat-completion backend with function calling."""

    async def create_completion(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Send a conversation and return the assistant's next turn.

        Args:
            messages: Conversation to send, system turns first
            tools: Function schemas in ``{"type": "function", "function": ...}`` format
            temperature: Sampling temperature

        Returns:
            Provider-agnostic response

        Raises:
            LLMBackendError: If the request fails
        """
        ...


def backend_error_from_status(message: str, status_code: int | None) -> LLMBackendError:
    """Build the matching error type for a failed backend request."""
    if status_code == 400 and matches_protocol_violation(message):
        return ProtocolViolationError(message, status_code)
    return LLMBackendError(message, status_code)
