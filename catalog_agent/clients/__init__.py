"""LLM backend clients."""

import os

from catalog_agent.clients.base import LLMBackend, LLMBackendError, ProtocolViolationError

_llm_backend: LLMBackend | None = None


def create_llm_backend(provider: str | None = None) -> LLMBackend:
    """Create the backend client for a provider (``openai`` or ``anthropic``)."""
    provider = (provider or os.getenv("LLM_PROVIDER", "openai")).lower()

    if provider == "anthropic":
        from catalog_agent.clients.anthropic import AnthropicClient

        return AnthropicClient()
    if provider == "openai":
        from catalog_agent.clients.openai import OpenAIClient

        return OpenAIClient()

    raise ValueError(f"Unsupported LLM provider: {provider}")


def get_llm_backend() -> LLMBackend:
    """Get or create the process-wide LLM backend."""
    global _llm_backend
    if _llm_backend is None:
        _llm_backend = create_llm_backend()
    return _llm_backend


__all__ = [
    "LLMBackend",
    "LLMBackendError",
    "ProtocolViolationError",
    "create_llm_backend",
    "get_llm_backend",
]
