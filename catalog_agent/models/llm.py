"""LLM-related data models and types (provider-agnostic)."""

from dataclasses import dataclass, field
from typing import Literal

from catalog_agent.models.messages import AssistantMessage


@dataclass
class LLMUsage:
    """Token/resource usage information from LLM provider."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0

    @property
    def cache_hit_rate(self) -> float:
        """Calculate cache hit rate as percentage."""
        total_input = self.input_tokens + self.cache_read_input_tokens + self.cache_creation_input_tokens
        if total_input == 0:
            return 0.0
        return (self.cache_read_input_tokens / total_input) * 100


@dataclass
class LLMResponse:
    """Provider-agnostic response from an LLM backend.

    ``message`` is the assistant turn as returned by the backend: final text,
    tool calls, or both.
    """

    message: AssistantMessage
    finish_reason: str | None = None
    usage: LLMUsage | None = None
    model: str = ""
    provider: str = "openai"

    @property
    def has_tool_calls(self) -> bool:
        return self.message.has_tool_calls


LoopStopReason = Literal["complete", "max_rounds"]


@dataclass
class AgentLoopResult:
    """Result from executing an agent loop."""

    content: str
    stop_reason: LoopStopReason
    rounds: int
    usage: LLMUsage = field(default_factory=LLMUsage)
    tool_calls_executed: int = 0

    @property
    def aborted(self) -> bool:
        return self.stop_reason == "max_rounds"
