"""State definitions for the agent loop graph."""

from dataclasses import dataclass, field

from pydantic import BaseModel

from catalog_agent.models.agent import AgentContext
from catalog_agent.models.llm import LoopStopReason
from catalog_agent.models.messages import AssistantMessage, SystemMessage
from catalog_agent.services.history import ConversationHistory


class AgentLoopState(BaseModel):
    """Control state of one run of the agent loop.

    Messages live in the agent's ``ConversationHistory``; the graph state
    only tracks where the loop is and what the backend last returned.
    """

    max_rounds: int
    rounds: int = 0

    # Latest backend turn, consumed by the tools or finalize node
    response: AssistantMessage | None = None

    final_text: str | None = None
    stop_reason: LoopStopReason | None = None
    tool_calls_executed: int = 0

    # Token usage tracking
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0


@dataclass
class LoopRun:
    """Per-run inputs handed to the graph nodes through ``configurable``."""

    history: ConversationHistory
    context: AgentContext
    system_messages: list[SystemMessage] = field(default_factory=list)
    temperature: float = 0.7
    tools_enabled: bool = True
