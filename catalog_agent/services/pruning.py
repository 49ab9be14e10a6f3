"""History pruning that preserves tool-call adjacency."""

from catalog_agent.models.messages import AssistantMessage, Message, ToolMessage
from catalog_agent.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_NON_SYSTEM = 50


def prune_history(messages: list[Message], max_non_system: int = DEFAULT_MAX_NON_SYSTEM) -> list[Message]:
    """Bound conversation length without orphaning tool results.

    System messages are always kept and placed first. Only the most recent
    ``max_non_system`` other messages are kept. The window is then validated:
    a tool message survives only if its ``tool_call_id`` belongs to the most
    recent assistant turn and no user turn came in between.

    Args:
        messages: Conversation to prune
        max_non_system: Number of non-system messages to keep

    Returns:
        New list of messages that satisfies the adjacency invariant
    """
    system_messages = [m for m in messages if m.role == "system"]
    non_system = [m for m in messages if m.role != "system"]

    window = non_system[-max_non_system:] if max_non_system > 0 else []

    validated: list[Message] = []
    outstanding: set[str] = set()
    dropped = 0

    for message in window:
        if isinstance(message, AssistantMessage):
            outstanding = {call.id for call in message.tool_calls}
            validated.append(message)
        elif isinstance(message, ToolMessage):
            if message.tool_call_id in outstanding:
                validated.append(message)
            else:
                dropped += 1
        else:
            outstanding = set()
            validated.append(message)

    if len(non_system) > len(window) or dropped:
        logger.debug(
            f"Pruned history from {len(non_system)} to {len(validated)} non-system messages "
            f"({dropped} orphaned tool results dropped)"
        )

    return [*system_messages, *validated]


def find_adjacency_violations(messages: list[Message]) -> list[str]:
    """List tool messages that do not answer a call of the preceding assistant turn.

    Returns:
        Human-readable description of each violation, empty when valid
    """
    violations: list[str] = []
    outstanding: set[str] | None = None

    for index, message in enumerate(messages):
        if isinstance(message, AssistantMessage):
            outstanding = {call.id for call in message.tool_calls}
        elif isinstance(message, ToolMessage):
            if outstanding is None or message.tool_call_id not in outstanding:
                violations.append(f"message {index}: tool result {message.tool_call_id!r} has no matching call")
        else:
            outstanding = None

    return violations
