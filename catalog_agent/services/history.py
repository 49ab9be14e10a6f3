"""Per-agent conversation history."""

from collections.abc import Iterable, Iterator

from catalog_agent.models.messages import Message


class ConversationHistory:
    """Ordered, append-only sequence of conversation turns owned by one agent.

    Only the orchestration loop appends to it; it is cleared on self-heal or
    an explicit reset.
    """

    def __init__(self, messages: Iterable[Message] | None = None):
        self._messages: list[Message] = list(messages or [])

    def append(self, message: Message) -> None:
        self._messages.append(message)

    def extend(self, messages: Iterable[Message]) -> None:
        self._messages.extend(messages)

    def clear(self) -> None:
        self._messages.clear()

    @property
    def messages(self) -> list[Message]:
        """Snapshot of the stored messages."""
        return list(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __repr__(self) -> str:
        return f"ConversationHistory(messages={len(self._messages)})"
