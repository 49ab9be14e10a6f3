"""Tests for history pruning."""

import random

import pytest

from catalog_agent.models.messages import (
    AssistantMessage,
    Message,
    SystemMessage,
    ToolCall,
    ToolMessage,
    UserMessage,
)
from catalog_agent.services.pruning import find_adjacency_violations, prune_history


def tool_round(call_ids: list[str]) -> list[Message]:
    """An assistant turn with tool calls followed by one result per call."""
    calls = [ToolCall(id=call_id, name="list_products") for call_id in call_ids]
    return [
        AssistantMessage(content=None, tool_calls=calls),
        *[ToolMessage(content="[]", tool_call_id=call_id, name="list_products") for call_id in call_ids],
    ]


def random_history(rng: random.Random, turns: int) -> list[Message]:
    """Valid conversation mixing plain turns and tool rounds."""
    messages: list[Message] = [SystemMessage(content="prompt")]
    next_id = 0
    for _ in range(turns):
        messages.append(UserMessage(content="question"))
        for _ in range(rng.randint(0, 3)):
            ids = [f"call_{next_id + i}" for i in range(rng.randint(1, 4))]
            next_id += len(ids)
            messages.extend(tool_round(ids))
        messages.append(AssistantMessage(content="answer"))
    return messages


class TestPruneHistory:
    """Tests for prune_history."""

    def test_short_history_unchanged(self):
        messages = [SystemMessage(content="s"), UserMessage(content="u"), AssistantMessage(content="a")]
        assert prune_history(messages) == messages

    def test_system_messages_kept_and_first(self):
        """Test that system messages survive pruning and are moved to the front."""
        messages = [
            UserMessage(content="u1"),
            SystemMessage(content="s1"),
            AssistantMessage(content="a1"),
            UserMessage(content="u2"),
            SystemMessage(content="s2"),
        ]

        pruned = prune_history(messages, max_non_system=2)

        assert [m.content for m in pruned] == ["s1", "s2", "a1", "u2"]

    def test_window_keeps_most_recent(self):
        messages = [UserMessage(content=str(i)) for i in range(60)]

        pruned = prune_history(messages)

        assert len(pruned) == 50
        assert pruned[0].content == "10"
        assert pruned[-1].content == "59"

    def test_cut_tool_round_drops_orphans(self):
        """Test that results whose assistant turn fell out of the window are removed."""
        messages = [UserMessage(content="u"), *tool_round(["a", "b", "c"]), AssistantMessage(content="done")]

        # Window of 3 keeps [tool b, tool c, assistant]
        pruned = prune_history(messages, max_non_system=3)

        assert pruned == [messages[-1]]
        assert find_adjacency_violations(pruned) == []

    def test_tool_result_after_user_turn_dropped(self):
        messages = [
            *tool_round(["a"])[:1],
            UserMessage(content="interrupt"),
            ToolMessage(content="[]", tool_call_id="a", name="list_products"),
        ]

        pruned = prune_history(messages)

        assert [m.role for m in pruned] == ["assistant", "user"]

    def test_tool_result_for_older_assistant_dropped(self):
        """Test that a newer assistant turn replaces the outstanding call ids."""
        messages = [
            *tool_round(["a"])[:1],
            AssistantMessage(content=None, tool_calls=[ToolCall(id="b", name="t")]),
            ToolMessage(content="[]", tool_call_id="a", name="t"),
            ToolMessage(content="[]", tool_call_id="b", name="t"),
        ]

        pruned = prune_history(messages)

        assert [m.tool_call_id for m in pruned if isinstance(m, ToolMessage)] == ["b"]

    def test_idempotent(self):
        messages = random_history(random.Random(7), turns=20)
        once = prune_history(messages, max_non_system=17)
        assert prune_history(once, max_non_system=17) == once

    @pytest.mark.parametrize("seed", range(25))
    def test_random_histories_satisfy_adjacency(self, seed):
        """Test that any window of a valid conversation is sent without orphaned results."""
        rng = random.Random(seed)
        messages = random_history(rng, turns=rng.randint(1, 30))
        max_non_system = rng.randint(1, 60)

        pruned = prune_history(messages, max_non_system=max_non_system)

        assert find_adjacency_violations(pruned) == []
        assert sum(1 for m in pruned if m.role != "system") <= max_non_system
        assert pruned[0].role == "system"


class TestFindAdjacencyViolations:
    """Tests for the adjacency check."""

    def test_valid_history(self):
        assert find_adjacency_violations([UserMessage(content="u"), *tool_round(["a", "b"])]) == []

    def test_leading_tool_message(self):
        violations = find_adjacency_violations([ToolMessage(content="[]", tool_call_id="x", name="t")])
        assert len(violations) == 1
        assert "'x'" in violations[0]
