"""Scripted LLM backend and response builders for tests."""

import json
from dataclasses import dataclass
from typing import Any

from catalog_agent.models.llm import LLMResponse, LLMUsage
from catalog_agent.models.messages import AssistantMessage, Message, ToolCall


@dataclass
class BackendRequest:
    """One recorded call to the scripted backend."""

    messages: list[Message]
    tools: list[dict[str, Any]] | None
    temperature: float

    @property
    def roles(self) -> list[str]:
        return [m.role for m in self.messages]


class ScriptedBackend:
    """LLM backend that replays canned responses and records every request.

    Script items are ``LLMResponse`` objects to return or exceptions to raise.
    Calling past the end of the script fails the test.
    """

    def __init__(self, script: list[LLMResponse | Exception] | None = None):
        self.script = list(script or [])
        self.requests: list[BackendRequest] = []

    async def create_completion(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float = 0.7,
    ) -> LLMResponse:
        self.requests.append(BackendRequest(messages=list(messages), tools=tools, temperature=temperature))
        if not self.script:
            raise AssertionError(f"Unexpected backend call #{len(self.requests)}")

        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def call_count(self) -> int:
        return len(self.requests)


def text_response(text: str, input_tokens: int = 10, output_tokens: int = 5) -> LLMResponse:
    """Backend response with a final answer."""
    return LLMResponse(
        message=AssistantMessage(content=text),
        finish_reason="stop",
        usage=LLMUsage(input_tokens=input_tokens, output_tokens=output_tokens),
    )


def tool_call(name: str, arguments: dict[str, Any] | str | None = None, call_id: str = "call_1") -> ToolCall:
    """Tool call with arguments given as a dict or a raw payload."""
    if isinstance(arguments, str):
        payload = arguments
    else:
        payload = json.dumps(arguments or {})
    return ToolCall(id=call_id, name=name, arguments=payload)


def tool_response(*calls: ToolCall, content: str | None = None) -> LLMResponse:
    """Backend response requesting tool calls."""
    return LLMResponse(
        message=AssistantMessage(content=content, tool_calls=list(calls)),
        finish_reason="tool_calls",
        usage=LLMUsage(input_tokens=10, output_tokens=5),
    )
