"""Anthropic API client with rate limiting and error handling."""

import asyncio
import json
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal

from anthropic import APIConnectionError, APIStatusError, AsyncAnthropic
from anthropic.types import Message as AnthropicAPIMessage
from pydantic import BaseModel

from catalog_agent.clients.base import LLMBackendError, backend_error_from_status
from catalog_agent.clients.rate_limit import BackendRateLimiter
from catalog_agent.models.llm import LLMResponse, LLMUsage
from catalog_agent.models.messages import AssistantMessage, Message, ToolCall
from catalog_agent.utils.logging import get_logger
from catalog_agent.utils.tokens import estimate_tokens

logger = get_logger(__name__)


class CacheControl(BaseModel):
    """Cache control configuration for prompt caching."""

    type: Literal["ephemeral"] = "ephemeral"
    ttl: Literal["5m", "1h"] = "5m"


class AnthropicTool(BaseModel):
    """Tool definition for Anthropic API."""

    name: str
    description: str
    input_schema: dict[str, Any]
    cache_control: CacheControl | None = None


@dataclass
class AnthropicConfig:
    """Configuration for Anthropic API client."""

    model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = 1000
    max_retries: int = 3
    retry_delay: float = 1.0


def _decode_tool_input(arguments: str) -> dict[str, Any]:
    try:
        decoded = json.loads(arguments) if arguments.strip() else {}
    except ValueError:
        return {}
    return decoded if isinstance(decoded, dict) else {}


def to_anthropic_messages(messages: list[Message]) -> tuple[str, list[dict[str, Any]]]:
    """Map a chat-completions conversation onto Anthropic's message format.

    System turns become the system prompt. Tool results are sent as
    ``tool_result`` blocks in a user turn, and consecutive user-side turns are
    merged because the API requires alternating roles. Leading assistant
    turns, and the tool results answering them, are dropped.

    Returns:
        System prompt and the list of message dictionaries
    """
    system_parts: list[str] = []
    converted: list[dict[str, Any]] = []

    def add(role: str, blocks: list[dict[str, Any]]) -> None:
        if converted and converted[-1]["role"] == role:
            converted[-1]["content"].extend(blocks)
        else:
            converted.append({"role": role, "content": blocks})

    for message in messages:
        if message.role == "system":
            system_parts.append(message.content)
        elif message.role == "user":
            add("user", [{"type": "text", "text": message.content}])
        elif message.role == "assistant":
            blocks: list[dict[str, Any]] = []
            if message.content:
                blocks.append({"type": "text", "text": message.content})
            for call in message.tool_calls:
                blocks.append(
                    {"type": "tool_use", "id": call.id, "name": call.name, "input": _decode_tool_input(call.arguments)}
                )
            if blocks:
                add("assistant", blocks)
        else:
            add("user", [{"type": "tool_result", "tool_use_id": message.tool_call_id, "content": message.content}])

    # A pruned window may open on an assistant turn; the request must start with the user
    while converted and converted[0]["role"] == "assistant":
        converted.pop(0)
        if converted:
            remaining = [block for block in converted[0]["content"] if block["type"] != "tool_result"]
            if remaining:
                converted[0]["content"] = remaining
            else:
                converted.pop(0)

    return "\n\n".join(system_parts), converted


def to_anthropic_tools(tools: list[dict[str, Any]]) -> list[AnthropicTool]:
    """Convert function schemas, caching all of them via the last tool."""
    anthropic_tools = [
        AnthropicTool(
            name=tool["function"]["name"],
            description=tool["function"].get("description", ""),
            input_schema=tool["function"].get("parameters") or {"type": "object", "properties": {}},
        )
        for tool in tools
    ]
    if anthropic_tools:
        anthropic_tools[-1].cache_control = CacheControl()
    return anthropic_tools


class AnthropicClient:
    """Low-level Anthropic API client with rate limiting and error handling."""

    rate_limiter: BackendRateLimiter = BackendRateLimiter()

    def __init__(
        self,
        api_key: str | None = None,
        config: AnthropicConfig | None = None,
        client: AsyncAnthropic | None = None,
    ):
        """Initialize Anthropic client.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            config: Client configuration
            client: Preconfigured SDK client
        """
        self.config = config or AnthropicConfig(model=os.getenv("LLM_MODEL", AnthropicConfig.model))

        if client is not None:
            self.client = client
            return

        anthropic_api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable is required")

        self.client = AsyncAnthropic(api_key=anthropic_api_key, max_retries=0)

    async def create_completion(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Create a message with Claude API.

        Args:
            messages: Conversation history
            tools: Function schemas to advertise
            temperature: Sampling temperature (clamped to Anthropic's 0-1 range)

        Returns:
            Provider-agnostic response
        """
        system_prompt, message_dicts = to_anthropic_messages(messages)

        estimated_tokens = estimate_tokens(system_prompt + "".join(m.content or "" for m in messages))
        logger.debug(f"Estimated tokens: {estimated_tokens}")
        await self.rate_limiter.check_rate_limit(estimated_tokens, identifier="anthropic")

        request_params: dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "temperature": min(max(temperature, 0.0), 1.0),
            "messages": message_dicts,
        }
        if system_prompt:
            request_params["system"] = system_prompt
        if tools:
            request_params["tools"] = [tool.model_dump(exclude_none=True) for tool in to_anthropic_tools(tools)]

        logger.debug(f"Making Anthropic API call with model: {request_params['model']}")
        response: AnthropicAPIMessage = await self._request_with_retries(
            lambda: self.client.messages.create(**request_params)
        )

        return self._convert_response(response)

    async def _request_with_retries[T](self, call: Callable[[], Awaitable[T]]) -> T:
        """Execute Anthropic API request with retry logic."""
        for attempt in range(self.config.max_retries):
            last_attempt = attempt == self.config.max_retries - 1
            try:
                return await call()

            except APIStatusError as e:
                if e.status_code == 429 and not last_attempt:
                    retry_after = int(e.response.headers.get("retry-after", 60))
                    if retry_after < 120:
                        await asyncio.sleep(retry_after)
                        continue

                elif e.status_code >= 500 and not last_attempt:
                    # Server error, retry with exponential backoff
                    await asyncio.sleep(self.config.retry_delay * (2**attempt))
                    continue

                message = e.message
                if isinstance(e.body, dict) and isinstance(e.body.get("error"), dict):
                    message = e.body["error"].get("message", message)
                raise backend_error_from_status(f"LLM API error: {message}", e.status_code) from e

            except APIConnectionError as e:
                if not last_attempt:
                    await asyncio.sleep(self.config.retry_delay * (2**attempt))
                    continue
                raise LLMBackendError(f"LLM API connection failed: {e}") from e

        raise LLMBackendError(f"Failed to complete request after {self.config.max_retries} attempts")

    def _convert_response(self, response: AnthropicAPIMessage) -> LLMResponse:
        """Convert Anthropic content blocks into an assistant turn."""
        texts: list[str] = []
        tool_calls: list[ToolCall] = []

        for block in response.content:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(ToolCall(id=block.id, name=block.name, arguments=json.dumps(block.input)))
            else:
                logger.warning(f"Unknown content block type: {block.type}")

        usage = None
        if response.usage:
            usage = LLMUsage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
                cache_creation_input_tokens=response.usage.cache_creation_input_tokens or 0,
                cache_read_input_tokens=response.usage.cache_read_input_tokens or 0,
            )

        logger.debug(f"Response received - Stop reason: {response.stop_reason}, tool calls: {len(tool_calls)}")

        return LLMResponse(
            message=AssistantMessage(content="".join(texts) or None, tool_calls=tool_calls),
            finish_reason=response.stop_reason,
            usage=usage,
            model=response.model,
            provider="anthropic",
        )
