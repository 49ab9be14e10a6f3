"""OpenAI-compatible chat completions client with rate limiting and error handling."""

import asyncio
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from openai import APIConnectionError, APIStatusError, AsyncOpenAI
from openai.types.chat import ChatCompletion

from catalog_agent.clients.base import LLMBackendError, backend_error_from_status
from catalog_agent.clients.rate_limit import BackendRateLimiter
from catalog_agent.models.llm import LLMResponse, LLMUsage
from catalog_agent.models.messages import AssistantMessage, Message, ToolCall, to_wire_messages
from catalog_agent.utils.logging import get_logger
from catalog_agent.utils.tokens import estimate_tokens

logger = get_logger(__name__)


@dataclass
class OpenAIConfig:
    """Configuration for OpenAI-compatible API client."""

    model: str = "deepseek-chat"
    base_url: str = "https://api.deepseek.com/v1"
    max_tokens: int | None = None
    max_retries: int = 3
    retry_delay: float = 1.0
    request_timeout: float = 120.0

    @classmethod
    def from_env(cls) -> "OpenAIConfig":
        defaults = cls()
        return cls(
            model=os.getenv("LLM_MODEL", defaults.model),
            base_url=os.getenv("LLM_BASE_URL", defaults.base_url),
        )


def _error_message(error: APIStatusError) -> str:
    """Extract the backend-provided error message."""
    body = error.body
    if isinstance(body, dict):
        detail = body.get("error", body)
        if isinstance(detail, dict) and detail.get("message"):
            return str(detail["message"])
        if isinstance(detail, str):
            return detail
    return error.message


class OpenAIClient:
    """Low-level OpenAI-compatible API client with rate limiting and error handling."""

    rate_limiter: BackendRateLimiter = BackendRateLimiter()

    def __init__(
        self,
        api_key: str | None = None,
        config: OpenAIConfig | None = None,
        client: AsyncOpenAI | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: API key (defaults to DEEPSEEK_API_KEY, then OPENAI_API_KEY)
            config: Client configuration
            client: Preconfigured SDK client
        """
        self.config = config or OpenAIConfig.from_env()

        if client is not None:
            self.client = client
            return

        resolved_key = api_key or os.getenv("DEEPSEEK_API_KEY") or os.getenv("OPENAI_API_KEY")
        if not resolved_key:
            raise ValueError("DEEPSEEK_API_KEY or OPENAI_API_KEY environment variable is required")

        # Retries are handled by _request_with_retries
        self.client = AsyncOpenAI(
            api_key=resolved_key,
            base_url=self.config.base_url,
            max_retries=0,
            timeout=self.config.request_timeout,
        )

    async def create_completion(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Create a chat completion.

        Args:
            messages: Conversation history
            tools: Function schemas to advertise
            temperature: Sampling temperature

        Returns:
            Provider-agnostic response
        """
        request_params: dict[str, Any] = {
            "model": self.config.model,
            "messages": to_wire_messages(messages),
            "temperature": temperature,
        }
        if tools:
            request_params["tools"] = tools
        if self.config.max_tokens:
            request_params["max_tokens"] = self.config.max_tokens

        estimated_tokens = self._estimate_tokens(messages)
        logger.debug(f"Estimated tokens: {estimated_tokens}")
        await self.rate_limiter.check_rate_limit(estimated_tokens, identifier=self.config.model)

        logger.debug(
            f"Creating completion with {len(messages)} messages, {len(tools) if tools else 0} tools, "
            f"model: {self.config.model}"
        )
        completion: ChatCompletion = await self._request_with_retries(
            lambda: self.client.chat.completions.create(**request_params)
        )

        return self._convert_completion(completion)

    async def _request_with_retries[T](self, call: Callable[[], Awaitable[T]]) -> T:
        """Execute API request with retry logic."""
        for attempt in range(self.config.max_retries):
            last_attempt = attempt == self.config.max_retries - 1
            try:
                return await call()

            except APIStatusError as e:
                if e.status_code == 429 and not last_attempt:
                    retry_after = int(e.response.headers.get("retry-after", 60))
                    if retry_after < 120:
                        logger.warning(f"Backend rate limited, retrying in {retry_after}s")
                        await asyncio.sleep(retry_after)
                        continue

                elif e.status_code >= 500 and not last_attempt:
                    # Server error, retry with exponential backoff
                    await asyncio.sleep(self.config.retry_delay * (2**attempt))
                    continue

                raise backend_error_from_status(f"LLM API error: {_error_message(e)}", e.status_code) from e

            except APIConnectionError as e:
                if not last_attempt:
                    await asyncio.sleep(self.config.retry_delay * (2**attempt))
                    continue
                raise LLMBackendError(f"LLM API connection failed: {e}") from e

        raise LLMBackendError(f"Failed to complete request after {self.config.max_retries} attempts")

    def _convert_completion(self, completion: ChatCompletion) -> LLMResponse:
        """Convert an SDK completion into our response type."""
        if not completion.choices:
            raise LLMBackendError("LLM API returned no choices")

        choice = completion.choices[0]
        tool_calls = [
            ToolCall(id=call.id, name=call.function.name, arguments=call.function.arguments or "{}")
            for call in choice.message.tool_calls or []
            if getattr(call, "function", None) is not None
        ]

        usage = None
        if completion.usage:
            usage = LLMUsage(
                input_tokens=completion.usage.prompt_tokens,
                output_tokens=completion.usage.completion_tokens,
                total_tokens=completion.usage.total_tokens,
            )

        logger.debug(f"Response received - Finish reason: {choice.finish_reason}, tool calls: {len(tool_calls)}")

        return LLMResponse(
            message=AssistantMessage(content=choice.message.content, tool_calls=tool_calls),
            finish_reason=choice.finish_reason,
            usage=usage,
            model=completion.model,
            provider="openai",
        )

    def _estimate_tokens(self, messages: list[Message]) -> int:
        """Estimate token count for rate limiting."""
        text_content = "".join(message.content or "" for message in messages)
        return estimate_tokens(text_content)
