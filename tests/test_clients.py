"""Tests for the LLM backend clients."""

import json
from unittest.mock import AsyncMock, Mock, patch

import httpx
import openai
import pytest
from anthropic.types import Message as AnthropicAPIMessage
from openai.types.chat import ChatCompletion

from catalog_agent.clients import create_llm_backend
from catalog_agent.clients.anthropic import AnthropicClient, to_anthropic_messages, to_anthropic_tools
from catalog_agent.clients.base import LLMBackendError, ProtocolViolationError, backend_error_from_status
from catalog_agent.clients.openai import OpenAIClient, OpenAIConfig
from catalog_agent.models.messages import AssistantMessage, SystemMessage, ToolCall, ToolMessage, UserMessage
from catalog_agent.utils.tokens import estimate_tokens

TOOL_SCHEMA = {
    "type": "function",
    "function": {
        "name": "list_categories",
        "description": "List categories",
        "parameters": {"type": "object", "properties": {}},
    },
}


def make_completion(message: dict, finish_reason: str = "stop") -> ChatCompletion:
    return ChatCompletion.model_validate(
        {
            "id": "chatcmpl-1",
            "object": "chat.completion",
            "created": 1700000000,
            "model": "deepseek-chat",
            "choices": [{"index": 0, "message": {"role": "assistant", **message}, "finish_reason": finish_reason}],
            "usage": {"prompt_tokens": 12, "completion_tokens": 4, "total_tokens": 16},
        }
    )


def status_error(status_code: int, message: str) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://api.deepseek.com/v1/chat/completions")
    response = httpx.Response(status_code, request=request)
    return openai.APIStatusError(message, response=response, body={"error": {"message": message}})


@pytest.fixture(autouse=True)
def fixed_token_estimate():
    """Avoid loading the tokenizer for request estimates."""
    with (
        patch("catalog_agent.clients.openai.estimate_tokens", return_value=10),
        patch("catalog_agent.clients.anthropic.estimate_tokens", return_value=10),
    ):
        yield


class TestOpenAIClient:
    """Tests for the OpenAI-compatible client."""

    @pytest.fixture
    def sdk(self):
        sdk = Mock()
        sdk.chat.completions.create = AsyncMock()
        return sdk

    @pytest.fixture
    def client(self, sdk):
        return OpenAIClient(config=OpenAIConfig(max_retries=2, retry_delay=0), client=sdk)

    @pytest.mark.asyncio
    async def test_request_uses_wire_format(self, client, sdk):
        """Test that messages and tools are sent in the chat-completions shape."""
        sdk.chat.completions.create.return_value = make_completion({"content": "Hi"})
        messages = [
            SystemMessage(content="prompt"),
            UserMessage(content="hello"),
            AssistantMessage(content=None, tool_calls=[ToolCall(id="c1", name="list_categories")]),
            ToolMessage(content='["Kites"]', tool_call_id="c1", name="list_categories"),
        ]

        await client.create_completion(messages, tools=[TOOL_SCHEMA], temperature=0.3)

        params = sdk.chat.completions.create.call_args.kwargs
        assert params["model"] == "deepseek-chat"
        assert params["temperature"] == 0.3
        assert params["tools"] == [TOOL_SCHEMA]
        assert params["messages"][2]["tool_calls"][0]["function"]["name"] == "list_categories"
        assert params["messages"][3] == {
            "role": "tool",
            "content": '["Kites"]',
            "tool_call_id": "c1",
            "name": "list_categories",
        }

    @pytest.mark.asyncio
    async def test_tools_omitted_when_empty(self, client, sdk):
        sdk.chat.completions.create.return_value = make_completion({"content": "Hi"})

        await client.create_completion([UserMessage(content="hello")], tools=None)

        assert "tools" not in sdk.chat.completions.create.call_args.kwargs

    @pytest.mark.asyncio
    async def test_text_response(self, client, sdk):
        sdk.chat.completions.create.return_value = make_completion({"content": "Hello"})

        response = await client.create_completion([UserMessage(content="hi")])

        assert response.message.content == "Hello"
        assert not response.has_tool_calls
        assert response.finish_reason == "stop"
        assert response.usage.input_tokens == 12
        assert response.usage.output_tokens == 4

    @pytest.mark.asyncio
    async def test_tool_call_response(self, client, sdk):
        sdk.chat.completions.create.return_value = make_completion(
            {
                "content": "",
                "tool_calls": [
                    {
                        "id": "call_9",
                        "type": "function",
                        "function": {"name": "search_products", "arguments": '{"query": "kite"}'},
                    }
                ],
            },
            finish_reason="tool_calls",
        )

        response = await client.create_completion([UserMessage(content="find kites")], tools=[TOOL_SCHEMA])

        assert response.message.tool_calls == [
            ToolCall(id="call_9", name="search_products", arguments='{"query": "kite"}')
        ]

    @pytest.mark.asyncio
    async def test_server_error_retried(self, client, sdk):
        sdk.chat.completions.create.side_effect = [
            status_error(503, "overloaded"),
            make_completion({"content": "ok"}),
        ]

        response = await client.create_completion([UserMessage(content="hi")])

        assert response.message.content == "ok"
        assert sdk.chat.completions.create.await_count == 2

    @pytest.mark.asyncio
    async def test_client_error_surfaces_backend_message(self, client, sdk):
        sdk.chat.completions.create.side_effect = status_error(401, "Authentication Fails")

        with pytest.raises(LLMBackendError) as exc_info:
            await client.create_completion([UserMessage(content="hi")])

        assert exc_info.value.status_code == 401
        assert "Authentication Fails" in exc_info.value.message
        assert sdk.chat.completions.create.await_count == 1

    @pytest.mark.asyncio
    async def test_protocol_violation_typed(self, client, sdk):
        sdk.chat.completions.create.side_effect = status_error(
            400, "Messages with role 'tool' must be a response to a preceding message with 'tool_calls'"
        )

        with pytest.raises(ProtocolViolationError):
            await client.create_completion([UserMessage(content="hi")])

    def test_missing_api_key(self):
        with patch.dict("os.environ", {}, clear=True), pytest.raises(ValueError, match="API_KEY"):
            OpenAIClient()

    def test_config_from_env(self):
        with patch.dict("os.environ", {"LLM_MODEL": "gpt-4o-mini", "LLM_BASE_URL": "https://api.openai.com/v1"}):
            config = OpenAIConfig.from_env()

        assert config.model == "gpt-4o-mini"
        assert config.base_url == "https://api.openai.com/v1"


class TestAnthropicConversion:
    """Tests for mapping conversations onto the Anthropic format."""

    def test_messages(self):
        """Test that tool calls and results become tool_use and tool_result blocks."""
        system, messages = to_anthropic_messages(
            [
                SystemMessage(content="prompt"),
                SystemMessage(content="context"),
                UserMessage(content="hello"),
                AssistantMessage(
                    content="Checking",
                    tool_calls=[
                        ToolCall(id="t1", name="a", arguments='{"x": 1}'),
                        ToolCall(id="t2", name="b", arguments=""),
                    ],
                ),
                ToolMessage(content="1", tool_call_id="t1", name="a"),
                ToolMessage(content="2", tool_call_id="t2", name="b"),
                AssistantMessage(content="Done"),
            ]
        )

        assert system == "prompt\n\ncontext"
        assert [m["role"] for m in messages] == ["user", "assistant", "user", "assistant"]
        assert messages[1]["content"] == [
            {"type": "text", "text": "Checking"},
            {"type": "tool_use", "id": "t1", "name": "a", "input": {"x": 1}},
            {"type": "tool_use", "id": "t2", "name": "b", "input": {}},
        ]
        assert messages[2]["content"] == [
            {"type": "tool_result", "tool_use_id": "t1", "content": "1"},
            {"type": "tool_result", "tool_use_id": "t2", "content": "2"},
        ]

    def test_consecutive_user_turns_merged(self):
        _, messages = to_anthropic_messages([UserMessage(content="a"), UserMessage(content="b")])

        assert len(messages) == 1
        assert [block["text"] for block in messages[0]["content"]] == ["a", "b"]

    def test_pruned_window_starts_with_user(self):
        """Test that leading assistant turns and their tool results are dropped."""
        _, messages = to_anthropic_messages(
            [
                SystemMessage(content="prompt"),
                AssistantMessage(content="done"),
                UserMessage(content="next"),
            ]
        )

        assert messages == [{"role": "user", "content": [{"type": "text", "text": "next"}]}]

    def test_leading_tool_round_dropped(self):
        _, messages = to_anthropic_messages(
            [
                AssistantMessage(tool_calls=[ToolCall(id="t1", name="a", arguments="{}")]),
                ToolMessage(content="1", tool_call_id="t1", name="a"),
                AssistantMessage(content="Found it"),
                UserMessage(content="thanks"),
            ]
        )

        assert [m["role"] for m in messages] == ["user"]
        assert messages[0]["content"] == [{"type": "text", "text": "thanks"}]

    def test_tools_cache_last(self):
        second = {**TOOL_SCHEMA, "function": {**TOOL_SCHEMA["function"], "name": "x"}}
        tools = to_anthropic_tools([TOOL_SCHEMA, second])

        assert tools[0].cache_control is None
        assert tools[1].cache_control is not None
        assert tools[1].input_schema == {"type": "object", "properties": {}}


class TestAnthropicClient:
    """Tests for the Anthropic client."""

    @pytest.mark.asyncio
    async def test_response_conversion(self):
        sdk = Mock()
        sdk.messages.create = AsyncMock(
            return_value=AnthropicAPIMessage.model_validate(
                {
                    "id": "msg_1",
                    "type": "message",
                    "role": "assistant",
                    "model": "claude-3-5-sonnet-20241022",
                    "content": [
                        {"type": "text", "text": "Let me look"},
                        {
                            "type": "tool_use",
                            "id": "toolu_1",
                            "name": "audit_catalog",
                            "input": {"issueType": "low_stock"},
                        },
                    ],
                    "stop_reason": "tool_use",
                    "stop_sequence": None,
                    "usage": {"input_tokens": 20, "output_tokens": 8},
                }
            )
        )
        client = AnthropicClient(client=sdk)

        response = await client.create_completion(
            [SystemMessage(content="prompt"), UserMessage(content="audit")], tools=[TOOL_SCHEMA], temperature=1.5
        )

        params = sdk.messages.create.call_args.kwargs
        assert params["system"] == "prompt"
        assert params["temperature"] == 1.0
        assert params["tools"][0]["cache_control"] == {"type": "ephemeral", "ttl": "5m"}

        assert response.provider == "anthropic"
        assert response.message.content == "Let me look"
        assert response.message.tool_calls[0].name == "audit_catalog"
        assert json.loads(response.message.tool_calls[0].arguments) == {"issueType": "low_stock"}
        assert response.usage.total_tokens == 28

    def test_missing_api_key(self):
        with patch.dict("os.environ", {}, clear=True), pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            AnthropicClient()


class TestBackendFactory:
    """Tests for provider selection."""

    def test_default_provider_is_openai(self):
        with patch.dict("os.environ", {"DEEPSEEK_API_KEY": "test-key"}, clear=True):
            assert isinstance(create_llm_backend(), OpenAIClient)

    def test_anthropic_provider(self):
        with patch.dict("os.environ", {"ANTHROPIC_API_KEY": "test-key"}, clear=True):
            assert isinstance(create_llm_backend("anthropic"), AnthropicClient)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unsupported LLM provider"):
            create_llm_backend("cohere")


class TestErrorMapping:
    """Tests for backend error classification."""

    def test_protocol_violation_only_for_bad_request(self):
        message = "tool_call_ids did not have response messages"
        assert isinstance(backend_error_from_status(message, 400), ProtocolViolationError)
        assert type(backend_error_from_status(message, 500)) is LLMBackendError

    def test_estimate_tokens_fallback(self):
        broken = Mock()
        broken.encode.side_effect = RuntimeError("encoding failed")

        assert estimate_tokens("a" * 40, tokenizer=broken) == 10
