"""Node implementations for the agent loop graph."""

from typing import Any

from langchain_core.runnables import RunnableConfig

from catalog_agent.graphs.state import AgentLoopState, LoopRun
from catalog_agent.models.agent import AgentContext
from catalog_agent.models.messages import AssistantMessage, ToolCall, ToolMessage
from catalog_agent.services.llm import LLMService
from catalog_agent.services.pruning import prune_history
from catalog_agent.services.truncation import truncate_tool_result
from catalog_agent.tools.base import ToolError
from catalog_agent.tools.registry import ToolsRegistry, tool_error_content
from catalog_agent.utils.logging import get_logger

logger = get_logger(__name__)

STEP_LIMIT_MESSAGE = (
    "I reached the maximum number of steps for this request before finishing. "
    "Please narrow the request or ask me to continue."
)

LOOP_RUN_KEY = "loop_run"


def get_loop_run(config: RunnableConfig) -> LoopRun:
    """Fetch the per-run inputs from the node config."""
    return config["configurable"][LOOP_RUN_KEY]


class AgentLoopNodes:
    """Graph nodes bound to an LLM service and a tools registry."""

    def __init__(
        self,
        llm_service: LLMService,
        tools: ToolsRegistry,
        max_history_messages: int = 50,
        max_tool_result_length: int = 5000,
    ):
        self.llm_service = llm_service
        self.tools = tools
        self.max_history_messages = max_history_messages
        self.max_tool_result_length = max_tool_result_length

    async def agent_node(self, state: AgentLoopState, config: RunnableConfig) -> dict[str, Any]:
        """Send the pruned conversation to the backend and record its turn."""
        run = get_loop_run(config)
        rounds = state.rounds + 1
        logger.debug(f"Agent loop round {rounds}/{state.max_rounds}")

        messages = prune_history([*run.system_messages, *run.history.messages], self.max_history_messages)
        tools = self.tools.get_function_schemas() if run.tools_enabled and len(self.tools) else None

        response = await self.llm_service.complete(messages, tools=tools, temperature=run.temperature)

        updates: dict[str, Any] = {"rounds": rounds, "response": response.message}
        if response.usage:
            updates.update(
                {
                    "total_input_tokens": state.total_input_tokens + response.usage.input_tokens,
                    "total_output_tokens": state.total_output_tokens + response.usage.output_tokens,
                    "cache_read_tokens": state.cache_read_tokens + response.usage.cache_read_input_tokens,
                    "cache_creation_tokens": state.cache_creation_tokens
                    + response.usage.cache_creation_input_tokens,
                }
            )
        return updates

    async def tools_node(self, state: AgentLoopState, config: RunnableConfig) -> dict[str, Any]:
        """Record the tool-call turn, then resolve each call in order."""
        run = get_loop_run(config)
        response = state.response
        if response is None:
            raise RuntimeError("tools node reached without a backend response")

        run.history.append(response)
        logger.info(f"LLM wants to use {len(response.tool_calls)} tools")

        # Sequential: tools may write to shared catalog state
        for call in response.tool_calls:
            content = await self._resolve_tool_call(call, run.context)
            run.history.append(ToolMessage(content=content, tool_call_id=call.id, name=call.name))

        return {
            "response": None,
            "tool_calls_executed": state.tool_calls_executed + len(response.tool_calls),
        }

    def finalize_node(self, state: AgentLoopState, config: RunnableConfig) -> dict[str, Any]:
        """Store the final answer."""
        run = get_loop_run(config)
        content = state.response.content if state.response else None
        run.history.append(AssistantMessage(content=content or ""))

        logger.info(f"Agent loop completed in {state.rounds} rounds")
        return {"final_text": content or "", "stop_reason": "complete", "response": None}

    def abort_node(self, state: AgentLoopState, config: RunnableConfig) -> dict[str, Any]:
        """Stop with the step-limit advisory instead of failing."""
        run = get_loop_run(config)
        run.history.append(AssistantMessage(content=STEP_LIMIT_MESSAGE))
        return {"final_text": STEP_LIMIT_MESSAGE, "stop_reason": "max_rounds"}

    async def _resolve_tool_call(self, call: ToolCall, context: AgentContext) -> str:
        logger.debug(f"Executing tool: {call.name} with arguments: {call.arguments}")
        try:
            result = await self.tools.execute(call, context)
        except ToolError as e:
            logger.error(f"Tool {call.name} failed: {e}")
            return tool_error_content(e)

        content = truncate_tool_result(result, self.max_tool_result_length)
        logger.debug(f"Tool {call.name} succeeded: {content[:100]}...")
        return content
