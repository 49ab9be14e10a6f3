"""Agent loop graph: model turn, tool execution, repeat until a final answer."""

from langgraph.graph import END, StateGraph

from catalog_agent.graphs.edges import route_agent_output, route_tool_output
from catalog_agent.graphs.nodes import LOOP_RUN_KEY, AgentLoopNodes
from catalog_agent.graphs.state import AgentLoopState, LoopRun
from catalog_agent.models.agent import AgentContext
from catalog_agent.models.llm import AgentLoopResult, LLMUsage
from catalog_agent.models.messages import SystemMessage
from catalog_agent.services.history import ConversationHistory
from catalog_agent.services.llm import LLMService
from catalog_agent.tools.registry import ToolsRegistry
from catalog_agent.utils.logging import get_logger

logger = get_logger(__name__)


def create_agent_loop_graph(nodes: AgentLoopNodes):
    """Create the agent loop graph.

    The loop alternates between the ``agent`` node (one backend call) and the
    ``tools`` node (execute every requested call) until the backend answers
    without tool calls or the round budget is spent.

    Args:
        nodes: Node implementations bound to a backend and a tools registry

    Returns:
        Compiled LangGraph workflow
    """
    workflow = StateGraph(AgentLoopState)

    workflow.add_node("agent", nodes.agent_node)
    workflow.add_node("tools", nodes.tools_node)
    workflow.add_node("finalize", nodes.finalize_node)
    workflow.add_node("abort", nodes.abort_node)

    workflow.set_entry_point("agent")

    workflow.add_conditional_edges(
        "agent",
        route_agent_output,
        {
            "tools": "tools",
            "finalize": "finalize",
        },
    )

    workflow.add_conditional_edges(
        "tools",
        route_tool_output,
        {
            "agent": "agent",
            "abort": "abort",
        },
    )

    workflow.add_edge("finalize", END)
    workflow.add_edge("abort", END)

    return workflow.compile()


class AgentLoop:
    """Bounded request/act loop over one agent's history and tools."""

    def __init__(
        self,
        llm_service: LLMService,
        tools: ToolsRegistry,
        max_rounds: int = 15,
        max_history_messages: int = 50,
        max_tool_result_length: int = 5000,
    ):
        """Initialize the loop.

        Args:
            llm_service: Service used for backend calls
            tools: Registry of tools the backend may call
            max_rounds: Maximum backend calls per run
            max_history_messages: Non-system messages kept when pruning
            max_tool_result_length: Character budget for each tool result
        """
        if max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")

        self.max_rounds = max_rounds
        self.nodes = AgentLoopNodes(
            llm_service,
            tools,
            max_history_messages=max_history_messages,
            max_tool_result_length=max_tool_result_length,
        )
        self.graph = create_agent_loop_graph(self.nodes)

    async def run(
        self,
        history: ConversationHistory,
        context: AgentContext,
        system_messages: list[SystemMessage] | None = None,
        temperature: float = 0.7,
        tools_enabled: bool = True,
    ) -> AgentLoopResult:
        """Run the loop until the backend gives a final answer.

        New messages are appended to ``history`` as the loop progresses, so
        on error the history keeps every turn completed before the failure.

        Raises:
            LLMBackendError: If a backend call fails
        """
        loop_run = LoopRun(
            history=history,
            context=context,
            system_messages=list(system_messages or []),
            temperature=temperature,
            tools_enabled=tools_enabled,
        )
        config = {
            "configurable": {LOOP_RUN_KEY: loop_run},
            # Each round visits at most two nodes, plus finalize/abort
            "recursion_limit": 2 * self.max_rounds + 5,
        }

        final_state = await self.graph.ainvoke(AgentLoopState(max_rounds=self.max_rounds), config)

        usage = LLMUsage(
            input_tokens=final_state.get("total_input_tokens", 0),
            output_tokens=final_state.get("total_output_tokens", 0),
            cache_read_input_tokens=final_state.get("cache_read_tokens", 0),
            cache_creation_input_tokens=final_state.get("cache_creation_tokens", 0),
        )
        usage.total_tokens = usage.input_tokens + usage.output_tokens

        result = AgentLoopResult(
            content=final_state.get("final_text") or "",
            stop_reason=final_state.get("stop_reason") or "complete",
            rounds=final_state.get("rounds", 0),
            usage=usage,
            tool_calls_executed=final_state.get("tool_calls_executed", 0),
        )
        logger.info(
            f"Agent loop finished: stop_reason={result.stop_reason}, rounds={result.rounds}, "
            f"tool_calls={result.tool_calls_executed}, tokens={usage.total_tokens}, "
            f"cache_hit_rate={usage.cache_hit_rate:.1f}%"
        )
        return result
