"""Edge logic and routing for the agent loop graph."""

from typing import Literal

from catalog_agent.graphs.state import AgentLoopState
from catalog_agent.utils.logging import get_logger

logger = get_logger(__name__)


def route_agent_output(state: AgentLoopState) -> Literal["tools", "finalize"]:
    """Route from the agent node.

    Tool calls take precedence over any text in the same response.
    """
    if state.response is not None and state.response.has_tool_calls:
        return "tools"
    return "finalize"


def route_tool_output(state: AgentLoopState) -> Literal["agent", "abort"]:
    """Route from tool execution back to the model, unless the round budget is spent."""
    if state.rounds >= state.max_rounds:
        logger.warning(f"Agent loop reached max rounds ({state.max_rounds})")
        return "abort"
    return "agent"
