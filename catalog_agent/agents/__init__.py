"""Conversational agents and their factories."""

from collections.abc import Callable

from catalog_agent.agents.base import BaseAgent
from catalog_agent.agents.product import ProductAgent

AgentFactory = Callable[[], BaseAgent]


def create_product_agent() -> BaseAgent:
    return ProductAgent()


# Roles without a dedicated agent fall back to the product agent
AGENT_FACTORIES: dict[str, AgentFactory] = {
    "product_agent": create_product_agent,
}


__all__ = ["AGENT_FACTORIES", "AgentFactory", "BaseAgent", "ProductAgent", "create_product_agent"]
