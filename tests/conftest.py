"""Shared fixtures."""

import pytest

from catalog_agent.agents.product import ProductAgent
from catalog_agent.config import AgentConfig
from catalog_agent.services.catalog import InMemoryCatalogService
from catalog_agent.services.llm import LLMService
from tests.fakes import ScriptedBackend


@pytest.fixture
def agent_config():
    """Agent configuration independent of the environment."""
    return AgentConfig()


@pytest.fixture
def backend():
    return ScriptedBackend()


@pytest.fixture
def catalog():
    return InMemoryCatalogService()


@pytest.fixture
def product_agent(backend, catalog, agent_config):
    """Product agent wired to the scripted backend."""
    return ProductAgent(catalog=catalog, llm_service=LLMService(backend), config=agent_config)
