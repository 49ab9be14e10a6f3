"""Base agent: owns a conversation history and drives the agent loop."""

from abc import ABC, abstractmethod

from catalog_agent.agents.recovery import SelfHealingSupervisor
from catalog_agent.config import AgentConfig, get_agent_config
from catalog_agent.graphs.agent_loop import AgentLoop
from catalog_agent.models.agent import AgentContext, AgentResponse, AgentRole
from catalog_agent.models.llm import AgentLoopResult
from catalog_agent.models.messages import Message, SystemMessage
from catalog_agent.services.history import ConversationHistory
from catalog_agent.services.llm import LLMService, get_llm_service
from catalog_agent.tools.base import ToolDefinition
from catalog_agent.tools.registry import ToolsRegistry
from catalog_agent.utils.logging import get_logger

logger = get_logger(__name__)


class BaseAgent(ABC):
    """Conversational agent with tools.

    Subclasses provide the system prompt, the tool set and ``handle_message``.
    Callers go through ``process_message``, which never raises.
    """

    role: AgentRole = "general"

    def __init__(
        self,
        system_prompt: str,
        tools: list[ToolDefinition] | None = None,
        llm_service: LLMService | None = None,
        config: AgentConfig | None = None,
    ):
        """Initialize the agent.

        Args:
            system_prompt: Instructions sent first on every backend call
            tools: Tools the backend may call
            llm_service: Backend access (defaults to the process-wide service)
            config: Loop limits and timeouts (defaults to environment configuration)
        """
        self.system_prompt = system_prompt
        self.config = config or get_agent_config()
        self.history = ConversationHistory()
        self.tools = ToolsRegistry(tools, timeout_seconds=self.config.tool_timeout_seconds)
        self.loop = AgentLoop(
            llm_service or get_llm_service(),
            self.tools,
            max_rounds=self.config.max_rounds,
            max_history_messages=self.config.max_history_messages,
            max_tool_result_length=self.config.max_tool_result_length,
        )
        self.supervisor = SelfHealingSupervisor(agent_name=type(self).__name__)

    def build_system_messages(self, context: AgentContext) -> list[SystemMessage]:
        """System turns for a call; override to add context-dependent instructions."""
        return [SystemMessage(content=self.system_prompt)]

    async def run_loop(
        self,
        initial_messages: list[Message],
        context: AgentContext,
        temperature: float | None = None,
        tools_enabled: bool = True,
    ) -> AgentLoopResult:
        """Append the new messages to history and run the loop to completion.

        Raises:
            LLMBackendError: If a backend call fails
        """
        self.history.extend(initial_messages)
        return await self.loop.run(
            self.history,
            context,
            system_messages=self.build_system_messages(context),
            temperature=self.config.temperature if temperature is None else temperature,
            tools_enabled=tools_enabled,
        )

    async def run(
        self,
        initial_messages: list[Message],
        context: AgentContext,
        temperature: float | None = None,
        tools_enabled: bool = True,
    ) -> str:
        """Run the loop and return the final assistant text."""
        result = await self.run_loop(initial_messages, context, temperature, tools_enabled)
        return result.content

    @abstractmethod
    async def handle_message(self, message: str, context: AgentContext) -> AgentResponse:
        """Process one user message; may raise."""

    async def process_message(self, message: str, context: AgentContext) -> AgentResponse:
        """Process one user message, recovering from rejected histories.

        Returns:
            Agent response; failures are reported with ``status="error"``
        """
        logger.info(f"{type(self).__name__} processing message ({len(self.history)} messages in history)")
        return await self.supervisor.run(
            lambda: self.handle_message(message, context),
            reset=self.clear_history,
        )

    def get_history(self) -> list[Message]:
        return self.history.messages

    def clear_history(self) -> None:
        logger.info(f"Clearing history of {type(self).__name__} ({len(self.history)} messages)")
        self.history.clear()
