"""Turn-level recovery from conversations the backend rejects."""

from collections.abc import Awaitable, Callable

from catalog_agent.clients.base import LLMBackendError, ProtocolViolationError, matches_protocol_violation
from catalog_agent.models.agent import AgentResponse
from catalog_agent.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_PREFIX = "I'm sorry, there was an error processing your request"


def is_protocol_violation(error: BaseException) -> bool:
    """Check whether an error means the stored history broke tool-call ordering."""
    if isinstance(error, ProtocolViolationError):
        return True
    return matches_protocol_violation(str(error))


def error_response(error: BaseException) -> AgentResponse:
    """Build the error response shown to the caller for a failed turn."""
    detail = error.message if isinstance(error, LLMBackendError) else str(error)
    return AgentResponse.error(f"{ERROR_PREFIX}: {detail or type(error).__name__}")


class SelfHealingSupervisor:
    """Runs a turn, resetting history and retrying once on a protocol violation."""

    def __init__(self, agent_name: str = "agent"):
        self.agent_name = agent_name
        self.heal_count = 0

    async def run(
        self,
        turn: Callable[[], Awaitable[AgentResponse]],
        reset: Callable[[], None],
    ) -> AgentResponse:
        """Run one turn and always return a response.

        Args:
            turn: Coroutine factory that processes the user's message
            reset: Clears the agent's history before the retry

        Returns:
            The turn's response, or an error response if it could not complete
        """
        try:
            return await turn()
        except Exception as e:
            if not is_protocol_violation(e):
                logger.error(f"Error in {self.agent_name}: {e}", exc_info=True)
                return error_response(e)

            logger.warning(f"{self.agent_name} history rejected by backend, clearing and retrying: {e}")

        reset()
        self.heal_count += 1

        try:
            return await turn()
        except Exception as e:
            logger.error(f"Error in {self.agent_name} after history reset: {e}", exc_info=True)
            return error_response(e)
