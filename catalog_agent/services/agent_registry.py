"""In-memory registry of agent instances per session."""

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from cuid2 import cuid_wrapper

from catalog_agent.agents import AGENT_FACTORIES, AgentFactory, BaseAgent
from catalog_agent.config import get_agent_config
from catalog_agent.utils.logging import get_logger

logger = get_logger(__name__)

cuid = cuid_wrapper()

DEFAULT_ROLE = "product_agent"


@dataclass
class AgentEntry:
    """A cached agent and when it was last used."""

    agent: BaseAgent
    last_activity: datetime = field(default_factory=lambda: datetime.now(UTC))

    def update_activity(self) -> None:
        self.last_activity = datetime.now(UTC)


class AgentRegistry:
    """Caches one agent per ``(role, session_id)``, created lazily from a role factory."""

    def __init__(
        self,
        factories: dict[str, AgentFactory] | None = None,
        default_role: str = DEFAULT_ROLE,
        max_agents: int = 1000,
        ttl_minutes: int = 60,
    ):
        """Initialize agent registry.

        Args:
            factories: Agent factory per role
            default_role: Role whose factory serves roles without one
            max_agents: Cached agents kept before evicting the least recently used
            ttl_minutes: Minutes of inactivity before an agent expires
        """
        self.factories = dict(AGENT_FACTORIES if factories is None else factories)
        if default_role not in self.factories:
            raise ValueError(f"No factory registered for default role: {default_role}")
        if max_agents < 1:
            raise ValueError("max_agents must be at least 1")

        self.default_role = default_role
        self.max_agents = max_agents
        self.ttl = timedelta(minutes=ttl_minutes)
        self._agents: OrderedDict[tuple[str, str], AgentEntry] = OrderedDict()

    def get_agent(self, role: str, session_id: str) -> BaseAgent:
        """Get the session's agent for a role, creating it on first use.

        Args:
            role: Agent role; unknown roles use the default role's factory
            session_id: Session identifier

        Returns:
            The cached or newly created agent
        """
        self._cleanup_expired()

        key = (role, session_id)
        entry = self._agents.get(key)
        if entry is not None:
            entry.update_activity()
            self._agents.move_to_end(key)
            return entry.agent

        factory = self.factories.get(role)
        if factory is None:
            logger.warning(f"No agent for role {role}, using {self.default_role}")
            factory = self.factories[self.default_role]

        while len(self._agents) >= self.max_agents:
            (old_role, old_session), _ = self._agents.popitem(last=False)
            logger.info(f"Evicted least recently used agent {old_role} for session {old_session}")

        agent = factory()
        self._agents[key] = AgentEntry(agent=agent)
        logger.info(f"Created {type(agent).__name__} for role {role}, session {session_id}")
        return agent

    def evict(self, session_id: str) -> int:
        """Drop the agents of every role for a session.

        Returns:
            Number of agents removed
        """
        keys = [key for key in self._agents if key[1] == session_id]
        for key in keys:
            del self._agents[key]

        if keys:
            logger.info(f"Evicted {len(keys)} agents for session {session_id}")
        return len(keys)

    def clear(self) -> None:
        self._agents.clear()

    def get_agent_count(self) -> int:
        """Get current number of cached agents."""
        self._cleanup_expired()
        return len(self._agents)

    def generate_session_id(self) -> str:
        """Generate a new CUID-based session ID."""
        return cuid()

    def _cleanup_expired(self) -> None:
        """Remove agents idle longer than the TTL."""
        current_time = datetime.now(UTC)
        expired = [key for key, entry in self._agents.items() if current_time - entry.last_activity > self.ttl]

        for key in expired:
            del self._agents[key]

        if expired:
            logger.debug(f"Expired {len(expired)} idle agents")


_agent_registry: AgentRegistry | None = None


def get_agent_registry() -> AgentRegistry:
    """Get or create the process-wide agent registry."""
    global _agent_registry
    if _agent_registry is None:
        config = get_agent_config()
        _agent_registry = AgentRegistry(
            max_agents=config.registry_max_agents,
            ttl_minutes=config.registry_ttl_minutes,
        )
    return _agent_registry
