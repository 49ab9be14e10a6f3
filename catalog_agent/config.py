"""Agent runtime configuration."""

import os
from dataclasses import dataclass


def _env_float(name: str, default: float | None) -> float | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


@dataclass
class AgentConfig:
    """Configuration for agent orchestration."""

    max_rounds: int = 15  # Backend calls allowed per conversational turn
    max_history_messages: int = 50  # Non-system messages sent to the backend
    max_tool_result_length: int = 5000  # Characters of serialized tool output
    temperature: float = 0.7

    # None waits indefinitely
    tool_timeout_seconds: float | None = None
    backend_timeout_seconds: float | None = None

    registry_max_agents: int = 1000
    registry_ttl_minutes: int = 60

    @classmethod
    def from_env(cls) -> "AgentConfig":
        """Build configuration from ``AGENT_*`` environment variables."""
        defaults = cls()
        return cls(
            max_rounds=_env_int("AGENT_MAX_ROUNDS", defaults.max_rounds),
            max_history_messages=_env_int("AGENT_MAX_HISTORY_MESSAGES", defaults.max_history_messages),
            max_tool_result_length=_env_int("AGENT_MAX_TOOL_RESULT_LENGTH", defaults.max_tool_result_length),
            temperature=_env_float("AGENT_TEMPERATURE", defaults.temperature) or 0.0,
            tool_timeout_seconds=_env_float("AGENT_TOOL_TIMEOUT_SECONDS", None),
            backend_timeout_seconds=_env_float("AGENT_BACKEND_TIMEOUT_SECONDS", None),
            registry_max_agents=_env_int("AGENT_REGISTRY_MAX_AGENTS", defaults.registry_max_agents),
            registry_ttl_minutes=_env_int("AGENT_REGISTRY_TTL_MINUTES", defaults.registry_ttl_minutes),
        )

    def __post_init__(self) -> None:
        if self.max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        if self.max_history_messages < 1:
            raise ValueError("max_history_messages must be at least 1")


_agent_config: AgentConfig | None = None


def get_agent_config() -> AgentConfig:
    """Get or create agent configuration instance."""
    global _agent_config
    if _agent_config is None:
        _agent_config = AgentConfig.from_env()
    return _agent_config
