"""Logging setup shared by the service, the agents and the clients."""

import logging
import os
import sys

from pydantic import BaseModel, Field, field_validator

# Backend SDKs and the HTTP stack log every request at INFO
NOISY_LOGGERS = ("openai", "anthropic", "httpx", "uvicorn.access")


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    quiet_loggers: list[str] = Field(default_factory=lambda: list(NOISY_LOGGERS))

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls) -> "LogConfig":
        """Build configuration from ``LOG_LEVEL`` and ``LOG_FORMAT``."""
        overrides = {"level": os.getenv("LOG_LEVEL"), "format": os.getenv("LOG_FORMAT")}
        return cls(**{key: value for key, value in overrides.items() if value})


def setup_logging(config: LogConfig | None = None) -> None:
    """Configure the root logger for the application.

    Args:
        config: Logging configuration (defaults to environment settings)
    """
    config = config or LogConfig.from_env()

    logging.basicConfig(
        level=config.level,
        format=config.format,
        datefmt=config.date_format,
        stream=sys.stdout,
        force=True,
    )

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger at the level configured by ``LOG_LEVEL``.

    Args:
        name: Module name (typically __name__)
    """
    logger = logging.getLogger(name)
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    return logger
