"""Configuration contract for edugate.

Pydantic-validated settings for the gate and its store adapters. Direct
os.environ/os.getenv usage is confined to ``load_config_from_env()``; all
other code receives a ``GateConfig`` instance.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Environment(str, Enum):
    """Deployment environment. Controls error-body detail."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


class GateConfig(BaseModel):
    """Configuration for an edugate deployment.

    Non-production environments include reason codes and underlying store
    errors in failure bodies; production omits internal detail.
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment",
    )

    # Redis resource store
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for RedisResourceStore (e.g., redis://localhost:6379/0)",
    )
    redis_prefix: str = Field(
        default="edugate",
        description="Key prefix for resource documents in Redis",
    )

    service_name: Optional[str] = Field(
        default=None,
        description="Service name used as the logger namespace",
    )

    @property
    def include_error_details(self) -> bool:
        return self.environment != Environment.PRODUCTION

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate Redis URL format."""
        if v is None:
            return v
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("Redis URL must start with redis://, rediss://, or unix://")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str | Environment) -> Environment:
        if isinstance(v, Environment):
            return v
        if isinstance(v, str):
            aliases = {"dev": "development", "prod": "production"}
            raw = v.strip().lower()
            try:
                return Environment(aliases.get(raw, raw))
            except ValueError:
                raise ValueError(f"Invalid environment: {v}. Must be one of {[e.value for e in Environment]}")
        raise ValueError(f"Environment must be string or Environment enum, got {type(v)}")

    model_config = {
        "extra": "forbid",
    }


def load_config_from_env() -> GateConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - EDUGATE_ENV: development | test | production (default: development)
    - REDIS_URL: Redis connection URL
    - EDUGATE_REDIS_PREFIX: Key prefix for Redis resource documents
    - SERVICE_NAME: Service name for logging

    Returns:
        GateConfig instance with values from environment or defaults.
    """
    import os

    return GateConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes", "on"),
        environment=os.getenv("EDUGATE_ENV", "development"),
        redis_url=os.getenv("REDIS_URL"),
        redis_prefix=os.getenv("EDUGATE_REDIS_PREFIX", "edugate"),
        service_name=os.getenv("SERVICE_NAME"),
    )


__all__ = [
    "Environment",
    "GateConfig",
    "LogLevel",
    "load_config_from_env",
]
