"""Configuration for the permission engine.

Pydantic-validated settings shared by the cache, logging and service
construction. ``load_config_from_env()`` is the only place that reads
environment variables; everything else receives an ``AccessConfig``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_CACHE_TTL_SECONDS = 60 * 30
DEFAULT_CACHE_KEY_PREFIX = "accessmask:users:authorization"


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AccessConfig(BaseModel):
    """Settings for the permission engine.

    A missing ``redis_url`` disables the permission cache; every check is
    then computed directly from the user record.
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

    # Permission cache
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL (e.g., redis://localhost:6379/0)",
    )
    cache_ttl_seconds: int = Field(
        default=DEFAULT_CACHE_TTL_SECONDS,
        gt=0,
        description="Lifetime of a cached permission entry",
    )
    cache_key_prefix: str = Field(
        default=DEFAULT_CACHE_KEY_PREFIX,
        min_length=1,
        description="Key prefix; the user id is appended after ':'",
    )
    cache_timeout_seconds: float = Field(
        default=0.5,
        gt=0,
        description="Upper bound for a single cache round-trip",
    )
    cache_retry_after_seconds: float = Field(
        default=5.0,
        ge=0,
        description="How long to bypass the cache after a backend failure",
    )

    service_name: Optional[str] = Field(
        default=None,
        description="Service name used as logger name prefix",
    )

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

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


def load_config_from_env() -> AccessConfig:
    """Load configuration from environment variables.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - REDIS_URL: Redis connection URL (unset = no permission cache)
    - AUTH_CACHE_TTL_SECONDS: Cached entry lifetime (default: 1800)
    - AUTH_CACHE_KEY_PREFIX: Cache key prefix
    - AUTH_CACHE_TIMEOUT_SECONDS: Per-call cache timeout (default: 0.5)
    - AUTH_CACHE_RETRY_AFTER_SECONDS: Cache bypass window after failure (default: 5)
    - SERVICE_NAME: Service name

    Returns:
        AccessConfig instance with values from environment or defaults.
    """
    import os

    return AccessConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
        redis_url=os.getenv("REDIS_URL") or None,
        cache_ttl_seconds=int(os.getenv("AUTH_CACHE_TTL_SECONDS", str(DEFAULT_CACHE_TTL_SECONDS))),
        cache_key_prefix=os.getenv("AUTH_CACHE_KEY_PREFIX", DEFAULT_CACHE_KEY_PREFIX),
        cache_timeout_seconds=float(os.getenv("AUTH_CACHE_TIMEOUT_SECONDS", "0.5")),
        cache_retry_after_seconds=float(os.getenv("AUTH_CACHE_RETRY_AFTER_SECONDS", "5")),
        service_name=os.getenv("SERVICE_NAME"),
    )


__all__ = [
    "AccessConfig",
    "DEFAULT_CACHE_KEY_PREFIX",
    "DEFAULT_CACHE_TTL_SECONDS",
    "LogLevel",
    "load_config_from_env",
]
