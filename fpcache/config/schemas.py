"""
Fingerprint Cache — Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
All configuration is defined here and validated once at construction.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StoreBackend(str, Enum):
    """Supported backing stores."""

    MEMORY = "memory"
    REDIS = "redis"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CacheManagerConfig(BaseModel):
    """Immutable cache manager settings, fixed at construction."""

    default_ttl_seconds: int = Field(
        default=900,
        gt=0,
        description="TTL used when a caller omits or supplies a non-positive TTL",
    )
    download_counter_enabled: bool = Field(default=True, description="Count successful reads per entry")
    redundancy_counter_enabled: bool = Field(
        default=True,
        description="Count identical puts and extend expiry on each one",
    )

    model_config = ConfigDict(frozen=True)


class StoreConfig(BaseModel):
    """Backing store configuration."""

    backend: StoreBackend = Field(default=StoreBackend.MEMORY, description="Store backend to use")
    namespace: str = Field(default="fpcache", description="Key namespace/prefix")

    # Redis-specific settings (only used when backend=redis)
    redis_url: str | None = Field(default=None, description="Redis connection URL")
    redis_max_connections: int = Field(default=10, ge=1, description="Redis connection pool size")
    redis_socket_timeout: int = Field(default=5, ge=1, description="Redis socket timeout in seconds")

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str | None, info: Any) -> str | None:
        """Ensure redis_url is provided when backend is redis."""
        backend = info.data.get("backend")
        if backend == StoreBackend.REDIS and not v:
            raise ValueError("redis_url is required when store backend is 'redis'")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    json_format: bool = Field(default=True, description="Emit JSON log lines instead of plain text")


class FingerprintCacheConfig(BaseModel):
    """Root configuration for the fingerprint cache."""

    manager: CacheManagerConfig = Field(default_factory=CacheManagerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(validate_assignment=True)
