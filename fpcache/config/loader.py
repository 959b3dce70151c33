"""
Fingerprint Cache — Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton configuration instance for the process.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import FingerprintCacheConfig

logger = logging.getLogger(__name__)

_config_instance: FingerprintCacheConfig | None = None


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> FingerprintCacheConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated FingerprintCacheConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    if env_file:
        env_path = Path(env_file)
    else:
        env_path = Path.cwd() / ".env"

    if env_path.exists():
        logger.info(f"Loading environment from {env_path}")
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    # Auto-detect store backend: Redis if REDIS_URL is set, else memory
    redis_url = os.getenv("REDIS_URL")
    store_backend = "redis" if redis_url else "memory"

    try:
        config_dict = {
            "manager": {
                "default_ttl_seconds": int(os.getenv("CACHE_DEFAULT_TTL_SECONDS", "900")),
                "download_counter_enabled": _env_flag("CACHE_DOWNLOAD_COUNTER", "true"),
                "redundancy_counter_enabled": _env_flag("CACHE_REDUNDANCY_COUNTER", "true"),
            },
            "store": {
                "backend": os.getenv("CACHE_BACKEND", store_backend),
                "namespace": os.getenv("CACHE_NAMESPACE", "fpcache"),
                "redis_url": redis_url,
                "redis_max_connections": int(os.getenv("REDIS_MAX_CONNECTIONS", "10")),
                "redis_socket_timeout": int(os.getenv("REDIS_SOCKET_TIMEOUT", "5")),
            },
            "logging": {
                "level": os.getenv("LOG_LEVEL", "INFO").upper(),
                "json_format": _env_flag("LOG_JSON", "true"),
            },
        }
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid numeric environment value: {e}",
            details={"error": str(e)},
        ) from e

    try:
        _config_instance = FingerprintCacheConfig(**config_dict)  # type: ignore[arg-type]
        logger.info(
            f"Configuration loaded successfully (store backend: {_config_instance.store.backend.value})",
            extra={
                "store_backend": _config_instance.store.backend.value,
            },
        )
        return _config_instance
    except ValidationError as e:
        logger.error(
            f"Configuration validation failed: {e}",
            extra={"validation_errors": e.errors(), "config_dict_keys": list(config_dict.keys())},
            exc_info=True,
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors()},
        ) from e


def get_config() -> FingerprintCacheConfig:
    """
    Get the current configuration instance, loading it on first access.

    Returns:
        Current FingerprintCacheConfig instance
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> FingerprintCacheConfig:
    """Force reload configuration."""
    return load_config(env_file=env_file, reload=True)
