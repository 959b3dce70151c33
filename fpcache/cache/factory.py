"""
Fingerprint Cache — Store and Manager Factory

Canonical factory for creating store adapters and cache managers from configuration.

Key points:
- Select backend with CACHE_BACKEND=memory|redis (auto-detected as redis when REDIS_URL is set)
- When redis is selected, the redis client must be installed and REDIS_URL must be set
- Instances are kept in a named registry so one process shares one connection pool

Examples:
    from fpcache.cache.factory import create_cache_manager

    # Uses env-configured backend (memory by default)
    manager = create_cache_manager()

    # Or explicitly supply a config (e.g., for tests)
    from fpcache.config import FingerprintCacheConfig, StoreConfig, StoreBackend
    cfg = FingerprintCacheConfig(store=StoreConfig(backend=StoreBackend.MEMORY))
    manager = create_cache_manager(cfg, name="test")
"""

from __future__ import annotations

import logging

from ..config import FingerprintCacheConfig, StoreBackend, StoreConfig, get_config
from ..errors import ConfigurationError
from ..observability import setup_logging
from .backends.memory import MemoryStoreAdapter
from .interface import CacheStoreAdapter
from .manager import CacheManager

logger = logging.getLogger(__name__)

# Global registries keyed by instance name
_store_instances: dict[str, CacheStoreAdapter] = {}
_manager_instances: dict[str, CacheManager] = {}


def _create_memory_store(config: StoreConfig) -> CacheStoreAdapter:
    """Internal helper to construct a memory store adapter."""
    return MemoryStoreAdapter(namespace=config.namespace)


def _create_redis_store(config: StoreConfig) -> CacheStoreAdapter:
    """Internal helper to construct a redis store adapter with lazy import."""
    if not config.redis_url:
        raise ConfigurationError(
            "REDIS_URL must be set when CACHE_BACKEND=redis",
            details={"env": "REDIS_URL", "backend": "redis"},
        )

    # Lazy import to avoid hard dependency when memory backend is used
    try:
        from .backends.redis import RedisStoreAdapter
    except ImportError as e:
        logger.error(
            "Redis backend selected but redis client is not installed",
            extra={"package": "redis>=5.0.0", "error": str(e)},
        )
        raise ConfigurationError(
            "Redis backend selected but redis client is unavailable. "
            "Install with: pip install 'redis>=5.0.0' or add to dependencies.",
            details={"package": "redis>=5.0.0", "error": str(e), "backend": "redis"},
        ) from e

    return RedisStoreAdapter(
        redis_url=config.redis_url,
        namespace=config.namespace,
        max_connections=config.redis_max_connections,
        socket_timeout=config.redis_socket_timeout,
    )


def create_store(
    config: StoreConfig | None = None,
    name: str = "default",
) -> CacheStoreAdapter:
    """
    Create a store adapter based on configuration.

    Args:
        config: Store configuration (uses global config if not provided)
        name: Instance name (for multiple store instances)

    Returns:
        Configured store adapter instance

    Raises:
        ConfigurationError: If configuration is invalid or backend unavailable
    """
    if name in _store_instances:
        logger.debug("Returning existing store instance: %s", name)
        return _store_instances[name]

    if config is None:
        config = get_config().store

    logger.info(
        "Creating store instance '%s' with backend: %s",
        name,
        config.backend.value,
        extra={"store_name": name, "backend": config.backend.value},
    )

    if config.backend == StoreBackend.MEMORY:
        store = _create_memory_store(config)
    elif config.backend == StoreBackend.REDIS:
        store = _create_redis_store(config)
    else:
        raise ConfigurationError(
            f"Unknown store backend: {config.backend}",
            details={
                "backend": str(config.backend),
                "supported": [backend.value for backend in StoreBackend],
            },
        )

    _store_instances[name] = store
    return store


def create_cache_manager(
    config: FingerprintCacheConfig | None = None,
    store: CacheStoreAdapter | None = None,
    name: str = "default",
) -> CacheManager:
    """
    Create a cache manager wired to a store adapter.

    Applies config.logging to the fpcache logger before building the manager.

    Args:
        config: Root configuration (uses global config if not provided)
        store: Explicit store adapter; created from config.store when omitted
        name: Instance name shared by the manager and its store

    Returns:
        Configured CacheManager
    """
    if name in _manager_instances:
        logger.debug("Returning existing cache manager instance: %s", name)
        return _manager_instances[name]

    if config is None:
        config = get_config()

    setup_logging(config.logging.level.value, config.logging.json_format)

    if store is None:
        store = create_store(config.store, name=name)

    manager = CacheManager(store, config.manager)
    _manager_instances[name] = manager

    logger.info(
        "Cache manager '%s' created successfully",
        name,
        extra={
            "manager_name": name,
            "default_ttl_seconds": config.manager.default_ttl_seconds,
            "download_counter_enabled": config.manager.download_counter_enabled,
            "redundancy_counter_enabled": config.manager.redundancy_counter_enabled,
        },
    )
    return manager


def get_cache_manager(name: str = "default") -> CacheManager:
    """
    Get an existing cache manager by name, creating it from global config if missing.
    """
    if name not in _manager_instances:
        logger.debug("Cache manager '%s' not found, creating new instance", name)
        return create_cache_manager(name=name)

    return _manager_instances[name]


async def close_all_stores() -> None:
    """
    Close all store instances and release resources.

    Must be called during graceful shutdown.
    """
    if not _store_instances:
        logger.debug("No store instances to close")
        return

    logger.info("Closing %d store instance(s)...", len(_store_instances))

    for name, store in list(_store_instances.items()):
        try:
            await store.close()
            logger.info("Closed store instance: %s", name)
        except Exception as e:
            logger.error(
                "Error closing store instance '%s': %s",
                name,
                e,
                extra={"store_name": name, "error": str(e)},
                exc_info=True,
            )

    _store_instances.clear()
    _manager_instances.clear()
    logger.info("All store instances closed")


def reset_cache_factory() -> None:
    """
    Clear all instance references without closing them.

    Warning: Only use this in testing contexts.
    """
    count = len(_store_instances) + len(_manager_instances)
    _store_instances.clear()
    _manager_instances.clear()
    logger.debug("Reset cache factory, cleared %d instance reference(s)", count)


def list_store_instances() -> list[str]:
    """List all registered store instance names."""
    return list(_store_instances.keys())
