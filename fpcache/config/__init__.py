"""
Fingerprint Cache — Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, reload_config
from .schemas import (
    CacheManagerConfig,
    FingerprintCacheConfig,
    LoggingConfig,
    LogLevel,
    StoreBackend,
    StoreConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    # Main config
    "FingerprintCacheConfig",
    # Enums
    "StoreBackend",
    "LogLevel",
    # Config sections
    "CacheManagerConfig",
    "StoreConfig",
    "LoggingConfig",
]
