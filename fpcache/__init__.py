"""
Fingerprint Cache — Durable Deduplicating Cache

Get/put/delete over a TTL-capable keyed store with content-addressed
deduplication, recency-windowed reads and optional usage counters.
"""

__version__ = "1.0.0"

from .cache import CacheHit, CacheManager, CacheStoreAdapter, PutReceipt, create_cache_manager
from .config import CacheManagerConfig
from .errors import StoreUnavailableError, UnsupportedValueError

__all__ = [
    "CacheManager",
    "CacheManagerConfig",
    "CacheStoreAdapter",
    "CacheHit",
    "PutReceipt",
    "create_cache_manager",
    "StoreUnavailableError",
    "UnsupportedValueError",
]
