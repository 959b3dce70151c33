"""
Fingerprint Cache — Cache Module

Provides the cache manager, the store adapter contract and its backends.

Usage:
    from fpcache.cache import create_cache_manager

    manager = create_cache_manager()
    receipt = await manager.put("user:42", {"plan": "pro"}, ttl_seconds=60)
    hit = await manager.get("user:42")
"""

from .codec import decode, encode
from .factory import (
    close_all_stores,
    create_cache_manager,
    create_store,
    get_cache_manager,
    list_store_instances,
    reset_cache_factory,
)
from .fingerprint import fingerprint
from .interface import CacheStoreAdapter
from .manager import CacheManager
from .models import AppliedExpiry, CacheEntry, CacheHit, FreshEntry, MatchedEntry, PutReceipt

__all__ = [
    # Factory functions
    "create_store",
    "create_cache_manager",
    "get_cache_manager",
    "close_all_stores",
    "list_store_instances",
    "reset_cache_factory",
    # Protocol
    "CacheManager",
    "CacheStoreAdapter",
    # Helpers
    "fingerprint",
    "encode",
    "decode",
    # Models
    "CacheEntry",
    "FreshEntry",
    "MatchedEntry",
    "AppliedExpiry",
    "CacheHit",
    "PutReceipt",
]
