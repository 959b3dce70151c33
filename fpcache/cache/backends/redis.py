"""
Fingerprint Cache — Redis Store Adapter

Asynchronous Redis store adapter with:
- One hash per entry at "<namespace>:<keyFingerprint>" holding the camelCase entry fields
- EXPIREAT on expiryEpochSeconds so Redis reaps expired rows on its own
- Lua scripts for counter bumps and extensions so they never recreate a deleted row
- Transactional pipeline for full writes

Requires: redis>=5.0 with asyncio support

Example:
    store = RedisStoreAdapter(redis_url="redis://localhost:6379/0", namespace="fpcache")
    manager = CacheManager(store)
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from ...errors import StoreUnavailableError
from ..interface import CacheStoreAdapter
from ..models import AppliedExpiry, CacheEntry, FreshEntry, MatchedEntry

logger = logging.getLogger(__name__)

try:
    # redis-py asyncio client (v4+)
    from redis.asyncio import Redis
    from redis.exceptions import RedisError
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Redis async client is required but not installed. "
        "Install with: pip install 'redis>=5.0.0' or add 'redis' to your dependencies."
    ) from e

# KEYS[1] = entry key
_BUMP_DOWNLOADS_LUA = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return nil
end
return redis.call('HINCRBY', KEYS[1], 'downloadCount', 1)
"""

# KEYS[1] = entry key, ARGV[1] = new expiryEpochSeconds, ARGV[2] = now millis
_EXTEND_LUA = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return nil
end
redis.call('HINCRBY', KEYS[1], 'redundancyCount', 1)
redis.call('HSET', KEYS[1], 'updatedAtMillis', ARGV[2], 'expiryEpochSeconds', ARGV[1])
redis.call('EXPIREAT', KEYS[1], ARGV[1])
return redis.call('HGET', KEYS[1], 'expiryEpochSeconds')
"""


class RedisStoreAdapter(CacheStoreAdapter):
    """
    Redis store adapter.

    Notes:
    - Keys are prefixed with the configured namespace to avoid collisions.
    - Hash fields are stored as strings and parsed back to ints on read.
    - Expiry/recency filters are evaluated against the adapter clock, so a row
      Redis has not reaped yet is still reported as absent once expired.
    """

    def __init__(
        self,
        redis_url: str,
        namespace: str = "fpcache",
        max_connections: int = 10,
        socket_timeout: int = 5,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize Redis store adapter.

        Args:
            redis_url: Connection URL, e.g., redis://localhost:6379/0 or rediss:// for TLS
            namespace: Prefix for all keys
            max_connections: Connection pool size
            socket_timeout: Socket timeout in seconds
            clock: Callable returning epoch seconds
        """
        if not redis_url:
            raise ValueError("redis_url is required")

        self.namespace = namespace.strip() or "fpcache"
        self._clock = clock

        # Lazy connection; connects on first command
        self._client = Redis.from_url(  # type: ignore[call-overload]
            url=redis_url,
            decode_responses=True,
            max_connections=max_connections,
            socket_timeout=socket_timeout,
        )
        self._bump_downloads = self._client.register_script(_BUMP_DOWNLOADS_LUA)
        self._extend = self._client.register_script(_EXTEND_LUA)

    # ------------ Helpers ------------

    def _make_key(self, key_fingerprint: str) -> str:
        """Create namespaced key."""
        return f"{self.namespace}:{key_fingerprint}"

    def _now_seconds(self) -> int:
        return int(self._clock() * 1000) // 1000

    @asynccontextmanager
    async def _store_call(self, operation: str, key_fingerprint: str) -> AsyncIterator[None]:
        """Translate client faults into StoreUnavailableError."""
        try:
            yield
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            raise StoreUnavailableError(
                operation,
                details={"key_fingerprint": key_fingerprint, "namespace": self.namespace, "error": str(e)},
            ) from e

    # ------------ Adapter interface ------------

    async def fetch_fresh(self, key_fingerprint: str, min_updated_at_millis: int) -> FreshEntry | None:
        """Return the value projection of a live, recent entry."""
        async with self._store_call("fetch_fresh", key_fingerprint):
            value, expiry, updated = await self._client.hmget(
                self._make_key(key_fingerprint),
                ["serializedValue", "expiryEpochSeconds", "updatedAtMillis"],
            )

        if value is None or expiry is None or updated is None:
            return None
        if int(expiry) <= self._now_seconds() or int(updated) <= min_updated_at_millis:
            return None
        return FreshEntry(serialized_value=value, expiry_epoch_seconds=int(expiry))

    async def bump_download_counter(self, key_fingerprint: str) -> None:
        """Increment downloadCount if the entry still exists."""
        async with self._store_call("bump_download_counter", key_fingerprint):
            await self._bump_downloads(keys=[self._make_key(key_fingerprint)])

    async def fetch_if_value_matches(self, key_fingerprint: str, value_fingerprint: str) -> MatchedEntry | None:
        """Return expiry/ttl of a live entry holding the same value."""
        async with self._store_call("fetch_if_value_matches", key_fingerprint):
            stored_fingerprint, expiry, ttl = await self._client.hmget(
                self._make_key(key_fingerprint),
                ["valueFingerprint", "expiryEpochSeconds", "ttlSeconds"],
            )

        if stored_fingerprint is None or expiry is None or ttl is None:
            return None
        if int(expiry) <= self._now_seconds() or stored_fingerprint != value_fingerprint:
            return None
        return MatchedEntry(expiry_epoch_seconds=int(expiry), ttl_seconds=int(ttl))

    async def extend_matching_entry(
        self,
        key_fingerprint: str,
        new_expiry_epoch_seconds: int,
        now_millis: int,
    ) -> AppliedExpiry:
        """Bump redundancyCount and move the entry's timestamps forward."""
        async with self._store_call("extend_matching_entry", key_fingerprint):
            applied = await self._extend(
                keys=[self._make_key(key_fingerprint)],
                args=[new_expiry_epoch_seconds, now_millis],
            )

        if applied is None:
            raise StoreUnavailableError(
                "extend_matching_entry",
                details={"key_fingerprint": key_fingerprint, "reason": "entry no longer exists"},
            )
        return AppliedExpiry(expiry_epoch_seconds=int(applied))

    async def write_entry(self, entry: CacheEntry) -> None:
        """Replace the entry hash and schedule Redis-side expiry."""
        key = self._make_key(entry.key_fingerprint)
        async with self._store_call("write_entry", entry.key_fingerprint):
            pipe = self._client.pipeline(transaction=True)
            pipe.delete(key)
            pipe.hset(key, mapping=entry.to_record())
            pipe.expireat(key, entry.expiry_epoch_seconds)
            await pipe.execute()

    async def delete_entry(self, key_fingerprint: str) -> bool:
        """Delete the entry hash; True whenever the call succeeded."""
        async with self._store_call("delete_entry", key_fingerprint):
            await self._client.delete(self._make_key(key_fingerprint))
        return True

    async def close(self) -> None:
        """Close the Redis client and release resources."""
        try:
            await self._client.aclose()
            logger.info(f"Closed Redis store adapter for namespace '{self.namespace}'")
        except Exception as e:
            logger.error(
                f"Error closing Redis client: {e}", extra={"namespace": self.namespace, "error": str(e)}, exc_info=True
            )
        finally:
            try:
                await self._client.connection_pool.disconnect()
            except Exception as e:
                logger.warning(f"Error disconnecting Redis connection pool: {e}", extra={"error": str(e)})
