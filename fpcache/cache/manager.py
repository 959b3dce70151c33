"""
Fingerprint Cache — Cache Manager

Implements the get/put/delete consistency protocol over a CacheStoreAdapter:

- Reads are hits only for live entries, optionally updated within a recency window.
- Puts skip rewriting unchanged values: a live entry with the same value
  fingerprint is either left alone or has its expiry extended and its
  redundancy counter bumped.
- Accounting counters are best effort and never decide correctness.
- Store faults degrade to a miss / no-op / False. Nothing is retried.

The dedup check and the following write are two round trips, not a
transaction. Concurrent identical puts may both perform a full write, which
only undercounts redundancy.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from ..config.schemas import CacheManagerConfig
from ..errors import StoreUnavailableError, ValidationError, extract_error_code
from .codec import decode, encode
from .fingerprint import fingerprint
from .interface import CacheStoreAdapter
from .models import CacheEntry, CacheHit, PutReceipt

logger = logging.getLogger(__name__)

CacheKey = str | bytes


def _raw_key(key: CacheKey) -> str:
    if isinstance(key, bytes):
        return key.decode("utf-8", errors="backslashreplace")
    return key


class CacheManager:
    """
    Durable cache manager with content-addressed deduplication.

    Stateless between calls apart from its fixed configuration; safe to share
    across tasks.
    """

    def __init__(
        self,
        store: CacheStoreAdapter,
        config: CacheManagerConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the cache manager.

        Args:
            store: Backing store adapter
            config: Immutable manager settings (defaults: ttl 900s, both counters on)
            clock: Callable returning epoch seconds
        """
        self.store = store
        self.config = config or CacheManagerConfig()
        self._clock = clock

    def _now_millis(self) -> int:
        return int(self._clock() * 1000)

    def _log_store_failure(self, error: StoreUnavailableError, key: CacheKey, key_fingerprint: str) -> None:
        logger.warning(
            f"Store call {error.operation} failed for key '{_raw_key(key)}': {error.message}",
            extra={
                "operation": error.operation,
                "key_fingerprint": key_fingerprint,
                "error_code": extract_error_code(error).value,
                "details": error.details,
            },
            exc_info=True,
        )

    def _log_rejection(self, error: ValidationError, level: int = logging.DEBUG) -> None:
        logger.log(
            level,
            f"Rejected cache call: {error.message}",
            extra={"error_code": extract_error_code(error).value, "error": error.to_dict()},
        )

    async def get(self, key: CacheKey, recency_seconds: int | None = None) -> CacheHit | None:
        """
        Read a live cached value.

        Args:
            key: Cache key
            recency_seconds: Only accept entries updated strictly less than this many seconds ago

        Returns:
            CacheHit with the decoded value and its expiry, or None on miss
        """
        if recency_seconds is not None and recency_seconds <= 0:
            self._log_rejection(
                ValidationError(
                    "Non-positive recency window can never be satisfied",
                    details={"recency_seconds": recency_seconds},
                )
            )
            return None

        key_fingerprint = fingerprint(key)
        now_millis = self._now_millis()
        min_updated_at_millis = 0 if recency_seconds is None else now_millis - recency_seconds * 1000

        try:
            fresh = await self.store.fetch_fresh(key_fingerprint, min_updated_at_millis)
        except StoreUnavailableError as e:
            self._log_store_failure(e, key, key_fingerprint)
            return None

        if fresh is None:
            logger.debug("Cache miss", extra={"key_fingerprint": key_fingerprint})
            return None

        try:
            value = decode(fresh.serialized_value)
        except ValueError as e:
            logger.error(
                f"Stored payload for key '{_raw_key(key)}' is not decodable: {e}",
                extra={"key_fingerprint": key_fingerprint, "error": str(e)},
            )
            return None

        if self.config.download_counter_enabled:
            try:
                await self.store.bump_download_counter(key_fingerprint)
            except StoreUnavailableError as e:
                self._log_store_failure(e, key, key_fingerprint)

        logger.debug(
            "Cache hit",
            extra={"key_fingerprint": key_fingerprint, "expiry_epoch_seconds": fresh.expiry_epoch_seconds},
        )
        return CacheHit(value=value, expiry_epoch_seconds=fresh.expiry_epoch_seconds)

    async def put(self, key: CacheKey, value: Any, ttl_seconds: int | None = None) -> PutReceipt | None:
        """
        Cache a value, reusing the stored entry when the value is unchanged.

        When a live entry already holds the same value, the entry is extended
        by its previously stored TTL, not by ``ttl_seconds``.

        Args:
            key: Cache key
            value: Value to cache; None is never cached
            ttl_seconds: Time to live; None or non-positive means the configured default

        Returns:
            PutReceipt with the key fingerprint and effective expiry, or None if nothing was cached

        Raises:
            UnsupportedValueError: If the value cannot be serialized
        """
        if value is None:
            self._log_rejection(
                ValidationError(
                    f"'{_raw_key(key)}' is not cached as its value is None",
                    details={"raw_key": _raw_key(key)},
                ),
                logging.WARNING,
            )
            return None

        if ttl_seconds is None or ttl_seconds <= 0:
            if ttl_seconds is not None:
                logger.warning(
                    f"Upgraded ttl_seconds {ttl_seconds} to {self.config.default_ttl_seconds} seconds",
                    extra={"ttl_seconds": ttl_seconds},
                )
            ttl_seconds = self.config.default_ttl_seconds

        key_fingerprint = fingerprint(key)
        serialized_value = encode(value)
        value_fingerprint = fingerprint(serialized_value)

        try:
            matched = await self.store.fetch_if_value_matches(key_fingerprint, value_fingerprint)
        except StoreUnavailableError as e:
            self._log_store_failure(e, key, key_fingerprint)
            return None

        if matched is not None:
            if not self.config.redundancy_counter_enabled:
                return PutReceipt(key_fingerprint=key_fingerprint, expiry_epoch_seconds=matched.expiry_epoch_seconds)

            now_millis = self._now_millis()
            try:
                applied = await self.store.extend_matching_entry(
                    key_fingerprint,
                    now_millis // 1000 + matched.ttl_seconds,
                    now_millis,
                )
            except StoreUnavailableError as e:
                self._log_store_failure(e, key, key_fingerprint)
                return None

            logger.debug(
                "Extended unchanged entry",
                extra={"key_fingerprint": key_fingerprint, "expiry_epoch_seconds": applied.expiry_epoch_seconds},
            )
            return PutReceipt(key_fingerprint=key_fingerprint, expiry_epoch_seconds=applied.expiry_epoch_seconds)

        entry = CacheEntry.new(
            key_fingerprint=key_fingerprint,
            value_fingerprint=value_fingerprint,
            raw_key=_raw_key(key),
            serialized_value=serialized_value,
            ttl_seconds=ttl_seconds,
            now_millis=self._now_millis(),
        )
        try:
            await self.store.write_entry(entry)
        except StoreUnavailableError as e:
            self._log_store_failure(e, key, key_fingerprint)
            return None

        logger.debug(
            "Wrote cache entry",
            extra={"key_fingerprint": key_fingerprint, "expiry_epoch_seconds": entry.expiry_epoch_seconds},
        )
        return PutReceipt(key_fingerprint=key_fingerprint, expiry_epoch_seconds=entry.expiry_epoch_seconds)

    async def delete(self, key: CacheKey) -> bool:
        """
        Delete a cached entry.

        Returns:
            True when the store call succeeded (absent keys included), False on store failure
        """
        key_fingerprint = fingerprint(key)
        try:
            return await self.store.delete_entry(key_fingerprint)
        except StoreUnavailableError as e:
            self._log_store_failure(e, key, key_fingerprint)
            return False
