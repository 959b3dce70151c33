"""
Fingerprint Cache — Memory Store Adapter

In-process store adapter for single-process deployments and tests.
Expired rows are hidden from reads but stay physically present until deleted
there is no background sweep.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

from ...errors import StoreUnavailableError
from ..interface import CacheStoreAdapter
from ..models import AppliedExpiry, CacheEntry, FreshEntry, MatchedEntry

logger = logging.getLogger(__name__)


class MemoryStoreAdapter(CacheStoreAdapter):
    """
    In-memory store adapter keyed by key fingerprint.

    Features:
    - Conditional reads honour expiry and recency exactly like remote backends
    - Counter and extension updates are atomic under an asyncio lock
    - Injectable clock for deterministic tests

    get_entry is a diagnostic helper outside the adapter contract; the cache
    manager never calls it.
    """

    def __init__(
        self,
        namespace: str = "fpcache",
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize memory store adapter.

        Args:
            namespace: Label used in logs
            clock: Callable returning epoch seconds
        """
        self.namespace = namespace
        self._clock = clock

        # Storage: key fingerprint -> persisted camelCase record
        self._rows: dict[str, dict[str, Any]] = {}

        self._lock = asyncio.Lock()

    def _now_seconds(self) -> int:
        return int(self._clock() * 1000) // 1000

    def _live_row(self, key_fingerprint: str) -> dict[str, Any] | None:
        row = self._rows.get(key_fingerprint)
        if row is None or row["expiryEpochSeconds"] <= self._now_seconds():
            return None
        return row

    async def fetch_fresh(self, key_fingerprint: str, min_updated_at_millis: int) -> FreshEntry | None:
        """Return the value projection of a live, recent entry."""
        async with self._lock:
            row = self._live_row(key_fingerprint)
            if row is None or row["updatedAtMillis"] <= min_updated_at_millis:
                return None
            return FreshEntry(
                serialized_value=row["serializedValue"],
                expiry_epoch_seconds=row["expiryEpochSeconds"],
            )

    async def bump_download_counter(self, key_fingerprint: str) -> None:
        """Increment downloadCount if the row exists."""
        async with self._lock:
            row = self._rows.get(key_fingerprint)
            if row is not None:
                row["downloadCount"] += 1

    async def fetch_if_value_matches(self, key_fingerprint: str, value_fingerprint: str) -> MatchedEntry | None:
        """Return expiry/ttl of a live entry holding the same value."""
        async with self._lock:
            row = self._live_row(key_fingerprint)
            if row is None or row["valueFingerprint"] != value_fingerprint:
                return None
            return MatchedEntry(
                expiry_epoch_seconds=row["expiryEpochSeconds"],
                ttl_seconds=row["ttlSeconds"],
            )

    async def extend_matching_entry(
        self,
        key_fingerprint: str,
        new_expiry_epoch_seconds: int,
        now_millis: int,
    ) -> AppliedExpiry:
        """Bump redundancyCount and move the entry's timestamps forward."""
        async with self._lock:
            row = self._rows.get(key_fingerprint)
            if row is None:
                # Deleted between the match check and this update
                raise StoreUnavailableError(
                    "extend_matching_entry",
                    details={"key_fingerprint": key_fingerprint, "reason": "entry no longer exists"},
                )
            row["redundancyCount"] += 1
            row["updatedAtMillis"] = now_millis
            row["expiryEpochSeconds"] = new_expiry_epoch_seconds
            return AppliedExpiry(expiry_epoch_seconds=row["expiryEpochSeconds"])

    async def write_entry(self, entry: CacheEntry) -> None:
        """Upsert a full entry."""
        async with self._lock:
            self._rows[entry.key_fingerprint] = entry.to_record()

    async def delete_entry(self, key_fingerprint: str) -> bool:
        """Remove the row if present; always succeeds."""
        async with self._lock:
            self._rows.pop(key_fingerprint, None)
            return True

    async def get_entry(self, key_fingerprint: str) -> CacheEntry | None:
        """Return the physical row, expired or not, for diagnostics."""
        async with self._lock:
            row = self._rows.get(key_fingerprint)
            return CacheEntry.from_record(row) if row is not None else None

    async def close(self) -> None:
        """Memory backend holds no external resources."""
        logger.debug(f"Memory store adapter closed for namespace '{self.namespace}'")
