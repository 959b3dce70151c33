"""
Fingerprint Cache — Cache Store Adapter Interface

Defines the narrow set of store operations the cache manager depends on.
Every backend translates these into its own conditional query/update surface.
"""

from abc import ABC, abstractmethod

from .models import AppliedExpiry, CacheEntry, FreshEntry, MatchedEntry


class CacheStoreAdapter(ABC):
    """
    Abstract base class for backing keyed stores.

    Each operation is a single round trip and must raise StoreUnavailableError
    on any backend fault. Adapters never retry; retry policy belongs to the
    underlying client.
    """

    @abstractmethod
    async def fetch_fresh(self, key_fingerprint: str, min_updated_at_millis: int) -> FreshEntry | None:
        """
        Fetch the value projection of a live, recently updated entry.

        Args:
            key_fingerprint: Fingerprint of the raw key
            min_updated_at_millis: Entry must satisfy updatedAtMillis > this (0 = no recency constraint)

        Returns:
            FreshEntry if present, not expired and recent enough; None otherwise
        """

    @abstractmethod
    async def bump_download_counter(self, key_fingerprint: str) -> None:
        """
        Atomically increment downloadCount by 1.

        Best effort: callers ignore failures. Must not create an entry when absent.
        """

    @abstractmethod
    async def fetch_if_value_matches(self, key_fingerprint: str, value_fingerprint: str) -> MatchedEntry | None:
        """
        Fetch expiry/ttl of a live entry whose stored value fingerprint matches.

        Args:
            key_fingerprint: Fingerprint of the raw key
            value_fingerprint: Fingerprint of the serialized candidate value

        Returns:
            MatchedEntry if present, not expired and matching; None otherwise
        """

    @abstractmethod
    async def extend_matching_entry(
        self,
        key_fingerprint: str,
        new_expiry_epoch_seconds: int,
        now_millis: int,
    ) -> AppliedExpiry:
        """
        Atomically bump redundancyCount and move updatedAtMillis/expiryEpochSeconds forward.

        Args:
            key_fingerprint: Fingerprint of the raw key
            new_expiry_epoch_seconds: Expiry to apply
            now_millis: New updatedAtMillis

        Returns:
            The expiry the store actually applied
        """

    @abstractmethod
    async def write_entry(self, entry: CacheEntry) -> None:
        """
        Unconditionally upsert a full entry.

        Args:
            entry: Entry with zeroed counters and createdAtMillis == updatedAtMillis
        """

    @abstractmethod
    async def delete_entry(self, key_fingerprint: str) -> bool:
        """
        Remove an entry if present.

        Returns:
            True when the backend call succeeded, whether or not a row existed
        """

    async def close(self) -> None:
        """
        Release backend resources.

        Should be called during graceful shutdown. Default is a no-op.
        """
        return None
