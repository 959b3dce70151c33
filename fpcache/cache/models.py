"""
Fingerprint Cache — Cache Models

CacheEntry is the persisted row; the remaining models are the narrow
projections exchanged between the cache manager, store adapters and callers.

Attributes are snake_case in Python. Persisted field names are the camelCase
aliases (keyFingerprint, expiryEpochSeconds, ...) so every backend shares one
on-disk schema; use ``to_record()`` / ``from_record()`` at the store boundary.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CacheEntry(BaseModel):
    """One cached value, keyed by the fingerprint of its raw key."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key_fingerprint: str
    value_fingerprint: str
    raw_key: str
    serialized_value: str
    ttl_seconds: int = Field(gt=0)
    expiry_epoch_seconds: int
    created_at_millis: int
    updated_at_millis: int
    download_count: int = Field(default=0, ge=0)
    redundancy_count: int = Field(default=0, ge=0)

    @classmethod
    def new(
        cls,
        *,
        key_fingerprint: str,
        value_fingerprint: str,
        raw_key: str,
        serialized_value: str,
        ttl_seconds: int,
        now_millis: int,
    ) -> CacheEntry:
        """Build a fresh entry with zeroed counters and both timestamps at ``now_millis``."""
        return cls(
            key_fingerprint=key_fingerprint,
            value_fingerprint=value_fingerprint,
            raw_key=raw_key,
            serialized_value=serialized_value,
            ttl_seconds=ttl_seconds,
            expiry_epoch_seconds=now_millis // 1000 + ttl_seconds,
            created_at_millis=now_millis,
            updated_at_millis=now_millis,
        )

    def is_live(self, now_seconds: int) -> bool:
        """True while the entry has not logically expired."""
        return self.expiry_epoch_seconds > now_seconds

    def to_record(self) -> dict[str, Any]:
        """Dump using the persisted camelCase field names."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> CacheEntry:
        """Rebuild an entry from a persisted record."""
        return cls.model_validate(record)


class FreshEntry(BaseModel):
    """Projection returned by a fresh fetch."""

    model_config = ConfigDict(frozen=True)

    serialized_value: str
    expiry_epoch_seconds: int


class MatchedEntry(BaseModel):
    """Projection returned when the stored value fingerprint matches."""

    model_config = ConfigDict(frozen=True)

    expiry_epoch_seconds: int
    ttl_seconds: int


class AppliedExpiry(BaseModel):
    """Expiry actually applied by the store after an extension."""

    model_config = ConfigDict(frozen=True)

    expiry_epoch_seconds: int


class CacheHit(BaseModel):
    """Result of a successful ``get``."""

    model_config = ConfigDict(frozen=True)

    value: Any
    expiry_epoch_seconds: int


class PutReceipt(BaseModel):
    """Result of a successful ``put``."""

    model_config = ConfigDict(frozen=True)

    key_fingerprint: str
    expiry_epoch_seconds: int
