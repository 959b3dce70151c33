"""
Fingerprint Cache — Test Configuration and Shared Fixtures

Provides a controllable clock, a call-counting store with failure injection,
and Redis availability helpers shared by unit and integration tests.
"""

import logging
import os
from collections import Counter
from collections.abc import Callable, Generator

import pytest

from fpcache.cache.backends.memory import MemoryStoreAdapter
from fpcache.cache.interface import CacheStoreAdapter
from fpcache.cache.manager import CacheManager
from fpcache.cache.models import AppliedExpiry, CacheEntry, FreshEntry, MatchedEntry
from fpcache.config import CacheManagerConfig
from fpcache.errors import StoreUnavailableError

# Set test environment
os.environ["LOG_LEVEL"] = "DEBUG"

T0 = 1_700_000_000.0


# Redis availability checker
def is_redis_available() -> bool:
    """Check if Redis server is available for testing."""
    import socket

    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex(("localhost", 6379))
        sock.close()
        return result == 0
    except Exception:
        return False


# Skip marker for Redis tests
redis_available = pytest.mark.skipif(not is_redis_available(), reason="Redis server not available")


class FakeClock:
    """Manually advanced epoch-seconds clock."""

    def __init__(self, start: float = T0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingStore(CacheStoreAdapter):
    """Memory-backed store that records every call and can fail on demand."""

    def __init__(self, clock: FakeClock) -> None:
        self.inner = MemoryStoreAdapter(namespace="test", clock=clock)
        self.calls: Counter[str] = Counter()
        self.fail_on: set[str] = set()

    def _record(self, operation: str) -> None:
        self.calls[operation] += 1
        if operation in self.fail_on:
            raise StoreUnavailableError(operation, details={"injected": True})

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    async def fetch_fresh(self, key_fingerprint: str, min_updated_at_millis: int) -> FreshEntry | None:
        self._record("fetch_fresh")
        return await self.inner.fetch_fresh(key_fingerprint, min_updated_at_millis)

    async def bump_download_counter(self, key_fingerprint: str) -> None:
        self._record("bump_download_counter")
        await self.inner.bump_download_counter(key_fingerprint)

    async def fetch_if_value_matches(self, key_fingerprint: str, value_fingerprint: str) -> MatchedEntry | None:
        self._record("fetch_if_value_matches")
        return await self.inner.fetch_if_value_matches(key_fingerprint, value_fingerprint)

    async def extend_matching_entry(
        self, key_fingerprint: str, new_expiry_epoch_seconds: int, now_millis: int
    ) -> AppliedExpiry:
        self._record("extend_matching_entry")
        return await self.inner.extend_matching_entry(key_fingerprint, new_expiry_epoch_seconds, now_millis)

    async def write_entry(self, entry: CacheEntry) -> None:
        self._record("write_entry")
        await self.inner.write_entry(entry)

    async def delete_entry(self, key_fingerprint: str) -> bool:
        self._record("delete_entry")
        return await self.inner.delete_entry(key_fingerprint)


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at T0 until advanced."""
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> CountingStore:
    """Call-counting store sharing the test clock."""
    return CountingStore(clock)


@pytest.fixture
def make_manager(store: CountingStore, clock: FakeClock) -> Callable[..., CacheManager]:
    """Build a CacheManager over the counting store with config overrides."""

    def _make(**overrides: object) -> CacheManager:
        return CacheManager(store, CacheManagerConfig(**overrides), clock=clock)

    return _make


@pytest.fixture
def manager(make_manager: Callable[..., CacheManager]) -> CacheManager:
    """CacheManager with default configuration."""
    return make_manager()


@pytest.fixture
def test_redis_url() -> str:
    """Get Redis URL for testing (database 15 for isolation)."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest.fixture
def mock_env_memory(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for the memory store backend."""
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.setenv("CACHE_BACKEND", "memory")
    monkeypatch.setenv("CACHE_DEFAULT_TTL_SECONDS", "120")
    monkeypatch.setenv("CACHE_NAMESPACE", "test")


@pytest.fixture
def sample_values() -> dict[str, object]:
    """Representative values from the supported data model."""
    return {
        "string": "hello",
        "unicode": "héllo wörld ✓",
        "int": 42,
        "float": 3.14,
        "bool": False,
        "list": [1, "two", 3.0, None],
        "dict": {"nested": {"key": "value", "list": [1, 2, 3]}},
        "records": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}],
    }


@pytest.fixture(autouse=True)
def reset_cache_factory() -> Generator[None, None, None]:
    """Reset factory registries, the config singleton and the fpcache logger after each test."""
    package_logger = logging.getLogger("fpcache")
    handlers, level = list(package_logger.handlers), package_logger.level
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    from fpcache.cache.factory import reset_cache_factory as reset_factory
    from fpcache.config import loader

    reset_factory()
    loader._config_instance = None
