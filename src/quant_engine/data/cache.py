"""TTL caches for portfolio and price lookups."""

import os
import time
from collections.abc import Callable
from typing import Any

import diskcache


class TTLCache:
    """
    Keyed cache of {value, timestamp} entries with a fixed time-to-live.

    Entries are read-checked-then-replaced with last-writer-wins semantics;
    staleness is bounded by the TTL, so no locking is done. diskcache's own
    expiry is set as well so stale entries are evicted from disk.
    """

    def __init__(
        self,
        ttl_seconds: float,
        directory: str | None = None,
        clock: Callable[[], float] = time.time,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self.cache: diskcache.Cache = diskcache.Cache(directory)
        self._clock = clock

    def get(self, key: str) -> Any | None:
        """
        Get a fresh value by key.

        Returns:
            Cached value, or None if absent or older than the TTL
        """
        entry = self.cache.get(key)
        if entry is None:
            return None
        if self._clock() - entry["timestamp"] >= self.ttl_seconds:
            self.cache.delete(key)
            return None
        return entry["value"]

    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous entry."""
        entry = {"value": value, "timestamp": self._clock()}
        self.cache.set(key, entry, expire=self.ttl_seconds)

    def invalidate(self, key: str) -> None:
        """Drop the entry for key, if any."""
        self.cache.delete(key)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self) -> None:
        """Clear all cached data."""
        self.cache.clear()

    def close(self) -> None:
        self.cache.close()


def _cache_dir(name: str) -> str:
    base = os.environ.get("CACHE_DIR", ".cache")
    return os.path.join(base, name)


def build_portfolio_cache() -> TTLCache:
    """
    Per-user portfolio cache (5 minutes by default).

    Lives in a fresh temporary directory, so holdings cached by an earlier
    process are never served after a restart.
    """
    ttl = float(os.environ.get("PORTFOLIO_CACHE_TTL", "300"))
    return TTLCache(ttl)


def build_price_cache() -> TTLCache:
    """Per-symbol live price cache (30 seconds by default)."""
    ttl = float(os.environ.get("PRICE_CACHE_TTL", "30"))
    return TTLCache(ttl, _cache_dir("prices"))
