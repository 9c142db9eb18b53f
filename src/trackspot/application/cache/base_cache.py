"""Base cache interface and in-memory implementation.

ResponseCache is the only consumer. It reads through get_entry(), writes with
set(), and exposes delete()/clear() as invalidate()/clear(). TTL is honoured
when ResponseCache is built with ttl_seconds. The Spotify caches wired up in
lifecycle pass none, so their entries live as long as the process.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, TypeVar

K = TypeVar("K")  # Key type
V = TypeVar("V")  # Value type


@dataclass(frozen=True)
class CacheEntry[V]:
    """Cache entry with value and metadata."""

    value: V
    created_at: float
    ttl_seconds: int | None = None

    # Hey future me, ttl_seconds=None means "never expires". The Spotify response caches use that:
    # catalog entries we already resolved don't change in any way that matters to us, and the key
    # space is small (only tracks someone actually asked for). Frozen so an entry is either fully
    # there or not there at all - nobody can half-update one in place.
    def is_expired(self) -> bool:
        """Check if cache entry is expired."""
        if self.ttl_seconds is None:
            return False
        return time.time() > (self.created_at + self.ttl_seconds)


class BaseCache[K, V](ABC):
    """Base cache interface for all cache implementations."""

    @abstractmethod
    async def get_entry(self, key: K) -> CacheEntry[V] | None:
        """Get the full entry for key.

        Args:
            key: Cache key

        Returns:
            Entry if found and not expired, None otherwise
        """
        pass

    @abstractmethod
    async def set(self, key: K, value: V, ttl_seconds: int | None = None) -> None:
        """Set value in cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl_seconds: Time to live in seconds, None for no expiry
        """
        pass

    @abstractmethod
    async def delete(self, key: K) -> bool:
        """Delete value from cache.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Clear all entries from cache."""
        pass


class InMemoryCache(BaseCache[K, V]):
    """In-memory cache implementation using dictionary.

    Unbounded: there is no eviction besides TTL expiry on read.
    """

    # Listen up future me, this is IN-MEMORY ONLY! Server restart = all cache lost. No persistence,
    # no sharing across processes. The _lock is CRITICAL for async safety - all reads and writes
    # go through it, and set() swaps in a complete CacheEntry in one dict assignment. Readers never
    # observe a half-written entry, concurrent writers to the same key resolve to last-writer-wins.
    def __init__(self) -> None:
        """Initialize in-memory cache."""
        self._cache: dict[K, CacheEntry[V]] = {}
        self._lock = asyncio.Lock()

    # Yo, get_entry() deletes expired entries on read (eviction on read). That means it has side
    # effects even though it's named like a pure getter.
    async def get_entry(self, key: K) -> CacheEntry[V] | None:
        """Get entry from cache."""
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if entry.is_expired():
                del self._cache[key]
                return None

            return entry

    # Hey, set() ALWAYS overwrites existing key without warning! That's the last-writer-wins rule.
    async def set(self, key: K, value: V, ttl_seconds: int | None = None) -> None:
        """Set value in cache."""
        entry = CacheEntry(value=value, created_at=time.time(), ttl_seconds=ttl_seconds)
        async with self._lock:
            self._cache[key] = entry

    async def delete(self, key: K) -> bool:
        """Delete value from cache."""
        async with self._lock:
            if key in self._cache:
                del self._cache[key]
                return True
            return False

    async def clear(self) -> None:
        """Clear all entries from cache."""
        async with self._lock:
            self._cache.clear()

    # Listen up, get_stats() is NOT locked! Stats are for monitoring (health endpoint), not
    # correctness, so a slightly stale count is fine. No I/O, so it stays synchronous.
    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total_entries = len(self._cache)
        expired_entries = sum(1 for entry in self._cache.values() if entry.is_expired())

        return {
            "total_entries": total_entries,
            "active_entries": total_entries - expired_entries,
            "expired_entries": expired_entries,
        }
