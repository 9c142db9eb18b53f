"""Memoization of upstream lookups.

Hey future me - ResponseCache is the explicit replacement for "slap a caching
decorator on the client method". The operation to memoize is passed IN as an
async callable, so the caching policy is testable without any network:

    album = await album_cache.get_or_compute(album_id, lambda: client.get_album(album_id))

Rules:
- Hit -> return cached value, compute is NOT called.
- Miss -> await compute(); store only on success.
- compute raised -> exception goes to the caller unchanged, nothing stored, so
  the next call with the same key tries again.
- Two tasks missing the same key at once may BOTH compute. We accept the
  duplicate request; the backend lock makes sure the entry is never torn and
  the last writer wins.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from trackspot.application.cache.base_cache import BaseCache, InMemoryCache

logger = logging.getLogger(__name__)


class ResponseCache[K, V]:
    """Named get-or-compute cache over a BaseCache backend."""

    def __init__(
        self,
        name: str,
        backend: BaseCache[K, V] | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        """Initialize response cache.

        Args:
            name: Namespace name, used in logs and stats (e.g. "spotify_tracks")
            backend: Storage backend, defaults to a fresh InMemoryCache
            ttl_seconds: Entry lifetime, None keeps entries for the process lifetime
        """
        self.name = name
        self._backend: BaseCache[K, V] = backend if backend is not None else InMemoryCache()
        self._ttl_seconds = ttl_seconds
        self.hits = 0
        self.misses = 0

    async def get_or_compute(self, key: K, compute: Callable[[], Awaitable[V]]) -> V:
        """Return cached value for key, computing and caching it on a miss."""
        entry = await self._backend.get_entry(key)
        if entry is not None:
            self.hits += 1
            logger.debug("Cache hit [%s] %s", self.name, key)
            return entry.value

        self.misses += 1
        logger.debug("Cache miss [%s] %s", self.name, key)
        value = await compute()
        await self._backend.set(key, value, self._ttl_seconds)
        return value

    async def invalidate(self, key: K) -> bool:
        """Drop one key. Returns True if it was cached."""
        return await self._backend.delete(key)

    async def clear(self) -> None:
        """Drop every key in this namespace."""
        await self._backend.clear()

    def get_stats(self) -> dict[str, Any]:
        """Hit/miss counters plus backend stats when available."""
        stats: dict[str, Any] = {"hits": self.hits, "misses": self.misses}
        backend_stats = getattr(self._backend, "get_stats", None)
        if callable(backend_stats):
            stats.update(backend_stats())
        return stats
