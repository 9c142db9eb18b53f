"""Tests for ResponseCache get-or-compute semantics."""

import asyncio

import pytest

from trackspot.application.cache import InMemoryCache, ResponseCache
from trackspot.domain.exceptions import ExternalServiceError


class CountingCompute:
    """Async compute function returning a fixed value and counting calls."""

    def __init__(self, value: str = "value") -> None:
        self.value = value
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        await asyncio.sleep(0)
        return self.value


class TestResponseCacheHitMiss:
    """Hit/miss behaviour."""

    async def test_second_call_returns_cached_value_without_computing(self) -> None:
        """Test that compute runs exactly once for two sequential calls."""
        cache: ResponseCache[str, str] = ResponseCache("spotify_tracks")
        compute = CountingCompute("album")

        first = await cache.get_or_compute("k", compute)
        second = await cache.get_or_compute("k", compute)

        assert first == second == "album"
        assert compute.calls == 1
        assert cache.hits == 1
        assert cache.misses == 1

    async def test_distinct_keys_compute_independently(self) -> None:
        """Test that each key gets its own entry."""
        cache: ResponseCache[str, str] = ResponseCache("spotify_albums")
        compute_a = CountingCompute("a")
        compute_b = CountingCompute("b")

        assert await cache.get_or_compute("a", compute_a) == "a"
        assert await cache.get_or_compute("b", compute_b) == "b"
        assert compute_a.calls == 1
        assert compute_b.calls == 1

    async def test_uses_given_backend(self) -> None:
        """Test that values land in the injected backend."""
        backend: InMemoryCache[str, str] = InMemoryCache()
        cache = ResponseCache("spotify_tracks", backend=backend)

        await cache.get_or_compute("k", CountingCompute("v"))

        assert await backend.get("k") == "v"


class TestResponseCacheFailures:
    """Failed computations are never cached."""

    async def test_exception_propagates_and_nothing_is_stored(self) -> None:
        """Test that a failing compute leaves the key uncached."""
        cache: ResponseCache[str, str] = ResponseCache("spotify_tracks")
        calls = 0

        async def failing() -> str:
            nonlocal calls
            calls += 1
            raise ExternalServiceError("upstream broke")

        with pytest.raises(ExternalServiceError, match="upstream broke"):
            await cache.get_or_compute("k", failing)
        with pytest.raises(ExternalServiceError):
            await cache.get_or_compute("k", failing)

        assert calls == 2
        assert cache.hits == 0

    async def test_success_after_failure_is_cached(self) -> None:
        """Test that a later success for the same key is stored."""
        cache: ResponseCache[str, str] = ResponseCache("spotify_tracks")

        async def failing() -> str:
            raise ExternalServiceError("nope")

        with pytest.raises(ExternalServiceError):
            await cache.get_or_compute("k", failing)

        compute = CountingCompute("ok")
        assert await cache.get_or_compute("k", compute) == "ok"
        assert await cache.get_or_compute("k", compute) == "ok"
        assert compute.calls == 1


class TestResponseCacheManagement:
    """invalidate/clear/stats."""

    async def test_invalidate_forces_recompute(self) -> None:
        """Test that an invalidated key is computed again."""
        cache: ResponseCache[str, str] = ResponseCache("spotify_albums")
        compute = CountingCompute()

        await cache.get_or_compute("k", compute)
        assert await cache.invalidate("k") is True
        assert await cache.invalidate("k") is False
        await cache.get_or_compute("k", compute)

        assert compute.calls == 2

    async def test_clear_and_stats(self) -> None:
        """Test that stats report counters and entries, clear empties the backend."""
        cache: ResponseCache[str, str] = ResponseCache("spotify_albums")
        await cache.get_or_compute("a", CountingCompute())
        await cache.get_or_compute("a", CountingCompute())

        stats = cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["total_entries"] == 1

        await cache.clear()
        assert cache.get_stats()["total_entries"] == 0


class TestResponseCacheTtl:
    """Entry lifetime when the cache is built with ttl_seconds."""

    async def test_expired_entry_is_computed_again(self, mocker) -> None:
        """Test that an entry past its TTL is a miss and gets recomputed."""
        clock = mocker.patch("trackspot.application.cache.base_cache.time.time")
        clock.return_value = 1000.0
        cache: ResponseCache[str, str] = ResponseCache("spotify_tracks", ttl_seconds=10)
        compute = CountingCompute()

        await cache.get_or_compute("k", compute)
        clock.return_value = 1005.0
        await cache.get_or_compute("k", compute)
        assert compute.calls == 1

        clock.return_value = 1011.0
        await cache.get_or_compute("k", compute)
        assert compute.calls == 2
        assert cache.misses == 2

    async def test_default_cache_never_expires(self, mocker) -> None:
        """Test that without ttl_seconds an entry survives any clock jump."""
        clock = mocker.patch("trackspot.application.cache.base_cache.time.time")
        clock.return_value = 0.0
        backend: InMemoryCache[str, str] = InMemoryCache()
        cache: ResponseCache[str, str] = ResponseCache("spotify_albums", backend=backend)
        compute = CountingCompute()

        await cache.get_or_compute("k", compute)
        clock.return_value = 10**9
        await cache.get_or_compute("k", compute)

        assert compute.calls == 1
        assert backend.get_stats()["expired_entries"] == 0
