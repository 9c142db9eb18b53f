"""Tests for TokenCache refresh behaviour."""

import asyncio

import pytest

from trackspot.domain.entities import TokenGrant
from trackspot.domain.exceptions import AuthError
from trackspot.infrastructure.integrations.token_cache import TokenCache

THIRTY_MINUTES = 30 * 60


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class CountingFetch:
    """Token endpoint stand-in issuing token-1, token-2, ..."""

    def __init__(self, expires_in: int = THIRTY_MINUTES) -> None:
        self.expires_in = expires_in
        self.calls = 0

    async def __call__(self) -> TokenGrant:
        self.calls += 1
        # Let every concurrent waiter pile up on the lock before we return
        await asyncio.sleep(0.01)
        return TokenGrant(access_token=f"token-{self.calls}", expires_in=self.expires_in)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fetch() -> CountingFetch:
    return CountingFetch()


@pytest.fixture
def token_cache(fetch: CountingFetch, clock: FakeClock) -> TokenCache:
    return TokenCache(fetch, clock=clock)


class TestTokenCacheInit:
    """Construction rules."""

    def test_margin_below_sixty_seconds_is_rejected(self, fetch: CountingFetch) -> None:
        """Test that a safety margin under 60s is refused."""
        with pytest.raises(ValueError):
            TokenCache(fetch, expiry_margin_seconds=59)

    def test_starts_without_credential(self, token_cache: TokenCache) -> None:
        """Test that nothing is fetched at construction time."""
        assert token_cache.current is None
        assert token_cache.refresh_count == 0


class TestTokenCacheRefresh:
    """Expiry and refresh."""

    async def test_first_call_fetches_token(
        self, token_cache: TokenCache, fetch: CountingFetch, clock: FakeClock
    ) -> None:
        """Test that the first call performs the exchange and stores expiry minus margin."""
        assert await token_cache.get_token() == "token-1"
        assert fetch.calls == 1
        assert token_cache.current is not None
        assert token_cache.current.expires_at == clock.now + THIRTY_MINUTES - 60

    async def test_token_reused_until_margin(
        self, token_cache: TokenCache, fetch: CountingFetch, clock: FakeClock
    ) -> None:
        """Test that a call 61s before declared expiry still returns the cached token."""
        issued_at = clock.now
        await token_cache.get_token()

        clock.now = issued_at + THIRTY_MINUTES - 61
        assert await token_cache.get_token() == "token-1"
        assert fetch.calls == 1

    async def test_concurrent_callers_inside_margin_trigger_one_refresh(
        self, token_cache: TokenCache, fetch: CountingFetch, clock: FakeClock
    ) -> None:
        """Test that 50 callers 59s before declared expiry cause exactly one refresh."""
        issued_at = clock.now
        await token_cache.get_token()

        clock.now = issued_at + THIRTY_MINUTES - 59
        tokens = await asyncio.gather(*(token_cache.get_token() for _ in range(50)))

        assert fetch.calls == 2
        assert set(tokens) == {"token-2"}
        assert token_cache.refresh_count == 2

    async def test_concurrent_first_calls_share_one_fetch(
        self, token_cache: TokenCache, fetch: CountingFetch
    ) -> None:
        """Test that a cold cache hit by many tasks at once fetches once."""
        tokens = await asyncio.gather(*(token_cache.get_token() for _ in range(20)))

        assert fetch.calls == 1
        assert set(tokens) == {"token-1"}

    async def test_invalidate_forces_refresh(
        self, token_cache: TokenCache, fetch: CountingFetch
    ) -> None:
        """Test that invalidate() drops the credential."""
        await token_cache.get_token()
        token_cache.invalidate()

        assert token_cache.current is None
        assert await token_cache.get_token() == "token-2"
        assert fetch.calls == 2

    async def test_invalidate_with_replaced_token_keeps_current(
        self, token_cache: TokenCache, fetch: CountingFetch
    ) -> None:
        """Test that a late 401 for an old token does not drop the refreshed one."""
        stale = await token_cache.get_token()
        token_cache.invalidate(stale)
        fresh = await token_cache.get_token()

        token_cache.invalidate(stale)

        assert token_cache.current is not None
        assert await token_cache.get_token() == fresh == "token-2"
        assert token_cache.refresh_count == 2

    async def test_concurrent_rejections_of_same_token_refresh_once(
        self, token_cache: TokenCache, fetch: CountingFetch
    ) -> None:
        """Test that two callers rejected with the same token share one refresh."""
        stale = await token_cache.get_token()
        first_retry_done = asyncio.Event()

        async def first_caller() -> str:
            token_cache.invalidate(stale)
            token = await token_cache.get_token()
            first_retry_done.set()
            return token

        async def second_caller() -> str:
            # its 401 arrives only after the first caller already refreshed
            await first_retry_done.wait()
            token_cache.invalidate(stale)
            return await token_cache.get_token()

        tokens = await asyncio.gather(first_caller(), second_caller())

        assert tokens == ["token-2", "token-2"]
        assert token_cache.refresh_count == 2


class TestTokenCacheFailures:
    """Errors are surfaced, never retried."""

    async def test_auth_error_propagates_unchanged(self, clock: FakeClock) -> None:
        """Test that AuthError from the exchange reaches the caller."""
        calls = 0

        async def failing() -> TokenGrant:
            nonlocal calls
            calls += 1
            raise AuthError("invalid_client", error_code="invalid_client", http_status=400)

        cache = TokenCache(failing, clock=clock)
        with pytest.raises(AuthError) as exc_info:
            await cache.get_token()

        assert exc_info.value.error_code == "invalid_client"
        assert calls == 1
        assert cache.current is None

    async def test_unexpected_error_is_wrapped(self, clock: FakeClock) -> None:
        """Test that other exceptions become AuthError with the cause chained."""

        async def failing() -> TokenGrant:
            raise RuntimeError("boom")

        cache = TokenCache(failing, clock=clock)
        with pytest.raises(AuthError) as exc_info:
            await cache.get_token()

        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_empty_token_is_rejected(self, clock: FakeClock) -> None:
        """Test that an empty access token is an AuthError."""

        async def empty() -> TokenGrant:
            return TokenGrant(access_token="", expires_in=3600)

        cache = TokenCache(empty, clock=clock)
        with pytest.raises(AuthError):
            await cache.get_token()

    async def test_failed_refresh_keeps_trying_next_call(
        self, token_cache: TokenCache, fetch: CountingFetch, clock: FakeClock
    ) -> None:
        """Test that a failure does not poison the cache for later callers."""
        issued_at = clock.now
        await token_cache.get_token()
        clock.now = issued_at + THIRTY_MINUTES

        original = fetch.__call__

        async def fail_once() -> TokenGrant:
            raise AuthError("temporary")

        token_cache._fetch_token = fail_once
        with pytest.raises(AuthError):
            await token_cache.get_token()

        token_cache._fetch_token = original
        assert await token_cache.get_token() == "token-2"
