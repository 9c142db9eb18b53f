"""Process-wide bearer token for the Spotify client-credentials flow.

Hey future me - this is the "lazily initialised shared token" done explicitly.
The credential is STATE OWNED BY THIS OBJECT, refreshed under an asyncio.Lock
with the classic double-check:

    fast path:   credential fresh?             -> return it (no lock)
    slow path:   take lock, check AGAIN        -> someone refreshed while we waited? return theirs
                 still stale                   -> fetch ONCE, swap in new Credential

50 tasks hitting an expired token at once -> exactly one POST to /api/token, the
other 49 wait on the lock and then read the new credential. Credential is a
frozen dataclass that gets REPLACED, so readers outside the lock see either the
old or the new token, never a mix.

Failures are NOT retried here. An AuthError goes straight back to the caller.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from trackspot.domain.entities import Credential, TokenGrant
from trackspot.domain.exceptions import AuthError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_MARGIN_SECONDS = 60


class TokenCache:
    """Caches a bearer credential and refreshes it on expiry."""

    def __init__(
        self,
        fetch_token: Callable[[], Awaitable[TokenGrant]],
        *,
        expiry_margin_seconds: int = DEFAULT_EXPIRY_MARGIN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize token cache.

        Args:
            fetch_token: Performs the token exchange (see SpotifyClient.fetch_access_token)
            expiry_margin_seconds: Subtracted from the declared lifetime, at least 60
            clock: Seconds source, monotonic by default (injectable for tests)
        """
        if expiry_margin_seconds < DEFAULT_EXPIRY_MARGIN_SECONDS:
            raise ValueError(
                f"expiry_margin_seconds must be >= {DEFAULT_EXPIRY_MARGIN_SECONDS}"
            )
        self._fetch_token = fetch_token
        self._margin = expiry_margin_seconds
        self._clock = clock
        self._credential: Credential | None = None
        self._lock = asyncio.Lock()
        self.refresh_count = 0

    @property
    def current(self) -> Credential | None:
        """The credential currently held (may be expired)."""
        return self._credential

    def _is_fresh(self, credential: Credential | None) -> bool:
        return credential is not None and not credential.is_expired(self._clock())

    async def get_token(self) -> str:
        """Return a valid access token, refreshing if absent or expired.

        Raises:
            AuthError: Token exchange failed or returned a malformed response
        """
        credential = self._credential
        if self._is_fresh(credential):
            return credential.access_token  # type: ignore[union-attr]

        async with self._lock:
            # Re-check: another task may have refreshed while we waited for the lock
            credential = self._credential
            if self._is_fresh(credential):
                return credential.access_token  # type: ignore[union-attr]

            logger.info("Access token is missing or expired, requesting a new one")
            credential = await self._refresh()
            self._credential = credential
            return credential.access_token

    async def _refresh(self) -> Credential:
        try:
            grant = await self._fetch_token()
        except (AuthError, ConfigurationError):
            raise
        except Exception as e:
            raise AuthError(f"Token exchange failed: {type(e).__name__}") from e

        if not grant.access_token:
            raise AuthError("Token response did not contain an access token")

        self.refresh_count += 1
        expires_at = self._clock() + grant.expires_in - self._margin
        logger.info(
            "Fetched new access token (lifetime %ds, refresh in %ds)",
            grant.expires_in,
            max(grant.expires_in - self._margin, 0),
        )
        return Credential(access_token=grant.access_token, expires_at=expires_at)

    def invalidate(self, token: str | None = None) -> None:
        """Forget the current credential (e.g. after the API answered 401).

        Args:
            token: The token that was rejected. If given, the credential is only
                dropped while it still holds that token, so a late 401 for an old
                token cannot throw away a freshly refreshed one.
        """
        credential = self._credential
        if credential is None:
            return
        if token is not None and credential.access_token != token:
            logger.debug("Ignoring invalidate for a token that was already replaced")
            return
        self._credential = None
