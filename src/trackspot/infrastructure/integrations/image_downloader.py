"""Cover image download with a bounded, fixed-delay retry."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from trackspot.domain.exceptions import DownloadError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0

type Fetcher = Callable[[str], Awaitable[bytes]]
type Sleeper = Callable[[float], Awaitable[None]]


class EmptyResponseError(Exception):
    """The image URL answered successfully but with a zero-length body."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Empty response body from {url}")
        self.url = url


# Transient = worth another attempt. Anything else (bad URL, code bug) fails on the spot.
DEFAULT_RETRY_ON: tuple[type[BaseException], ...] = (
    httpx.TransportError,
    httpx.HTTPStatusError,
    EmptyResponseError,
)


def http_fetcher(client: httpx.AsyncClient, timeout: float | None = None) -> Fetcher:
    """Build a fetch function that GETs a URL and returns the body bytes.

    Args:
        client: Shared httpx client
        timeout: Per-request timeout in seconds

    Returns:
        Coroutine function url -> bytes raising on non-2xx or empty body
    """

    async def fetch(url: str) -> bytes:
        response = await client.get(url, timeout=timeout)
        response.raise_for_status()
        if not response.content:
            raise EmptyResponseError(url)
        return response.content

    return fetch


# Hey future me - fetch and sleep are BOTH injected so tests can fail twice, succeed once, and
# assert exactly 2.0 seconds of "sleep" without actually waiting. The delay is fixed (no backoff).
class RetryingDownloader:
    """Download bytes from a URL with up to ``max_attempts`` tries."""

    def __init__(
        self,
        fetch: Fetcher,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        retry_on: tuple[type[BaseException], ...] = DEFAULT_RETRY_ON,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        """Initialize downloader.

        Args:
            fetch: Performs one download attempt
            max_attempts: Total tries including the first, at least 1
            delay_seconds: Pause between tries
            retry_on: Exception types treated as transient
            sleep: Async sleep function (injectable for tests)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self._fetch = fetch
        self.max_attempts = max_attempts
        self.delay_seconds = delay_seconds
        self.retry_on = retry_on
        self._sleep = sleep

    async def download(self, url: str) -> bytes:
        """Download the resource at ``url``.

        Args:
            url: Absolute image URL

        Returns:
            Non-empty response body

        Raises:
            DownloadError: Every attempt failed with a transient error, or a
                non-transient error occurred
        """
        last_error: BaseException | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                data = await self._fetch(url)
            except self.retry_on as e:
                last_error = e
                logger.warning(
                    "Image download attempt %d/%d failed for %s: %s",
                    attempt,
                    self.max_attempts,
                    url,
                    type(e).__name__,
                )
                if attempt < self.max_attempts:
                    await self._sleep(self.delay_seconds)
                continue
            except Exception as e:
                logger.error("Image download failed for %s: %s", url, e)
                raise DownloadError(url, attempt, reason=str(e)) from e

            if not data:
                # fetchers other than http_fetcher may hand back b"" instead of raising
                last_error = EmptyResponseError(url)
                logger.warning(
                    "Image download attempt %d/%d returned no data for %s",
                    attempt,
                    self.max_attempts,
                    url,
                )
                if attempt < self.max_attempts:
                    await self._sleep(self.delay_seconds)
                continue

            if attempt > 1:
                logger.info("Image download for %s succeeded on attempt %d", url, attempt)
            return data

        raise DownloadError(
            url,
            self.max_attempts,
            reason=str(last_error) if last_error else None,
        ) from last_error
