"""External integration client implementations."""

from trackspot.infrastructure.integrations.http_pool import HttpClientPool
from trackspot.infrastructure.integrations.image_downloader import (
    EmptyResponseError,
    RetryingDownloader,
    http_fetcher,
)
from trackspot.infrastructure.integrations.spotify_client import SpotifyClient
from trackspot.infrastructure.integrations.token_cache import TokenCache

__all__ = [
    "EmptyResponseError",
    "HttpClientPool",
    "RetryingDownloader",
    "SpotifyClient",
    "TokenCache",
    "http_fetcher",
]
