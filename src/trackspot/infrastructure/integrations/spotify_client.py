"""Spotify Web API client (client-credentials flow, read-only catalog lookups)."""

import base64
import logging
from typing import Any

import httpx

from trackspot.config.settings import SpotifySettings
from trackspot.domain.dtos import UpstreamAlbum, UpstreamTrack
from trackspot.domain.entities import TokenGrant
from trackspot.domain.exceptions import (
    AuthError,
    ConfigurationError,
    ExternalServiceError,
    NotFoundError,
)
from trackspot.domain.ports import ICatalogClient
from trackspot.infrastructure.integrations.http_pool import HttpClientPool
from trackspot.infrastructure.integrations.token_cache import TokenCache

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME_SECONDS = 3600


class SpotifyClient(ICatalogClient):
    """HTTP client for Spotify catalog lookups."""

    # Hey future me, this init doesn't create the HTTP client - the shared one from HttpClientPool is
    # fetched lazily in _get_client() (needs a running loop). Tests pass their own http_client.
    # The TokenCache is built around OUR fetch_access_token unless one is injected.
    def __init__(
        self,
        settings: SpotifySettings,
        http_client: httpx.AsyncClient | None = None,
        token_cache: TokenCache | None = None,
    ) -> None:
        """
        Initialize Spotify client.

        Args:
            settings: Spotify configuration settings
            http_client: Client to use instead of the shared pool
            token_cache: Token cache to use instead of a private one
        """
        self.settings = settings
        self._client = http_client
        self.token_cache = token_cache or TokenCache(
            self.fetch_access_token,
            expiry_margin_seconds=settings.token_expiry_margin_seconds,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get injected client or the shared pool client."""
        if self._client is None:
            self._client = await HttpClientPool.get_client()
        return self._client

    def _basic_auth_header(self) -> str:
        if not self.settings.has_credentials:
            raise ConfigurationError(
                "Spotify credentials are not configured. "
                "Set SPOTIFY__CLIENT_ID and SPOTIFY__CLIENT_SECRET in your environment or .env."
            )
        raw = f"{self.settings.client_id}:{self.settings.client_secret.get_secret_value()}"
        return "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")

    # Yo future me, this is the client-credentials exchange. It HAS to be form-urlencoded with the
    # credentials in a Basic header. Spotify sometimes answers 200 with {"error": ...} in the body,
    # so a 2xx alone is NOT success - we check for "error" and for a non-empty access_token.
    async def fetch_access_token(self) -> TokenGrant:
        """Exchange client credentials for a bearer token.

        Raises:
            ConfigurationError: Client id/secret not configured
            AuthError: Transport error, non-2xx, error payload or missing token
        """
        headers = {
            "Authorization": self._basic_auth_header(),
            "Content-Type": "application/x-www-form-urlencoded",
        }
        client = await self._get_client()

        try:
            response = await client.post(
                self.settings.token_url,
                data={"grant_type": "client_credentials"},
                headers=headers,
                timeout=self.settings.request_timeout,
            )
        except httpx.HTTPError as e:
            logger.error("Error during Spotify access token request: %s", type(e).__name__)
            raise AuthError("Could not fetch access token from Spotify") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.is_success:
            error_code = payload.get("error") if isinstance(payload, dict) else None
            raise AuthError(
                f"Failed to fetch access token. Status: {response.status_code}",
                error_code=error_code,
                http_status=response.status_code,
            )

        if not isinstance(payload, dict):
            raise AuthError("Token endpoint returned a non-JSON body")

        if "error" in payload:
            description = payload.get("error_description") or "Unknown Spotify authentication error"
            raise AuthError(
                f"Spotify returned an error: {description}",
                error_code=str(payload.get("error")),
                http_status=response.status_code,
            )

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise AuthError("Token response did not contain an access token")

        expires_in = payload.get("expires_in", DEFAULT_TOKEN_LIFETIME_SECONDS)
        try:
            expires_in = int(expires_in)
        except (TypeError, ValueError) as e:
            raise AuthError("Token response has an invalid expires_in") from e

        logger.info("Successfully fetched new Spotify access token")
        return TokenGrant(access_token=access_token, expires_in=expires_in)

    # Hey future me - ALL catalog calls go through here. A 401 means our token died early
    # (revoked, clock skew) - drop it and try exactly once more with a fresh one. Anything
    # else non-2xx is the caller's problem via ExternalServiceError.
    async def _api_get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        url = f"{self.settings.api_base_url.rstrip('/')}{path}"
        client = await self._get_client()

        for attempt in range(2):
            token = await self.token_cache.get_token()
            try:
                response = await client.get(
                    url,
                    params=params,
                    headers={"Authorization": f"Bearer {token}"},
                    timeout=self.settings.request_timeout,
                )
            except httpx.HTTPError as e:
                logger.error("Error calling Spotify API at %s: %s", path, type(e).__name__)
                raise ExternalServiceError("Failed to retrieve data from Spotify API") from e

            if response.status_code == 401 and attempt == 0:
                logger.warning("Spotify rejected the access token, refreshing and retrying once")
                self.token_cache.invalidate(token)
                continue
            return response

        return response

    @staticmethod
    def _json(response: httpx.Response, what: str) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceError(f"Spotify returned invalid JSON for {what}") from e
        if not isinstance(payload, dict):
            raise ExternalServiceError(f"Spotify returned an unexpected body for {what}")
        return payload

    async def search_track_by_isrc(self, isrc: str) -> UpstreamTrack:
        """Search the catalog by ISRC and return the first match.

        Raises:
            NotFoundError: No track matches the ISRC
            ExternalServiceError: API error or malformed payload
        """
        logger.debug("Calling Spotify API for ISRC: %s", isrc)
        response = await self._api_get(
            "/search", params={"type": "track", "q": f"isrc:{isrc}"}
        )
        if not response.is_success:
            raise ExternalServiceError(
                f"Spotify search failed with status {response.status_code}"
            )

        payload = self._json(response, "track search")
        tracks = payload.get("tracks")
        if not isinstance(tracks, dict):
            raise ExternalServiceError("Malformed search response: missing 'tracks'")
        items = tracks.get("items") or []
        if not items:
            raise NotFoundError(
                "Track", isrc, f"No track found on Spotify for ISRC: {isrc}"
            )
        return UpstreamTrack.from_spotify(items[0])

    async def get_album(self, album_id: str) -> UpstreamAlbum:
        """Fetch album details (name and cover image candidates).

        Raises:
            NotFoundError: Album id unknown to Spotify
            ExternalServiceError: API error or malformed payload
        """
        logger.debug("Calling Spotify API for album ID: %s", album_id)
        response = await self._api_get(f"/albums/{album_id}")
        if response.status_code == 404:
            raise NotFoundError("Album", album_id)
        if not response.is_success:
            raise ExternalServiceError(
                f"Spotify album lookup failed with status {response.status_code}"
            )
        return UpstreamAlbum.from_spotify(self._json(response, "album"))
