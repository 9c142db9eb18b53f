"""Application lifecycle management for startup and shutdown tasks.

Startup builds the whole object graph once and parks it on app.state:

    settings -> logging -> directories -> Database (+ tables)
             -> LocalBlobStore -> shared httpx client
             -> SpotifyClient (+ its TokenCache) -> RetryingDownloader
             -> ResponseCache x2 -> TrackService

Shutdown closes the HTTP pool and disposes the engine.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from trackspot.application.cache import ResponseCache
from trackspot.application.services import TrackService
from trackspot.config import Settings, get_settings
from trackspot.domain.dtos import UpstreamAlbum, UpstreamTrack
from trackspot.domain.exceptions import ConfigurationError
from trackspot.infrastructure.integrations import (
    HttpClientPool,
    RetryingDownloader,
    SpotifyClient,
    http_fetcher,
)
from trackspot.infrastructure.observability import configure_logging
from trackspot.infrastructure.persistence import Database, TrackRepository
from trackspot.infrastructure.storage import LocalBlobStore

logger = logging.getLogger(__name__)

TRACK_CACHE_NAME = "spotify_tracks"
ALBUM_CACHE_NAME = "spotify_albums"


def build_track_service(
    settings: Settings,
    db: Database,
    http_client: httpx.AsyncClient,
) -> TrackService:
    """Wire a TrackService from settings and shared resources.

    Raises:
        ConfigurationError: Blob storage location unusable
    """
    blob_store = LocalBlobStore(settings.storage.location)
    catalog = SpotifyClient(settings.spotify, http_client=http_client)
    downloader = RetryingDownloader(
        http_fetcher(http_client, timeout=settings.download.timeout),
        max_attempts=settings.download.max_attempts,
        delay_seconds=settings.download.retry_delay_seconds,
    )
    return TrackService(
        repository=TrackRepository(db),
        catalog=catalog,
        downloader=downloader,
        blob_store=blob_store,
        track_cache=ResponseCache[str, UpstreamTrack](TRACK_CACHE_NAME),
        album_cache=ResponseCache[str, UpstreamAlbum](ALBUM_CACHE_NAME),
    )


# Listen future me, everything before `yield` runs at STARTUP, everything in `finally` at
# SHUTDOWN. If startup blows up, the finally still closes whatever we managed to open.
# Missing Spotify credentials do NOT stop startup - stored tracks can still be served, and
# POST answers 503 until credentials are configured.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    try:
        try:
            settings.ensure_directories()
        except OSError as e:
            raise ConfigurationError(f"Unable to create data directories: {e}") from e
        logger.info("Storage directories initialized")

        db = Database(settings)
        app.state.db = db
        await db.create_tables()
        logger.info("Database initialized: %s", settings.database.url)

        http_client = await HttpClientPool.get_client(timeout=settings.spotify.request_timeout)
        app.state.track_service = build_track_service(settings, db, http_client)

        if not settings.spotify.has_credentials:
            logger.warning(
                "Spotify credentials are not configured - new tracks cannot be fetched"
            )

        logger.info("Application startup complete")
        yield

    except Exception as e:
        logger.exception("Error during application startup: %s", e)
        raise
    finally:
        logger.info("Shutting down application")

        try:
            await HttpClientPool.close()
        except Exception as e:
            logger.exception("Error closing HTTP client pool: %s", e)

        db = getattr(app.state, "db", None)
        if db is not None:
            try:
                await db.close()
                logger.info("Database connection closed")
            except Exception as e:
                logger.exception("Error closing database: %s", e)
