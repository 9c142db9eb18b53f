"""Track acquisition: store lookup first, Spotify on a miss.

Hey future me - this is THE core flow of the service. get_or_create() is:

    1. repository.get_by_isrc          -> hit? done, zero network calls
    2. search track by ISRC (cached)   -> NotFoundError if Spotify has no match
    3. fetch album (cached)            -> NotFoundError if there is no usable cover
    4. download first cover image      -> retried by RetryingDownloader
    5. blob_store.store("<ISRC>.jpg")  -> reference
    6. compose TrackRecord, repository.add
       DuplicateEntityError = another request for the same ISRC won -> re-read, return theirs
    7. return the record

Nothing is persisted before step 6, so a failure anywhere earlier leaves the DB
untouched. The blob from step 5 may stay behind on failure. Its name is the
ISRC, so the next successful attempt overwrites it.
"""

import logging

from trackspot.application.cache import ResponseCache
from trackspot.domain.dtos import UpstreamAlbum, UpstreamTrack
from trackspot.domain.entities import UNKNOWN_ARTIST, StoredBlob, TrackRecord
from trackspot.domain.exceptions import DuplicateEntityError, NotFoundError, StorageError
from trackspot.domain.ports import IBlobStore, ICatalogClient, ITrackRepository
from trackspot.domain.value_objects import Isrc
from trackspot.infrastructure.integrations.image_downloader import RetryingDownloader

logger = logging.getLogger(__name__)

COVER_FILE_EXTENSION = ".jpg"


class TrackService:
    """Get-or-create for tracks keyed by ISRC."""

    def __init__(
        self,
        repository: ITrackRepository,
        catalog: ICatalogClient,
        downloader: RetryingDownloader,
        blob_store: IBlobStore,
        track_cache: ResponseCache[str, UpstreamTrack],
        album_cache: ResponseCache[str, UpstreamAlbum],
    ) -> None:
        """Initialize track service.

        Args:
            repository: Persistent store for TrackRecords
            catalog: Spotify catalog client
            downloader: Cover image downloader (with retry)
            blob_store: Where cover bytes go
            track_cache: Memoizes ISRC -> UpstreamTrack
            album_cache: Memoizes album id -> UpstreamAlbum
        """
        self._repository = repository
        self._catalog = catalog
        self._downloader = downloader
        self._blob_store = blob_store
        self._track_cache = track_cache
        self._album_cache = album_cache

    async def get_or_create(self, isrc: str) -> TrackRecord:
        """Return the stored track for ISRC, acquiring it from Spotify if needed.

        Args:
            isrc: ISRC in canonical form (e.g. USRC17607839)

        Returns:
            The persisted TrackRecord

        Raises:
            ValidationError: Malformed ISRC
            NotFoundError: Spotify has no track, or the album has no cover image
            AuthError: Token exchange failed
            ExternalServiceError: Spotify call failed or returned garbage
            DownloadError: Cover download failed after retries
            StorageError: Blob or DB write failed
        """
        key = Isrc.from_string(isrc).value

        existing = await self._repository.get_by_isrc(key)
        if existing is not None:
            logger.debug("Track %s already stored", key)
            return existing

        logger.info("Track %s not stored yet, fetching from Spotify", key)

        track = await self._track_cache.get_or_compute(
            key, lambda: self._catalog.search_track_by_isrc(key)
        )
        album_id = track.album.id
        album = await self._album_cache.get_or_compute(
            album_id, lambda: self._catalog.get_album(album_id)
        )

        image_url = album.primary_image_url()
        if image_url is None or not image_url.strip():
            raise NotFoundError(
                "Cover image", album_id, f"No cover image available for album {album_id}"
            )

        image_data = await self._downloader.download(image_url)
        cover_ref = await self._blob_store.store(image_data, f"{key}{COVER_FILE_EXTENSION}")

        record = TrackRecord(
            isrc=key,
            title=track.name,
            primary_artist=track.primary_artist_name() or UNKNOWN_ARTIST,
            album_title=album.name,
            album_id=album.id,
            explicit=track.explicit,
            duration_seconds=track.duration_seconds,
            cover_image_ref=cover_ref,
        )

        try:
            saved = await self._repository.add(record)
        except DuplicateEntityError:
            # Lost the race to a concurrent request for the same ISRC, theirs is just as good
            logger.info("Track %s was stored concurrently, using the existing row", key)
            winner = await self._repository.get_by_isrc(key)
            if winner is None:
                raise StorageError(
                    f"Track {key} reported as duplicate but could not be read back"
                ) from None
            return winner

        logger.info("Stored track %s (%s - %s)", key, saved.primary_artist, saved.title)
        return saved

    async def get(self, isrc: str) -> TrackRecord:
        """Return the stored track, never calling Spotify.

        Raises:
            ValidationError: Malformed ISRC
            NotFoundError: Track not stored
        """
        key = Isrc.from_string(isrc).value
        record = await self._repository.get_by_isrc(key)
        if record is None:
            raise NotFoundError("Track", key)
        return record

    async def get_cover(self, isrc: str) -> StoredBlob:
        """Return the cover image bytes of a stored track.

        Raises:
            ValidationError: Malformed ISRC
            NotFoundError: Track not stored, or its cover file is gone
        """
        record = await self.get(isrc)
        return await self._blob_store.load(record.cover_image_ref)

    def get_cache_stats(self) -> dict[str, dict[str, object]]:
        """Hit/miss counters of both upstream caches (for /health)."""
        return {
            self._track_cache.name: self._track_cache.get_stats(),
            self._album_cache.name: self._album_cache.get_stats(),
        }
