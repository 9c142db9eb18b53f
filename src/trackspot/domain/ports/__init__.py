"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod

from trackspot.domain.dtos import UpstreamAlbum, UpstreamTrack
from trackspot.domain.entities import StoredBlob, TrackRecord


# Hey future me, ITrackRepository is a PORT (Hexagonal Architecture)! TrackService only ever talks
# to this interface, the SQLAlchemy implementation lives in infrastructure/persistence. The contract
# that matters: add() MUST raise DuplicateEntityError when the ISRC already exists - TrackService's
# race handling depends on it. Tests use an in-memory fake that honours the same contract.
class ITrackRepository(ABC):
    """Repository interface for TrackRecord entities."""

    @abstractmethod
    async def get_by_isrc(self, isrc: str) -> TrackRecord | None:
        """Get a track by ISRC, None if not stored."""
        pass

    @abstractmethod
    async def add(self, record: TrackRecord) -> TrackRecord:
        """Persist a new track.

        Raises:
            DuplicateEntityError: ISRC already stored
            StorageError: Any other persistence failure
        """
        pass


class IBlobStore(ABC):
    """Key -> bytes store for cover images."""

    @abstractmethod
    async def store(self, data: bytes, name: str) -> str:
        """Store bytes under name and return an opaque reference.

        Raises:
            StorageError: Name escapes the store root, or the write failed
        """
        pass

    @abstractmethod
    async def load(self, reference: str) -> StoredBlob:
        """Load bytes previously stored.

        Raises:
            NotFoundError: Reference is unknown, unreadable or escapes the root
        """
        pass


class ICatalogClient(ABC):
    """Music catalog (Spotify) read operations."""

    @abstractmethod
    async def search_track_by_isrc(self, isrc: str) -> UpstreamTrack:
        """Return the first catalog match for the ISRC.

        Raises:
            NotFoundError: Catalog has no match
            AuthError: Token exchange failed
            ExternalServiceError: Catalog call failed or payload malformed
        """
        pass

    @abstractmethod
    async def get_album(self, album_id: str) -> UpstreamAlbum:
        """Return album details including image candidates."""
        pass


__all__ = ["IBlobStore", "ICatalogClient", "ITrackRepository"]
