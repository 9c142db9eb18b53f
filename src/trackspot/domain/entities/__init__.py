"""Domain entities."""

from dataclasses import dataclass

UNKNOWN_ARTIST = "Unknown Artist"


# Hey future me, TokenGrant is what the token endpoint TOLD us (relative lifetime in seconds).
# Credential is what we STORE (absolute expiry on our own clock, margin already subtracted).
# Keep them separate - the fetch function doesn't know our clock, TokenCache does.
@dataclass(frozen=True)
class TokenGrant:
    """Raw result of a client-credentials exchange."""

    access_token: str
    expires_in: int


@dataclass(frozen=True)
class Credential:
    """Bearer credential with absolute expiry.

    Frozen: a refresh REPLACES the credential object, it never
    mutates the old one. Readers holding a reference keep a consistent pair.
    """

    access_token: str
    expires_at: float  # clock seconds (monotonic by default)

    def is_expired(self, now: float) -> bool:
        """Check if credential must be refreshed."""
        return now >= self.expires_at


# Listen up, TrackRecord is the ONLY thing we persist. One row per ISRC, created once,
# never updated. cover_image_ref is OPAQUE - it's whatever the blob store handed back
# from store(), and only the blob store knows how to turn it into bytes again.
@dataclass(frozen=True)
class TrackRecord:
    """Persisted track metadata keyed by ISRC."""

    isrc: str
    title: str
    primary_artist: str
    album_title: str
    album_id: str
    explicit: bool
    duration_seconds: int
    cover_image_ref: str

    def __post_init__(self) -> None:
        if self.duration_seconds < 0:
            raise ValueError("duration_seconds must be >= 0")


@dataclass(frozen=True)
class StoredBlob:
    """Bytes loaded from the blob store plus what we know about them."""

    data: bytes
    content_type: str
    filename: str


__all__ = [
    "UNKNOWN_ARTIST",
    "Credential",
    "StoredBlob",
    "TokenGrant",
    "TrackRecord",
]
