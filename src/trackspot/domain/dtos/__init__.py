"""
Read-only projections of Spotify catalog responses.

Hey future me - these DTOs are the ONLY shape in which catalog data travels past
the Spotify client. They are built with from_spotify() which VALIDATES: a track
without a name or album, or an album without id/name, is a broken response and
raises ExternalServiceError. We never default-fill required fields - a half-empty
TrackRecord in the DB is far worse than a 502.

Optional bits (artists, images, explicit, duration) DO get defaults because
Spotify legitimately omits them.
"""

from dataclasses import dataclass, field
from typing import Any

from trackspot.domain.exceptions import ExternalServiceError


def _require_str(payload: dict[str, Any], key: str, what: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ExternalServiceError(f"Malformed {what}: missing '{key}'")
    return value


def _as_list(payload: dict[str, Any], key: str) -> list[dict[str, Any]]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ExternalServiceError(f"Malformed catalog response: '{key}' is not a list")
    return [item for item in value if isinstance(item, dict)]


@dataclass(frozen=True)
class UpstreamImage:
    """One image candidate (Spotify orders them largest first)."""

    url: str
    width: int | None = None
    height: int | None = None

    @classmethod
    def from_spotify(cls, payload: dict[str, Any]) -> "UpstreamImage":
        url = payload.get("url")
        if not isinstance(url, str):
            raise ExternalServiceError("Malformed image: missing 'url'")
        return cls(url=url, width=payload.get("width"), height=payload.get("height"))


@dataclass(frozen=True)
class UpstreamArtist:
    """Artist credit on a track."""

    name: str
    id: str | None = None

    @classmethod
    def from_spotify(cls, payload: dict[str, Any]) -> "UpstreamArtist":
        return cls(name=_require_str(payload, "name", "artist"), id=payload.get("id"))


@dataclass(frozen=True)
class UpstreamAlbum:
    """Album as returned by /albums/{id} (or embedded in a track)."""

    id: str
    name: str
    images: tuple[UpstreamImage, ...] = field(default_factory=tuple)

    @classmethod
    def from_spotify(cls, payload: dict[str, Any]) -> "UpstreamAlbum":
        if not isinstance(payload, dict):
            raise ExternalServiceError("Malformed album: expected an object")
        return cls(
            id=_require_str(payload, "id", "album"),
            name=_require_str(payload, "name", "album"),
            images=tuple(
                UpstreamImage.from_spotify(image)
                for image in _as_list(payload, "images")
            ),
        )

    def primary_image_url(self) -> str | None:
        """URL of the first (preferred) image, None if there are no images."""
        if not self.images:
            return None
        return self.images[0].url


@dataclass(frozen=True)
class UpstreamTrack:
    """Track item from a search result."""

    name: str
    album: UpstreamAlbum
    explicit: bool = False
    duration_ms: int = 0
    artists: tuple[UpstreamArtist, ...] = field(default_factory=tuple)
    id: str | None = None

    @classmethod
    def from_spotify(cls, payload: dict[str, Any]) -> "UpstreamTrack":
        if not isinstance(payload, dict):
            raise ExternalServiceError("Malformed track: expected an object")
        name = _require_str(payload, "name", "track")
        album_payload = payload.get("album")
        if album_payload is None:
            raise ExternalServiceError("Malformed track: missing 'album'")

        duration_ms = payload.get("duration_ms") or 0
        if not isinstance(duration_ms, int) or duration_ms < 0:
            raise ExternalServiceError("Malformed track: invalid 'duration_ms'")

        return cls(
            name=name,
            album=UpstreamAlbum.from_spotify(album_payload),
            explicit=bool(payload.get("explicit", False)),
            duration_ms=duration_ms,
            artists=tuple(
                UpstreamArtist.from_spotify(artist)
                for artist in _as_list(payload, "artists")
            ),
            id=payload.get("id"),
        )

    def primary_artist_name(self) -> str | None:
        """Name of the first credited artist, None if nobody is credited."""
        if not self.artists:
            return None
        return self.artists[0].name

    @property
    def duration_seconds(self) -> int:
        return self.duration_ms // 1000


__all__ = ["UpstreamAlbum", "UpstreamArtist", "UpstreamImage", "UpstreamTrack"]
