"""API schemas for tracks."""

from pydantic import BaseModel, ConfigDict, Field

from trackspot.domain.entities import TrackRecord


# Hey future me - the wire format is camelCase (artistName, playbackSeconds, ...) because that's
# what existing clients of this API read. Python side stays snake_case, the aliases do the mapping.
# populate_by_name lets us build it with snake_case kwargs; FastAPI serializes by alias.
class TrackResponse(BaseModel):
    """Track as returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    isrc: str = Field(..., description="International Standard Recording Code")
    name: str = Field(..., description="Track title")
    artist_name: str = Field(..., alias="artistName", description="Primary artist")
    album_name: str = Field(..., alias="albumName", description="Album title")
    is_explicit: bool = Field(..., alias="isExplicit", description="Explicit lyrics flag")
    playback_seconds: int = Field(
        ..., alias="playbackSeconds", ge=0, description="Duration in whole seconds"
    )
    cover_image_url: str = Field(
        ..., alias="coverImageUrl", description="Absolute URL of the cover image endpoint"
    )

    @classmethod
    def from_record(cls, record: TrackRecord, cover_image_url: str) -> "TrackResponse":
        return cls(
            isrc=record.isrc,
            name=record.title,
            artist_name=record.primary_artist,
            album_name=record.album_title,
            is_explicit=record.explicit,
            playback_seconds=record.duration_seconds,
            cover_image_url=cover_image_url,
        )
