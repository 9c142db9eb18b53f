"""API request/response schemas."""

from trackspot.api.schemas.tracks import TrackResponse

__all__ = ["TrackResponse"]
