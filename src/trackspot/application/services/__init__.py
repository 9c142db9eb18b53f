"""Application services."""

from trackspot.application.services.track_service import TrackService

__all__ = ["TrackService"]
