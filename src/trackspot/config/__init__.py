"""Configuration module for TrackSpot."""

from .settings import (
    DatabaseSettings,
    DownloadSettings,
    ObservabilitySettings,
    Settings,
    SpotifySettings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "DatabaseSettings",
    "DownloadSettings",
    "ObservabilitySettings",
    "Settings",
    "SpotifySettings",
    "StorageSettings",
    "get_settings",
]
