"""TrackSpot - track metadata and cover art by ISRC, fetched lazily from Spotify."""

__version__ = "1.0.0"
