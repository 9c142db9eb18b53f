"""Blob storage implementations."""

from trackspot.infrastructure.storage.local_blob_store import (
    LocalBlobStore,
    detect_content_type,
)

__all__ = ["LocalBlobStore", "detect_content_type"]
