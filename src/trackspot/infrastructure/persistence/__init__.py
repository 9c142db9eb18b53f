"""Infrastructure persistence layer."""

from .database import Database
from .models import Base, TrackModel
from .repositories import TrackRepository
from .retry import DatabaseLockMetrics, is_lock_error, with_db_retry

__all__ = [
    "Base",
    "Database",
    "DatabaseLockMetrics",
    "TrackModel",
    "TrackRepository",
    "is_lock_error",
    "with_db_retry",
]
