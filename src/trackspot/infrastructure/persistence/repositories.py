"""Repository implementations for domain entities."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from trackspot.domain.entities import TrackRecord
from trackspot.domain.exceptions import DuplicateEntityError, StorageError
from trackspot.domain.ports import ITrackRepository
from trackspot.infrastructure.persistence.database import Database
from trackspot.infrastructure.persistence.models import TrackModel
from trackspot.infrastructure.persistence.retry import is_lock_error, with_db_retry

logger = logging.getLogger(__name__)


# Hey future me, unlike the request-scoped repos you'd see elsewhere this one owns its sessions:
# each call opens a short session_scope() on the shared Database. TrackService is a singleton on
# app.state and gets called from many concurrent requests, so it can't hold one AsyncSession.
class TrackRepository(ITrackRepository):
    """SQLAlchemy implementation of the track repository."""

    def __init__(self, db: Database) -> None:
        """Initialize repository with the database manager."""
        self.db = db

    @with_db_retry(max_attempts=3)
    async def _select(self, isrc: str) -> TrackModel | None:
        async with self.db.session_scope() as session:
            result = await session.execute(
                select(TrackModel).where(TrackModel.isrc == isrc)
            )
            return result.scalar_one_or_none()

    async def get_by_isrc(self, isrc: str) -> TrackRecord | None:
        """Get a track by ISRC.

        Raises:
            StorageError: Query failed
        """
        try:
            model = await self._select(isrc)
        except SQLAlchemyError as e:
            logger.error("Failed to read track %s: %s", isrc, e)
            raise StorageError(f"Failed to read track {isrc}") from e
        return model.to_entity() if model else None

    @with_db_retry(max_attempts=3)
    async def _insert(self, record: TrackRecord) -> None:
        async with self.db.session_scope() as session:
            session.add(TrackModel.from_entity(record))

    async def add(self, record: TrackRecord) -> TrackRecord:
        """Insert a new track.

        Raises:
            DuplicateEntityError: A row with this ISRC already exists
            StorageError: Any other database failure
        """
        try:
            await self._insert(record)
        except IntegrityError as e:
            raise DuplicateEntityError("Track", record.isrc) from e
        except SQLAlchemyError as e:
            if is_lock_error(e):
                logger.error("Database stayed locked while saving track %s", record.isrc)
            else:
                logger.error("Failed to save track %s: %s", record.isrc, e)
            raise StorageError(f"Failed to save track {record.isrc}") from e

        logger.debug("Saved track %s", record.isrc)
        return record
