"""SQLAlchemy ORM models for trackspot."""

from datetime import UTC, datetime

import sqlalchemy as sa
from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from trackspot.domain.entities import TrackRecord


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Listen up, the ISRC IS the primary key. That's what makes "exactly one row per ISRC" true
# even when two requests race: the second INSERT fails with IntegrityError at commit, and
# the repository reports it as DuplicateEntityError. Rows are never updated.
class TrackModel(Base):
    """Persisted track metadata (one row per ISRC)."""

    __tablename__ = "tracks"

    isrc: Mapped[str] = mapped_column(String(12), primary_key=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    primary_artist: Mapped[str] = mapped_column(String(512), nullable=False)
    album_title: Mapped[str] = mapped_column(String(512), nullable=False)
    album_id: Mapped[str] = mapped_column(String(64), nullable=False)
    explicit: Mapped[bool] = mapped_column(
        sa.Boolean(), nullable=False, server_default="0", default=False
    )
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    cover_image_ref: Mapped[str] = mapped_column(String(1024), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )

    @classmethod
    def from_entity(cls, record: TrackRecord) -> "TrackModel":
        return cls(
            isrc=record.isrc,
            title=record.title,
            primary_artist=record.primary_artist,
            album_title=record.album_title,
            album_id=record.album_id,
            explicit=record.explicit,
            duration_seconds=record.duration_seconds,
            cover_image_ref=record.cover_image_ref,
        )

    def to_entity(self) -> TrackRecord:
        return TrackRecord(
            isrc=self.isrc,
            title=self.title,
            primary_artist=self.primary_artist,
            album_title=self.album_title,
            album_id=self.album_id,
            explicit=self.explicit,
            duration_seconds=self.duration_seconds,
            cover_image_ref=self.cover_image_ref,
        )
