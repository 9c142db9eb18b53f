"""create tracks table

Revision ID: 0001
Revises:
Create Date: 2026-10-19 12:00:00.000000

Hey future me - one row per ISRC, and the ISRC IS the primary key. That PK is
what turns a concurrent double-insert into an IntegrityError, which the
repository reports as DuplicateEntityError. Don't replace it with a surrogate
id without adding a UNIQUE constraint on isrc.
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create tracks table."""
    op.create_table(
        "tracks",
        sa.Column("isrc", sa.String(length=12), nullable=False),
        sa.Column("title", sa.String(length=512), nullable=False),
        sa.Column("primary_artist", sa.String(length=512), nullable=False),
        sa.Column("album_title", sa.String(length=512), nullable=False),
        sa.Column("album_id", sa.String(length=64), nullable=False),
        sa.Column("explicit", sa.Boolean(), server_default="0", nullable=False),
        sa.Column("duration_seconds", sa.Integer(), nullable=False),
        sa.Column("cover_image_ref", sa.String(length=1024), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("isrc"),
    )


def downgrade() -> None:
    """Drop tracks table."""
    op.drop_table("tracks")
