"""create photos and comments

Revision ID: 0001
Revises:
Create Date: 2026-01-06 16:00:35
"""

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

ai_status_enum = sa.Enum("PENDING", "DONE", "ERROR", name="ai_status_enum")


def upgrade() -> None:
    op.create_table(
        "photos",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("owner_id", sa.String(length=255), nullable=False),
        sa.Column("location_ref", sa.String(length=512), nullable=False),
        sa.Column("lat", sa.Float(), nullable=False),
        sa.Column("lng", sa.Float(), nullable=False),
        sa.Column("ai_status", ai_status_enum, nullable=False, server_default="PENDING"),
        sa.Column("ai_description", sa.Text(), nullable=True),
        sa.Column("ai_error", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_photos_owner_id", "photos", ["owner_id"])
    op.create_index("ix_photos_lat_lng", "photos", ["lat", "lng"])

    op.create_table(
        "comments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "photo_id",
            sa.String(length=36),
            sa.ForeignKey("photos.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("author_id", sa.String(length=255), nullable=False),
        sa.Column("content", sa.String(length=500), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_comments_photo_id_created_at", "comments", ["photo_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_comments_photo_id_created_at", table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_photos_lat_lng", table_name="photos")
    op.drop_index("ix_photos_owner_id", table_name="photos")
    op.drop_table("photos")
    ai_status_enum.drop(op.get_bind(), checkfirst=True)
