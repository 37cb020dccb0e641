"""Initial migration: resources table.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_JSON = sa.JSON().with_variant(JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "resources",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("file_url", sa.String(2000), nullable=True),
        sa.Column("thumbnail_url", sa.String(2000), nullable=True),
        sa.Column("file_size", sa.BigInteger, nullable=True),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("featured", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("tags", _JSON, nullable=False),
        sa.Column("related_resources", _JSON, nullable=False),
        sa.Column("download_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_by", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("download_count >= 0", name="ck_resource_download_count"),
    )
    op.create_index("ix_resources_category", "resources", ["category"])
    op.create_index("ix_resources_type", "resources", ["type"])
    op.create_index("ix_resources_is_public", "resources", ["is_public"])
    op.create_index("ix_resources_created_at", "resources", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_resources_created_at", table_name="resources")
    op.drop_index("ix_resources_is_public", table_name="resources")
    op.drop_index("ix_resources_type", table_name="resources")
    op.drop_index("ix_resources_category", table_name="resources")
    op.drop_table("resources")
