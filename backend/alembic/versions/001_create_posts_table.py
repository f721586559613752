"""Create posts table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `posts` table: one row per shared image.
How:   PostgreSQL UUID primary key generated server-side, TIMESTAMP WITH TIME
       ZONE audit columns, CHECK constraints mirroring the ingest validation.

Rollback: downgrade() drops the table and every post in it.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "posts",

        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
            comment="Post identifier, assigned at insert",
        ),

        # Public CDN (or /api/files) URL returned by the object store
        sa.Column(
            "image_url",
            sa.String(1024),
            nullable=False,
            comment="Public URL of the uploaded image",
        ),

        sa.Column(
            "caption",
            sa.Text(),
            nullable=False,
            comment="Caption text, stored trimmed",
        ),

        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When the post was created (UTC)",
        ),

        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="Last modification (UTC); equals created_at on insert",
        ),

        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("length(image_url) > 0", name="ck_posts_image_url_not_empty"),
        sa.CheckConstraint("length(caption) > 0", name="ck_posts_caption_not_empty"),
    )

    # Feed query: ORDER BY created_at DESC
    op.create_index(
        "idx_posts_created_at",
        "posts",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_posts_created_at", table_name="posts")
    op.drop_table("posts")
