"""
SnapShare Backend: Post SQLAlchemy Model
==========================================

What:  ORM model representing the `posts` table.
How:   Inherits from the shared DeclarativeBase; Alembic migration 001
       creates the same table with PostgreSQL server defaults.
Who:   Written by SqlAlchemyPostRepository.create, read by its list query.

Table Design:
    - id: UUID primary key, generated on insert
    - image_url: public URL returned by the object store
    - caption: trimmed, non-empty caption text
    - created_at / updated_at: UTC; equal at insertion (posts are never edited)

    Index on created_at DESC serves the feed query.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from snapshare.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    An uploaded image's URL linked to its caption.

    Lifecycle:
        Created once by the ingest pipeline after a successful upload,
        read many times by the feed, never updated or deleted.
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier assigned on insert",
    )

    # Format: full https URL on the CDN, or PUBLIC_BASE_URL/api/files/... locally
    image_url: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        comment="Public URL of the uploaded image",
    )

    caption: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Trimmed, non-empty caption",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        comment="When this post was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        comment="Equal to created_at; no update path exists",
    )

    __table_args__ = (
        CheckConstraint("length(image_url) > 0", name="ck_posts_image_url_not_empty"),
        CheckConstraint("length(caption) > 0", name="ck_posts_caption_not_empty"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, created_at='{self.created_at}')>"


Index("idx_posts_created_at", Post.created_at.desc())
