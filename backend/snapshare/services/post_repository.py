"""
SnapShare Backend: Post Repository
====================================

What:  Persistence contract for posts and its async SQLAlchemy implementation.
How:   `create` inserts and commits one Post inside the request session; on
       any SQLAlchemy error the session is rolled back and the failure is
       re-raised as PersistenceFailedError, so a failed create leaves nothing
       visible. `find_all_sorted_by_created_desc` is a single ordered SELECT.
Who:   Built per request (it wraps that request's AsyncSession) and handed to
       the pipeline.

Query plan (feed):
    SELECT * FROM posts ORDER BY created_at DESC, id DESC
    → idx_posts_created_at; id breaks ties between equal timestamps
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, List

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.exceptions import PersistenceFailedError
from snapshare.models.post import Post

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PostRepository(ABC):
    """
    Contract:
        - create() returns the stored Post with id and timestamps assigned
        - failures are raised as PersistenceFailedError
        - a failed create() leaves no record behind
    """

    @abstractmethod
    async def create(self, image_url: str, caption: str) -> Post:
        ...

    @abstractmethod
    async def find_all_sorted_by_created_desc(self) -> List[Post]:
        ...


class SqlAlchemyPostRepository(PostRepository):
    """
    Args:
        session: The request's AsyncSession
        clock:   Timestamp source for created_at/updated_at
    """

    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock

    async def create(self, image_url: str, caption: str) -> Post:
        now = self.clock()
        post = Post(image_url=image_url, caption=caption, created_at=now, updated_at=now)
        try:
            self.session.add(post)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to insert post: %s", e)
            raise PersistenceFailedError(
                context={"error_type": type(e).__name__, "error": str(e)},
            ) from e

        logger.info("Post %s persisted", post.id)
        return post

    async def find_all_sorted_by_created_desc(self) -> List[Post]:
        try:
            result = await self.session.execute(
                select(Post).order_by(desc(Post.created_at), desc(Post.id))
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Failed to list posts: %s", e, exc_info=True)
            raise PersistenceFailedError(
                message="Could not retrieve posts. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e
