"""
SnapShare Backend: Post Repository Tests
==========================================

What:  Tests for SqlAlchemyPostRepository against a real (SQLite) database.
How:   In-memory aiosqlite engine from conftest; the schema comes from
       Base.metadata, the same metadata Alembic migrates.

What we test:
    ✅ create assigns id and equal created_at/updated_at
    ✅ feed ordering is newest first
    ✅ a failed insert leaves no row and the session stays usable
"""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from snapshare.exceptions import PersistenceFailedError
from snapshare.models.post import Post
from snapshare.services.post_repository import SqlAlchemyPostRepository


class TestCreate:

    @pytest.mark.asyncio
    async def test_assigns_id_and_timestamps(self, db_session, clock):
        repository = SqlAlchemyPostRepository(db_session, clock=clock)

        post = await repository.create(image_url="https://cdn.test/a.jpg", caption="hello")

        assert post.id is not None
        assert post.image_url == "https://cdn.test/a.jpg"
        assert post.caption == "hello"
        assert post.created_at == post.updated_at

    @pytest.mark.asyncio
    async def test_record_is_committed(self, db_session, session_factory, clock):
        repository = SqlAlchemyPostRepository(db_session, clock=clock)
        post = await repository.create(image_url="https://cdn.test/a.jpg", caption="hello")

        async with session_factory() as other:
            stored = await other.get(Post, post.id)

        assert stored is not None
        assert stored.caption == "hello"

    @pytest.mark.asyncio
    async def test_constraint_violation_leaves_nothing(self, db_session, clock):
        repository = SqlAlchemyPostRepository(db_session, clock=clock)

        with pytest.raises(PersistenceFailedError) as exc_info:
            await repository.create(image_url="", caption="hello")

        assert exc_info.value.context["error_type"] == "IntegrityError"
        count = await db_session.scalar(select(func.count()).select_from(Post))
        assert count == 0

        # Session is usable again after the rollback
        post = await repository.create(image_url="https://cdn.test/b.jpg", caption="ok")
        assert post.id is not None

    @pytest.mark.asyncio
    async def test_driver_error_is_rolled_back(self, clock):
        session = AsyncMock()
        session.add = lambda obj: None
        session.commit = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("db down")))
        repository = SqlAlchemyPostRepository(session, clock=clock)

        with pytest.raises(PersistenceFailedError, match="Failed to save the post"):
            await repository.create(image_url="https://cdn.test/a.jpg", caption="x")

        session.rollback.assert_awaited_once()


class TestFindAll:

    @pytest.mark.asyncio
    async def test_empty(self, db_session):
        repository = SqlAlchemyPostRepository(db_session)
        assert await repository.find_all_sorted_by_created_desc() == []

    @pytest.mark.asyncio
    async def test_newest_first(self, db_session, clock):
        repository = SqlAlchemyPostRepository(db_session, clock=clock)
        for caption in ("first", "second", "third"):
            await repository.create(image_url=f"https://cdn.test/{caption}.jpg", caption=caption)

        posts = await repository.find_all_sorted_by_created_desc()

        assert [p.caption for p in posts] == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_query_failure(self):
        session = AsyncMock()
        session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))
        repository = SqlAlchemyPostRepository(session)

        with pytest.raises(PersistenceFailedError, match="Could not retrieve posts"):
            await repository.find_all_sorted_by_created_desc()
