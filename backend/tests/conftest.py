"""
SnapShare Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before anything from `snapshare` is
       imported, so the settings singleton and the module-level engine never
       point at a real database or CDN.

Fixture Hierarchy (all function-scoped):
    ├── clock:            Deterministic, strictly increasing UTC timestamps
    ├── object_store:     FakeObjectStore recording uploads/deletes
    ├── memory_repository: InMemoryPostRepository (no database)
    ├── db_engine:        In-memory aiosqlite engine with the schema created
    ├── db_session:       AsyncSession bound to db_engine
    ├── sample_image_bytes: Minimal JPEG bytes
    ├── app:              create_app() with the fake store and the test DB
    └── test_client:      HTTPX AsyncClient over ASGITransport
"""

import os
import tempfile

# Override settings for testing BEFORE any snapshare imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["OBJECT_STORE_BACKEND"] = "local"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="snapshare_test_")
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from snapshare.database import Base, get_db_session
from snapshare.exceptions import PersistenceFailedError, UploadFailedError
from snapshare.models.post import Post
from snapshare.services.object_store import ObjectStore, UploadResult
from snapshare.services.post_repository import PostRepository


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════

class TickingClock:
    """Each call returns a timestamp one second after the previous one."""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


class FakeObjectStore(ObjectStore):
    """
    Records every call. Set `fail_with` to an exception to make upload()
    raise it; set `delete_fails` to make delete() raise UploadFailedError;
    set `url` to return that URL instead of a generated one.
    """

    base_url = "https://cdn.test/posts"

    def __init__(self):
        self.uploads: List[dict] = []
        self.deleted: List[str] = []
        self.fail_with: Optional[BaseException] = None
        self.delete_fails = False
        self.url: Optional[str] = None
        self.closed = False

    async def upload(self, content: bytes, file_name: str, content_type: str) -> UploadResult:
        self.uploads.append(
            {"content": content, "file_name": file_name, "content_type": content_type}
        )
        if self.fail_with is not None:
            raise self.fail_with
        url = self.url if self.url is not None else f"{self.base_url}/{file_name}"
        return UploadResult(url=url, external_id=f"file-{len(self.uploads)}")

    async def delete(self, external_id: str) -> None:
        if self.delete_fails:
            raise UploadFailedError(message="delete refused")
        self.deleted.append(external_id)

    async def aclose(self) -> None:
        self.closed = True


class InMemoryPostRepository(PostRepository):
    """PostRepository over a list; `fail_with` makes every call raise."""

    def __init__(self, clock=None):
        self.clock = clock or TickingClock()
        self.posts: List[Post] = []
        self.create_calls = 0
        self.fail_with: Optional[BaseException] = None

    async def create(self, image_url: str, caption: str) -> Post:
        self.create_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        now = self.clock()
        post = Post(
            id=uuid.uuid4(),
            image_url=image_url,
            caption=caption,
            created_at=now,
            updated_at=now,
        )
        self.posts.append(post)
        return post

    async def find_all_sorted_by_created_desc(self) -> List[Post]:
        if self.fail_with is not None:
            raise self.fail_with
        return sorted(self.posts, key=lambda p: p.created_at, reverse=True)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def memory_repository(clock):
    return InMemoryPostRepository(clock=clock)


@pytest.fixture
def persistence_error():
    return PersistenceFailedError(context={"error": "connection lost"})


@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite with the posts table created.

    StaticPool: every session shares the one connection, so the in-memory
    database survives between them.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def sample_image_bytes():
    """
    Minimal JPEG bytes: SOI marker + JFIF header + EOI marker.

    Not a decodable photograph; validation only looks at the declared MIME
    type and the size.
    """
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def app(object_store, session_factory):
    """
    A fresh application wired to the fake object store and the test database.

    ASGITransport does not run the lifespan, so the object store is placed on
    app.state here.
    """
    from snapshare.main import create_app

    application = create_app()
    application.state.object_store = object_store

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_db_session
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
