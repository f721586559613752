"""
SnapShare Backend: Dependency Wiring
======================================

What:  FastAPI dependencies that assemble the validator, collaborators and
       pipeline for each request, plus the factory that builds the object
       store from settings at startup.
How:   The object store lives on `app.state` (created and closed by the
       lifespan in main.py). The repository wraps the request's database
       session. Tests replace any of these through `app.dependency_overrides`.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from snapshare.config import Settings, settings
from snapshare.database import get_db_session
from snapshare.services.imagekit_store import ImageKitObjectStore
from snapshare.services.local_store import LocalObjectStore
from snapshare.services.object_store import ObjectStore
from snapshare.services.pipeline import PostIngestPipeline
from snapshare.services.post_repository import PostRepository, SqlAlchemyPostRepository
from snapshare.services.validation import IngestValidator


def build_object_store(config: Settings) -> ObjectStore:
    """Instantiate the configured ObjectStore backend."""
    if config.object_store_backend == "local":
        return LocalObjectStore(
            storage_root=config.storage_root,
            public_base_url=config.public_base_url,
        )
    return ImageKitObjectStore(
        private_key=config.imagekit_private_key,
        upload_url=config.imagekit_upload_url,
        api_url=config.imagekit_api_url,
        folder=config.imagekit_folder,
        timeout=config.object_store_timeout,
    )


def get_validator() -> IngestValidator:
    return IngestValidator(
        max_upload_size=settings.max_upload_size,
        allowed_mime_types=settings.allowed_mime_types_set,
    )


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store


def get_post_repository(db: AsyncSession = Depends(get_db_session)) -> PostRepository:
    return SqlAlchemyPostRepository(db)


def get_pipeline(
    object_store: ObjectStore = Depends(get_object_store),
    repository: PostRepository = Depends(get_post_repository),
) -> PostIngestPipeline:
    return PostIngestPipeline(
        object_store=object_store,
        repository=repository,
        compensate_orphaned_uploads=settings.compensate_orphaned_uploads,
    )
