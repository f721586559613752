"""
SnapShare Backend: Post Ingest Pipeline
=========================================

What:  Turns a validated upload into a stored Post, or into a classified
       IngestError, and lists the feed.
How:   Composes an ObjectStore and a PostRepository passed in through the
       constructor. Both external calls are awaited in sequence because the
       insert needs the URL the upload returns.

Orchestration Flow (ingest):
    ┌────────────┐    ┌──────────────┐    ┌──────────────┐
    │  name gen  │───▶│ ObjectStore  │───▶│ Repository   │───▶ Ok(Post)
    └────────────┘    │ .upload      │    │ .create      │
                      └──────┬───────┘    └──────┬───────┘
                             ▼                   ▼
                      Err(UploadFailed)   Err(PersistenceFailed)

    Anything unexpected from either collaborator → Err(Internal).
    No step is retried; the caller resubmits the whole request.

Orphaned uploads:
    When the upload succeeds and the insert fails, the remote object stays
    behind unless `compensate_orphaned_uploads` is set, in which case the
    pipeline asks the store to delete it. Either way the result is
    PersistenceFailed.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from snapshare.exceptions import (
    ErrorKind,
    IngestError,
    PersistenceFailedError,
    SnapShareError,
    UploadFailedError,
)
from snapshare.models.post import Post
from snapshare.services.object_store import FileNameGenerator, ObjectStore, UploadResult
from snapshare.services.post_repository import PostRepository

logger = logging.getLogger(__name__)

INTERNAL_MESSAGE = "An unexpected error occurred. Please try again or contact support."


@dataclass(frozen=True)
class IngestResult:
    """Exactly one of `post` / `error` is set."""

    post: Optional[Post] = None
    error: Optional[IngestError] = None
    # Set when the error was produced from an exception, for dev-mode details
    exception: Optional[BaseException] = field(default=None, compare=False, repr=False)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ListResult:
    posts: List[Post] = field(default_factory=list)
    error: Optional[IngestError] = None
    exception: Optional[BaseException] = field(default=None, compare=False, repr=False)

    @property
    def ok(self) -> bool:
        return self.error is None


def _internal(exc: BaseException, stage: str) -> IngestError:
    return IngestError(
        kind=ErrorKind.INTERNAL,
        message=INTERNAL_MESSAGE,
        context={"stage": stage, "error_type": type(exc).__name__},
    )


class PostIngestPipeline:
    """
    Args:
        object_store:                Where image bytes go
        repository:                  Where Post records go
        name_generator:              mime type → distinguishing file name
        compensate_orphaned_uploads: Delete the upload if the insert fails
    """

    def __init__(
        self,
        object_store: ObjectStore,
        repository: PostRepository,
        name_generator: Optional[Callable[[str], str]] = None,
        compensate_orphaned_uploads: bool = False,
    ):
        self.object_store = object_store
        self.repository = repository
        self.name_generator = name_generator or FileNameGenerator()
        self.compensate_orphaned_uploads = compensate_orphaned_uploads

    async def ingest(self, content: bytes, mime_type: str, caption: str) -> IngestResult:
        """
        Upload `content`, then persist a Post pointing at it.

        Returns:
            IngestResult with the stored Post, or with an IngestError of kind
            UploadFailed, PersistenceFailed or Internal. Never raises for
            collaborator failures.
        """
        # ── Step 1: Upload ────────────────────────────────────────────────
        try:
            file_name = self.name_generator(mime_type)
            upload = await self.object_store.upload(content, file_name, mime_type)
        except UploadFailedError as e:
            logger.warning("Upload failed: %s", e.message)
            return IngestResult(error=e.to_ingest_error(), exception=e)
        except Exception as e:
            logger.error("Unexpected error during upload: %s", e, exc_info=True)
            return IngestResult(error=_internal(e, "upload"), exception=e)

        logger.debug("Uploaded %s → %s", file_name, upload.url)

        # ── Step 2: Persist ───────────────────────────────────────────────
        try:
            post = await self.repository.create(image_url=upload.url, caption=caption)
        except PersistenceFailedError as e:
            logger.warning("Persisting post failed after upload of %s: %s", file_name, e.message)
            await self._compensate(upload)
            return IngestResult(error=e.to_ingest_error(), exception=e)
        except Exception as e:
            logger.error("Unexpected error while persisting post: %s", e, exc_info=True)
            await self._compensate(upload)
            return IngestResult(error=_internal(e, "persist"), exception=e)

        logger.info("Post %s created for %s", post.id, file_name)
        return IngestResult(post=post)

    async def list(self) -> ListResult:
        """All posts, most recently created first; empty when there are none."""
        try:
            posts = await self.repository.find_all_sorted_by_created_desc()
        except SnapShareError as e:
            return ListResult(error=e.to_ingest_error(), exception=e)
        except Exception as e:
            logger.error("Unexpected error while listing posts: %s", e, exc_info=True)
            return ListResult(error=_internal(e, "list"), exception=e)
        return ListResult(posts=list(posts))

    async def _compensate(self, upload: UploadResult) -> None:
        if not self.compensate_orphaned_uploads:
            logger.warning("Orphaned upload left in object store: %s", upload.external_id)
            return
        try:
            await self.object_store.delete(upload.external_id)
            logger.info("Removed orphaned upload %s", upload.external_id)
        except Exception as e:
            # The insert failure is what the caller needs to hear about
            logger.error("Could not remove orphaned upload %s: %s", upload.external_id, e)
