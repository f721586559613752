"""
SnapShare Backend: Post Route Handlers
========================================

What:  POST /api/create-post (validate → upload → persist) and GET /api/post.
How:   Reads the multipart form, hands it to IngestValidator, then to
       PostIngestPipeline. Failures come back as IngestError values and are
       rendered with the failure envelope; the status comes from the
       ErrorKind lookup table.

Request Flow (create):
    1. Client sends multipart/form-data with `image` (file) and `caption`
    2. At most MAX_UPLOAD_SIZE + 1 bytes are read into memory
    3. IngestValidator rejects bad input with no side effects
    4. PostIngestPipeline uploads the bytes, then inserts the Post
    5. 201 Created with the Post envelope
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from snapshare.dependencies import get_pipeline, get_validator
from snapshare.envelope import error_response
from snapshare.schemas.post import (
    ErrorEnvelope,
    PostEnvelope,
    PostListEnvelope,
    PostResponse,
)
from snapshare.services.pipeline import PostIngestPipeline
from snapshare.services.validation import IncomingFile, IngestValidator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Posts"])


async def read_upload(image: Optional[UploadFile], limit: int) -> Optional[IncomingFile]:
    """
    Read an uploaded file, bounded to `limit` bytes.

    An empty file part without a filename (what browsers send for an
    untouched file input) counts as no file at all.
    """
    if image is None:
        return None
    try:
        content = await image.read(limit)
    finally:
        await image.close()
    if not image.filename and not content:
        return None
    return IncomingFile(content_type=image.content_type, content=content, filename=image.filename)


@router.post(
    "/create-post",
    status_code=201,
    response_model=PostEnvelope,
    responses={
        201: {"description": "Post created", "model": PostEnvelope},
        400: {"description": "Invalid input, or upload/persistence failed", "model": ErrorEnvelope},
        500: {"description": "Unexpected server error", "model": ErrorEnvelope},
    },
    summary="Create a post from an image and a caption",
    description=(
        "Upload an image (JPEG, PNG, GIF or WebP, max 5MB by default) with a caption. "
        "The image is stored in object storage and a post pointing at its public URL is saved."
    ),
)
async def create_post(
    image: Optional[UploadFile] = File(default=None, description="Image file to share"),
    caption: Optional[str] = Form(default=None, description="Caption text (required)"),
    validator: IngestValidator = Depends(get_validator),
    pipeline: PostIngestPipeline = Depends(get_pipeline),
):
    # One byte past the limit is enough to detect an oversized file
    incoming = await read_upload(image, validator.max_upload_size + 1)

    validation = validator.validate(incoming, caption)
    if not validation.ok:
        logger.info("Create-post rejected: %s", validation.error.kind.value)
        return error_response(validation.error)

    upload = validation.upload
    result = await pipeline.ingest(upload.content, upload.mime_type, upload.caption)
    if not result.ok:
        return error_response(result.error, exc=result.exception)

    return PostEnvelope(data=PostResponse.model_validate(result.post))


@router.get(
    "/post",
    response_model=PostListEnvelope,
    responses={
        200: {"description": "All posts, newest first", "model": PostListEnvelope},
        500: {"description": "Repository failure", "model": ErrorEnvelope},
    },
    summary="List all posts",
)
async def list_posts(pipeline: PostIngestPipeline = Depends(get_pipeline)):
    result = await pipeline.list()
    if not result.ok:
        return error_response(result.error, status_code=500, exc=result.exception)

    posts = [PostResponse.model_validate(post) for post in result.posts]
    return PostListEnvelope(count=len(posts), data=posts)
