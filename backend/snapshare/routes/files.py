"""
SnapShare Backend: Stored File Route
======================================

What:  Serves images written by LocalObjectStore at the URLs it hands out.
How:   Resolves the path through the store (which refuses anything outside
       STORAGE_ROOT) and streams it with FileResponse.
When:  Only meaningful with OBJECT_STORE_BACKEND=local; with a CDN backend
       every path is a 404.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from snapshare.dependencies import get_object_store
from snapshare.exceptions import NotFoundError
from snapshare.schemas.post import ErrorEnvelope
from snapshare.services.local_store import LocalObjectStore
from snapshare.services.object_store import ObjectStore

router = APIRouter(prefix="/api", tags=["Files"])


@router.get(
    "/files/{file_path:path}",
    summary="Serve a locally stored image",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found", "model": ErrorEnvelope},
    },
)
async def serve_file(
    file_path: str,
    object_store: ObjectStore = Depends(get_object_store),
) -> FileResponse:
    if not isinstance(object_store, LocalObjectStore):
        raise NotFoundError(resource="file", resource_id=file_path)

    full_path = object_store.resolve(file_path)
    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
