"""
SnapShare Backend: Local Disk Object Store
============================================

What:  ObjectStore that writes uploads below STORAGE_ROOT and serves them
       back through GET /api/files/{path}.
How:   Async writes with aiofiles into date-organized directories; the
       returned URL is PUBLIC_BASE_URL + /api/files/ + relative path, and the
       relative path doubles as the external ID.
When:  OBJECT_STORE_BACKEND=local, e.g. development without CDN credentials.

Directory Structure:
    storage/
    └── 2024/
        └── 01/
            └── 15/
                ├── image_1705312800000_1a2b3c4d.jpg
                └── image_1705312801234_5e6f7a8b.png
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

import aiofiles
import aiofiles.os

from snapshare.exceptions import NotFoundError, UploadFailedError
from snapshare.services.object_store import ObjectStore, UploadResult

logger = logging.getLogger(__name__)

FILES_ROUTE_PREFIX = "/api/files"


class LocalObjectStore(ObjectStore):
    """
    Args:
        storage_root:    Directory that holds uploaded files
        public_base_url: Scheme+host clients use to reach this service
    """

    def __init__(self, storage_root: str, public_base_url: str):
        self.storage_root = Path(storage_root).resolve()
        self.public_base_url = public_base_url.rstrip("/")
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalObjectStore initialized with storage_root=%s", self.storage_root)

    def _relative_path(self, file_name: str) -> str:
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        # Only the final component of the supplied name is used
        return f"{date_dir}/{Path(file_name).name}"

    def resolve(self, relative_path: str) -> Path:
        """
        Map a relative path from a URL back onto disk.

        Raises:
            NotFoundError: path escapes storage_root or does not exist
        """
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root) or not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        return full_path

    async def upload(self, content: bytes, file_name: str, content_type: str) -> UploadResult:
        relative_path = self._relative_path(file_name)
        absolute_path = self.storage_root / relative_path

        try:
            await aiofiles.os.makedirs(absolute_path.parent, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, e)
            raise UploadFailedError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": relative_path, "os_error": str(e)},
            ) from e

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return UploadResult(
            url=f"{self.public_base_url}{FILES_ROUTE_PREFIX}/{relative_path}",
            external_id=relative_path,
        )

    async def delete(self, external_id: str) -> None:
        try:
            path = self.resolve(external_id)
        except NotFoundError:
            logger.debug("Delete: file already gone: %s", external_id)
            return
        try:
            os.remove(path)
        except OSError as e:
            raise UploadFailedError(
                message="Failed to delete stored image",
                context={"path": external_id, "os_error": str(e)},
            ) from e
        logger.info("Deleted stored file: %s", external_id)
