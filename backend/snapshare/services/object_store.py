"""
SnapShare Backend: Object Store Interface
===========================================

What:  Abstract contract for the external storage that holds uploaded images,
       plus the file-name generator used to name uploads.
How:   Concrete stores (ImageKitObjectStore, LocalObjectStore) implement
       upload/delete/aclose. The pipeline receives one through its
       constructor and never imports a concrete class.

Name generation:
    image_<epoch milliseconds>_<8 random hex chars><ext>
    The millisecond token orders names in time; the random suffix keeps two
    uploads in the same millisecond apart. The store does no collision
    handling of its own.
"""

import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict

# Extension per accepted MIME type; anything else falls back to ".bin"
EXTENSION_BY_MIME: Dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


@dataclass(frozen=True)
class UploadResult:
    """What a store hands back after an upload; consumed by the pipeline."""

    url: str
    external_id: str


class FileNameGenerator:
    """
    Produces distinguishing upload names.

    Args:
        clock:  Returns epoch seconds; injectable for tests
        prefix: Leading part of every name
    """

    def __init__(self, clock: Callable[[], float] = time.time, prefix: str = "image"):
        self.clock = clock
        self.prefix = prefix

    def __call__(self, mime_type: str) -> str:
        millis = int(self.clock() * 1000)
        ext = EXTENSION_BY_MIME.get(mime_type, ".bin")
        return f"{self.prefix}_{millis}_{secrets.token_hex(4)}{ext}"


class ObjectStore(ABC):
    """
    External binary storage returning public URLs.

    Contract:
        - upload() stores the bytes and returns a resolvable URL
        - every implementation-specific failure is raised as UploadFailedError
        - delete() is best-effort cleanup used by the compensating step
        - aclose() releases network clients; called once at shutdown
    """

    @abstractmethod
    async def upload(self, content: bytes, file_name: str, content_type: str) -> UploadResult:
        """
        Store `content` under `file_name`.

        Raises:
            UploadFailedError: transport, auth, quota or disk failure
        """
        ...

    @abstractmethod
    async def delete(self, external_id: str) -> None:
        """Remove a previously uploaded object by its external ID."""
        ...

    async def aclose(self) -> None:
        return None
