"""
SnapShare Backend: Ingest Validator
=====================================

What:  Gate-keeps a create-post request before any side effect happens.
How:   Runs four checks in a fixed order and stops at the first failure:

           1. file attached?               → MissingFile
           2. declared MIME type allowed?  → UnsupportedMediaType
           3. size ≤ max_upload_size?      → PayloadTooLarge
           4. caption non-empty (trimmed)? → MissingCaption

       The outcome is a ValidationResult holding either a ValidatedUpload or
       an IngestError. Nothing is raised, written or uploaded here.
Who:   Called by the create-post route; the pipeline only ever sees input
       that passed.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from snapshare.exceptions import ErrorKind, IngestError

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_MIME_TYPES: FrozenSet[str] = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/webp"}
)
DEFAULT_MAX_UPLOAD_SIZE = 5 * 1024 * 1024

MISSING_FILE_MESSAGE = "Image file is required. Please upload an image."
MISSING_CAPTION_MESSAGE = "Caption is required. Please enter a caption."


@dataclass(frozen=True)
class IncomingFile:
    """The attachment as received: declared MIME type, bytes and client filename."""

    content_type: Optional[str]
    content: bytes
    filename: Optional[str] = None


@dataclass(frozen=True)
class ValidatedUpload:
    caption: str
    content: bytes
    mime_type: str


@dataclass(frozen=True)
class ValidationResult:
    """Exactly one of `upload` / `error` is set."""

    upload: Optional[ValidatedUpload] = None
    error: Optional[IngestError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def accept(cls, upload: ValidatedUpload) -> "ValidationResult":
        return cls(upload=upload)

    @classmethod
    def reject(cls, kind: ErrorKind, message: str, **context) -> "ValidationResult":
        return cls(error=IngestError(kind=kind, message=message, context=context))


def normalize_mime_type(content_type: Optional[str]) -> str:
    """'Image/JPEG; charset=binary' → 'image/jpeg'."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


class IngestValidator:
    """
    Pure validation of create-post input against configured limits.

    Args:
        max_upload_size:    Largest accepted file in bytes (inclusive)
        allowed_mime_types: Accepted declared MIME types
    """

    def __init__(
        self,
        max_upload_size: int = DEFAULT_MAX_UPLOAD_SIZE,
        allowed_mime_types: Iterable[str] = DEFAULT_ALLOWED_MIME_TYPES,
    ):
        self.max_upload_size = max_upload_size
        self.allowed_mime_types = frozenset(normalize_mime_type(m) for m in allowed_mime_types)

    def validate(
        self, file: Optional[IncomingFile], caption: Optional[str]
    ) -> ValidationResult:
        if file is None:
            return ValidationResult.reject(
                ErrorKind.MISSING_FILE,
                MISSING_FILE_MESSAGE,
                field="image",
            )

        mime_type = normalize_mime_type(file.content_type)
        if mime_type not in self.allowed_mime_types:
            return ValidationResult.reject(
                ErrorKind.UNSUPPORTED_MEDIA_TYPE,
                (
                    f"File type '{mime_type or 'unknown'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(self.allowed_mime_types))}"
                ),
                field="image",
                declared_mime=mime_type,
            )

        size = len(file.content)
        if size > self.max_upload_size:
            max_mb = self.max_upload_size / (1024 * 1024)
            return ValidationResult.reject(
                ErrorKind.PAYLOAD_TOO_LARGE,
                f"File is too large. Maximum size is {max_mb:g}MB.",
                field="image",
                max_size=self.max_upload_size,
            )

        trimmed = caption.strip() if caption is not None else ""
        if not trimmed:
            return ValidationResult.reject(
                ErrorKind.MISSING_CAPTION,
                MISSING_CAPTION_MESSAGE,
                field="caption",
            )

        logger.debug("Upload accepted: %s, %d bytes", mime_type, size)
        return ValidationResult.accept(
            ValidatedUpload(caption=trimmed, content=file.content, mime_type=mime_type)
        )
