"""
SnapShare Backend: Error Taxonomy
===================================

What:  Error kinds, the exception hierarchy raised by collaborators, and the
       typed `IngestError` value returned by the validator and the pipeline.
How:   Collaborators (object stores, repository) raise SnapShareError
       subclasses. The pipeline catches them at its boundary and returns an
       IngestError carrying the matching ErrorKind. Routes map the kind to an
       HTTP status through `envelope.STATUS_BY_KIND`.

Exception Hierarchy:
    SnapShareError (base)          kind
    ├── UploadFailedError          UploadFailed
    ├── PersistenceFailedError     PersistenceFailed
    └── NotFoundError              NotFound

Input problems (MissingFile, UnsupportedMediaType, PayloadTooLarge,
MissingCaption) never become exceptions: IngestValidator returns them
directly as IngestError values.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Machine-readable failure classification, sent to clients as `errorKind`."""

    # Client input; the caller can resubmit corrected input
    MISSING_FILE = "MissingFile"
    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaType"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"
    MISSING_CAPTION = "MissingCaption"

    # Collaborator failures; may be transient
    UPLOAD_FAILED = "UploadFailed"
    PERSISTENCE_FAILED = "PersistenceFailed"

    INTERNAL = "Internal"

    # Routing surface only (unknown route, missing local file, wrong method,
    # malformed request outside the two form fields)
    NOT_FOUND = "NotFound"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    INVALID_REQUEST = "InvalidRequest"


@dataclass(frozen=True)
class IngestError:
    """
    A classified failure, returned (not raised) by the validator and pipeline.

    Attributes:
        kind:     Which ErrorKind this is
        message:  Human-readable, safe to return in the API response
        context:  Debug details; only exposed in development mode
    """

    kind: ErrorKind
    message: str
    context: Dict[str, Any] = field(default_factory=dict)


class SnapShareError(Exception):
    """
    Base exception for all SnapShare application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to the client
                  outside development mode)
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def to_ingest_error(self) -> IngestError:
        return IngestError(kind=self.kind, message=self.message, context=dict(self.context))


class UploadFailedError(SnapShareError):
    """
    Raised by an ObjectStore when the image could not be stored.

    When:    Network error, timeout, auth rejection or quota error from the
             CDN; disk errors for the local store.
    Effect:  The pipeline stops before persistence.
    """

    kind = ErrorKind.UPLOAD_FAILED

    def __init__(
        self,
        message: str = "Failed to upload image to storage",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PersistenceFailedError(SnapShareError):
    """
    Raised by a PostRepository when a write or query fails.

    When:    Constraint violation, connection lost mid-query, etc.
    Security Note:
        The message is generic. The driver error (SQL, constraint names) goes
        into `context`, which is only logged server-side.
    """

    kind = ErrorKind.PERSISTENCE_FAILED

    def __init__(
        self,
        message: str = "Failed to save the post. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SnapShareError):
    """Raised when a requested route or stored file does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
