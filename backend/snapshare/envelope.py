"""
SnapShare Backend: Response Envelopes
=======================================

What:  Builds the uniform failure envelope and holds the ErrorKind → HTTP
       status lookup table.
Who:   Route handlers (for IngestError results) and the global exception
       handlers in main.py (for anything that escapes a handler).

Success envelopes are plain Pydantic models (schemas/post.py) returned by
the handlers; only failures need a JSONResponse with a non-default status.
"""

import logging
import traceback
from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

from snapshare.config import settings
from snapshare.exceptions import ErrorKind, IngestError
from snapshare.middleware.request_id import request_id_var
from snapshare.schemas.post import ErrorEnvelope

logger = logging.getLogger(__name__)


# Pure lookup: no business logic decides a status code anywhere else
STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.MISSING_FILE: 400,
    ErrorKind.UNSUPPORTED_MEDIA_TYPE: 400,
    ErrorKind.PAYLOAD_TOO_LARGE: 400,
    ErrorKind.MISSING_CAPTION: 400,
    ErrorKind.UPLOAD_FAILED: 400,
    ErrorKind.PERSISTENCE_FAILED: 400,
    ErrorKind.INTERNAL: 500,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.METHOD_NOT_ALLOWED: 405,
    ErrorKind.INVALID_REQUEST: 400,
}


def status_for(kind: ErrorKind) -> int:
    return STATUS_BY_KIND.get(kind, 500)


def error_response(
    error: IngestError,
    status_code: Optional[int] = None,
    exc: Optional[BaseException] = None,
) -> JSONResponse:
    """
    Render an IngestError as the failure envelope.

    Args:
        error:       The classified failure
        status_code: Override for the lookup table (the list endpoint reports
                     every failure as 500)
        exc:         Original exception; its traceback is added to `details`
                     in development mode only
    """
    details: Optional[Dict[str, Any]] = None
    if settings.is_development:
        details = dict(error.context)
        if exc is not None:
            details["exception"] = type(exc).__name__
            details["stack"] = "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )

    body = ErrorEnvelope(
        message=error.message,
        error_kind=error.kind.value,
        request_id=request_id_var.get("") or None,
        details=details,
    )
    return JSONResponse(
        status_code=status_code if status_code is not None else status_for(error.kind),
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )
