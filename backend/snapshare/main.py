"""
SnapShare Backend: FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn imports `snapshare.main:app`; tests call create_app() for a
       fresh instance.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                       FastAPI App                       │
    │                                                         │
    │  Middleware:  Request ID → Access Log → GZip → CORS     │
    │                                                         │
    │  Routes:                                                │
    │  ┌──────────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ POST create-post │ │ GET /api/post│ │ GET /health │  │
    │  └──────────────────┘ └──────────────┘ └─────────────┘  │
    │                                                         │
    │  Exception handlers → failure envelope                  │
    │  SnapShareError→kind table │ HTTP errors │ *→Internal   │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → build object store → app.state
    Shutdown: close object store client → dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from snapshare import __version__
from snapshare.config import settings
from snapshare.database import dispose_engine
from snapshare.dependencies import build_object_store
from snapshare.envelope import error_response
from snapshare.exceptions import ErrorKind, IngestError, SnapShareError
from snapshare.middleware.logging import RequestLoggingMiddleware
from snapshare.middleware.request_id import RequestIDMiddleware, request_id_var
from snapshare.routes import files, health, posts
from snapshare.services.validation import MISSING_CAPTION_MESSAGE, MISSING_FILE_MESSAGE

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] snapshare.services.pipeline: Post ... created
    Called once, first thing in the lifespan.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("SnapShare Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health stays up and uploads fail with UploadFailed
        logger.error("Configuration error: %s", e)

    app.state.object_store = build_object_store(settings)
    logger.info("Object store backend: %s", settings.object_store_backend)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SnapShare Backend shutting down...")
    await app.state.object_store.aclose()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Render everything that escapes a route handler as the failure envelope.

    Handler map:
        SnapShareError          → status from STATUS_BY_KIND
        404 / 405 / other HTTP  → NotFound / MethodNotAllowed / Internal, same status
        `image` not a file      → MissingFile (400)
        `caption` not text      → MissingCaption (400)
        other bad input         → InvalidRequest (400)
        Exception (fallback)    → Internal envelope (500)
    """

    @app.exception_handler(SnapShareError)
    async def handle_app_error(request: Request, exc: SnapShareError):
        rid = request_id_var.get("")
        logger.warning("[%s] %s: %s", rid, exc.kind.value, exc.message)
        return error_response(exc.to_ingest_error(), exc=exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            error = IngestError(
                kind=ErrorKind.NOT_FOUND,
                message=f"Route not found: {request.method} {request.url.path}",
            )
        elif exc.status_code == 405:
            error = IngestError(
                kind=ErrorKind.METHOD_NOT_ALLOWED,
                message=f"Method not allowed: {request.method} {request.url.path}",
            )
        else:
            error = IngestError(kind=ErrorKind.INTERNAL, message=str(exc.detail))
        response = error_response(error, status_code=exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        # Only field names and messages reach the client, never the raw input
        fields = [
            ".".join(str(part) for part in error.get("loc", ())[1:]) or "request"
            for error in exc.errors()
        ]
        # A text value in `image` means no file; a file part in `caption` means no caption
        if "image" in fields:
            error = IngestError(ErrorKind.MISSING_FILE, MISSING_FILE_MESSAGE, {"field": "image"})
        elif "caption" in fields:
            error = IngestError(
                ErrorKind.MISSING_CAPTION, MISSING_CAPTION_MESSAGE, {"field": "caption"}
            )
        else:
            error = IngestError(
                kind=ErrorKind.INVALID_REQUEST,
                message=f"Invalid request: check {', '.join(sorted(set(fields)))}",
                context={"errors": [e.get("msg", "") for e in exc.errors()]},
            )
        return error_response(error)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", exc, exc_info=True)
        return error_response(
            IngestError(
                kind=ErrorKind.INTERNAL,
                message="An unexpected error occurred. Please try again or contact support.",
            ),
            exc=exc,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="SnapShare API",
        description="Share an image with a caption; browse the feed newest-first.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → GZip → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(posts.router)
    app.include_router(files.router)
    app.include_router(health.router)

    return app


app = create_app()
