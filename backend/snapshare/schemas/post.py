"""
SnapShare Backend: Pydantic Response Schemas
==============================================

What:  The API contract: the Post representation and the success/failure
       envelopes every endpoint returns.
How:   FastAPI validates handler return values against these models and
       serializes them by alias, so clients see camelCase keys
       (`imageUrl`, `createdAt`, `errorKind`).

Envelope shapes:
    success: {"success": true,  "message": ..., "data": Post | [Post]}
    failure: {"success": false, "message": ..., "errorKind": ..., "requestId": ...}
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PostResponse(CamelModel):
    """
    What:  A stored post as returned to clients.
    Who:   Embedded in the create-post and list-posts envelopes.
    """
    id: uuid.UUID = Field(description="Unique post identifier (UUID)")
    image_url: str = Field(description="Public URL of the uploaded image")
    caption: str = Field(description="Trimmed caption text")
    created_at: datetime = Field(description="When the post was created (UTC ISO 8601)")
    updated_at: datetime = Field(description="Equal to createdAt")


class PostEnvelope(CamelModel):
    """Returned by POST /api/create-post with HTTP 201."""
    success: bool = True
    message: str = Field(default="Post created successfully")
    data: PostResponse


class PostListEnvelope(CamelModel):
    """Returned by GET /api/post, newest post first."""
    success: bool = True
    message: str = Field(default="Posts fetched successfully")
    count: int = Field(description="Number of posts in data")
    data: List[PostResponse]


class ErrorEnvelope(CamelModel):
    """
    What:  Uniform failure body for every endpoint.

    Fields:
        error_kind: Machine-readable ErrorKind value (e.g. "MissingCaption")
        message:    Human-readable description for display to users
        request_id: Correlation ID for finding this error in server logs
        details:    Exception context; only present in development mode
    """
    success: bool = False
    message: str
    error_kind: str = Field(description="Machine-readable error classification")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
    details: Optional[Dict[str, Any]] = Field(default=None)


class HealthResponse(CamelModel):
    """Returned by GET /health."""
    success: bool = True
    message: str = Field(default="Server is healthy and running")
    timestamp: datetime = Field(description="Server time (UTC ISO 8601)")
