"""
SnapShare Backend: Health Check Route
=======================================

What:  Liveness probe for Docker health checks and load balancers.
How:   Always answers 200 while the process can serve requests; it does not
       touch the database or the object store, so a slow CDN never marks the
       instance as dead.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from snapshare.schemas.post import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(timestamp=datetime.now(timezone.utc))
