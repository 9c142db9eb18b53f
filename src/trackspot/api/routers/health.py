# Hey future me - this router is for Docker health checks and a quick look at the caches.
#
#   docker: HEALTHCHECK CMD curl -f http://localhost:8000/health || exit 1
#
# It NEVER talks to Spotify. "database" is a SELECT 1, "caches" are the hit/miss counters of
# the two upstream caches, "db_locks" shows how often SQLite writes had to be retried.
"""Health check endpoint."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from trackspot.api.dependencies import get_database
from trackspot.infrastructure.persistence import Database, DatabaseLockMetrics

router = APIRouter()


class HealthStatus(BaseModel):
    """Health check response."""

    status: str = Field(description="ok or degraded")
    app: str = Field(description="Application name")
    timestamp: str = Field(description="ISO timestamp of health check")
    database: bool = Field(description="Database reachable")
    caches: dict[str, Any] = Field(default_factory=dict, description="Upstream cache stats")
    db_locks: dict[str, Any] = Field(default_factory=dict, description="SQLite lock retries")


@router.get("/health", response_model=HealthStatus)
async def health(
    request: Request,
    db: Database | None = Depends(get_database),
) -> HealthStatus:
    """Report liveness plus database and cache state."""
    database_ok = await db.ping() if db is not None else False

    service = getattr(request.app.state, "track_service", None)
    caches = service.get_cache_stats() if service is not None else {}

    settings = getattr(request.app.state, "settings", None)
    return HealthStatus(
        status="ok" if database_ok else "degraded",
        app=settings.app_name if settings is not None else "trackspot",
        timestamp=datetime.now(UTC).isoformat(),
        database=database_ok,
        caches=caches,
        db_locks=DatabaseLockMetrics.get_instance().get_stats(),
    )
