"""FastAPI application entry point.

    uvicorn trackspot.main:app
"""

import logging

import uvicorn
from fastapi import FastAPI

from trackspot.api import api_router, register_exception_handlers
from trackspot.api.routers import health
from trackspot.config import Settings, get_settings
from trackspot.infrastructure.lifecycle import lifespan
from trackspot.infrastructure.observability import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


# Hey future me, tests call create_app(Settings(...)) with a tmp database and storage dir. The
# settings go on app.state BEFORE lifespan runs, and lifespan picks them up from there instead of
# the cached get_settings().
def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use, defaults to get_settings()

    Returns:
        Configured application (resources are created at startup by lifespan)
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="TrackSpot",
        description="Track metadata and cover art by ISRC, fetched lazily from Spotify",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.api_prefix)
    app.include_router(health.router, tags=["Health"])

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run("trackspot.main:app", host="0.0.0.0", port=8000)  # nosec B104
