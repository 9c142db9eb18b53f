"""Dependency injection for API endpoints."""

import logging
from typing import cast

from fastapi import Request

from trackspot.application.services import TrackService
from trackspot.domain.exceptions import ConfigurationError
from trackspot.infrastructure.persistence.database import Database

logger = logging.getLogger(__name__)


# Hey future me, the TrackService is built ONCE in lifespan() and parked on app.state. If it's
# missing, startup failed half-way - that's a ConfigurationError (503), not a 500. Tests swap it
# out with app.dependency_overrides[get_track_service].
def get_track_service(request: Request) -> TrackService:
    """Get the shared TrackService from app state.

    Raises:
        ConfigurationError: Service not initialized
    """
    service = getattr(request.app.state, "track_service", None)
    if service is None:
        raise ConfigurationError("Track service not initialized")
    return cast(TrackService, service)


def get_database(request: Request) -> Database | None:
    """Get the Database from app state, None before startup."""
    return getattr(request.app.state, "db", None)
