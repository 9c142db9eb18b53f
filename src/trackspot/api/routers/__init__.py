"""API router initialization."""

# Hey future me, api_router gets mounted under settings.api_prefix ("/api/v1") in main.py, so the
# tracks endpoints end up at /api/v1/tracks/... The health router is NOT part of it, it lives at
# the root (/health) where container health checks expect it.

from fastapi import APIRouter

from trackspot.api.routers import health, tracks

api_router = APIRouter()
api_router.include_router(tracks.router, prefix="/tracks", tags=["Tracks"])

__all__ = ["api_router", "health", "tracks"]
