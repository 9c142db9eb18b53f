"""HTTP API for trackspot.

Structure:
- routers/: endpoints (tracks under the API prefix, /health at the root)
- schemas/: pydantic response models
- dependencies.py: pulls shared services off app.state
- exception_handlers.py: domain errors -> HTTP status codes
"""

from trackspot.api.exception_handlers import register_exception_handlers
from trackspot.api.routers import api_router

__all__ = ["api_router", "register_exception_handlers"]
