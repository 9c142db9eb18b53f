"""Middleware for observability: request/response logging."""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from trackspot.infrastructure.observability.logging import (
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


# Hey future me, this middleware logs ONE line per request (on completion) and makes sure every
# log line in between carries the same correlation_id. Clients may send X-Correlation-ID to
# stitch our logs to theirs; otherwise we mint one and echo it back in the response header.
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses."""

    def __init__(self, app: ASGIApp, log_query_params: bool = True) -> None:
        """Initialize middleware.

        Args:
            app: ASGI application
            log_query_params: Whether to include query params in the log extra
        """
        super().__init__(app)
        self.log_query_params = log_query_params

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request and log details."""
        set_correlation_id(request.headers.get(CORRELATION_HEADER))

        method = request.method
        path = request.url.path
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.exception(
                "Request failed: %s %s",
                method,
                path,
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": int(duration_ms),
                    "error_type": type(e).__name__,
                },
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        status_emoji = "✓" if response.status_code < 400 else "✗"
        extra: dict[str, object] = {
            "method": method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": int(duration_ms),
        }
        if self.log_query_params:
            extra["query_params"] = str(request.query_params)
        logger.info(
            "%s %s %s → %d (%.0fms)",
            status_emoji,
            method,
            path,
            response.status_code,
            duration_ms,
            extra=extra,
        )

        response.headers[CORRELATION_HEADER] = get_correlation_id()
        return response
