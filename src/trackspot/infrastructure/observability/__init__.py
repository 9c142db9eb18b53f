"""Observability infrastructure for structured logging."""

from trackspot.infrastructure.observability.logging import (
    configure_logging,
    get_correlation_id,
    redact_secrets,
    set_correlation_id,
)
from trackspot.infrastructure.observability.middleware import RequestLoggingMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "configure_logging",
    "get_correlation_id",
    "redact_secrets",
    "set_correlation_id",
]
