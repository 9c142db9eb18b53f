"""Custom exception handlers for FastAPI application.

This module registers global exception handlers that convert domain exceptions
and request validation errors into HTTP responses with the right status codes.

Hey future me - 4xx answers carry the exception's message (it's about the
caller's input, they should see it). 5xx answers carry a FIXED generic text per
error kind. The real exception message may contain upstream URLs, response
bodies or worse, so it only goes to the server log.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from trackspot.domain.exceptions import DomainException, ErrorKind

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal server error occurred. Please try again later."

# kind -> (status code, generic message or None to expose exc.message)
ERROR_KIND_RESPONSES: dict[ErrorKind, tuple[int, str | None]] = {
    ErrorKind.VALIDATION: (status.HTTP_400_BAD_REQUEST, None),
    ErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, None),
    ErrorKind.AUTH: (
        status.HTTP_502_BAD_GATEWAY,
        "Could not authenticate with the upstream music catalog.",
    ),
    ErrorKind.EXTERNAL_SERVICE: (
        status.HTTP_502_BAD_GATEWAY,
        "The upstream music catalog returned an error. Please try again later.",
    ),
    ErrorKind.DOWNLOAD: (
        status.HTTP_502_BAD_GATEWAY,
        "The cover image could not be downloaded. Please try again later.",
    ),
    ErrorKind.STORAGE: (status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE),
    ErrorKind.CONFIGURATION: (
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "The service is not configured correctly.",
    ),
}


def _describe_validation_errors(errors: list[dict[str, Any]]) -> str:
    parts = []
    for error in errors:
        location = ".".join(
            str(part) for part in error.get("loc", ()) if part not in ("query", "path")
        )
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain, validation, HTTP and unexpected exceptions.

    Args:
        app: FastAPI application instance
    """

    # One handler for the whole DomainException tree - the kind picks the status code
    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request, exc: DomainException
    ) -> JSONResponse:
        status_code, generic_message = ERROR_KIND_RESPONSES.get(
            exc.kind, (status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)
        )
        extra = {
            "path": request.url.path,
            "error_kind": str(exc.kind),
            "error_type": type(exc).__name__,
        }

        if status_code >= 500:
            logger.error(
                "%s at %s: %s",
                type(exc).__name__,
                request.url.path,
                exc.message,
                exc_info=exc.__cause__ is not None,
                extra=extra,
            )
        else:
            logger.info(
                "%s at %s: %s",
                type(exc).__name__,
                request.url.path,
                exc.message,
                extra=extra,
            )

        return JSONResponse(
            status_code=status_code,
            content={"detail": generic_message or exc.message, "kind": str(exc.kind)},
        )

    # FastAPI would answer 422 here. A missing or malformed ?isrc= is a plain bad request for us.
    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        detail = _describe_validation_errors(list(exc.errors()))
        logger.warning(
            "Request validation error at %s: %s",
            request.url.path,
            detail,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": detail, "kind": str(ErrorKind.VALIDATION)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "HTTP %d at %s: %s",
                exc.status_code,
                request.url.path,
                exc.detail,
                extra={"path": request.url.path, "status_code": exc.status_code},
            )
        else:
            logger.debug(
                "HTTP %d at %s: %s",
                exc.status_code,
                request.url.path,
                exc.detail,
                extra={"path": request.url.path, "status_code": exc.status_code},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    # Last resort. Full traceback goes to the log, the client gets the generic text only.
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "Unhandled error at %s",
            request.url.path,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": INTERNAL_ERROR_MESSAGE},
        )
