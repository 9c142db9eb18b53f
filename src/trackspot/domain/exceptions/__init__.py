"""Domain exceptions."""

from enum import StrEnum
from typing import Any, ClassVar


class ErrorKind(StrEnum):
    """Closed set of failure kinds.

    Hey future me - every DomainException subclass pins exactly ONE kind. The API
    layer maps kinds to status codes (see api/exception_handlers.py), so adding a
    new exception means picking an existing kind or extending this enum AND the
    handler table. StrEnum so kinds log/serialize as plain strings.
    """

    AUTH = "auth"
    NOT_FOUND = "not_found"
    DOWNLOAD = "download"
    STORAGE = "storage"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    EXTERNAL_SERVICE = "external_service"


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    kind: ClassVar[ErrorKind]

    # Hey future me, we store message as an attribute so code can inspect it without parsing str(exception).
    # This is your base class - DON'T raise it directly! Always use a specific subclass so callers can
    # catch precisely and the API layer can find the kind.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed (e.g. malformed ISRC).

    HTTP Status: 400
    """

    kind = ErrorKind.VALIDATION


class NotFoundError(DomainException):
    """Something we looked for does not exist.

    Covers both sides: the catalog has no match for a track/album/image, or the
    local store has no record for a key.

    HTTP Status: 404
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self, entity_type: str, entity_id: Any, message: str | None = None
    ) -> None:
        super().__init__(message or f"{entity_type} not found: {entity_id}")
        self.entity_type = entity_type
        self.entity_id = entity_id


class AuthError(DomainException):
    """Client-credentials token exchange failed or returned garbage.

    Not retried automatically - the caller decides whether to retry the whole
    operation.

    HTTP Status: 502 (generic message)
    """

    kind = ErrorKind.AUTH

    def __init__(
        self,
        message: str = "Spotify token exchange failed",
        error_code: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code  # e.g., "invalid_client"
        self.http_status = http_status  # e.g., 400, 401


class DownloadError(DomainException):
    """Image download failed after the retry budget, or on a non-retryable error.

    HTTP Status: 502 (generic message)
    """

    kind = ErrorKind.DOWNLOAD

    def __init__(self, url: str, attempts: int, reason: str | None = None) -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(f"Download of {url} failed after {attempts} attempt(s){detail}")
        self.url = url
        self.attempts = attempts


class StorageError(DomainException):
    """Blob store or persistent store I/O failed.

    HTTP Status: 500 (generic message)
    """

    kind = ErrorKind.STORAGE


class DuplicateEntityError(StorageError):
    """The persistent store rejected a write because the key already exists.

    Hey future me - this is the ONE storage error that is not terminal for
    TrackService.get_or_create(): a concurrent request won the race, so we
    re-read and return its record instead of failing.
    """

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} already exists")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ExternalServiceError(DomainException):
    """Spotify returned an error or a payload we could not parse.

    HTTP Status: 502 (generic message)
    """

    kind = ErrorKind.EXTERNAL_SERVICE


class ConfigurationError(DomainException):
    """Application misconfiguration (missing credentials, blank storage path).

    HTTP Status: 503 (generic message)
    """

    kind = ErrorKind.CONFIGURATION


__all__ = [
    "AuthError",
    "ConfigurationError",
    "DomainException",
    "DownloadError",
    "DuplicateEntityError",
    "ErrorKind",
    "ExternalServiceError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
]
