"""Domain errors raised by the schema and storage layers.

Each error carries the HTTP status and error code the API surfaces for it,
so the exception handlers in ``profile_manager.main`` can render them in the
standard error envelope.
"""

from typing import Any

from fastapi import status


class ProfileManagerError(Exception):
    """Base class for all Profile Manager errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: list[Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ProfileManagerError):
    """Malformed or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors) or "Validation error", details=errors)
        self.errors = errors


class NotFoundError(ProfileManagerError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ConflictError(ProfileManagerError):
    """A unique key (profileId, username) already exists."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class BackendUnavailableError(ProfileManagerError):
    """The primary store could not serve a call. Never surfaced to API callers."""

    code = "BACKEND_UNAVAILABLE"


class InternalError(ProfileManagerError):
    """Both the primary and the fallback store failed."""


# Errors that describe the request rather than the backend; these propagate
# through the storage facade instead of triggering a fallback.
DOMAIN_ERRORS = (ValidationError, NotFoundError, ConflictError)
