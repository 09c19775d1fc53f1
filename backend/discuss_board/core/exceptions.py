"""Domain error taxonomy raised by the service layer.

Each error kind maps to exactly one HTTP status in
``discuss_board.core.error_handlers``; callers can tell kinds apart by type
rather than by matching on message text.
"""

from fastapi import status


class DomainError(Exception):
    """Base class for expected, client-visible failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, *, details: list[dict] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(DomainError):
    """Malformed input, bad enumerated value, or path/body identifier mismatch."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class NotFoundError(DomainError):
    """Target row (or a required parent) is absent or soft-deleted."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ForbiddenError(DomainError):
    """Principal lacks ownership or role for the requested operation."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class ConflictError(DomainError):
    """Duplicate compound key or a disallowed state transition."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class UnauthenticatedError(DomainError):
    """No valid principal could be resolved from the request."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"
