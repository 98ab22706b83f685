from typing import Dict, Optional
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


def error_response(
    message: str,
    field_errors: Dict[str, str],
    code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
) -> HTTPException:
    """Return an HTTPException with a consistent structure and log details."""
    logger.error("%s %s", message, field_errors)
    detail = {"message": message, "field_errors": field_errors}
    return HTTPException(status_code=code, detail=detail)


class DomainError(Exception):
    """Base class for errors raised by the service layer.

    Each subclass maps onto one HTTP status; the app renders them with the
    same ``{"message", "field_errors"}`` body as :func:`error_response`.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.field_errors = field_errors or {}

    def to_detail(self) -> dict:
        return {"message": self.message, "field_errors": self.field_errors}


class ValidationError(DomainError):
    """Malformed input, raised before any I/O."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(DomainError):
    """Missing session."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AuthError):
    """Authenticated, but the role or artist scope does not allow the action."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT


class EmptyStateError(DomainError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class PersistenceError(DomainError):
    """Wraps a database or storage failure; the message is passed through."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
