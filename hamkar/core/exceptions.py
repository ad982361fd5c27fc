"""Application error taxonomy.

Services raise these; the handlers in ``hamkar.core.handlers`` turn them into
the ``{success: false, message}`` envelope.
"""

from typing import List, Optional

from fastapi import status


class AppError(Exception):
    """Base class for errors that map to a client-facing status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"

    # Reasons distinguish token failures for clients that want to re-login.
    INVALID_TOKEN = "invalid_token"
    TOKEN_EXPIRED = "token_expired"
    MISSING_TOKEN = "missing_token"
    INVALID_CREDENTIALS = "invalid_credentials"

    def __init__(self, message: Optional[str] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InvalidStateError(AppError):
    """Illegal lifecycle transition or failed precondition."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation not allowed in the current state"


class PayloadTooLargeError(AppError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = "Payload too large"
