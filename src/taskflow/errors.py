"""Application error taxonomy.

Every business-rule failure raised by the service layer is an AppError.
The HTTP layer translates them into the response envelope in one place
(see taskflow.api.errors), so handlers never build error responses.
"""

from collections.abc import Mapping
from http import HTTPStatus
from typing import Optional


class AppError(Exception):
    """Base class for errors that map to a client-visible HTTP status."""

    status: HTTPStatus = HTTPStatus.BAD_REQUEST
    message: str = "Bad request"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ):
        self.message = message or self.message
        self.headers = dict(headers) if headers else None
        super().__init__(self.message)


class ValidationError(AppError):
    status = HTTPStatus.BAD_REQUEST
    message = "Validation failed"


class Unauthenticated(AppError):
    status = HTTPStatus.UNAUTHORIZED
    message = "Authentication required"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentials(Unauthenticated):
    """Same response for unknown email and wrong password."""

    message = "Invalid credentials"


class Forbidden(AppError):
    status = HTTPStatus.FORBIDDEN
    message = "Not authorized to access this resource"


class NotFound(AppError):
    status = HTTPStatus.NOT_FOUND
    message = "Resource not found"


class Conflict(AppError):
    status = HTTPStatus.CONFLICT
    message = "Resource already exists"


class InternalError(AppError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    message = "Internal server error"
