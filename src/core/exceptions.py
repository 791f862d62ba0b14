from typing import List, Optional

from src.core.response.schemas import ErrorDetail


class ServiceException(Exception):
    """Base exception raised by services; carries a message and field details."""

    error_code: str = "SERVICE_ERROR"

    def __init__(
        self, detail: str, error_details: Optional[List[ErrorDetail]] = None
    ):
        super().__init__(detail)
        self.detail = detail
        self.error_details = error_details or []


class ValidationException(ServiceException):
    error_code = "VALIDATION_ERROR"


class UnauthorizedException(ServiceException):
    """No authenticated caller could be resolved."""

    error_code = "UNAUTHORIZED"


class AuthorizationException(ServiceException):
    """The caller may not act on this resource."""

    error_code = "FORBIDDEN"


class NotFoundException(ServiceException):
    error_code = "NOT_FOUND"


class ConflictException(ServiceException):
    error_code = "CONFLICT"


class PersistenceException(ServiceException):
    """The store failed to read or write."""

    error_code = "PERSISTENCE_ERROR"
