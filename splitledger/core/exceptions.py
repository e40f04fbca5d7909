"""Ledger error taxonomy

Every failure raised by the services is one of these types; the HTTP layer
maps them to status codes through ``AppException.status_code``.
"""
from typing import Any, Optional


class AppException(Exception):
    """Base exception for application errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_type: str = "AppError",
        details: Optional[Any] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)


class ValidationError(AppException):
    """Bad input: amounts, split inputs, unknown split type"""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_type="ValidationError",
            details=details
        )


class NotFoundError(AppException):
    """Resource not found exception"""

    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=404,
            error_type="NotFoundError",
            details=details
        )


class AuthenticationError(AppException):
    """Authentication failure exception"""

    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=401,
            error_type="AuthenticationError",
            details=details
        )


class AuthorizationError(AppException):
    """Actor may not perform this operation"""

    def __init__(self, message: str = "Permission denied", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=403,
            error_type="AuthorizationError",
            details=details
        )


class DatabaseError(AppException):
    """Database operation error exception"""

    def __init__(self, message: str = "Database error occurred", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=500,
            error_type="DatabaseError",
            details=details
        )


class ConflictError(AppException):
    """State conflict: over-settlement, terminal settlement, duplicate tag"""

    def __init__(self, message: str = "Resource already exists", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_type="ConflictError",
            details=details
        )


class InternalConsistencyError(AppException):
    """Ledger invariant violated (indicates a bug, not bad input)"""

    def __init__(self, message: str = "Ledger consistency check failed", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=500,
            error_type="InternalConsistencyError",
            details=details
        )
