"""
Custom exception classes for the HeartSync application.
Provides structured error handling with machine-readable error codes.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes shared with the frontend"""

    # Authentication errors (401)
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_NOT_AUTHENTICATED = "AUTH_NOT_AUTHENTICATED"

    # Authorization errors (403)
    AUTHZ_FORBIDDEN = "AUTHZ_FORBIDDEN"
    AUTHZ_ADMIN_REQUIRED = "AUTHZ_ADMIN_REQUIRED"

    # Resource errors (404, 409)
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_ALREADY_EXISTS = "RESOURCE_ALREADY_EXISTS"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"

    # Validation errors (422)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CRUSH_SELF_TARGET = "CRUSH_SELF_TARGET"

    # Season errors (409)
    SEASON_NOT_ACTIVE = "SEASON_NOT_ACTIVE"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500+)
    SERVER_ERROR = "SERVER_ERROR"
    SERVER_UNAVAILABLE = "SERVER_UNAVAILABLE"
    STORAGE_TRANSIENT = "STORAGE_TRANSIENT"


class AppException(Exception):
    """
    Base exception class for application errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SERVER_ERROR,
        status_code: int = 500,
        field: str | None = None,
        metadata: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.field = field
        self.metadata = metadata or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to response dictionary"""
        response = {
            "detail": self.message,
            "code": self.code.value,
        }
        if self.field:
            response["field"] = self.field
        if self.metadata:
            response["metadata"] = self.metadata
        return response


# Authentication Errors (401)


class AuthenticationError(AppException):
    """Base authentication error"""

    def __init__(
        self,
        message: str = "Authentication required",
        code: ErrorCode = ErrorCode.AUTH_NOT_AUTHENTICATED,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=401,
        )


class InvalidCredentialsError(AuthenticationError):
    """Invalid handle or password"""

    def __init__(self, message: str = "Incorrect handle or password"):
        super().__init__(
            message=message,
            code=ErrorCode.AUTH_INVALID_CREDENTIALS,
        )


# Authorization Errors (403)


class AuthorizationError(AppException):
    """Base authorization error"""

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        code: ErrorCode = ErrorCode.AUTHZ_FORBIDDEN,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=403,
        )


class AdminRequiredError(AuthorizationError):
    def __init__(self, message: str = "Admin access required"):
        super().__init__(message=message, code=ErrorCode.AUTHZ_ADMIN_REQUIRED)


# Resource Errors (404, 409)


class NotFoundError(AppException):
    """Resource not found"""

    def __init__(
        self,
        message: str = "Requested resource was not found",
        resource: str | None = None,
    ):
        metadata = {"resource": resource} if resource else None
        super().__init__(
            message=message,
            code=ErrorCode.RESOURCE_NOT_FOUND,
            status_code=404,
            metadata=metadata,
        )


class AlreadyExistsError(AppException):
    """Resource already exists"""

    def __init__(
        self,
        message: str = "Resource already exists",
        field: str | None = None,
    ):
        super().__init__(
            message=message,
            code=ErrorCode.RESOURCE_ALREADY_EXISTS,
            status_code=409,
            field=field,
        )


class ConflictError(AppException):
    """Resource is in a state that does not allow the operation"""

    def __init__(
        self,
        message: str = "Resource state conflict",
        field: str | None = None,
    ):
        super().__init__(
            message=message,
            code=ErrorCode.RESOURCE_CONFLICT,
            status_code=409,
            field=field,
        )


# Validation Errors (422)


class ValidationError(AppException):
    """Malformed or missing input, rejected before any write"""

    def __init__(
        self,
        message: str = "Please check the submitted data",
        field: str | None = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=422,
            field=field,
        )


class SelfCrushError(ValidationError):
    """Target handle normalizes to the submitter's own handle"""

    def __init__(self, message: str = "You cannot submit a crush on yourself"):
        super().__init__(
            message=message,
            field="target_handle",
            code=ErrorCode.CRUSH_SELF_TARGET,
        )


# Season Errors (409)


class SeasonNotActiveError(AppException):
    """Season is unknown, inactive or outside its time window"""

    def __init__(
        self,
        message: str = "Season is not active",
        season_id: str | None = None,
    ):
        metadata = {"season_id": season_id} if season_id else None
        super().__init__(
            message=message,
            code=ErrorCode.SEASON_NOT_ACTIVE,
            status_code=409,
            metadata=metadata,
        )


# Server Errors (500+)


class ServerError(AppException):
    """Internal server error"""

    def __init__(
        self,
        message: str = "Internal server error",
        code: ErrorCode = ErrorCode.SERVER_ERROR,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=500,
        )


class TransientStorageError(AppException):
    """Storage contention or timeout that outlasted every retry"""

    def __init__(
        self,
        message: str = "The service is busy. Please try again",
        attempts: int | None = None,
        retry_after: int = 1,
    ):
        metadata: dict[str, Any] = {"retry_after": retry_after}
        if attempts is not None:
            metadata["attempts"] = attempts
        super().__init__(
            message=message,
            code=ErrorCode.STORAGE_TRANSIENT,
            status_code=503,
            metadata=metadata,
        )
