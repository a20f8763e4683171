"""
Custom Exception Classes.

Provides a hierarchy of domain-specific exceptions that are automatically
converted to appropriate HTTP responses by the global exception handler.

Authorization decisions themselves never raise (see ``core.access``); these
exceptions are for request handling around those decisions.
"""

from typing import Any


class AppException(Exception):
    """
    Base exception for all application-specific errors.

    All custom exceptions should inherit from this class.
    The global exception handler converts these to HTTP responses.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "APP_ERROR",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }

# ============================================
# 4xx Client Errors
# ============================================

class BadRequestError(AppException):
    """Invalid request data or parameters (400)."""

    def __init__(
        self,
        message: str = "Invalid request",
        error_code: str = "BAD_REQUEST",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=400,
            details=details,
        )

class InvalidArgumentError(BadRequestError):
    """Malformed filter or pagination input (400)."""

    def __init__(
        self,
        message: str = "Invalid argument",
        argument: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if argument:
            details["argument"] = argument
        super().__init__(
            message=message,
            error_code="INVALID_ARGUMENT",
            details=details,
        )

class UnauthorizedError(AppException):
    """Authentication required or failed (401).

    Raised when no actor can be resolved for the request.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: str = "UNAUTHORIZED",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=401,
            details=details,
        )

class ForbiddenError(AppException):
    """Permission denied (403)."""

    def __init__(
        self,
        message: str = "Permission denied",
        error_code: str = "FORBIDDEN",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=403,
            details=details,
        )

class NotFoundError(AppException):
    """Resource not found (404)."""

    def __init__(
        self,
        message: str = "Resource not found",
        error_code: str = "NOT_FOUND",
        resource_type: str | None = None,
        resource_id: str | int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=404,
            details=details,
        )

class ConflictError(AppException):
    """Resource conflict, e.g., duplicate entry (409)."""

    def __init__(
        self,
        message: str = "Resource conflict",
        error_code: str = "CONFLICT",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=409,
            details=details,
        )

# ============================================
# 5xx Server Errors
# ============================================

class ConfigurationError(AppException):
    """Application configuration error."""

    def __init__(
        self,
        message: str = "Configuration error",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            status_code=500,
            details=details,
        )

# ============================================
# Domain-Specific Exceptions
# ============================================

class NotificationNotFoundError(NotFoundError):
    """Notification absent or owned by another actor.

    Both cases produce the same error so a non-owner cannot probe for
    existence.
    """

    def __init__(self, notification_id: str) -> None:
        super().__init__(
            message="Notification not found",
            error_code="NOTIFICATION_NOT_FOUND",
            resource_type="notification",
            resource_id=notification_id,
        )

class UserNotFoundError(NotFoundError):
    """User (actor) record not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            message=f"User not found: {user_id}",
            error_code="USER_NOT_FOUND",
            resource_type="user",
            resource_id=user_id,
        )

class UserAlreadyExistsError(ConflictError):
    """User with the same email already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(
            message=f"User with email '{email}' already exists",
            error_code="USER_ALREADY_EXISTS",
            details={"email": email},
        )

class UnknownRoleError(BadRequestError):
    """Role value outside the closed role enumeration."""

    def __init__(self, role: object) -> None:
        super().__init__(
            message=f"Unknown role: {role!r}",
            error_code="UNKNOWN_ROLE",
            details={"role": str(role)},
        )
