"""Domain exceptions for the application.

HTTP-facing exceptions inherit from :class:`AppException` and are converted
to plain-text error responses by the exception handlers.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for logs
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("User not found", resource="user", resource_id=user_id)
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ServiceUnavailableError(AppException):
    """Raised when a required service is unavailable.

    Example:
        raise ServiceUnavailableError("User directory unreachable")
    """

    message = "Service temporarily unavailable"
    error_code = "service_unavailable"
    status_code = 503


class LookupUnavailableError(ServiceUnavailableError):
    """Raised when the user lookup fails instead of answering found/not found."""

    message = "User lookup unavailable"
    error_code = "lookup_unavailable"


class TracingSetupError(RuntimeError):
    """Raised at startup when the span exporter cannot be constructed.

    Not an :class:`AppException`: it never reaches a request handler.
    """
