"""Error handling module with plain-text error responses."""

from userspan.core.errors.exceptions import (
    AppException,
    LookupUnavailableError,
    NotFoundError,
    ServiceUnavailableError,
    TracingSetupError,
)
from userspan.core.errors.handlers import (
    error_response,
    register_exception_handlers,
)


__all__ = [
    # Exceptions
    "AppException",
    "LookupUnavailableError",
    "NotFoundError",
    "ServiceUnavailableError",
    "TracingSetupError",
    # Handlers
    "error_response",
    "register_exception_handlers",
]
