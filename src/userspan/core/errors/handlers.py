"""Plain-text exception handlers.

Error responses mirror a standard error-response helper: the status code of
the exception and a ``text/plain`` body made of the message and a newline.
"""

from typing import TYPE_CHECKING, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse

from userspan.core.errors.exceptions import AppException


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()


def error_response(message: str, status_code: int) -> PlainTextResponse:
    """Build a plain-text error response.

    Args:
        message: Human-readable message, written without trailing newline
        status_code: HTTP status code

    Returns:
        Response with body ``"<message>\\n"``
    """
    return PlainTextResponse(f"{message}\n", status_code=status_code)


async def app_exception_handler(request: Request, exc: AppException) -> PlainTextResponse:
    """Handle application-specific exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "app_exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        path=str(request.url.path),
        details=exc.details,
    )
    return error_response(exc.message, exc.status_code)


async def generic_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Handle unexpected exceptions.

    The actual error details are logged but not exposed to clients.
    """
    logger.exception(
        "unhandled_exception",
        path=str(request.url.path),
        error_type=type(exc).__name__,
    )
    return error_response("Internal Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Call this function during app initialization:

        app = FastAPI()
        register_exception_handlers(app)
    """
    app.add_exception_handler(
        AppException, cast("ExceptionHandler", app_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)
