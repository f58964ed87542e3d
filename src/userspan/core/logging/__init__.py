"""Logging module with structured logging and request tracking."""

from userspan.core.logging.config import add_trace_context, configure_logging
from userspan.core.logging.middleware import RequestLoggingMiddleware


__all__ = [
    "RequestLoggingMiddleware",
    "add_trace_context",
    "configure_logging",
]
