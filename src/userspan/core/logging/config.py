"""structlog configuration."""

import logging
from typing import Any

import structlog
from opentelemetry import trace

from userspan.config import Settings


def add_trace_context(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that adds trace_id and span_id to log events.

    Args:
        logger: The logger instance (unused, required by structlog API).
        method_name: The log method name (unused, required by structlog API).
        event_dict: The log event dictionary to enrich.

    Returns:
        The enriched event dictionary with trace_id and span_id if available.
    """
    span_context = trace.get_current_span().get_span_context()

    if span_context.is_valid:
        event_dict.setdefault("trace_id", format(span_context.trace_id, "032x"))
        event_dict["span_id"] = format(span_context.span_id, "016x")

    return event_dict


def configure_logging(settings: Settings) -> None:
    """Configure structlog for the process.

    Args:
        settings: Application settings (log level and renderer choice)
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_trace_context,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            (
                structlog.processors.JSONRenderer()
                if settings.render_json_logs
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
