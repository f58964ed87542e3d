"""Inbound trace context middleware.

Resolves the trace context of every request once, on arrival, and makes it
available to handlers through ``request.state.trace_context``.
"""

import time
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from fastapi import Request, Response
from opentelemetry import context as otel_context
from opentelemetry import trace
from opentelemetry.context import Context
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from userspan.core.constants import REQUEST_ID_HEADER
from userspan.core.observability.tracing import TracePropagator


if TYPE_CHECKING:
    from starlette.types import ASGIApp


def resolve_trace_context(request: Request, propagator: TracePropagator) -> Context:
    """Return the context a request's spans should nest under.

    When server instrumentation already opened a span for the request the
    current context is used, so children nest under the server span.
    Otherwise the context is extracted from the inbound headers.
    """
    current = otel_context.get_current()
    if trace.get_current_span(current).get_span_context().is_valid:
        return current
    return propagator.extract(request.headers)


class TraceContextMiddleware(BaseHTTPMiddleware):
    """Middleware that attaches trace context and a request ID to requests.

    The following are set on ``request.state``:
    - received_at / received_ns: arrival wall-clock time and monotonic ns
    - trace_context: the propagated context (read-only downstream)
    - request_id: from X-Request-ID or generated

    ``request_id`` and ``trace_id`` are bound to the structlog context and
    the request ID is echoed in the X-Request-ID response header.
    """

    def __init__(self, app: "ASGIApp", propagator: TracePropagator) -> None:
        super().__init__(app)
        self.propagator = propagator

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process the request and attach its trace context.

        Args:
            request: The incoming request
            call_next: The next middleware/handler

        Returns:
            The response with X-Request-ID header
        """
        request.state.received_at = datetime.now(UTC)
        request.state.received_ns = time.perf_counter_ns()

        ctx = resolve_trace_context(request, self.propagator)
        request.state.trace_context = ctx

        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        bound: dict[str, str] = {"request_id": request_id}
        span_context = trace.get_current_span(ctx).get_span_context()
        if span_context.is_valid:
            bound["trace_id"] = format(span_context.trace_id, "032x")
        structlog.contextvars.bind_contextvars(**bound)

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "trace_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
