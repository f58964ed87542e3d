"""Tests for the trace context middleware."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from opentelemetry import context as otel_context
from opentelemetry import trace

from userspan.core.observability import TraceContextMiddleware, TracePropagator
from userspan.core.observability.middleware import resolve_trace_context


TRACEPARENT = "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01"


def make_mock_request(headers: dict[str, str] | None = None) -> MagicMock:
    """Create a mock Request for testing."""
    request = MagicMock()
    request.headers = headers or {}
    request.state = MagicMock()
    return request


class TestResolveTraceContext:
    """Tests for resolve_trace_context."""

    def test_extracts_from_headers(self, settings):
        """Verify the inbound traceparent is used without a current span."""
        request = make_mock_request({"traceparent": TRACEPARENT})

        ctx = resolve_trace_context(request, TracePropagator(settings))

        span_context = trace.get_current_span(ctx).get_span_context()
        assert format(span_context.span_id, "016x") == "00f067aa0ba902b7"

    def test_prefers_current_span(self, settings, tracer):
        """Verify an active server span wins over the headers."""
        request = make_mock_request({"traceparent": TRACEPARENT})

        with tracer.start_as_current_span("server") as server:
            ctx = resolve_trace_context(request, TracePropagator(settings))

        assert trace.get_current_span(ctx) is server


class TestTraceContextMiddleware:
    """Tests for TraceContextMiddleware.dispatch."""

    @pytest.mark.asyncio
    async def test_sets_request_state(self, settings):
        """Verify context, arrival time and request id land on request.state."""
        middleware = TraceContextMiddleware.__new__(TraceContextMiddleware)
        middleware.propagator = TracePropagator(settings)
        request = make_mock_request({"traceparent": TRACEPARENT, "X-Request-ID": "r-1"})
        response = MagicMock()
        response.headers = {}
        call_next = AsyncMock(return_value=response)

        result = await middleware.dispatch(request, call_next)

        assert result is response
        assert response.headers["X-Request-ID"] == "r-1"
        assert request.state.request_id == "r-1"
        assert isinstance(request.state.received_ns, int)
        span_context = trace.get_current_span(
            request.state.trace_context
        ).get_span_context()
        assert format(span_context.trace_id, "032x") == (
            "4bf92f3577b34da6a3ce929d0e0e4736"
        )
        call_next.assert_awaited_once_with(request)

    @pytest.mark.asyncio
    async def test_does_not_attach_context(self, settings):
        """Verify the ambient context is left untouched."""
        middleware = TraceContextMiddleware.__new__(TraceContextMiddleware)
        middleware.propagator = TracePropagator(settings)
        before = otel_context.get_current()
        response = MagicMock()
        response.headers = {}

        await middleware.dispatch(
            make_mock_request({"traceparent": TRACEPARENT}),
            AsyncMock(return_value=response),
        )

        assert otel_context.get_current() == before
