"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from opentelemetry import trace
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
    InMemorySpanExporter,
)

from userspan.config import Settings
from userspan.main import create_app


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Build settings isolated from any .env file.

    Spans are exported synchronously and no server spans are created
    unless a test overrides it.
    """

    def factory(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "environment": "test",
            "host": "127.0.0.1",
            "port": 8081,
            "trace_exporter": "none",
            "trace_batch_export": False,
            "instrument_server": False,
            "tracing_required": True,
            "not_found_policy": "ok",
            "log_level": "WARNING",
            "log_json": False,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return factory


@pytest.fixture
def settings(settings_factory: Callable[..., Settings]) -> Settings:
    """Provide default test settings."""
    return settings_factory()


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    """Collect finished spans in memory."""
    return InMemorySpanExporter()


@pytest.fixture
def tracer(span_exporter: InMemorySpanExporter) -> trace.Tracer:
    """Provide a tracer from a local provider exporting to memory.

    The provider is never installed globally.
    """
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider.get_tracer("test")


@pytest.fixture
def finished_spans(
    span_exporter: InMemorySpanExporter,
) -> Callable[..., list[ReadableSpan]]:
    """Return exported spans, optionally filtered by name."""

    def get(name: str | None = "getUser") -> list[ReadableSpan]:
        spans = span_exporter.get_finished_spans()
        if name is None:
            return list(spans)
        return [span for span in spans if span.name == name]

    return get


@pytest.fixture
def app(
    settings: Settings, span_exporter: InMemorySpanExporter
) -> Generator[FastAPI, None, None]:
    """Create test application instance."""
    application = create_app(settings, span_exporter=span_exporter)

    yield application

    application.dependency_overrides.clear()
    application.state.propagator.shutdown()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
