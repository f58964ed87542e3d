"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from opentelemetry.sdk.trace.export import SpanExporter

from userspan import __version__
from userspan.api.router import api_router
from userspan.config import Settings, get_settings
from userspan.core.errors import register_exception_handlers
from userspan.core.logging import RequestLoggingMiddleware, configure_logging
from userspan.core.observability import (
    RequestSpanEnricher,
    TraceContextMiddleware,
    TracePropagator,
    default_schema,
)
from userspan.modules.users.services import lookup_user


logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Handles startup and shutdown events.
    """
    settings: Settings = app.state.settings
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
        trace_exporter=settings.trace_exporter,
    )

    yield

    logger.info("application_shutdown")

    # Flush pending spans
    app.state.propagator.shutdown()


def create_app(
    settings: Settings | None = None,
    span_exporter: SpanExporter | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Tracing is initialized here, before the first request can arrive.

    Args:
        settings: Settings to use instead of the environment-derived ones
        span_exporter: Exporter to use instead of the configured one

    Returns:
        Configured FastAPI application instance.

    Raises:
        TracingSetupError: If the span exporter cannot be constructed and
            tracing is required
    """
    settings = settings or get_settings()
    configure_logging(settings)

    propagator = TracePropagator(settings, span_exporter=span_exporter)
    propagator.initialize()

    enricher = RequestSpanEnricher(
        propagator.tracer(settings.instrumentation_name),
        lookup_user,
        schema=default_schema(settings.service_version),
        not_found_policy=settings.not_found_policy,
    )

    app = FastAPI(
        title=settings.app_name,
        description="Traced user lookup service",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )

    app.state.settings = settings
    app.state.propagator = propagator
    app.state.enricher = enricher

    app.add_middleware(RequestLoggingMiddleware)

    # Added last so it runs first: logging sees request_id and trace_id
    app.add_middleware(TraceContextMiddleware, propagator=propagator)

    register_exception_handlers(app)

    app.include_router(api_router)

    # Server spans wrap everything above
    propagator.instrument_app(app)

    return app
