"""Shared API dependencies.

Process-wide collaborators live on ``app.state`` (set by ``create_app``) and
reach handlers through these dependencies, which tests can override.
"""

from typing import Annotated

from fastapi import Depends, Request
from opentelemetry.context import Context

from userspan.config import Settings
from userspan.core.observability.enricher import RequestSpanEnricher


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_enricher(request: Request) -> RequestSpanEnricher:
    """Get the request span enricher."""
    return request.app.state.enricher


def get_trace_context(request: Request) -> Context:
    """Get the propagated trace context of the current request.

    Falls back to extracting from headers when TraceContextMiddleware
    did not run.
    """
    ctx = getattr(request.state, "trace_context", None)
    if ctx is None:
        ctx = request.app.state.propagator.extract(request.headers)
    return ctx


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Enricher = Annotated[RequestSpanEnricher, Depends(get_enricher)]
TraceContext = Annotated[Context, Depends(get_trace_context)]
