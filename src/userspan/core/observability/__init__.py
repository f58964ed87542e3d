"""Observability module for request tracing.

Provides OpenTelemetry propagation, the inbound context middleware and the
span enricher that traces user lookups.
"""

from userspan.core.observability.attributes import (
    DEFAULT_SCHEMA,
    AttributeField,
    AttributeSchema,
    AttributeSource,
    RequestInfo,
    default_schema,
)
from userspan.core.observability.enricher import RequestSpanEnricher
from userspan.core.observability.middleware import TraceContextMiddleware
from userspan.core.observability.tracing import TracePropagator


__all__ = [
    "DEFAULT_SCHEMA",
    "AttributeField",
    "AttributeSchema",
    "AttributeSource",
    "RequestInfo",
    "RequestSpanEnricher",
    "TraceContextMiddleware",
    "TracePropagator",
    "default_schema",
]
