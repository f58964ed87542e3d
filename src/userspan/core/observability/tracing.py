"""OpenTelemetry tracing configuration.

Owns the process-wide tracing state:
- W3C trace-context + baggage propagation across HTTP headers
- The tracer provider and its span exporter
- Optional server-span instrumentation of the FastAPI app

Spans are exported to an OTLP-compatible backend (Jaeger, Tempo, etc.)
when TRACE_EXPORTER=otlp and OTLP_ENDPOINT are configured.
"""

from collections.abc import Mapping, MutableMapping

import structlog
from fastapi import FastAPI
from opentelemetry import propagate, trace
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.context import Context
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from userspan import __version__
from userspan.config import Settings
from userspan.core.constants import SERVER_TRACE_EXCLUDED_URLS
from userspan.core.errors import TracingSetupError


log = structlog.get_logger()


class TracePropagator:
    """Process-wide trace context propagation and span export.

    Constructed once at startup and handed to whoever needs a tracer;
    nothing reads it from a global. The tracer provider is kept local to
    this object, only the text-map propagator is installed globally so
    that library instrumentation extracts the same headers.

    Attributes:
        settings: Application settings driving exporter selection
    """

    def __init__(
        self,
        settings: Settings,
        span_exporter: SpanExporter | None = None,
    ) -> None:
        """Initialize the propagator.

        Args:
            settings: Application settings
            span_exporter: Exporter to use instead of the configured one
        """
        self.settings = settings
        self._span_exporter = span_exporter
        self._textmap = CompositePropagator(
            [TraceContextTextMapPropagator(), W3CBaggagePropagator()]
        )
        self._provider: TracerProvider | None = None
        self._tracer_provider: trace.TracerProvider = trace.NoOpTracerProvider()
        self._initialized = False

    @property
    def enabled(self) -> bool:
        """Whether spans are recorded by an SDK tracer provider."""
        return self._provider is not None

    def initialize(self) -> None:
        """Configure propagation and the span exporter.

        Safe to call more than once; only the first call has an effect.

        Raises:
            TracingSetupError: If the exporter cannot be constructed and
                tracing is required
        """
        if self._initialized:
            return

        propagate.set_global_textmap(self._textmap)

        try:
            exporter = self._build_exporter()
        except Exception as exc:
            if self.settings.tracing_required:
                raise TracingSetupError(
                    f"span exporter {self.settings.trace_exporter!r} "
                    f"could not be constructed: {exc}"
                ) from exc
            log.warning(
                "tracing_degraded",
                exporter=self.settings.trace_exporter,
                error=str(exc),
            )
            self._initialized = True
            return

        resource = Resource.create(
            {
                "service.name": self.settings.service_name,
                "service.version": self.settings.service_version,
                "deployment.environment": self.settings.environment,
            }
        )
        provider = TracerProvider(resource=resource)

        if exporter is not None:
            if self.settings.trace_batch_export:
                provider.add_span_processor(BatchSpanProcessor(exporter))
            else:
                provider.add_span_processor(SimpleSpanProcessor(exporter))

        self._provider = provider
        self._tracer_provider = provider
        self._initialized = True

        log.info(
            "tracing_configured",
            exporter=(
                type(exporter).__name__ if exporter is not None else "none"
            ),
            endpoint=self.settings.otlp_endpoint,
        )

    def _build_exporter(self) -> SpanExporter | None:
        """Construct the span exporter named by the settings.

        Returns:
            The exporter, or None when spans are not exported

        Raises:
            ValueError: If the OTLP exporter has no endpoint
        """
        if self._span_exporter is not None:
            return self._span_exporter

        if self.settings.trace_exporter == "otlp":
            endpoint = self.settings.otlp_endpoint
            if not endpoint:
                raise ValueError("OTLP_ENDPOINT is not configured")
            return OTLPSpanExporter(
                endpoint=endpoint,
                insecure=not endpoint.startswith("https"),
            )
        if self.settings.trace_exporter == "console":
            return ConsoleSpanExporter()
        return None

    def shutdown(self) -> None:
        """Flush pending spans and shut the provider down.

        Runs during teardown, so failures are logged and not raised.
        """
        provider = self._provider
        if provider is None:
            return

        self._provider = None
        self._tracer_provider = trace.NoOpTracerProvider()

        try:
            if not provider.force_flush():
                log.warning("tracing_flush_timeout")
            provider.shutdown()
        except Exception:
            log.exception("tracing_shutdown_failed")
            return

        log.info("tracing_shutdown_complete")

    def tracer(self, name: str) -> trace.Tracer:
        """Get a tracer for manual span creation.

        Args:
            name: Name of the instrumentation source

        Returns:
            Tracer bound to this propagator's provider (no-op when disabled)

        Example:
            tracer = propagator.tracer("userspan-server")
            with tracer.start_as_current_span("my_operation"):
                # ... do work
        """
        return self._tracer_provider.get_tracer(name, __version__)

    def extract(self, carrier: Mapping[str, str]) -> Context:
        """Build a context from inbound headers (traceparent, baggage)."""
        return self._textmap.extract(carrier)

    def inject(
        self,
        carrier: MutableMapping[str, str],
        context: Context | None = None,
    ) -> None:
        """Write trace and baggage headers for an outbound request."""
        self._textmap.inject(carrier, context=context)

    def instrument_app(self, app: FastAPI) -> None:
        """Add server spans to every request handled by the app.

        No-op when server instrumentation is switched off or tracing
        is disabled.

        Args:
            app: The FastAPI application instance to instrument
        """
        if not self.settings.instrument_server or self._provider is None:
            return

        FastAPIInstrumentor.instrument_app(
            app,
            tracer_provider=self._provider,
            excluded_urls=SERVER_TRACE_EXCLUDED_URLS,
        )
        log.debug("instrumented_fastapi")
