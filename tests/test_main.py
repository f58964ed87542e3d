"""Tests for the application factory and lifespan."""

import pytest

from userspan.core.errors import TracingSetupError
from userspan.core.observability import RequestSpanEnricher, TracePropagator
from userspan.main import create_app


class TestCreateApp:
    """Tests for create_app."""

    def test_wires_state(self, app):
        """Verify collaborators are stored on app.state."""
        assert isinstance(app.state.propagator, TracePropagator)
        assert isinstance(app.state.enricher, RequestSpanEnricher)
        assert app.state.propagator.enabled is True

    def test_enricher_uses_configured_policy(self, settings_factory, span_exporter):
        """Verify the not-found policy reaches the enricher."""
        app = create_app(
            settings_factory(not_found_policy="event"), span_exporter=span_exporter
        )

        assert app.state.enricher.not_found_policy == "event"

    def test_exporter_failure_is_fatal(self, settings_factory):
        """Verify the app is not created when spans cannot be exported."""
        with pytest.raises(TracingSetupError):
            create_app(settings_factory(trace_exporter="otlp", otlp_endpoint=None))

    def test_exporter_failure_degrades_when_optional(self, settings_factory):
        """Verify the app serves without tracing when tracing is optional."""
        app = create_app(
            settings_factory(
                trace_exporter="otlp", otlp_endpoint=None, tracing_required=False
            )
        )

        assert app.state.propagator.enabled is False


class TestLifespan:
    """Tests for the lifespan handler."""

    @pytest.mark.asyncio
    async def test_shutdown_flushes_tracing(self, app):
        """Verify tracing is shut down when the app stops."""
        async with app.router.lifespan_context(app):
            assert app.state.propagator.enabled is True

        assert app.state.propagator.enabled is False
