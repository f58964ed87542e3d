"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from userspan.config import Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        """Verify defaults match the reference deployment."""
        for name in ("PORT", "TRACE_EXPORTER", "NOT_FOUND_POLICY", "ENVIRONMENT"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.port == 8081
        assert settings.trace_exporter == "none"
        assert settings.not_found_policy == "ok"
        assert settings.tracing_required is True
        assert settings.instrumentation_name == "userspan-server"

    def test_reads_environment(self, monkeypatch):
        """Verify values come from environment variables."""
        monkeypatch.setenv("PORT", "9090")
        monkeypatch.setenv("TRACE_EXPORTER", "OTLP")
        monkeypatch.setenv("OTLP_ENDPOINT", "http://collector:4317")

        settings = Settings(_env_file=None)

        assert settings.port == 9090
        assert settings.trace_exporter == "otlp"
        assert settings.otlp_endpoint == "http://collector:4317"

    def test_rejects_unknown_exporter(self):
        """Verify unsupported exporters fail validation."""
        with pytest.raises(ValidationError, match="TRACE_EXPORTER"):
            Settings(_env_file=None, trace_exporter="zipkin")

    def test_rejects_unknown_not_found_policy(self):
        """Verify unsupported not-found policies fail validation."""
        with pytest.raises(ValidationError, match="NOT_FOUND_POLICY"):
            Settings(_env_file=None, not_found_policy="ignore")

    @pytest.mark.parametrize(
        ("environment", "log_json", "expected"),
        [
            ("production", None, True),
            ("development", None, False),
            ("development", True, True),
            ("production", False, False),
        ],
    )
    def test_render_json_logs(self, environment, log_json, expected):
        """Verify JSON logs default to production only."""
        settings = Settings(_env_file=None, environment=environment, log_json=log_json)

        assert settings.render_json_logs is expected
