"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from userspan import __version__
from userspan.core.constants import (
    DEFAULT_INSTRUMENTATION_NAME,
    DEFAULT_PORT,
    NOT_FOUND_POLICIES,
    TRACE_EXPORTERS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "userspan"
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # Listener
    host: str = "0.0.0.0"  # noqa: S104
    port: int = DEFAULT_PORT

    # Tracing
    service_name: str = "userspan"
    service_version: str = __version__
    instrumentation_name: str = DEFAULT_INSTRUMENTATION_NAME
    trace_exporter: str = "none"  # otlp, console, none
    otlp_endpoint: str | None = None
    tracing_required: bool = True
    trace_batch_export: bool = True
    instrument_server: bool = True
    not_found_policy: str = "ok"  # ok, event, error

    # Logging
    log_level: str = "INFO"
    log_json: bool | None = None

    @field_validator("trace_exporter")
    @classmethod
    def validate_trace_exporter(cls, v: str) -> str:
        """Validate the span exporter name.

        Args:
            v: The exporter name

        Returns:
            The normalized exporter name

        Raises:
            ValueError: If the exporter is not supported
        """
        v = v.strip().lower()
        if v not in TRACE_EXPORTERS:
            raise ValueError(
                f"TRACE_EXPORTER must be one of {', '.join(TRACE_EXPORTERS)}"
            )
        return v

    @field_validator("not_found_policy")
    @classmethod
    def validate_not_found_policy(cls, v: str) -> str:
        """Validate how lookup misses are reported on the span."""
        v = v.strip().lower()
        if v not in NOT_FOUND_POLICIES:
            raise ValueError(
                f"NOT_FOUND_POLICY must be one of {', '.join(NOT_FOUND_POLICIES)}"
            )
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def render_json_logs(self) -> bool:
        """Whether logs are rendered as JSON lines.

        Defaults to JSON in production and console output elsewhere.
        """
        if self.log_json is not None:
            return self.log_json
        return self.is_production


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
