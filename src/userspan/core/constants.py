"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Listener
DEFAULT_PORT = 8081

# Tracing
DEFAULT_INSTRUMENTATION_NAME = "userspan-server"
GET_USER_OPERATION = "getUser"
TRACE_EXPORTERS = ("otlp", "console", "none")
NOT_FOUND_POLICIES = ("ok", "event", "error")
NOT_FOUND_EVENT = "user.not_found"

# Span attribute values
REQUEST_TYPE_INCOMING = "Incoming"
SDK_TYPE = "fastapi"
EMPTY_BODY = "{}"

# Request correlation
REQUEST_ID_HEADER = "X-Request-ID"

# Paths that are never logged or server-traced
EXCLUDED_PATHS = ("/health/live", "/docs", "/redoc", "/openapi.json")
SERVER_TRACE_EXCLUDED_URLS = "health/.*,docs,redoc,openapi.json"
