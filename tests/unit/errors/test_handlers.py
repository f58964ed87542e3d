"""Tests for plain-text exception handlers."""

from unittest.mock import MagicMock

import pytest

from userspan.core.errors import (
    LookupUnavailableError,
    NotFoundError,
    error_response,
)
from userspan.core.errors.handlers import (
    app_exception_handler,
    generic_exception_handler,
)


def make_mock_request(path: str = "/users/999") -> MagicMock:
    """Create a mock Request for testing."""
    request = MagicMock()
    request.url.path = path
    return request


class TestErrorResponse:
    """Tests for error_response."""

    def test_body_ends_with_newline(self):
        """Verify the body mirrors a standard error-response helper."""
        response = error_response("User not found", 404)

        assert response.status_code == 404
        assert response.body == b"User not found\n"
        assert response.media_type == "text/plain"


class TestExceptionHandlers:
    """Tests for exception handlers."""

    @pytest.mark.asyncio
    async def test_not_found(self):
        """Verify NotFoundError renders as 404 with its message."""
        exc = NotFoundError("User not found", resource="user", resource_id="999")

        response = await app_exception_handler(make_mock_request(), exc)

        assert response.status_code == 404
        assert response.body == b"User not found\n"
        assert exc.details == {"resource": "user", "resource_id": "999"}

    @pytest.mark.asyncio
    async def test_lookup_unavailable(self):
        """Verify lookup failures render as 503."""
        response = await app_exception_handler(
            make_mock_request(), LookupUnavailableError()
        )

        assert response.status_code == 503
        assert response.body == b"User lookup unavailable\n"

    @pytest.mark.asyncio
    async def test_unexpected_exception_hides_details(self):
        """Verify unexpected errors do not leak their message."""
        response = await generic_exception_handler(
            make_mock_request(), RuntimeError("secret detail")
        )

        assert response.status_code == 500
        assert response.body == b"Internal Server Error\n"
