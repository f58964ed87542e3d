"""User API routes."""

from fastapi import Request
from fastapi.responses import PlainTextResponse

import userspan.api.convertors  # noqa: F401 - registers the "digits" convertor
from userspan.api.dependencies import AppSettings, Enricher, TraceContext
from userspan.core.errors import NotFoundError
from userspan.core.observability.attributes import RequestInfo
from userspan.modules.users import router
from userspan.modules.users.services import Found


@router.get(
    "/{user_id:digits}",
    response_class=PlainTextResponse,
    summary="Get user",
    description="Look a user up by numeric ID. Every call is traced as a getUser span.",
    responses={404: {"description": "User not found"}},
)
async def get_user(
    user_id: str,
    request: Request,
    enricher: Enricher,
    trace_context: TraceContext,
    settings: AppSettings,
) -> PlainTextResponse:
    """Get a user by ID."""
    request_info = RequestInfo.from_request(request, default_port=settings.port)
    result = enricher.get_user(trace_context, user_id, request_info)

    if not isinstance(result, Found):
        raise NotFoundError("User not found", resource="user", resource_id=user_id)

    return PlainTextResponse(f"user {result.name} (id {user_id})\n")
