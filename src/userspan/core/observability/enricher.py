"""Request span enricher.

Wraps the user lookup of one request in a ``getUser`` span that nests under
the propagated request context, carries the full attribute schema, and is
ended on every exit path.
"""

import time

import structlog
from fastapi import status
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.trace import Span, SpanKind, Status, StatusCode

from userspan.core.constants import (
    GET_USER_OPERATION,
    NOT_FOUND_EVENT,
    NOT_FOUND_POLICIES,
)
from userspan.core.errors import LookupUnavailableError
from userspan.core.observability.attributes import (
    DEFAULT_SCHEMA,
    ERROR_TYPE,
    AttributeSchema,
    AttributeSource,
    RequestInfo,
)
from userspan.modules.users.services import Found, LookupResult, UserLookup


logger = structlog.get_logger()


def parent_span_id(context: Context | None) -> str:
    """Return the hex id of the span active in ``context``, or ``""``."""
    span_context = trace.get_current_span(context).get_span_context()
    if not span_context.is_valid:
        return ""
    return format(span_context.span_id, "016x")


class RequestSpanEnricher:
    """Trace one user lookup per call.

    The tracer is injected, so the enricher can be exercised with any
    tracer provider (including an in-memory one in tests).

    Attributes:
        tracer: Tracer that creates the operation span
        lookup: Pure user lookup
        schema: Attributes set on every span
        operation: Span name
        not_found_policy: How a lookup miss shows on the span:
            ``ok`` (status OK), ``event`` (status OK plus a
            ``user.not_found`` event) or ``error`` (status ERROR)
    """

    def __init__(
        self,
        tracer: trace.Tracer,
        lookup: UserLookup,
        *,
        schema: AttributeSchema | None = None,
        operation: str = GET_USER_OPERATION,
        not_found_policy: str = "ok",
    ) -> None:
        if not_found_policy not in NOT_FOUND_POLICIES:
            raise ValueError(f"Unknown not-found policy: {not_found_policy!r}")

        self.tracer = tracer
        self.lookup = lookup
        self.schema = schema if schema is not None else DEFAULT_SCHEMA
        self.operation = operation
        self.not_found_policy = not_found_policy

    def get_user(
        self,
        context: Context | None,
        user_id: str,
        request_info: RequestInfo,
    ) -> LookupResult:
        """Look a user up inside a span.

        Attributes are evaluated once, when the lookup has finished and
        before the span ends, so ``duration_ns`` and ``http.status_code``
        describe the whole operation.

        Args:
            context: Propagated request context (parent of the span)
            user_id: Decimal identifier from the request path
            request_info: Request snapshot

        Returns:
            Found or NOT_FOUND

        Raises:
            LookupUnavailableError: If the lookup itself failed
        """
        parent_id = parent_span_id(context)
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

        with self.tracer.start_as_current_span(
            self.operation,
            context=context,
            kind=SpanKind.INTERNAL,
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            try:
                result = self.lookup(user_id)
            except Exception as exc:
                status_code = status.HTTP_503_SERVICE_UNAVAILABLE
                span.set_status(Status(StatusCode.ERROR, str(exc) or type(exc).__name__))
                span.set_attribute(ERROR_TYPE, type(exc).__name__)
                span.record_exception(exc)
                logger.error(
                    "user_lookup_failed",
                    user_id=user_id,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise LookupUnavailableError(
                    details={"user_id": user_id, "error": str(exc)}
                ) from exc
            except BaseException as exc:
                # Cancellation or interpreter exit; the span still ends.
                span.set_status(Status(StatusCode.ERROR, f"aborted: {type(exc).__name__}"))
                raise
            else:
                found = isinstance(result, Found)
                status_code = status.HTTP_200_OK if found else status.HTTP_404_NOT_FOUND
                self._set_outcome(span, found, user_id)
                return result
            finally:
                span.set_attributes(
                    self.schema.evaluate(
                        AttributeSource(
                            request=request_info,
                            path_params={"id": user_id},
                            status_code=status_code,
                            elapsed_ns=time.perf_counter_ns() - request_info.received_ns,
                            parent_span_id=parent_id,
                        )
                    )
                )

    def _set_outcome(self, span: Span, found: bool, user_id: str) -> None:
        """Set the single status of a span whose lookup returned."""
        if found or self.not_found_policy == "ok":
            span.set_status(Status(StatusCode.OK))
        elif self.not_found_policy == "event":
            span.set_status(Status(StatusCode.OK))
            span.add_event(NOT_FOUND_EVENT, {"user.id": user_id})
        else:
            span.set_status(Status(StatusCode.ERROR, "User not found"))
