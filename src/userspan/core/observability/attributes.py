"""Declarative span attribute schema.

The attributes attached to a request span are described once, as an ordered
list of ``(key, extractor)`` pairs, and evaluated per request against an
:class:`AttributeSource`. Key names never change between requests; only the
values do.
"""

import json
import time
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, NamedTuple

from fastapi import Request

from userspan.core.constants import EMPTY_BODY, REQUEST_TYPE_INCOMING, SDK_TYPE


AttributeValue = str | bool | int | float | Sequence[str]

# Semantic convention keys (HTTP/net, v1.4)
HTTP_METHOD = "http.method"
HTTP_SCHEME = "http.scheme"
HTTP_STATUS_CODE = "http.status_code"
HTTP_TARGET = "http.target"
HTTP_URL = "http.url"
HTTP_HOST = "http.host"
NET_HOST_PORT = "net.host.port"
HTTP_USER_AGENT = "http.user_agent"
HTTP_REQUEST_CONTENT_LENGTH = "http.request_content_length"
NET_PEER_IP = "net.peer.ip"

# Custom keys
CREATED_AT = "created_at"
DURATION_NS = "duration_ns"
PARENT_ID = "parent_id"
REFERER = "referer"
REQUEST_TYPE = "request_type"
SDK_TYPE_KEY = "sdk_type"
SERVICE_VERSION = "service_version"
TAGS = "tags"

# Structural keys, serialized as JSON text
PATH_PARAMS = "path_params"
QUERY_PARAMS = "query_params"
REQUEST_BODY = "request_body"
REQUEST_HEADERS = "request_headers"
RESPONSE_BODY = "response_body"
RESPONSE_HEADERS = "response_headers"

# Only set when the operation failed
ERROR_TYPE = "error.type"


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _group(pairs: Iterable[tuple[str, str]]) -> dict[str, tuple[str, ...]]:
    grouped: dict[str, list[str]] = {}
    for key, value in pairs:
        grouped.setdefault(key, []).append(value)
    return {key: tuple(values) for key, values in grouped.items()}


@dataclass(frozen=True)
class RequestInfo:
    """Immutable snapshot of the request metadata that spans describe."""

    method: str
    scheme: str
    host: str
    port: int
    target: str
    url: str
    user_agent: str = ""
    content_length: int = 0
    peer_address: str = ""
    referer: str = ""
    headers: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    query_params: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    received_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    received_ns: int = field(default_factory=time.perf_counter_ns)

    @classmethod
    def from_request(cls, request: Request, default_port: int) -> "RequestInfo":
        """Capture metadata from a Starlette request.

        Arrival time comes from ``request.state`` when TraceContextMiddleware
        recorded it, otherwise from the moment of capture.

        Args:
            request: The incoming request
            default_port: Port reported when the URL carries none

        Returns:
            The request snapshot
        """
        url = request.url

        try:
            content_length = int(request.headers.get("content-length", "0"))
        except ValueError:
            content_length = 0

        received_at = getattr(request.state, "received_at", None) or datetime.now(UTC)
        received_ns = getattr(request.state, "received_ns", None)

        return cls(
            method=request.method,
            scheme=url.scheme,
            host=request.headers.get("host") or url.netloc,
            port=url.port or default_port,
            target=url.path,
            url=str(url),
            user_agent=request.headers.get("user-agent", ""),
            content_length=content_length,
            peer_address=request.client.host if request.client else "",
            referer=request.headers.get("referer", ""),
            headers=_group(request.headers.items()),
            query_params=_group(request.query_params.multi_items()),
            received_at=received_at,
            received_ns=(
                received_ns if received_ns is not None else time.perf_counter_ns()
            ),
        )


@dataclass(frozen=True)
class AttributeSource:
    """Everything the schema extractors read for one request span.

    Attributes:
        request: Request snapshot
        path_params: Route parameters (``{"id": "123"}``)
        status_code: HTTP status the handler will answer with
        elapsed_ns: Time from request arrival to span completion
        parent_span_id: Hex id of the parent span, empty when there is none
    """

    request: RequestInfo
    path_params: Mapping[str, str]
    status_code: int
    elapsed_ns: int
    parent_span_id: str = ""


Extractor = Callable[[AttributeSource], AttributeValue]


class AttributeField(NamedTuple):
    """One span attribute: its key and how to compute its value."""

    key: str
    extract: Extractor


class AttributeSchema:
    """Ordered, duplicate-free list of span attribute fields."""

    def __init__(self, fields: Iterable[AttributeField]) -> None:
        self._fields = tuple(fields)

        seen: set[str] = set()
        for attribute in self._fields:
            if attribute.key in seen:
                raise ValueError(f"Duplicate span attribute key: {attribute.key}")
            seen.add(attribute.key)

    def __iter__(self) -> Iterator[AttributeField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    @property
    def keys(self) -> tuple[str, ...]:
        """Attribute keys in emission order."""
        return tuple(attribute.key for attribute in self._fields)

    def extend(self, *fields: AttributeField) -> "AttributeSchema":
        """Return a new schema with extra fields appended."""
        return AttributeSchema((*self._fields, *fields))

    def evaluate(self, source: AttributeSource) -> dict[str, AttributeValue]:
        """Compute every attribute value for one span.

        Args:
            source: Request data and outcome of the traced operation

        Returns:
            Mapping of attribute key to value, in schema order
        """
        return {attribute.key: attribute.extract(source) for attribute in self._fields}


def default_schema(service_version: str = "") -> AttributeSchema:
    """Build the attribute schema of the ``getUser`` span.

    Args:
        service_version: Value reported under ``service_version``

    Returns:
        The schema
    """
    return AttributeSchema(
        [
            # Semantic conventions
            AttributeField(HTTP_METHOD, lambda s: s.request.method),
            AttributeField(HTTP_SCHEME, lambda s: s.request.scheme),
            AttributeField(HTTP_STATUS_CODE, lambda s: s.status_code),
            AttributeField(HTTP_TARGET, lambda s: s.request.target),
            AttributeField(HTTP_URL, lambda s: s.request.url),
            AttributeField(HTTP_HOST, lambda s: s.request.host),
            AttributeField(NET_HOST_PORT, lambda s: s.request.port),
            AttributeField(HTTP_USER_AGENT, lambda s: s.request.user_agent),
            AttributeField(
                HTTP_REQUEST_CONTENT_LENGTH, lambda s: s.request.content_length
            ),
            AttributeField(NET_PEER_IP, lambda s: s.request.peer_address),
            # Custom
            AttributeField(CREATED_AT, lambda s: s.request.received_at.isoformat()),
            AttributeField(DURATION_NS, lambda s: float(s.elapsed_ns)),
            AttributeField(PARENT_ID, lambda s: s.parent_span_id),
            AttributeField(REFERER, lambda s: s.request.referer),
            AttributeField(REQUEST_TYPE, lambda _: REQUEST_TYPE_INCOMING),
            AttributeField(SDK_TYPE_KEY, lambda _: SDK_TYPE),
            AttributeField(SERVICE_VERSION, lambda _: service_version),
            AttributeField(TAGS, lambda _: []),
            # Structural
            AttributeField(PATH_PARAMS, lambda s: _to_json(dict(s.path_params))),
            AttributeField(
                QUERY_PARAMS,
                lambda s: _to_json({k: list(v) for k, v in s.request.query_params.items()}),
            ),
            AttributeField(REQUEST_BODY, lambda _: EMPTY_BODY),
            AttributeField(
                REQUEST_HEADERS,
                lambda s: _to_json({k: list(v) for k, v in s.request.headers.items()}),
            ),
            AttributeField(RESPONSE_BODY, lambda _: EMPTY_BODY),
            AttributeField(RESPONSE_HEADERS, lambda _: EMPTY_BODY),
        ]
    )


# Schema without a service version, used when none is configured
DEFAULT_SCHEMA = default_schema()
