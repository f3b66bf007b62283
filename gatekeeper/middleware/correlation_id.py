"""Correlation and trace context middleware.

Correlation id: client X-Correlation-ID if log-safe, else the request id.
Trace/span ids come from a W3C traceparent header when one is present, so
audit envelopes can be joined with upstream traces. Raw ASGI.
"""

import re

from gatekeeper.middleware._asgi import (
    ASGIApp,
    Receive,
    Scope,
    Send,
    get_header,
    safe_id,
    scope_state,
    with_response_headers,
)
from gatekeeper.shared.utils.generators import generate_cuid

# version-traceid-parentid-flags, lowercase hex.
_TRACEPARENT = re.compile(r"^[0-9a-f]{2}-([0-9a-f]{32})-([0-9a-f]{16})-[0-9a-f]{2}$")


def parse_traceparent(value: str | None) -> tuple[str | None, str | None]:
    """Return (trace_id, parent_span_id) from a traceparent header, or (None, None)."""
    if not value:
        return None, None
    match = _TRACEPARENT.fullmatch(value.strip())
    if not match:
        return None, None
    trace_id, span_id = match.groups()
    if trace_id == "0" * 32 or span_id == "0" * 16:
        return None, None
    return trace_id, span_id


def CorrelationIDMiddleware(
    app: ASGIApp, header_name: str = "X-Correlation-ID"
) -> ASGIApp:
    """Set scope state correlation_id, trace_id, span_id; echo the correlation header."""
    header_b = header_name.encode("latin-1")

    async def asgi_app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        state = scope_state(scope)
        correlation_id = (
            safe_id(get_header(scope, header_name))
            or state.get("request_id")
            or generate_cuid()
        )
        trace_id, span_id = parse_traceparent(get_header(scope, "traceparent"))
        state["correlation_id"] = correlation_id
        state["trace_id"] = trace_id
        state["span_id"] = span_id
        await app(
            scope, receive, with_response_headers(send, [(header_b, correlation_id.encode())])
        )

    return asgi_app
