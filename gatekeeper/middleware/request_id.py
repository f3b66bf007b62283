"""Request ID middleware.

Forwards a client X-Request-ID when it is log-safe, otherwise generates
one, and echoes it on the response. Raw ASGI.
"""

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


def RequestIDMiddleware(app: ASGIApp, header_name: str = "X-Request-ID") -> ASGIApp:
    """Set scope state request_id and the response header."""
    header_b = header_name.encode("latin-1")

    async def asgi_app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = safe_id(get_header(scope, header_name)) or generate_cuid()
        scope_state(scope)["request_id"] = request_id
        await app(
            scope, receive, with_response_headers(send, [(header_b, request_id.encode())])
        )

    return asgi_app
