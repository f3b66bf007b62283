"""Security headers middleware.

Token endpoints return credentials, so every response is marked
non-cacheable in addition to the usual hardening headers. Raw ASGI.
"""

from gatekeeper.middleware._asgi import ASGIApp, Receive, Scope, Send, with_response_headers

DEFAULT_HEADERS = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
}


def SecurityHeadersMiddleware(
    app: ASGIApp, headers: dict[str, str] | None = None
) -> ASGIApp:
    """Add headers to every HTTP response unless the endpoint already set them."""
    resolved = DEFAULT_HEADERS if headers is None else headers
    header_list = [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in resolved.items()]

    async def asgi_app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        await app(scope, receive, with_response_headers(send, header_list))

    return asgi_app
