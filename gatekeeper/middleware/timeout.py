"""Request timeout middleware.

Cancels the downstream app after timeout_seconds. Cancellation propagates
into get_db_transactional, which rolls the request's transaction back.
A 504 is sent only if the response has not started yet. Raw ASGI.
"""

import asyncio
import json
import logging

from gatekeeper.middleware._asgi import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


def TimeoutMiddleware(app: ASGIApp, timeout_seconds: float) -> ASGIApp:
    """Bound request duration; respond 504 on timeout."""

    async def asgi_app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        started = False

        async def tracking_send(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await asyncio.wait_for(app(scope, receive, tracking_send), timeout=timeout_seconds)
        except TimeoutError:
            logger.warning(
                "Request timed out after %ss: %s %s (request_id=%s)",
                timeout_seconds,
                scope.get("method", ""),
                scope.get("path", ""),
                scope.get("state", {}).get("request_id"),
            )
            if started:
                return
            body = json.dumps(
                {
                    "error": "GATEWAY_TIMEOUT",
                    "message": "Request timed out",
                    "details": {"timeout_seconds": timeout_seconds},
                }
            ).encode()
            await send(
                {
                    "type": "http.response.start",
                    "status": 504,
                    "headers": [
                        (b"content-type", b"application/json"),
                        (b"content-length", str(len(body)).encode()),
                    ],
                }
            )
            await send({"type": "http.response.body", "body": body, "more_body": False})

    return asgi_app
