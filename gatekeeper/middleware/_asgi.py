"""Raw ASGI helpers shared by the middleware in this package."""

import re
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

Scope = MutableMapping[str, Any]
Message = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[Message]]
Send = Callable[[Message], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

# Safe for logs and headers: alphanumeric, hyphen, underscore, dot; bounded.
ID_MAX_LENGTH = 64
_SAFE_ID = re.compile(r"^[A-Za-z0-9_.-]{1,%d}$" % ID_MAX_LENGTH)


def get_header(scope: Scope, name: str) -> str | None:
    """First header value for name (case-insensitive)."""
    want = name.lower().encode("latin-1")
    for key, value in scope.get("headers", []):
        if key.lower() == want:
            return value.decode("latin-1")
    return None


def safe_id(raw: str | None) -> str | None:
    """Return raw stripped if it is a log-safe identifier, else None."""
    if raw is None:
        return None
    value = raw.strip()
    return value if _SAFE_ID.fullmatch(value) else None


def scope_state(scope: Scope) -> dict[str, Any]:
    """Per-request state dict (exposed by Starlette as request.state)."""
    return scope.setdefault("state", {})


def with_response_headers(send: Send, extra: list[tuple[bytes, bytes]]) -> Send:
    """Wrap send so extra headers are appended to http.response.start (no duplicates)."""

    async def send_wrapper(message: Message) -> None:
        if message["type"] == "http.response.start":
            headers = list(message.get("headers", []))
            present = {k.lower() for k, _ in headers}
            headers.extend((k, v) for k, v in extra if k.lower() not in present)
            message["headers"] = headers
        await send(message)

    return send_wrapper
