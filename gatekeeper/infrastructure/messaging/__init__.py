"""Outbox/inbox relay: dispatcher and built-in handlers."""

from gatekeeper.infrastructure.messaging.handlers import (
    LoggingEventHandler,
    build_event_registry,
)
from gatekeeper.infrastructure.messaging.outbox_dispatcher import (
    DispatchResult,
    OutboxDispatcher,
)

__all__ = [
    "DispatchResult",
    "LoggingEventHandler",
    "OutboxDispatcher",
    "build_event_registry",
]
