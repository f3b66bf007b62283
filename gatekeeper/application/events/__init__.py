"""Integration events and handler registry for the outbox relay."""

from gatekeeper.application.events.integration_events import (
    IntegrationEvent,
    PasswordChangedIntegrationEvent,
    TenantCreatedIntegrationEvent,
    UserRegisteredIntegrationEvent,
)
from gatekeeper.application.events.registry import (
    EventHandlerRegistry,
    IIntegrationEventHandler,
)

__all__ = [
    "EventHandlerRegistry",
    "IIntegrationEventHandler",
    "IntegrationEvent",
    "PasswordChangedIntegrationEvent",
    "TenantCreatedIntegrationEvent",
    "UserRegisteredIntegrationEvent",
]
