"""Built-in integration event handlers and the default registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gatekeeper.application.events import (
    EventHandlerRegistry,
    IntegrationEvent,
    PasswordChangedIntegrationEvent,
    TenantCreatedIntegrationEvent,
    UserRegisteredIntegrationEvent,
)
from gatekeeper.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class LoggingEventHandler:
    """Writes each delivered event to the application log."""

    name = "log"

    async def handle(self, event: IntegrationEvent, session: AsyncSession) -> None:
        logger.info(
            "Integration event %s %s (tenant %s, correlation %s)",
            event.type_name(),
            event.event_id,
            event.tenant_id,
            event.correlation_id,
        )


def build_event_registry() -> EventHandlerRegistry:
    """Registry with every integration event known to the service."""
    registry = EventHandlerRegistry()
    log_handler = LoggingEventHandler()
    for event_cls in (
        UserRegisteredIntegrationEvent,
        PasswordChangedIntegrationEvent,
        TenantCreatedIntegrationEvent,
    ):
        registry.subscribe(event_cls, log_handler)
    return registry
