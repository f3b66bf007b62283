"""Handler registry: event type name -> event class and subscribed handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from gatekeeper.application.events.integration_events import IntegrationEvent

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class IIntegrationEventHandler(Protocol):
    """Handler for one or more integration event types.

    name must be stable across deployments: it is half of the inbox key.
    handle() runs inside the dispatcher's transaction; anything it writes
    through session commits together with the inbox marker.
    """

    name: str

    async def handle(self, event: IntegrationEvent, session: AsyncSession) -> None: ...


class EventHandlerRegistry:
    """Maps stored type names to event classes and their handlers."""

    def __init__(self) -> None:
        self._types: dict[str, type[IntegrationEvent]] = {}
        self._handlers: dict[str, list[IIntegrationEventHandler]] = {}

    def register_event(self, event_cls: type[IntegrationEvent]) -> None:
        """Make event_cls deserializable even if nothing subscribes to it."""
        self._types[event_cls.type_name()] = event_cls
        self._handlers.setdefault(event_cls.type_name(), [])

    def subscribe(
        self, event_cls: type[IntegrationEvent], handler: IIntegrationEventHandler
    ) -> None:
        """Register handler for event_cls. Handler names are unique per event type."""
        self.register_event(event_cls)
        handlers = self._handlers[event_cls.type_name()]
        if any(h.name == handler.name for h in handlers):
            raise ValueError(
                f"Handler {handler.name!r} already subscribed to {event_cls.type_name()}"
            )
        handlers.append(handler)

    def resolve(self, type_name: str) -> type[IntegrationEvent] | None:
        return self._types.get(type_name)

    def handlers_for(self, type_name: str) -> list[IIntegrationEventHandler]:
        return list(self._handlers.get(type_name, ()))

    def deserialize(self, type_name: str, payload: str) -> IntegrationEvent:
        """Rebuild the event stored under type_name.

        Raises:
            LookupError: If no event class is registered for type_name.
            pydantic.ValidationError: If payload does not match the class.
        """
        event_cls = self.resolve(type_name)
        if event_cls is None:
            raise LookupError(f"No integration event registered for type {type_name!r}")
        return event_cls.model_validate_json(payload)
