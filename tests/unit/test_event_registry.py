"""Tests for EventHandlerRegistry and integration event serialization."""

import pytest
from pydantic import ValidationError

from gatekeeper.application.events import (
    EventHandlerRegistry,
    PasswordChangedIntegrationEvent,
    UserRegisteredIntegrationEvent,
)
from gatekeeper.infrastructure.messaging import LoggingEventHandler, build_event_registry


class NamedHandler:
    def __init__(self, name: str) -> None:
        self.name = name

    async def handle(self, event, session) -> None:
        return None


def test_type_name_is_class_name() -> None:
    assert UserRegisteredIntegrationEvent.type_name() == "UserRegisteredIntegrationEvent"


def test_subscribe_and_resolve() -> None:
    registry = EventHandlerRegistry()
    handler = NamedHandler("welcome-mail")
    registry.subscribe(UserRegisteredIntegrationEvent, handler)
    assert registry.resolve("UserRegisteredIntegrationEvent") is UserRegisteredIntegrationEvent
    assert registry.handlers_for("UserRegisteredIntegrationEvent") == [handler]
    assert registry.handlers_for("Unknown") == []


def test_duplicate_handler_name_rejected() -> None:
    registry = EventHandlerRegistry()
    registry.subscribe(UserRegisteredIntegrationEvent, NamedHandler("h"))
    with pytest.raises(ValueError):
        registry.subscribe(UserRegisteredIntegrationEvent, NamedHandler("h"))


def test_same_handler_name_allowed_for_other_event_type() -> None:
    registry = EventHandlerRegistry()
    registry.subscribe(UserRegisteredIntegrationEvent, NamedHandler("h"))
    registry.subscribe(PasswordChangedIntegrationEvent, NamedHandler("h"))


def test_deserialize_round_trip() -> None:
    registry = EventHandlerRegistry()
    registry.register_event(UserRegisteredIntegrationEvent)
    event = UserRegisteredIntegrationEvent(
        tenant_id="acme", user_id="u1", email="a@example.com", display_name="A"
    )
    restored = registry.deserialize(event.type_name(), event.model_dump_json())
    assert restored == event


def test_deserialize_unknown_type() -> None:
    with pytest.raises(LookupError):
        EventHandlerRegistry().deserialize("Nope", "{}")


def test_deserialize_invalid_payload() -> None:
    registry = EventHandlerRegistry()
    registry.register_event(PasswordChangedIntegrationEvent)
    with pytest.raises(ValidationError):
        registry.deserialize("PasswordChangedIntegrationEvent", '{"tenant_id": "acme"}')


def test_default_registry_logs_every_event_type() -> None:
    registry = build_event_registry()
    for type_name in (
        "UserRegisteredIntegrationEvent",
        "PasswordChangedIntegrationEvent",
        "TenantCreatedIntegrationEvent",
    ):
        [handler] = registry.handlers_for(type_name)
        assert isinstance(handler, LoggingEventHandler)
