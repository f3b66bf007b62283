"""Integration events published through the transactional outbox.

Events are pydantic models so the relay can round-trip them through the
outbox payload column as JSON. The stored type name is the class name.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from gatekeeper.shared.utils.datetime import utc_now
from gatekeeper.shared.utils.generators import generate_cuid


class IntegrationEvent(BaseModel):
    """Base integration event. event_id doubles as the outbox message id."""

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=generate_cuid)
    occurred_at: datetime = Field(default_factory=utc_now)
    tenant_id: str | None = None
    correlation_id: str | None = None

    @classmethod
    def type_name(cls) -> str:
        """Name stored in outbox_message.type."""
        return cls.__name__


class UserRegisteredIntegrationEvent(IntegrationEvent):
    user_id: str
    email: str
    display_name: str = ""


class PasswordChangedIntegrationEvent(IntegrationEvent):
    user_id: str


class TenantCreatedIntegrationEvent(IntegrationEvent):
    name: str
    admin_user_id: str
    admin_email: str
