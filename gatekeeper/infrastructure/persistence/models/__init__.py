"""SQLAlchemy ORM models. Import this package to register all tables on Base.metadata."""

from gatekeeper.infrastructure.persistence.models.audit_record import AuditRecord
from gatekeeper.infrastructure.persistence.models.outbox import InboxMessage, OutboxMessage
from gatekeeper.infrastructure.persistence.models.tenant import Tenant
from gatekeeper.infrastructure.persistence.models.user import User, UserRole

__all__ = [
    "AuditRecord",
    "InboxMessage",
    "OutboxMessage",
    "Tenant",
    "User",
    "UserRole",
]
