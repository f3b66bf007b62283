"""Repositories over AsyncSession. Return application DTOs where a port exists."""

from gatekeeper.infrastructure.persistence.repositories.audit_record_repo import (
    AuditRecordRepository,
)
from gatekeeper.infrastructure.persistence.repositories.inbox_repo import InboxRepository
from gatekeeper.infrastructure.persistence.repositories.outbox_repo import (
    ClaimedMessage,
    OutboxRepository,
)
from gatekeeper.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from gatekeeper.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "AuditRecordRepository",
    "ClaimedMessage",
    "InboxRepository",
    "OutboxRepository",
    "TenantRepository",
    "UserRepository",
]
