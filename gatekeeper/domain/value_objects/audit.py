"""Audit envelope value object (immutable record of a security event)."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from gatekeeper.domain.enums import AuditEventType, AuditSeverity, AuditTag


@dataclass(frozen=True)
class AuditEnvelope:
    """One security/operational audit event. Never mutated after creation.

    Pipeline stages derive new envelopes with with_changes() instead of
    mutating an existing one.
    """

    id: str
    occurred_at: datetime
    received_at: datetime
    event_type: AuditEventType
    severity: AuditSeverity
    tenant_id: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    trace_id: str | None = None
    span_id: str | None = None
    correlation_id: str | None = None
    request_id: str | None = None
    source: str | None = None
    tags: AuditTag = AuditTag.NONE
    payload: dict[str, Any] = field(default_factory=dict)

    def with_changes(self, **changes: Any) -> "AuditEnvelope":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
