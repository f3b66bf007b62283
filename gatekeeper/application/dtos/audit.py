"""DTOs for audit queries."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AuditRecordResult:
    """Persisted audit record read-model."""

    id: str
    occurred_at: datetime
    received_at: datetime
    event_type: str
    severity: int
    tenant_id: str | None
    user_id: str | None
    user_name: str | None
    trace_id: str | None
    span_id: str | None
    correlation_id: str | None
    request_id: str | None
    source: str | None
    tags: int
    payload: dict[str, Any]


@dataclass(frozen=True)
class AuditSummary:
    """Aggregate counts over a window of audit records."""

    total: int
    by_event_type: dict[str, int] = field(default_factory=dict)
    by_severity: dict[str, int] = field(default_factory=dict)
    by_source: dict[str, int] = field(default_factory=dict)
    by_tenant: dict[str, int] = field(default_factory=dict)
    first_occurred_at: datetime | None = None
    last_occurred_at: datetime | None = None
