"""Audit API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuditRecordResponse(BaseModel):
    """One persisted audit envelope."""

    model_config = ConfigDict(from_attributes=True)

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


class AuditListResponse(BaseModel):
    items: list[AuditRecordResponse]
    skip: int
    limit: int
    total: int


class AuditSummaryResponse(BaseModel):
    """Aggregate counts (GET /audits/summary)."""

    model_config = ConfigDict(from_attributes=True)

    total: int
    by_event_type: dict[str, int]
    by_severity: dict[str, int]
    by_source: dict[str, int]
    by_tenant: dict[str, int]
    first_occurred_at: datetime | None = None
    last_occurred_at: datetime | None = None
