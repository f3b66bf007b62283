"""Security audit API: list and summarize the caller's tenant audit records (admin role)."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from gatekeeper.api.v1.dependencies import get_audit_record_repo, require_admin_role
from gatekeeper.domain.enums import AuditEventType
from gatekeeper.domain.value_objects import ClaimSet
from gatekeeper.infrastructure.persistence.repositories import AuditRecordRepository
from gatekeeper.schemas.audit import (
    AuditListResponse,
    AuditRecordResponse,
    AuditSummaryResponse,
)

router = APIRouter()


@router.get("", response_model=AuditListResponse)
async def list_audits(
    claims: Annotated[ClaimSet, Depends(require_admin_role)],
    audit_repo: Annotated[AuditRecordRepository, Depends(get_audit_record_repo)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    event_type: AuditEventType | None = Query(None, description="Filter by event type"),
    user_id: str | None = Query(None, description="Filter by user id"),
    min_severity: int | None = Query(None, ge=0, le=5),
    from_timestamp: datetime | None = Query(None, description="From (inclusive) ISO8601"),
    to_timestamp: datetime | None = Query(None, description="To (inclusive) ISO8601"),
) -> AuditListResponse:
    """List audit records for the caller's tenant, newest first."""
    filters = {
        "tenant_id": claims.tenant_id,
        "event_type": event_type.value if event_type else None,
        "user_id": user_id,
        "min_severity": min_severity,
        "from_timestamp": from_timestamp,
        "to_timestamp": to_timestamp,
    }
    items = await audit_repo.list(**filters, skip=skip, limit=limit)
    total = await audit_repo.count(**filters)
    return AuditListResponse(
        items=[AuditRecordResponse.model_validate(i) for i in items],
        skip=skip,
        limit=limit,
        total=total,
    )


@router.get("/summary", response_model=AuditSummaryResponse)
async def summarize_audits(
    claims: Annotated[ClaimSet, Depends(require_admin_role)],
    audit_repo: Annotated[AuditRecordRepository, Depends(get_audit_record_repo)],
    from_timestamp: datetime | None = Query(None),
    to_timestamp: datetime | None = Query(None),
) -> AuditSummaryResponse:
    """Counts by event type, severity, source and tenant."""
    summary = await audit_repo.summarize(
        tenant_id=claims.tenant_id,
        from_timestamp=from_timestamp,
        to_timestamp=to_timestamp,
    )
    return AuditSummaryResponse.model_validate(summary)
