"""Audit record repository: append-only inserts, filtered listing, aggregation."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import Select, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gatekeeper.application.dtos.audit import AuditRecordResult, AuditSummary
from gatekeeper.domain.enums import AuditSeverity
from gatekeeper.infrastructure.persistence.models.audit_record import AuditRecord
from gatekeeper.shared.utils.datetime import ensure_utc


def _record_to_result(r: AuditRecord) -> AuditRecordResult:
    occurred_at = ensure_utc(r.occurred_at)
    received_at = ensure_utc(r.received_at)
    assert occurred_at is not None and received_at is not None
    return AuditRecordResult(
        id=r.id,
        occurred_at=occurred_at,
        received_at=received_at,
        event_type=r.event_type,
        severity=r.severity,
        tenant_id=r.tenant_id,
        user_id=r.user_id,
        user_name=r.user_name,
        trace_id=r.trace_id,
        span_id=r.span_id,
        correlation_id=r.correlation_id,
        request_id=r.request_id,
        source=r.source,
        tags=r.tags,
        payload=json.loads(r.payload_json or "{}"),
    )


def _severity_name(value: int) -> str:
    try:
        return AuditSeverity(value).name
    except ValueError:
        return str(value)


class AuditRecordRepository:
    """Append-only audit store (IAuditRecordRepository). No update or delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def add_batch(self, rows: Sequence[Mapping[str, Any]]) -> int:
        """Insert serialized rows in the session's transaction."""
        if not rows:
            return 0
        self.db.add_all([AuditRecord(**row) for row in rows])
        await self.db.flush()
        return len(rows)

    def _filters(
        self,
        *,
        tenant_id: str | None = None,
        event_type: str | None = None,
        user_id: str | None = None,
        min_severity: int | None = None,
        from_timestamp: datetime | None = None,
        to_timestamp: datetime | None = None,
    ) -> list[Any]:
        conditions: list[Any] = []
        if tenant_id is not None:
            conditions.append(AuditRecord.tenant_id == tenant_id)
        if event_type is not None:
            conditions.append(AuditRecord.event_type == event_type)
        if user_id is not None:
            conditions.append(AuditRecord.user_id == user_id)
        if min_severity is not None:
            conditions.append(AuditRecord.severity >= min_severity)
        if from_timestamp is not None:
            conditions.append(AuditRecord.occurred_at >= from_timestamp)
        if to_timestamp is not None:
            conditions.append(AuditRecord.occurred_at <= to_timestamp)
        return conditions

    async def list(
        self,
        *,
        tenant_id: str | None = None,
        event_type: str | None = None,
        user_id: str | None = None,
        min_severity: int | None = None,
        from_timestamp: datetime | None = None,
        to_timestamp: datetime | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditRecordResult]:
        """Return audit records newest first with optional filters."""
        conditions = self._filters(
            tenant_id=tenant_id,
            event_type=event_type,
            user_id=user_id,
            min_severity=min_severity,
            from_timestamp=from_timestamp,
            to_timestamp=to_timestamp,
        )
        stmt = select(AuditRecord)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        stmt = stmt.order_by(AuditRecord.occurred_at.desc(), AuditRecord.id).offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        return [_record_to_result(r) for r in result.scalars().all()]

    async def count(
        self,
        *,
        tenant_id: str | None = None,
        event_type: str | None = None,
        user_id: str | None = None,
        min_severity: int | None = None,
        from_timestamp: datetime | None = None,
        to_timestamp: datetime | None = None,
    ) -> int:
        """Return the number of records matching the filters."""
        conditions = self._filters(
            tenant_id=tenant_id,
            event_type=event_type,
            user_id=user_id,
            min_severity=min_severity,
            from_timestamp=from_timestamp,
            to_timestamp=to_timestamp,
        )
        stmt = select(func.count()).select_from(AuditRecord)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def summarize(
        self,
        *,
        tenant_id: str | None = None,
        from_timestamp: datetime | None = None,
        to_timestamp: datetime | None = None,
    ) -> AuditSummary:
        """Counts by event type, severity, source and tenant over the window."""
        conditions = self._filters(
            tenant_id=tenant_id, from_timestamp=from_timestamp, to_timestamp=to_timestamp
        )

        async def grouped(column: Any) -> dict[Any, int]:
            stmt: Select[Any] = select(column, func.count()).select_from(AuditRecord)
            if conditions:
                stmt = stmt.where(and_(*conditions))
            result = await self.db.execute(stmt.group_by(column))
            return {key: int(n) for key, n in result.all()}

        bounds_stmt = select(
            func.count(), func.min(AuditRecord.occurred_at), func.max(AuditRecord.occurred_at)
        ).select_from(AuditRecord)
        if conditions:
            bounds_stmt = bounds_stmt.where(and_(*conditions))
        total, first, last = (await self.db.execute(bounds_stmt)).one()

        by_severity = await grouped(AuditRecord.severity)
        by_source = await grouped(AuditRecord.source)
        by_tenant = await grouped(AuditRecord.tenant_id)
        return AuditSummary(
            total=int(total or 0),
            by_event_type={str(k): v for k, v in (await grouped(AuditRecord.event_type)).items()},
            by_severity={_severity_name(k): v for k, v in by_severity.items()},
            by_source={(k or "unknown"): v for k, v in by_source.items()},
            by_tenant={(k or "none"): v for k, v in by_tenant.items()},
            first_occurred_at=ensure_utc(first),
            last_occurred_at=ensure_utc(last),
        )
