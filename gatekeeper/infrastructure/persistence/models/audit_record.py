"""Audit record ORM model. Append-only security audit storage."""

from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, Connection, DateTime, Integer, String, Text, event
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from gatekeeper.infrastructure.persistence.database import Base


class AuditRecord(Base):
    """Persisted AuditEnvelope. No update/delete.

    tenant_id is not a foreign key: audit history outlives tenant removal.
    """

    __tablename__ = "audit_record"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    received_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    event_type: Mapped[str] = mapped_column(String, nullable=False, index=True)
    severity: Mapped[int] = mapped_column(Integer, nullable=False)
    tenant_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    user_name: Mapped[str | None] = mapped_column(String, nullable=True)
    trace_id: Mapped[str | None] = mapped_column(String, nullable=True)
    span_id: Mapped[str | None] = mapped_column(String, nullable=True)
    correlation_id: Mapped[str | None] = mapped_column(String, nullable=True)
    request_id: Mapped[str | None] = mapped_column(String, nullable=True)
    source: Mapped[str | None] = mapped_column(String, nullable=True)
    tags: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    payload_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")


@event.listens_for(AuditRecord, "before_update")
def _prevent_audit_record_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: AuditRecord
) -> None:
    """Audit records are append-only; updates are forbidden."""
    raise ValueError("Audit records are immutable and cannot be updated.")


@event.listens_for(AuditRecord, "before_delete")
def _prevent_audit_record_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: AuditRecord
) -> None:
    """Audit records cannot be deleted through the ORM."""
    raise ValueError("Audit records cannot be deleted.")
