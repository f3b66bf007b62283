"""Outbox and inbox ORM models for the integration event relay."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from gatekeeper.infrastructure.persistence.database import Base
from gatekeeper.shared.utils.datetime import utc_now
from gatekeeper.shared.utils.generators import generate_cuid


class OutboxMessage(Base):
    """Integration event pending delivery. Written in the producer's transaction.

    Pending: processed_at is null and is_dead is false. locked_by/locked_until
    form a dispatcher lease so concurrent dispatchers never claim the same row.
    Rows are never deleted by the relay.
    """

    __tablename__ = "outbox_message"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_cuid)
    # Set in Python (microsecond precision) so oldest-first ordering is stable.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    type: Mapped[str] = mapped_column(String, nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    tenant_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    correlation_id: Mapped[str | None] = mapped_column(String, nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    retry_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_dead: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    locked_by: Mapped[str | None] = mapped_column(String, nullable=True)
    locked_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_outbox_pending", "processed_at", "is_dead", "created_at"),
    )


class InboxMessage(Base):
    """Idempotency marker: one row per (event, handler) that completed."""

    __tablename__ = "inbox_message"

    event_id: Mapped[str] = mapped_column(String, primary_key=True)
    handler_name: Mapped[str] = mapped_column(String, primary_key=True)
    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    tenant_id: Mapped[str | None] = mapped_column(String, nullable=True)
