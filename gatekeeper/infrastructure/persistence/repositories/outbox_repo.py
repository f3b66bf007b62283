"""Outbox repository: producer-side staging and dispatcher-side claiming.

add() only flushes; the row commits or rolls back with the producer's
transaction. Claiming takes a row lock where the database supports it
(FOR UPDATE SKIP LOCKED on PostgreSQL) and stamps a lease so a second
dispatcher skips rows the first one is working on, even on databases
without row locks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gatekeeper.application.events.integration_events import IntegrationEvent
from gatekeeper.domain.enums import OutboxStatus
from gatekeeper.infrastructure.persistence.models.outbox import OutboxMessage
from gatekeeper.shared.utils.datetime import utc_now


@dataclass(frozen=True)
class ClaimedMessage:
    """Detached snapshot of a claimed outbox row."""

    id: str
    type: str
    payload: str
    tenant_id: str | None
    correlation_id: str | None
    retry_count: int


def status_of(message: OutboxMessage) -> OutboxStatus:
    """Derived lifecycle state of an outbox row."""
    if message.is_dead:
        return OutboxStatus.DEAD
    if message.processed_at is not None:
        return OutboxStatus.PROCESSED
    return OutboxStatus.PENDING


def _pending_and_unleased(now: datetime):
    return and_(
        OutboxMessage.processed_at.is_(None),
        OutboxMessage.is_dead.is_(False),
        or_(OutboxMessage.locked_until.is_(None), OutboxMessage.locked_until < now),
    )


class OutboxRepository:
    """Outbox persistence (IOutboxRepository plus dispatcher operations)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def add(self, event: IntegrationEvent) -> str:
        """Stage event in the current transaction; return the message id."""
        message = OutboxMessage(
            id=event.event_id,
            type=event.type_name(),
            payload=event.model_dump_json(),
            tenant_id=event.tenant_id,
            correlation_id=event.correlation_id,
        )
        self.db.add(message)
        await self.db.flush()
        return message.id

    async def get(self, message_id: str) -> OutboxMessage | None:
        result = await self.db.execute(
            select(OutboxMessage)
            .where(OutboxMessage.id == message_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def count_pending(self) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(OutboxMessage)
            .where(and_(OutboxMessage.processed_at.is_(None), OutboxMessage.is_dead.is_(False)))
        )
        return int(result.scalar_one())

    async def claim_pending(
        self,
        worker_id: str,
        batch_size: int,
        lease: timedelta,
        now: datetime | None = None,
    ) -> list[ClaimedMessage]:
        """Lease up to batch_size pending messages, oldest first, to worker_id."""
        now = now or utc_now()
        candidate_ids = list(
            (
                await self.db.execute(
                    select(OutboxMessage.id)
                    .where(_pending_and_unleased(now))
                    .order_by(OutboxMessage.created_at, OutboxMessage.id)
                    .limit(batch_size)
                    .with_for_update(skip_locked=True)
                )
            )
            .scalars()
            .all()
        )
        if not candidate_ids:
            return []
        await self.db.execute(
            update(OutboxMessage)
            .where(and_(OutboxMessage.id.in_(candidate_ids), _pending_and_unleased(now)))
            .values(locked_by=worker_id, locked_until=now + lease)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(
            select(OutboxMessage)
            .where(and_(OutboxMessage.id.in_(candidate_ids), OutboxMessage.locked_by == worker_id))
            .order_by(OutboxMessage.created_at, OutboxMessage.id)
            .execution_options(populate_existing=True)
        )
        return [
            ClaimedMessage(
                id=m.id,
                type=m.type,
                payload=m.payload,
                tenant_id=m.tenant_id,
                correlation_id=m.correlation_id,
                retry_count=m.retry_count,
            )
            for m in result.scalars().all()
        ]

    async def mark_processed(
        self, message_id: str, worker_id: str, now: datetime | None = None
    ) -> bool:
        """Mark processed and release the lease. False if worker_id no longer holds it."""
        result = await self.db.execute(
            update(OutboxMessage)
            .where(
                and_(OutboxMessage.id == message_id, OutboxMessage.locked_by == worker_id)
            )
            .values(
                processed_at=now or utc_now(),
                last_error=None,
                locked_by=None,
                locked_until=None,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def mark_failed(
        self, message_id: str, worker_id: str, error: str, max_retries: int
    ) -> tuple[int, bool] | None:
        """Record a failed delivery attempt; return (retry_count, is_dead).

        The message is dead-lettered once retry_count reaches max_retries.
        Returns None when worker_id no longer holds the lease (another
        dispatcher reclaimed the message after it expired).
        """
        message = await self.get(message_id)
        if message is None or message.locked_by != worker_id:
            return None
        retry_count = message.retry_count + 1
        is_dead = retry_count >= max_retries
        result = await self.db.execute(
            update(OutboxMessage)
            .where(
                and_(
                    OutboxMessage.id == message_id,
                    OutboxMessage.locked_by == worker_id,
                    OutboxMessage.retry_count == message.retry_count,
                )
            )
            .values(
                retry_count=retry_count,
                last_error=error[:4000],
                is_dead=is_dead,
                locked_by=None,
                locked_until=None,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return retry_count, is_dead
