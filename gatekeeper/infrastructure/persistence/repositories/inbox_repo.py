"""Inbox repository: idempotency markers keyed by (event_id, handler_name)."""

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from gatekeeper.infrastructure.persistence.models.outbox import InboxMessage


class InboxRepository:
    """Records which handlers have completed which events."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def exists(self, event_id: str, handler_name: str) -> bool:
        result = await self.db.execute(
            select(InboxMessage.event_id).where(
                and_(InboxMessage.event_id == event_id, InboxMessage.handler_name == handler_name)
            )
        )
        return result.first() is not None

    async def mark_processed(
        self, event_id: str, handler_name: str, tenant_id: str | None = None
    ) -> None:
        """Insert the marker in the current transaction (with the handler's own writes)."""
        self.db.add(InboxMessage(event_id=event_id, handler_name=handler_name, tenant_id=tenant_id))
        await self.db.flush()
