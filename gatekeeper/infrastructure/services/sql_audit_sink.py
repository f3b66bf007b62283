"""SQL audit sink: writes serialized audit rows in their own transaction."""

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gatekeeper.infrastructure.persistence.repositories.audit_record_repo import (
    AuditRecordRepository,
)
from gatekeeper.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class SqlAuditSink:
    """IAuditSink over audit_record. Independent of any request transaction."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def write(self, rows: Sequence[Mapping[str, Any]]) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                written = await AuditRecordRepository(session).add_batch(rows)
        logger.info("Wrote %d audit records.", written)
