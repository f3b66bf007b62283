"""Outbox dispatcher: claims pending messages and runs their handlers effectively once.

Delivery is at-least-once; the inbox marker written in the handler's own
transaction turns that into effectively-once per (event, handler). A
message is marked processed only when every handler has completed.
"""

from __future__ import annotations

import os
import socket
from dataclasses import dataclass, field
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gatekeeper.application.events.registry import EventHandlerRegistry
from gatekeeper.domain.exceptions import DeliveryFailedException
from gatekeeper.infrastructure.persistence.repositories.inbox_repo import InboxRepository
from gatekeeper.infrastructure.persistence.repositories.outbox_repo import (
    ClaimedMessage,
    OutboxRepository,
)
from gatekeeper.shared.telemetry.logging import get_logger
from gatekeeper.shared.utils.generators import generate_short_id

logger = get_logger(__name__)


def default_worker_id() -> str:
    """host:pid:suffix, unique per dispatcher instance."""
    return f"{socket.gethostname()}:{os.getpid()}:{generate_short_id()}"


@dataclass
class DispatchResult:
    """Counters for one dispatch_once() run."""

    claimed: int = 0
    processed: int = 0
    failed: int = 0
    dead: int = 0
    errors: list[DeliveryFailedException] = field(default_factory=list)


class OutboxDispatcher:
    """Relays outbox messages to registered handlers."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        registry: EventHandlerRegistry,
        *,
        batch_size: int = 100,
        max_retries: int = 5,
        lease_seconds: int = 60,
        worker_id: str | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.registry = registry
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.lease = timedelta(seconds=lease_seconds)
        self.worker_id = worker_id or default_worker_id()

    async def dispatch_once(self) -> DispatchResult:
        """Claim one batch and deliver it. Safe to run from several processes."""
        logger.info("Outbox dispatch started (worker %s)", self.worker_id)
        result = DispatchResult()
        async with self.session_factory() as session:
            async with session.begin():
                claimed = await OutboxRepository(session).claim_pending(
                    self.worker_id, self.batch_size, self.lease
                )
        result.claimed = len(claimed)
        for message in claimed:
            error = await self._deliver(message)
            if error is None:
                result.processed += 1
                continue
            result.failed += 1
            result.errors.append(error)
            if await self._record_failure(message, error):
                result.dead += 1
        logger.info(
            "Outbox dispatch finished: claimed=%d processed=%d failed=%d dead=%d",
            result.claimed,
            result.processed,
            result.failed,
            result.dead,
        )
        return result

    async def _deliver(self, message: ClaimedMessage) -> DeliveryFailedException | None:
        """Run every handler not yet recorded in the inbox; return the first failure."""
        try:
            event = self.registry.deserialize(message.type, message.payload)
        except Exception as e:
            return DeliveryFailedException(message.id, None, f"{type(e).__name__}: {e}")

        failures: list[DeliveryFailedException] = []
        for handler in self.registry.handlers_for(message.type):
            try:
                async with self.session_factory() as session:
                    async with session.begin():
                        inbox = InboxRepository(session)
                        if await inbox.exists(message.id, handler.name):
                            logger.debug(
                                "Skipping %s for %s: already processed", handler.name, message.id
                            )
                            continue
                        await handler.handle(event, session)
                        await inbox.mark_processed(message.id, handler.name, message.tenant_id)
            except Exception as e:
                logger.warning(
                    "Handler %s failed for outbox message %s (%s): %s",
                    handler.name,
                    message.id,
                    message.type,
                    e,
                )
                failures.append(
                    DeliveryFailedException(message.id, handler.name, f"{type(e).__name__}: {e}")
                )

        if failures:
            if len(failures) == 1:
                return failures[0]
            combined = "; ".join(f"{f.details['handler']}: {f.details['error']}" for f in failures)
            return DeliveryFailedException(message.id, None, combined)

        async with self.session_factory() as session:
            async with session.begin():
                released = await OutboxRepository(session).mark_processed(
                    message.id, self.worker_id
                )
        if not released:
            # Handlers are recorded in the inbox; the new lease holder skips them.
            logger.warning(
                "Lease on outbox message %s lost before it was marked processed", message.id
            )
        return None

    async def _record_failure(
        self, message: ClaimedMessage, error: DeliveryFailedException
    ) -> bool:
        """Increment retry_count and dead-letter at max_retries. Returns True if now dead."""
        async with self.session_factory() as session:
            async with session.begin():
                recorded = await OutboxRepository(session).mark_failed(
                    message.id,
                    self.worker_id,
                    str(error.details.get("error", error.message)),
                    self.max_retries,
                )
        if recorded is None:
            logger.warning(
                "Lease on outbox message %s lost; failure left to the new holder", message.id
            )
            return False
        retry_count, is_dead = recorded
        if is_dead:
            logger.error(
                "Outbox message %s (%s) dead-lettered after %d attempts: %s",
                message.id,
                message.type,
                retry_count,
                error.details.get("error"),
            )
        else:
            logger.warning(
                "Outbox message %s (%s) failed attempt %d/%d",
                message.id,
                message.type,
                retry_count,
                self.max_retries,
            )
        return is_dead
