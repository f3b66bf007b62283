"""Bounded, non-blocking audit channel with a single background consumer.

publish() is synchronous and never waits: when the buffer is full the
oldest envelope is dropped and counted. The consumer drains batches
through the AuditPipeline; a failed batch is logged and discarded (audit
delivery is best effort and must never back-pressure the auth path).
"""

from __future__ import annotations

import asyncio
from collections import deque

from gatekeeper.domain.value_objects import AuditEnvelope
from gatekeeper.infrastructure.services.audit_pipeline import AuditPipeline
from gatekeeper.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CAPACITY = 50_000


class ChannelAuditPublisher:
    """IAuditPublisher: drop-oldest buffer plus one consumer task."""

    def __init__(
        self,
        pipeline: AuditPipeline,
        *,
        capacity: int = DEFAULT_CAPACITY,
        batch_size: int = 500,
        flush_interval_seconds: float = 1.0,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.pipeline = pipeline
        self.capacity = capacity
        self.batch_size = max(1, batch_size)
        self.flush_interval_seconds = flush_interval_seconds
        self._buffer: deque[AuditEnvelope] = deque()
        self._wakeup = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._closed = False
        self._stopping = False
        self._dropped = 0
        self._written = 0
        self._failed = 0

    @property
    def dropped_count(self) -> int:
        """Envelopes shed because the buffer was full or the publisher closed."""
        return self._dropped

    @property
    def written_count(self) -> int:
        return self._written

    @property
    def failed_count(self) -> int:
        """Envelopes lost to sink failures."""
        return self._failed

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def publish(self, envelope: AuditEnvelope) -> bool:
        """Enqueue envelope without blocking; shed the oldest when full."""
        if self._closed:
            self._dropped += 1
            return False
        shed = False
        if len(self._buffer) >= self.capacity:
            self._buffer.popleft()
            self._dropped += 1
            shed = True
            if self._dropped == 1 or self._dropped % 1000 == 0:
                logger.warning(
                    "Audit buffer full (capacity %d); %d envelopes dropped so far",
                    self.capacity,
                    self._dropped,
                )
        self._buffer.append(envelope)
        self._wakeup.set()
        return not shed

    def _take_batch(self) -> list[AuditEnvelope]:
        n = min(self.batch_size, len(self._buffer))
        return [self._buffer.popleft() for _ in range(n)]

    async def drain(self) -> int:
        """Process everything currently buffered. Returns envelopes written."""
        written = 0
        while self._buffer:
            batch = self._take_batch()
            try:
                written += await self.pipeline.process(batch)
            except Exception:
                self._failed += len(batch)
                logger.exception("Audit sink failed; discarded %d envelopes", len(batch))
        self._written += written
        return written

    async def run(self) -> None:
        """Consumer loop: wake on publish or every flush interval, drain, repeat."""
        logger.info("Audit consumer started (capacity %d)", self.capacity)
        try:
            while True:
                try:
                    await asyncio.wait_for(
                        self._wakeup.wait(), timeout=self.flush_interval_seconds
                    )
                except TimeoutError:
                    pass
                self._wakeup.clear()
                await self.drain()
                if self._stopping:
                    break
        finally:
            logger.info(
                "Audit consumer stopped (written=%d, dropped=%d, failed=%d)",
                self._written,
                self._dropped,
                self._failed,
            )

    def start(self) -> None:
        """Start the consumer task on the running loop (lifespan startup)."""
        if self._task is None or self._task.done():
            self._closed = False
            self._stopping = False
            self._task = asyncio.create_task(self.run(), name="audit-consumer")

    async def stop(self, timeout: float = 5.0) -> None:
        """Stop accepting envelopes, let the consumer drain once, then cancel it."""
        self._closed = True
        self._stopping = True
        self._wakeup.set()
        task, self._task = self._task, None
        if task is None:
            return
        try:
            await asyncio.wait_for(task, timeout=timeout)
        except TimeoutError:
            logger.warning(
                "Audit consumer did not drain within %.1fs; %d envelopes abandoned",
                timeout,
                len(self._buffer),
            )
