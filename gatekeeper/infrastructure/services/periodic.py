"""Periodic task runner owned by the application lifespan."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from gatekeeper.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class PeriodicTask:
    """Runs job every interval_seconds until stopped. Job errors are logged, not raised."""

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        job: Callable[[], Awaitable[Any]],
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.name = name
        self.interval_seconds = interval_seconds
        self.job = job
        self._stop = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                await self.job()
            except Exception:
                logger.exception("Periodic task %s failed", self.name)
            self.runs += 1
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
            except TimeoutError:
                pass

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._task = asyncio.create_task(self._loop(), name=f"periodic-{self.name}")
        logger.info("Periodic task %s started (every %.1fs)", self.name, self.interval_seconds)

    async def stop(self, timeout: float = 10.0) -> None:
        """Signal stop and wait for the current run; cancel it after timeout."""
        task, self._task = self._task, None
        if task is None:
            return
        self._stop.set()
        try:
            await asyncio.wait_for(task, timeout=timeout)
        except TimeoutError:
            logger.warning("Periodic task %s cancelled after %.1fs", self.name, timeout)
        logger.info("Periodic task %s stopped", self.name)
