"""Tests for PeriodicTask start/stop and error isolation."""

import asyncio

import pytest

from gatekeeper.infrastructure.services.periodic import PeriodicTask


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PeriodicTask("job", 0, lambda: asyncio.sleep(0))


async def test_runs_until_stopped() -> None:
    calls = 0

    async def job() -> None:
        nonlocal calls
        calls += 1

    task = PeriodicTask("job", 0.01, job)
    task.start()
    assert task.running
    for _ in range(100):
        if calls >= 3:
            break
        await asyncio.sleep(0.01)
    await task.stop(timeout=1.0)
    assert not task.running
    assert calls >= 3
    assert task.runs == calls


async def test_job_errors_do_not_stop_the_loop() -> None:
    calls = 0

    async def flaky() -> None:
        nonlocal calls
        calls += 1
        raise RuntimeError("boom")

    task = PeriodicTask("flaky", 0.01, flaky)
    task.start()
    for _ in range(100):
        if calls >= 2:
            break
        await asyncio.sleep(0.01)
    await task.stop(timeout=1.0)
    assert calls >= 2
