"""Tests for the fixed-delay scheduler."""

import asyncio
import time

import pytest
from unittest.mock import AsyncMock

from beer_service.scheduler import FixedDelayScheduler


class TestFixedDelayScheduler:

    @pytest.mark.asyncio
    async def test_runs_repeatedly_after_initial_delay(self):
        job = AsyncMock()
        scheduler = FixedDelayScheduler("job", job, initial_delay=0.01, fixed_delay=0.02)

        scheduler.start()
        await asyncio.sleep(0.2)
        await scheduler.stop()

        assert job.await_count >= 2
        assert scheduler.runs == job.await_count

    @pytest.mark.asyncio
    async def test_waits_initial_delay(self):
        job = AsyncMock()
        scheduler = FixedDelayScheduler("job", job, initial_delay=10, fixed_delay=0.01)

        scheduler.start()
        await asyncio.sleep(0.05)
        await scheduler.stop()

        job.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_job_errors_do_not_stop_scheduler(self):
        job = AsyncMock(side_effect=RuntimeError("boom"))
        scheduler = FixedDelayScheduler("job", job, initial_delay=0, fixed_delay=0.01)

        scheduler.start()
        await asyncio.sleep(0.2)
        await scheduler.stop()

        assert job.await_count >= 2
        assert scheduler.running is False

    @pytest.mark.asyncio
    async def test_overlapping_ticks_are_skipped(self):
        active = 0
        overlaps = 0

        async def slow_job():
            nonlocal active, overlaps
            active += 1
            if active > 1:
                overlaps += 1
            await asyncio.sleep(0.1)
            active -= 1

        scheduler = FixedDelayScheduler("job", slow_job, initial_delay=0, fixed_delay=0.02)
        scheduler.start()
        await asyncio.sleep(0.4)
        await scheduler.stop()

        assert scheduler.runs >= 2
        assert scheduler.skipped >= 1
        assert overlaps == 0

    @pytest.mark.asyncio
    async def test_delay_measured_from_end_of_run(self):
        starts = []

        async def job():
            starts.append(time.monotonic())
            await asyncio.sleep(0.05)

        scheduler = FixedDelayScheduler("job", job, initial_delay=0, fixed_delay=0.05)
        scheduler.start()
        await asyncio.sleep(0.5)
        await scheduler.stop()

        assert len(starts) >= 2
        gaps = [later - earlier for earlier, later in zip(starts, starts[1:])]
        assert min(gaps) >= 0.08

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        scheduler = FixedDelayScheduler("job", AsyncMock(), initial_delay=0, fixed_delay=1)

        await scheduler.stop()

        assert scheduler.running is False
