"""
Unit tests for job scheduling
"""
import asyncio
from datetime import datetime, time, timezone

import pytest

from servtec.services.scheduler import AsyncioScheduler, next_fire_time

BUSINESS_DAYS = ["MO", "TU", "WE", "TH", "FR", "SA"]


def at(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 10, day, hour, minute, tzinfo=timezone.utc)


class TestNextFireTime:
    """Test fire time computation"""

    def test_later_same_day(self):
        fire = next_fire_time(at(19, 15), [time(8), time(16)], BUSINESS_DAYS)
        assert fire == at(19, 16)

    def test_strictly_after(self):
        fire = next_fire_time(at(19, 16), [time(8), time(16)], BUSINESS_DAYS)
        assert fire == at(20, 8)

    def test_skips_sunday(self):
        # Saturday evening -> Monday morning
        fire = next_fire_time(at(24, 18, 30), [time(8), time(16)], BUSINESS_DAYS)
        assert fire == at(26, 8)

    def test_mixed_minutes_only_fire_at_listed_times(self):
        fire = next_fire_time(at(19, 8, 10), [time(8, 30), time(16, 0)])
        assert fire == at(19, 8, 30)

        fire = next_fire_time(at(19, 8, 31), [time(8, 30), time(16, 0)])
        assert fire == at(19, 16, 0)

    def test_lower_case_codes(self):
        assert next_fire_time(at(19, 15), [time(9)], ["tu"]) == at(20, 9)

    def test_unknown_weekday(self):
        with pytest.raises(ValueError):
            next_fire_time(at(19, 15), [time(9)], ["XX"])


class TestAsyncioScheduler:
    """Test the asyncio scheduler"""

    def test_every_at_requires_times(self):
        with pytest.raises(ValueError):
            AsyncioScheduler().every_at([], lambda: None)

    def test_every_interval_requires_positive_interval(self):
        with pytest.raises(ValueError):
            AsyncioScheduler().every_interval(0, lambda: None)

    @pytest.mark.asyncio
    async def test_interval_job_runs_until_stopped(self):
        calls = []

        async def job():
            calls.append(1)

        scheduler = AsyncioScheduler()
        scheduler.every_interval(0.01, job, name="tick")
        assert scheduler.running

        await asyncio.sleep(0.05)
        scheduler.stop()
        count = len(calls)
        await asyncio.sleep(0.03)

        assert count >= 1
        assert len(calls) == count
        assert scheduler.running is False

    @pytest.mark.asyncio
    async def test_failing_job_keeps_timer_alive(self):
        calls = []

        async def job():
            calls.append(1)
            raise RuntimeError("boom")

        scheduler = AsyncioScheduler()
        scheduler.every_interval(0.01, job)
        await asyncio.sleep(0.05)
        scheduler.stop()

        assert len(calls) >= 2

    @pytest.mark.asyncio
    async def test_every_at_waits_for_next_time(self):
        calls = []

        async def job():
            calls.append(1)

        scheduler = AsyncioScheduler(clock=lambda: at(19, 15))
        scheduler.every_at([time(16)], job, BUSINESS_DAYS, name="sweep")
        await asyncio.sleep(0.02)
        scheduler.stop()

        assert calls == []
