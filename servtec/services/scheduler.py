"""
Job scheduling

`Scheduler` is the timer abstraction the reminder service registers its jobs
with. `AsyncioScheduler` runs them on the current event loop and computes
fire times with dateutil recurrence rules in the business timezone.
"""
import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, time
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Set

from dateutil import rrule

from servtec.utils.dates import resolve_tz
from servtec.utils.logger import get_logger

logger = get_logger(__name__)

Job = Callable[[], Awaitable[None]]

WEEKDAYS = {
    "MO": rrule.MO,
    "TU": rrule.TU,
    "WE": rrule.WE,
    "TH": rrule.TH,
    "FR": rrule.FR,
    "SA": rrule.SA,
    "SU": rrule.SU,
}
ALL_WEEKDAYS = list(WEEKDAYS)


class Scheduler(ABC):
    """Registers recurring async jobs"""

    @abstractmethod
    def every_at(
        self,
        times: Sequence[time],
        fn: Job,
        weekdays: Optional[Iterable[str]] = None,
        name: str = ""
    ) -> None:
        """Run `fn` at each time of day on the given weekdays (MO..SU)."""

    @abstractmethod
    def every_interval(self, seconds: float, fn: Job, name: str = "") -> None:
        """Run `fn` every `seconds`."""

    @abstractmethod
    def stop(self) -> None:
        """Cancel all timers. Jobs already running are left to finish."""


def next_fire_time(
    after: datetime,
    times: Sequence[time],
    weekdays: Optional[Iterable[str]] = None
) -> datetime:
    """
    First occurrence strictly after `after` of any time of day on the allowed
    weekdays, in `after`'s timezone.
    """
    codes = [d.upper() for d in (weekdays or ALL_WEEKDAYS)]
    unknown = [d for d in codes if d not in WEEKDAYS]
    if unknown:
        raise ValueError(f"Unknown weekday codes: {unknown}")

    rule = rrule.rrule(
        rrule.DAILY,
        dtstart=after.replace(second=0, microsecond=0),
        byweekday=[WEEKDAYS[d] for d in codes],
        byhour=sorted({t.hour for t in times}),
        byminute=sorted({t.minute for t in times}),
        bysecond=0,
    )
    wanted = {(t.hour, t.minute) for t in times}
    for candidate in rule:
        if candidate > after and (candidate.hour, candidate.minute) in wanted:
            return candidate
    raise ValueError("Schedule has no future occurrences")


class AsyncioScheduler(Scheduler):
    """
    Scheduler on the running asyncio loop.

    Each registered job gets its own timer task. When a timer fires, the job
    runs as a separate task so a slow job never delays the next tick, and job
    failures are logged without stopping the timer.
    """

    def __init__(self, timezone: str = "UTC", clock: Optional[Callable[[], datetime]] = None):
        self.tz = resolve_tz(timezone)
        self.clock = clock or (lambda: datetime.now(self.tz))
        self._timers: List[asyncio.Task] = []
        self._running: Set[asyncio.Task] = set()

    def every_at(
        self,
        times: Sequence[time],
        fn: Job,
        weekdays: Optional[Iterable[str]] = None,
        name: str = ""
    ) -> None:
        if not times:
            raise ValueError("At least one time of day is required")
        weekdays = list(weekdays or ALL_WEEKDAYS)
        next_fire_time(self.clock().astimezone(self.tz), times, weekdays)
        self._start_timer(self._daily_loop(times, fn, weekdays, name or fn.__name__))

    def every_interval(self, seconds: float, fn: Job, name: str = "") -> None:
        if seconds <= 0:
            raise ValueError("Interval must be positive")
        self._start_timer(self._interval_loop(seconds, fn, name or fn.__name__))

    def stop(self) -> None:
        for task in self._timers:
            task.cancel()
        logger.info(f"Scheduler stopped ({len(self._timers)} timers cancelled)")
        self._timers = []

    @property
    def running(self) -> bool:
        return bool(self._timers)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _start_timer(self, coro) -> None:
        self._timers.append(asyncio.get_running_loop().create_task(coro))

    async def _daily_loop(self, times, fn: Job, weekdays, name: str) -> None:
        while True:
            now = self.clock().astimezone(self.tz)
            fire_at = next_fire_time(now, times, weekdays)
            delay = (fire_at - now).total_seconds()
            logger.debug(f"Job '{name}' next run at {fire_at.isoformat()}")
            await asyncio.sleep(max(delay, 0))
            self._dispatch(fn, name)

    async def _interval_loop(self, seconds: float, fn: Job, name: str) -> None:
        while True:
            await asyncio.sleep(seconds)
            self._dispatch(fn, name)

    def _dispatch(self, fn: Job, name: str) -> None:
        task = asyncio.get_running_loop().create_task(self._run_job(fn, name))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    @staticmethod
    async def _run_job(fn: Job, name: str) -> None:
        logger.info(f"Running scheduled job '{name}'")
        try:
            await fn()
        except Exception as e:
            logger.error(f"Scheduled job '{name}' failed: {e}")
