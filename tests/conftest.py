"""
Pytest configuration and fixtures
"""
from datetime import datetime, timedelta, timezone
from typing import List, Tuple

import pytest

from servtec.config import Settings
from servtec.errors import TransportError
from servtec.models.schemas import (
    CatalogEntry,
    Priority,
    RecipientRole,
    Ticket,
    TicketCreate,
    TicketState,
)
from servtec.repositories.memory_repository import InMemoryTicketStore
from servtec.services.scheduler import Scheduler

# Monday 2026-10-19 15:00 UTC
NOW = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to"""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, hours: float = 0, minutes: float = 0) -> None:
        self.now += timedelta(hours=hours, minutes=minutes)


class RecordingNotifier:
    """Notifier that records messages; roles in `failing` raise TransportError"""

    def __init__(self):
        self.sent: List[Tuple[RecipientRole, str]] = []
        self.failing = set()

    async def send(self, role: RecipientRole, text: str) -> None:
        if role in self.failing:
            raise TransportError(f"{role.value} unreachable")
        self.sent.append((role, text))

    def to(self, role: RecipientRole) -> List[str]:
        return [text for r, text in self.sent if r == role]


class ManualScheduler(Scheduler):
    """Scheduler whose jobs only run when fired by the test"""

    def __init__(self):
        self.at_jobs = {}
        self.interval_jobs = {}
        self.stopped = False

    def every_at(self, times, fn, weekdays=None, name=""):
        self.at_jobs[name or fn.__name__] = (list(times), list(weekdays or []), fn)

    def every_interval(self, seconds, fn, name=""):
        self.interval_jobs[name or fn.__name__] = (seconds, fn)

    def stop(self):
        self.stopped = True

    @property
    def running(self) -> bool:
        return not self.stopped

    async def fire(self, name: str):
        if name in self.at_jobs:
            return await self.at_jobs[name][2]()
        return await self.interval_jobs[name][1]()


async def _no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the local .env file"""
    return Settings(
        _env_file=None,
        timezone="UTC",
        group_chat_id="120363000000000000@g.us",
        handler_chat_id="595981111111",
        supervisor_chat_id="595982222222",
        handler_name="Javier Lopez",
        reminder_delay_seconds=0,
        scheduler_enabled=False,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def catalog() -> List[CatalogEntry]:
    """Sample equipment catalog"""
    return [
        CatalogEntry(
            id="EQ-001",
            name="Ultraformer MPT",
            brand="Classys",
            model="Ultraformer MPT",
            client="Clinica Norte SRL",
        ),
        CatalogEntry(
            id="EQ-002",
            name="Hydrafacial",
            brand="Hydrafacial",
            model="Syndeo",
            client="Centro Estetico Belleza SA",
        ),
        CatalogEntry(
            id="EQ-003",
            name="ND-Elite",
            brand="Fotona",
            model="ND-Elite",
            client="Hospital San Roque",
        ),
    ]


@pytest.fixture
def store(catalog, clock) -> InMemoryTicketStore:
    return InMemoryTicketStore(catalog=catalog, clock=clock)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def make_ticket(store, clock):
    """Insert a ticket last updated `hours_ago` hours before the clock"""

    def _make(
        number: str,
        priority: Priority = Priority.MEDIUM,
        state: TicketState = TicketState.PENDING,
        hours_ago: float = 0,
        client_name: str = "Clinica Norte SRL",
    ) -> Ticket:
        store.create_ticket(TicketCreate(
            document_number=number,
            description="No enciende el equipo",
            priority=priority,
            state=state,
            assigned_handler="Javier Lopez",
            client_name=client_name,
        ))
        stamp = clock() - timedelta(hours=hours_ago)
        return store.update_ticket(number, {"created_at": stamp, "updated_at": stamp})

    return _make


@pytest.fixture
def no_sleep():
    """Awaitable sleep replacement that returns immediately"""
    return _no_sleep
