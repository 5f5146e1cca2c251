"""
Reminder Scheduler

Periodic sweep over open tickets:
- critical tickets idle longer than the critical threshold get a reminder
- other tickets idle longer than the normal threshold get a reminder
- critical tickets idle beyond the escalation threshold are also broadcast
  to the shared channel

Tickets waiting for parts are excluded until resumed. A daily digest goes to
the supervisor.
"""
import asyncio
from datetime import timedelta
from typing import Callable, List, Optional

from pydantic import BaseModel, Field

from servtec.config import Settings, get_settings
from servtec.errors import TransportError
from servtec.models.schemas import (
    PAUSED_STATES,
    TERMINAL_STATES,
    DailySummary,
    Priority,
    RecipientRole,
    SweepResult,
    Ticket,
    TicketState,
    utcnow,
)
from servtec.repositories.base_repository import TicketStore
from servtec.services import messages
from servtec.services.scheduler import Scheduler
from servtec.services.whatsapp import Notifier
from servtec.utils.dates import local_midnight, resolve_tz, whole_hours
from servtec.utils.logger import get_logger

logger = get_logger(__name__)

EXCLUDED_STATES = TERMINAL_STATES | PAUSED_STATES


class StaleTickets(BaseModel):
    """Reminder candidates of one sweep"""
    critical: List[Ticket] = Field(default_factory=list)
    normal: List[Ticket] = Field(default_factory=list)
    escalation: List[Ticket] = Field(default_factory=list)

    @property
    def to_remind(self) -> List[Ticket]:
        return self.critical + self.normal


class ReminderService:
    """Stale-ticket reminders, escalations and the daily summary"""

    def __init__(
        self,
        store: TicketStore,
        notifier: Notifier,
        settings: Optional[Settings] = None,
        clock: Callable = utcnow,
        sleep=asyncio.sleep
    ):
        self.store = store
        self.notifier = notifier
        self.settings = settings or get_settings()
        self.clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()

    def collect_stale(self, now=None) -> StaleTickets:
        """
        Query the store for reminder and escalation candidates.

        Args:
            now: Reference time (clock when None)

        Returns:
            StaleTickets with critical, normal and escalation sets
        """
        now = now or self.clock()
        s = self.settings

        critical_cutoff = now - timedelta(hours=s.critical_threshold_hours)
        normal_cutoff = now - timedelta(hours=s.normal_threshold_hours)

        critical = [
            t for t in self.store.query_stale_tickets(critical_cutoff, EXCLUDED_STATES)
            if t.priority == Priority.CRITICAL
        ]
        normal = [
            t for t in self.store.query_stale_tickets(normal_cutoff, EXCLUDED_STATES)
            if t.priority != Priority.CRITICAL
        ]
        escalation = [
            t for t in critical
            if t.hours_since_update(now) >= s.escalation_threshold_hours
        ]

        return StaleTickets(critical=critical, normal=normal, escalation=escalation)

    async def run_sweep(self) -> SweepResult:
        """
        Send reminders for every stale ticket.

        A sweep started while another one is running is skipped. Delivery
        failures are recorded per ticket and never abort the sweep.
        """
        if self._lock.locked():
            logger.warning("Reminder sweep already running, skipping this tick")
            return SweepResult(skipped=True)

        async with self._lock:
            now = self.clock()
            result = SweepResult()

            try:
                stale = await asyncio.to_thread(self.collect_stale, now)
            except Exception as e:
                logger.error(f"Failed to query stale tickets: {e}")
                return result

            candidates = stale.to_remind
            if not candidates:
                logger.info("No tickets need reminders at this time")
                return result

            logger.info(
                f"Found {len(candidates)} tickets needing reminders "
                f"({len(stale.critical)} critical, {len(stale.normal)} normal)"
            )
            escalate = {t.document_number for t in stale.escalation}

            for index, ticket in enumerate(candidates):
                if index > 0:
                    await self._sleep(self.settings.reminder_delay_seconds)

                hours = whole_hours(now, ticket.updated_at)
                try:
                    await self.notifier.send(
                        RecipientRole.HANDLER, messages.reminder(ticket, hours)
                    )
                    result.reminded.append(ticket.document_number)

                    if ticket.document_number in escalate:
                        await self.notifier.send(
                            RecipientRole.SHARED,
                            messages.escalation(ticket, hours, self.settings.handler_name),
                        )
                        result.escalated.append(ticket.document_number)

                except Exception as e:
                    logger.error(f"Reminder for {ticket.document_number} failed: {e}")
                    result.failed.append(ticket.document_number)
                    continue

                logger.info(
                    f"Reminder sent for {ticket.document_number} "
                    f"(priority={ticket.priority.value}, {hours}h idle)"
                )

            return result

    def build_daily_summary(self, now=None) -> DailySummary:
        """
        Same-day digest.

        State and priority counts cover tickets created today; completions
        count tickets finished today; critical and SLA counts cover every open
        ticket.
        """
        now = now or self.clock()
        since = local_midnight(now, self.settings.timezone)
        tickets = self.store.list_tickets()

        created_today = [t for t in tickets if t.created_at >= since]
        open_tickets = [t for t in tickets if t.is_open]

        def state_count(state: TicketState) -> int:
            return sum(1 for t in created_today if t.state == state)

        by_priority = {p: 0 for p in Priority}
        for ticket in created_today:
            by_priority[ticket.priority] += 1

        return DailySummary(
            day=now.astimezone(resolve_tz(self.settings.timezone)).date(),
            created=len(created_today),
            completed=sum(
                1 for t in tickets
                if t.state == TicketState.DONE and t.updated_at >= since
            ),
            pending=state_count(TicketState.PENDING),
            in_progress=state_count(TicketState.IN_PROGRESS),
            waiting_parts=state_count(TicketState.WAITING_PARTS),
            critical_open=sum(1 for t in open_tickets if t.priority == Priority.CRITICAL),
            sla_breached=sum(
                1 for t in open_tickets
                if t.state not in PAUSED_STATES
                and t.hours_since_update(now) > self.settings.sla_hours
            ),
            by_priority=by_priority,
        )

    async def send_daily_summary(self) -> Optional[DailySummary]:
        try:
            summary = await asyncio.to_thread(self.build_daily_summary)
        except Exception as e:
            logger.error(f"Failed to build daily summary: {e}")
            return None

        try:
            await self.notifier.send(RecipientRole.SUPERVISOR, messages.daily_summary(summary))
        except TransportError as e:
            logger.error(f"Failed to send daily summary: {e}")
            return summary

        logger.info(
            f"Daily summary sent (created={summary.created}, completed={summary.completed}, "
            f"sla_breached={summary.sla_breached})"
        )
        return summary

    async def heartbeat(self) -> None:
        logger.info("Bot heartbeat - system is running")

    def register(self, scheduler: Scheduler) -> None:
        """Register the sweep, the daily summary and the heartbeat"""
        s = self.settings
        scheduler.every_at(
            s.REMINDER_TIMES, self.run_sweep, s.REMINDER_WEEKDAYS, name="reminder-sweep"
        )
        scheduler.every_at([s.DAILY_SUMMARY_TIME], self.send_daily_summary, name="daily-summary")
        scheduler.every_interval(s.heartbeat_interval_seconds, self.heartbeat, name="heartbeat")
        logger.info(
            f"Scheduled reminders at {s.reminder_times} ({s.reminder_weekdays}), "
            f"daily summary at {s.daily_summary_time}"
        )
