"""
Ticket Lifecycle Engine

Owns the ticket state machine. Operator replies are parsed into an
OperatorCommand and applied against the transition table below; anything
outside the table is a logged no-op.

    Pending/InProgress   --complete-->  Done (terminal)
    Pending              --start----->  InProgress
    Pending/InProgress   --hold------>  WaitingParts
    WaitingParts         --start----->  InProgress
    WaitingParts         --resume---->  Pending
    any non-terminal     --problem--->  Pending (annotated, supervisor notified)
"""
import asyncio
from typing import Callable, Dict, List, Optional

from servtec.config import Settings, get_settings
from servtec.errors import TransportError
from servtec.models.schemas import (
    CommandAction,
    CommandResult,
    OperatorCommand,
    Priority,
    RecipientRole,
    StatusReport,
    Ticket,
    TicketState,
    utcnow,
)
from servtec.repositories.base_repository import TicketStore
from servtec.services import messages
from servtec.services.commands import parse_command
from servtec.services.whatsapp import Notifier
from servtec.utils.dates import local_midnight
from servtec.utils.logger import get_logger

logger = get_logger(__name__)

TRANSITIONS: Dict[CommandAction, Dict[TicketState, TicketState]] = {
    CommandAction.COMPLETE: {
        TicketState.PENDING: TicketState.DONE,
        TicketState.IN_PROGRESS: TicketState.DONE,
    },
    CommandAction.START: {
        TicketState.PENDING: TicketState.IN_PROGRESS,
        TicketState.WAITING_PARTS: TicketState.IN_PROGRESS,
    },
    CommandAction.HOLD: {
        TicketState.PENDING: TicketState.WAITING_PARTS,
        TicketState.IN_PROGRESS: TicketState.WAITING_PARTS,
    },
    CommandAction.RESUME: {
        TicketState.WAITING_PARTS: TicketState.PENDING,
    },
    CommandAction.PROBLEM: {
        TicketState.PENDING: TicketState.PENDING,
        TicketState.IN_PROGRESS: TicketState.PENDING,
        TicketState.WAITING_PARTS: TicketState.PENDING,
    },
}


class TicketLifecycleEngine:
    """Applies operator commands to stored tickets"""

    def __init__(
        self,
        store: TicketStore,
        notifier: Notifier,
        settings: Optional[Settings] = None,
        clock: Callable = utcnow
    ):
        self.store = store
        self.notifier = notifier
        self.settings = settings or get_settings()
        self.clock = clock

    async def handle(self, text: str) -> CommandResult:
        """Parse and apply one operator reply"""
        command = parse_command(text)
        if command is None:
            logger.info(f"Ignoring unrecognized operator message: {text[:40]!r}")
            return CommandResult(reason="unrecognized command")
        return await self.apply(command)

    async def apply(self, command: OperatorCommand) -> CommandResult:
        """
        Apply a parsed command.

        Never raises: unknown tickets, invalid transitions and store failures
        are logged and reported in the returned CommandResult.
        """
        if command.action == CommandAction.STATUS:
            await self.send_status()
            return CommandResult(command=command, applied=True)

        number = command.document_number or ""
        try:
            ticket = await asyncio.to_thread(self.store.get_ticket, number)
        except Exception as e:
            logger.error(f"Failed to load ticket {number}: {e}")
            return CommandResult(command=command, reason="store error")

        if ticket is None:
            logger.warning(f"Command '{command.action.value}' for unknown ticket {number}")
            return CommandResult(command=command, reason="unknown ticket")

        target = TRANSITIONS[command.action].get(ticket.state)
        if target is None:
            logger.warning(
                f"Invalid transition: '{command.action.value}' on {ticket.document_number} "
                f"in state {ticket.state.value}"
            )
            return CommandResult(
                command=command,
                previous_state=ticket.state,
                reason="invalid transition",
            )

        patch = {
            "state": target,
            "annotation": self._annotate(ticket, command),
            "updated_at": self.clock(),
        }
        try:
            updated = await asyncio.to_thread(
                self.store.update_ticket, ticket.document_number, patch
            )
        except Exception as e:
            logger.error(f"Failed to update ticket {ticket.document_number}: {e}")
            return CommandResult(command=command, previous_state=ticket.state, reason="store error")

        if updated is None:
            return CommandResult(command=command, previous_state=ticket.state, reason="unknown ticket")

        logger.info(
            f"Ticket {updated.document_number}: {ticket.state.value} -> {target.value} "
            f"({command.action.value})"
        )
        await self._notify(command, updated)

        return CommandResult(
            command=command,
            applied=True,
            previous_state=ticket.state,
            new_state=target,
        )

    def status(self) -> StatusReport:
        """Open tickets per state and priority, plus tickets completed today"""
        now = self.clock()
        since = local_midnight(now, self.settings.timezone)
        report = StatusReport(
            by_state={s: 0 for s in TicketState if s != TicketState.DONE},
            by_priority={p: 0 for p in Priority},
        )

        for ticket in self.store.list_tickets():
            if ticket.is_open:
                report.by_state[ticket.state] += 1
                report.by_priority[ticket.priority] += 1
            elif ticket.updated_at >= since:
                report.completed_today += 1

        return report

    async def send_status(self) -> None:
        try:
            report = await asyncio.to_thread(self.status)
        except Exception as e:
            logger.error(f"Failed to compute status: {e}")
            return
        await self._send(RecipientRole.HANDLER, messages.status(report))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _annotate(self, ticket: Ticket, command: OperatorCommand) -> str:
        handler = self.settings.handler_name
        notes = {
            CommandAction.COMPLETE: f"Completado por {handler} via WhatsApp",
            CommandAction.START: f"{handler} está trabajando en el ticket",
            CommandAction.HOLD: "Pausado - esperando repuestos",
            CommandAction.RESUME: "Reanudado - pendiente de atención",
            CommandAction.PROBLEM: f"Problema reportado por {handler}: {command.detail}",
        }
        note = notes[command.action]
        if ticket.annotation:
            return f"{ticket.annotation}\n{note}"
        return note

    async def _notify(self, command: OperatorCommand, ticket: Ticket) -> None:
        number = ticket.document_number
        handler = self.settings.handler_name
        outbox: List[tuple] = []

        if command.action == CommandAction.COMPLETE:
            outbox = [
                (RecipientRole.HANDLER, messages.ack_complete(number)),
                (RecipientRole.SHARED, messages.completed_broadcast(number, handler)),
            ]
        elif command.action == CommandAction.START:
            outbox = [(RecipientRole.HANDLER, messages.ack_start(number))]
        elif command.action == CommandAction.HOLD:
            outbox = [(RecipientRole.HANDLER, messages.ack_hold(number))]
        elif command.action == CommandAction.RESUME:
            outbox = [(RecipientRole.HANDLER, messages.ack_resume(number))]
        elif command.action == CommandAction.PROBLEM:
            outbox = [
                (RecipientRole.HANDLER, messages.ack_problem(number)),
                (RecipientRole.SUPERVISOR, messages.problem_alert(number, command.detail, handler)),
            ]

        for role, text in outbox:
            await self._send(role, text)

    async def _send(self, role: RecipientRole, text: str) -> None:
        try:
            await self.notifier.send(role, text)
        except TransportError as e:
            logger.error(f"Failed to notify {role.value}: {e}")
