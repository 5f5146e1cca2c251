"""
In-memory TicketStore

Used by the test-suite and for local runs without Supabase. Enforces the same
uniqueness constraint on document numbers as the production table.
"""
import re
import threading
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from servtec.errors import DuplicateDocumentNumber
from servtec.models.schemas import (
    CatalogEntry,
    NumberFormat,
    Ticket,
    TicketCreate,
    TicketState,
    utcnow,
)
from servtec.repositories.base_repository import TicketStore
from servtec.utils.logger import get_logger

logger = get_logger(__name__)


class InMemoryTicketStore(TicketStore):
    """Dictionary-backed store with insertion-ordered catalog"""

    def __init__(
        self,
        catalog: Optional[Iterable[CatalogEntry]] = None,
        tickets_table: str = "service_tickets",
        clock=utcnow
    ):
        self.catalog: List[CatalogEntry] = list(catalog or [])
        self.tickets: Dict[str, Ticket] = {}
        self.tickets_table = tickets_table
        self.clock = clock
        self._numbers: Dict[Tuple[str, str], Set[str]] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _issued(self, fmt: NumberFormat) -> Set[str]:
        key = (fmt.table, fmt.column)
        if key == (self.tickets_table, "document_number"):
            return set(self.tickets)
        return self._numbers.setdefault(key, set())

    def register_number(self, fmt: NumberFormat, number: str) -> None:
        """Record a number issued for a non-ticket document."""
        with self._lock:
            self._numbers.setdefault((fmt.table, fmt.column), set()).add(number)

    # ------------------------------------------------------------------
    # Numbering
    # ------------------------------------------------------------------
    def find_max_number(self, fmt: NumberFormat, day: str) -> Optional[str]:
        pattern = re.compile(rf"^{re.escape(fmt.prefix)}-{day}-(\d+)$")
        best: Optional[str] = None
        best_seq = -1
        for number in self._issued(fmt):
            match = pattern.match(number)
            if match and int(match.group(1)) > best_seq:
                best, best_seq = number, int(match.group(1))
        return best

    def list_numbers(self, fmt: NumberFormat, starts_with: str) -> List[str]:
        return sorted(
            (n for n in self._issued(fmt) if n.startswith(starts_with)),
            reverse=True
        )

    # ------------------------------------------------------------------
    # Tickets
    # ------------------------------------------------------------------
    def create_ticket(self, ticket: TicketCreate) -> Ticket:
        with self._lock:
            if ticket.document_number in self.tickets:
                raise DuplicateDocumentNumber(ticket.document_number)

            now = self.clock()
            stored = Ticket(**ticket.model_dump(), created_at=now, updated_at=now)
            self.tickets[stored.document_number] = stored

        logger.info(f"Created ticket: {stored.document_number}")
        return stored

    def get_ticket(self, document_number: str) -> Optional[Ticket]:
        wanted = document_number.upper()
        for number, ticket in self.tickets.items():
            if number.upper() == wanted:
                return ticket
        return None

    def update_ticket(
        self,
        document_number: str,
        patch: Dict[str, Any]
    ) -> Optional[Ticket]:
        if not patch:
            raise ValueError("No updates provided")

        with self._lock:
            current = self.get_ticket(document_number)
            if current is None:
                return None
            updated = current.model_copy(update=patch)
            self.tickets[current.document_number] = updated
        return updated

    def query_stale_tickets(
        self,
        older_than: datetime,
        exclude_states: Iterable[TicketState]
    ) -> List[Ticket]:
        excluded = {TicketState(s) for s in exclude_states}
        stale = [
            t for t in self.tickets.values()
            if t.state not in excluded and t.updated_at < older_than
        ]
        return sorted(stale, key=lambda t: t.updated_at)

    def list_tickets(
        self,
        created_since: Optional[datetime] = None,
        exclude_states: Iterable[TicketState] = ()
    ) -> List[Ticket]:
        excluded = {TicketState(s) for s in exclude_states}
        found = [
            t for t in self.tickets.values()
            if t.state not in excluded
            and (created_since is None or t.created_at >= created_since)
        ]
        return sorted(found, key=lambda t: t.created_at)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    def query_catalog(self) -> List[CatalogEntry]:
        return list(self.catalog)
