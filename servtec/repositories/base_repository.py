"""
Base Repository

Defines the persistence contract the bot depends on. Every component receives
a store instance explicitly; there is no module-level client.

Implementations:
- SupabaseTicketStore (production)
- InMemoryTicketStore (tests, local runs)
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from servtec.models.schemas import (
    CatalogEntry,
    NumberFormat,
    Ticket,
    TicketCreate,
    TicketState,
)


class TicketStore(ABC):
    """
    Persistence interface for tickets, issued document numbers and the
    equipment catalog.
    """

    # ------------------------------------------------------------------
    # Numbering
    # ------------------------------------------------------------------
    @abstractmethod
    def find_max_number(self, fmt: NumberFormat, day: str) -> Optional[str]:
        """
        Highest issued number matching `PREFIX-day-*`.

        Args:
            fmt: Numbering format of the document type
            day: Date as YYYYMMDD

        Returns:
            The number string or None when nothing was issued that day
        """

    @abstractmethod
    def list_numbers(self, fmt: NumberFormat, starts_with: str) -> List[str]:
        """All issued numbers for the format starting with `starts_with`."""

    # ------------------------------------------------------------------
    # Tickets
    # ------------------------------------------------------------------
    @abstractmethod
    def create_ticket(self, ticket: TicketCreate) -> Ticket:
        """
        Insert a ticket.

        Raises:
            DuplicateDocumentNumber: If the number is already taken
        """

    @abstractmethod
    def get_ticket(self, document_number: str) -> Optional[Ticket]:
        """Fetch a ticket by document number (case-insensitive)."""

    @abstractmethod
    def update_ticket(
        self,
        document_number: str,
        patch: Dict[str, Any]
    ) -> Optional[Ticket]:
        """Apply a partial update and return the stored ticket, None if missing."""

    @abstractmethod
    def query_stale_tickets(
        self,
        older_than: datetime,
        exclude_states: Iterable[TicketState]
    ) -> List[Ticket]:
        """Tickets last updated before `older_than`, excluding the given states."""

    @abstractmethod
    def list_tickets(
        self,
        created_since: Optional[datetime] = None,
        exclude_states: Iterable[TicketState] = ()
    ) -> List[Ticket]:
        """Tickets created at or after `created_since` (all when None)."""

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    @abstractmethod
    def query_catalog(self) -> List[CatalogEntry]:
        """Every equipment/client record, in a stable order."""
