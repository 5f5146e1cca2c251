"""
Ticket Repository for Supabase

Features:
- Ticket CRUD on the service_tickets table
- Document-number lookups for the numbering service
- Stale-ticket queries for the reminder sweep
- Read-only access to the equipment catalog
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser as date_parser

from servtec.config import Settings, get_settings
from servtec.errors import DuplicateDocumentNumber
from servtec.models.schemas import (
    CatalogEntry,
    NumberFormat,
    Ticket,
    TicketCreate,
    TicketState,
)
from servtec.repositories.base_repository import TicketStore
from servtec.utils.logger import get_logger

logger = get_logger(__name__)

# PostgreSQL unique_violation
UNIQUE_VIOLATION = "23505"


class SupabaseTicketStore(TicketStore):
    """TicketStore backed by Supabase tables"""

    def __init__(self, supabase_client=None, settings: Optional[Settings] = None):
        """
        Initialize repository with Supabase client

        Args:
            supabase_client: Supabase client instance (built from settings if None)
            settings: Table names and credentials (cached settings if None)
        """
        self.settings = settings or get_settings()
        if supabase_client is None:
            from supabase import create_client
            self.client = create_client(
                self.settings.supabase_url,
                self.settings.supabase_service_role_key or self.settings.supabase_key
            )
        else:
            self.client = supabase_client

        self.table_name = self.settings.tickets_table
        self.catalog_table = self.settings.catalog_table
        logger.info(f"SupabaseTicketStore initialized for table: {self.table_name}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _serialize_payload(data: Dict[str, Any]) -> Dict[str, Any]:
        """Prepare payload for Supabase (convert enums and datetimes)."""
        serialized: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, Enum):
                serialized[key] = value.value
            elif isinstance(value, datetime):
                serialized[key] = value.isoformat()
            else:
                serialized[key] = value
        return serialized

    @staticmethod
    def _deserialize(row: Dict[str, Any]) -> Ticket:
        """Convert Supabase row into Ticket model."""
        row = dict(row)
        for key in ("created_at", "updated_at"):
            if isinstance(row.get(key), str):
                row[key] = date_parser.isoparse(row[key])
        if row.get("id") is not None:
            row["id"] = str(row["id"])
        return Ticket(**row)

    # ------------------------------------------------------------------
    # Numbering
    # ------------------------------------------------------------------
    def find_max_number(self, fmt: NumberFormat, day: str) -> Optional[str]:
        pattern = f"{fmt.prefix}-{day}-%"
        response = self.client.table(fmt.table)\
            .select(fmt.column)\
            .like(fmt.column, pattern)\
            .order(fmt.column, desc=True)\
            .limit(1)\
            .execute()

        if not response.data:
            return None
        return response.data[0].get(fmt.column)

    def list_numbers(self, fmt: NumberFormat, starts_with: str) -> List[str]:
        response = self.client.table(fmt.table)\
            .select(fmt.column)\
            .like(fmt.column, f"{starts_with}%")\
            .order(fmt.column, desc=True)\
            .execute()

        return [row[fmt.column] for row in response.data or [] if row.get(fmt.column)]

    # ------------------------------------------------------------------
    # Tickets
    # ------------------------------------------------------------------
    def create_ticket(self, ticket: TicketCreate) -> Ticket:
        try:
            payload = self._serialize_payload(ticket.model_dump())
            response = self.client.table(self.table_name).insert(payload).execute()

            if not response.data:
                raise ValueError("Supabase insert returned no data")

            result = self._deserialize(response.data[0])
            logger.info(f"Created ticket: {result.document_number}")
            return result

        except Exception as e:
            if getattr(e, "code", None) == UNIQUE_VIOLATION:
                logger.warning(f"Document number collision: {ticket.document_number}")
                raise DuplicateDocumentNumber(ticket.document_number) from e
            logger.error(f"Failed to create ticket {ticket.document_number}: {e}")
            raise

    def get_ticket(self, document_number: str) -> Optional[Ticket]:
        try:
            response = self.client.table(self.table_name)\
                .select("*")\
                .eq("document_number", document_number.strip().upper())\
                .limit(1)\
                .execute()

            if not response.data:
                return None
            return self._deserialize(response.data[0])

        except Exception as e:
            logger.error(f"Failed to get ticket {document_number}: {e}")
            raise

    def update_ticket(
        self,
        document_number: str,
        patch: Dict[str, Any]
    ) -> Optional[Ticket]:
        if not patch:
            raise ValueError("No updates provided")

        try:
            self.client.table(self.table_name)\
                .update(self._serialize_payload(patch))\
                .eq("document_number", document_number)\
                .execute()

            return self.get_ticket(document_number)

        except Exception as e:
            logger.error(f"Failed to update ticket {document_number}: {e}")
            raise

    def query_stale_tickets(
        self,
        older_than: datetime,
        exclude_states: Iterable[TicketState]
    ) -> List[Ticket]:
        excluded = {TicketState(s) for s in exclude_states}
        wanted = [s.value for s in TicketState if s not in excluded]

        try:
            response = self.client.table(self.table_name)\
                .select("*")\
                .in_("state", wanted)\
                .lt("updated_at", older_than.isoformat())\
                .order("updated_at")\
                .execute()

            return [self._deserialize(row) for row in response.data or []]

        except Exception as e:
            logger.error(f"Failed to query stale tickets: {e}")
            raise

    def list_tickets(
        self,
        created_since: Optional[datetime] = None,
        exclude_states: Iterable[TicketState] = ()
    ) -> List[Ticket]:
        excluded = {TicketState(s) for s in exclude_states}

        try:
            query = self.client.table(self.table_name).select("*")
            if excluded:
                query = query.in_("state", [s.value for s in TicketState if s not in excluded])
            if created_since is not None:
                query = query.gte("created_at", created_since.isoformat())

            response = query.order("created_at").execute()
            return [self._deserialize(row) for row in response.data or []]

        except Exception as e:
            logger.error(f"Failed to list tickets: {e}")
            raise

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    def query_catalog(self) -> List[CatalogEntry]:
        try:
            response = self.client.table(self.catalog_table)\
                .select("id, name, brand, model, client")\
                .order("id")\
                .execute()

            return [
                CatalogEntry(
                    id=str(row["id"]),
                    name=row.get("name") or "",
                    brand=row.get("brand") or "",
                    model=row.get("model") or "",
                    client=row.get("client") or "",
                )
                for row in response.data or []
            ]

        except Exception as e:
            logger.error(f"Failed to fetch equipment catalog: {e}")
            raise
