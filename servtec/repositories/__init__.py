"""
Repositories package for database operations

Provides store implementations for:
- service_tickets table and the equipment catalog (SupabaseTicketStore)
- in-process storage for tests and local runs (InMemoryTicketStore)
"""
from servtec.repositories.base_repository import TicketStore
from servtec.repositories.ticket_repository import SupabaseTicketStore
from servtec.repositories.memory_repository import InMemoryTicketStore

__all__ = [
    "TicketStore",
    "SupabaseTicketStore",
    "InMemoryTicketStore",
]
