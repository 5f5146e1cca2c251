"""
Pydantic models for the ServTec service-desk bot
"""

from servtec.models.schemas import (
    # Enums
    Priority,
    TicketState,
    RecipientRole,
    DocumentType,
    CommandAction,

    # Database Models
    NumberFormat,
    Ticket,
    TicketCreate,
    CatalogEntry,

    # Pipeline Models
    InboundMessage,
    Classification,
    EntityRef,
    ClientRef,
    Resolution,
    OperatorCommand,
    CommandResult,
    IntakeResult,
    StatusReport,
    DailySummary,
    NumberingStats,
    ParsedNumber,
    SweepResult,
)

__all__ = [
    # Enums
    "Priority",
    "TicketState",
    "RecipientRole",
    "DocumentType",
    "CommandAction",

    # Database Models
    "NumberFormat",
    "Ticket",
    "TicketCreate",
    "CatalogEntry",

    # Pipeline Models
    "InboundMessage",
    "Classification",
    "EntityRef",
    "ClientRef",
    "Resolution",
    "OperatorCommand",
    "CommandResult",
    "IntakeResult",
    "StatusReport",
    "DailySummary",
    "NumberingStats",
    "ParsedNumber",
    "SweepResult",
]
