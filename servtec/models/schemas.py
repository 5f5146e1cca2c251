"""
Pydantic models for the ServTec service-desk bot

This module contains the schemas shared by the intake pipeline, the lifecycle
engine, the reminder scheduler and the store adapters. Field names match the
columns of the `service_tickets` and `equipment` tables in Supabase.
"""
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Dict, List
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, ConfigDict


def utcnow() -> datetime:
    """Timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


# ============================================================================
# Enums
# ============================================================================

class Priority(str, Enum):
    """Ticket priority tiers, fixed at creation"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TicketState(str, Enum):
    """Ticket lifecycle states"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    WAITING_PARTS = "waiting_parts"
    DONE = "done"


class RecipientRole(str, Enum):
    """Outbound notification recipients"""
    SHARED = "shared"
    HANDLER = "handler"
    SUPERVISOR = "supervisor"


class DocumentType(str, Enum):
    """Document types numbered by the numbering service"""
    REPORT = "report"
    TICKET = "ticket"
    FORM = "form"
    INVOICE = "invoice"
    DELIVERY_NOTE = "delivery_note"
    WORK_ORDER = "work_order"


class CommandAction(str, Enum):
    """Operator command keywords"""
    COMPLETE = "complete"
    START = "start"
    HOLD = "hold"
    RESUME = "resume"
    PROBLEM = "problem"
    STATUS = "status"


TERMINAL_STATES = frozenset({TicketState.DONE})
PAUSED_STATES = frozenset({TicketState.WAITING_PARTS})


# ============================================================================
# Database Models
# ============================================================================

class NumberFormat(BaseModel):
    """
    Numbering configuration for one document type.

    Attributes:
        prefix: Upper-case prefix (RPT, FORM, FACT, ...)
        digits: Zero-padded width of the sequential part
        table: Table holding the issued numbers
        column: Column holding the issued numbers
    """
    model_config = ConfigDict(frozen=True)

    prefix: str = Field(..., pattern=r"^[A-Z]+$")
    digits: int = Field(3, ge=1, le=9)
    table: str = "service_tickets"
    column: str = "document_number"


class TicketCreate(BaseModel):
    """Schema for creating a ticket (without generated fields)"""
    model_config = ConfigDict(from_attributes=True)

    document_number: str = Field(..., min_length=1, max_length=64)
    description: str = Field(..., min_length=1)
    priority: Priority
    state: TicketState = TicketState.PENDING
    assigned_handler: str = ""
    client_name: Optional[str] = None
    equipment_id: Optional[str] = None
    equipment_name: Optional[str] = None
    component: Optional[str] = None
    origin: str = "whatsapp"
    contact_address: Optional[str] = None
    annotation: Optional[str] = None


class Ticket(TicketCreate):
    """
    Service ticket as stored.

    The document number is unique within (document type, calendar day);
    priority never changes after creation. State, annotation and updated_at
    are only mutated by the lifecycle engine.
    """
    id: str = Field(default_factory=lambda: str(uuid4()))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        """Store timestamps are compared as aware UTC datetimes"""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_open(self) -> bool:
        return self.state not in TERMINAL_STATES

    def hours_since_update(self, now: datetime) -> float:
        return (now - self.updated_at).total_seconds() / 3600


class CatalogEntry(BaseModel):
    """Equipment/client record used for entity resolution (read-only)"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = ""
    brand: str = ""
    model: str = ""
    client: str = ""


# ============================================================================
# Pipeline Models
# ============================================================================

class InboundMessage(BaseModel):
    """
    Inbound chat message.

    Attributes:
        text: Message body
        sender_address: Author's address (the participant inside a group)
        is_group_channel: True when posted to a group chat
        chat_address: Chat the message was posted to
    """
    text: str
    sender_address: str = ""
    is_group_channel: bool = False
    chat_address: str = ""


class Classification(BaseModel):
    """Classifier verdict for one message"""
    is_service_request: bool
    priority: Priority = Priority.MEDIUM


class EntityRef(BaseModel):
    """Reference to a catalog equipment entry"""
    id: str
    name: str


class ClientRef(BaseModel):
    """Resolved client: short display name plus full legal name"""
    name: str
    full_name: str


class Resolution(BaseModel):
    """
    Best-effort entity resolution result.

    Every field is optional; an empty resolution is a normal outcome and
    never blocks ticket creation.
    """
    equipment: Optional[EntityRef] = None
    client: Optional[ClientRef] = None
    component: Optional[str] = None
    equipment_hint: Optional[str] = None
    client_hint: Optional[str] = None

    @property
    def client_display(self) -> Optional[str]:
        if self.client:
            return self.client.name
        return self.client_hint

    @property
    def equipment_display(self) -> Optional[str]:
        if self.equipment:
            return self.equipment.name
        return self.equipment_hint


class OperatorCommand(BaseModel):
    """Parsed operator reply: action keyword + document number + remainder"""
    action: CommandAction
    document_number: Optional[str] = None
    detail: Optional[str] = None


class CommandResult(BaseModel):
    """Outcome of applying one operator command"""
    command: Optional[OperatorCommand] = None
    applied: bool = False
    previous_state: Optional[TicketState] = None
    new_state: Optional[TicketState] = None
    reason: Optional[str] = None


class IntakeResult(BaseModel):
    """Outcome of processing one inbound message through intake"""
    classification: Classification
    resolution: Optional[Resolution] = None
    ticket: Optional[Ticket] = None
    error: Optional[str] = None


class StatusReport(BaseModel):
    """Counts of open tickets per state and priority"""
    by_state: Dict[TicketState, int] = Field(default_factory=dict)
    by_priority: Dict[Priority, int] = Field(default_factory=dict)
    completed_today: int = 0

    def count(self, state: TicketState) -> int:
        return self.by_state.get(state, 0)

    @property
    def critical_open(self) -> int:
        return self.by_priority.get(Priority.CRITICAL, 0)


class DailySummary(BaseModel):
    """Same-day digest sent to the supervisor"""
    day: date
    created: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = 0
    waiting_parts: int = 0
    critical_open: int = 0
    sla_breached: int = 0
    by_priority: Dict[Priority, int] = Field(default_factory=dict)


class NumberingStats(BaseModel):
    """Issued-number statistics for one document type"""
    total_today: int = 0
    total_this_month: int = 0
    last_number: Optional[str] = None


class ParsedNumber(BaseModel):
    """Components of a document number"""
    prefix: str
    date: str
    sequential: int


class SweepResult(BaseModel):
    """Outcome of one reminder sweep"""
    skipped: bool = False
    reminded: List[str] = Field(default_factory=list)
    escalated: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.reminded) + len(self.failed)
