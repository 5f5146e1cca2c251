"""
Tests for Pydantic schemas to verify validation logic
"""
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from servtec.models.schemas import (
    ClientRef,
    EntityRef,
    NumberFormat,
    Priority,
    Resolution,
    StatusReport,
    SweepResult,
    Ticket,
    TicketCreate,
    TicketState,
)


class TestNumberFormat:
    """Test NumberFormat validation"""

    def test_prefix_must_be_upper_case_letters(self):
        with pytest.raises(ValidationError):
            NumberFormat(prefix="rpt")
        with pytest.raises(ValidationError):
            NumberFormat(prefix="RPT1")

    def test_digits_range(self):
        with pytest.raises(ValidationError):
            NumberFormat(prefix="RPT", digits=0)

    def test_is_frozen(self):
        fmt = NumberFormat(prefix="RPT")
        with pytest.raises(ValidationError):
            fmt.digits = 5


class TestTicket:
    """Test Ticket model"""

    def test_requires_description(self):
        with pytest.raises(ValidationError):
            TicketCreate(document_number="RPT-20261019-001", description="", priority=Priority.LOW)

    def test_defaults(self):
        ticket = Ticket(
            document_number="RPT-20261019-001",
            description="No enciende",
            priority=Priority.HIGH,
        )

        assert ticket.state == TicketState.PENDING
        assert ticket.origin == "whatsapp"
        assert ticket.is_open
        assert ticket.created_at.tzinfo is not None

    def test_naive_timestamps_become_utc(self):
        ticket = Ticket(
            document_number="RPT-20261019-001",
            description="No enciende",
            priority=Priority.HIGH,
            updated_at=datetime(2026, 10, 19, 12, 0),
        )
        assert ticket.updated_at.tzinfo == timezone.utc

    def test_hours_since_update(self):
        stamp = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        ticket = Ticket(
            document_number="RPT-20261019-001",
            description="x",
            priority=Priority.LOW,
            updated_at=stamp,
        )
        assert ticket.hours_since_update(stamp + timedelta(minutes=150)) == 2.5

    def test_done_is_closed(self):
        ticket = Ticket(
            document_number="RPT-20261019-001",
            description="x",
            priority=Priority.LOW,
            state=TicketState.DONE,
        )
        assert not ticket.is_open

    def test_enum_values(self):
        assert TicketState("waiting_parts") == TicketState.WAITING_PARTS
        with pytest.raises(ValueError):
            Priority("urgent")


class TestResolution:
    """Test display fallbacks"""

    def test_empty(self):
        resolution = Resolution()
        assert resolution.client_display is None
        assert resolution.equipment_display is None

    def test_resolved_entities_win_over_hints(self):
        resolution = Resolution(
            equipment=EntityRef(id="EQ-001", name="Ultraformer MPT"),
            client=ClientRef(name="Clinica", full_name="Clinica Norte SRL"),
            equipment_hint="Hifu",
            client_hint="Norte",
        )
        assert resolution.equipment_display == "Ultraformer MPT"
        assert resolution.client_display == "Clinica"


class TestReports:
    """Test report helpers"""

    def test_status_report_count(self):
        report = StatusReport(by_state={TicketState.PENDING: 3})

        assert report.count(TicketState.PENDING) == 3
        assert report.count(TicketState.IN_PROGRESS) == 0
        assert report.critical_open == 0

    def test_sweep_total(self):
        result = SweepResult(reminded=["A", "B"], failed=["C"])
        assert result.total == 3
