"""
Unit tests for NumberingService

Tests:
- Number format per document type
- Daily sequence, no gaps
- Fallback on lookup/parse failure
- validate / parse
- Range reservation and statistics
"""
from datetime import date
from unittest.mock import MagicMock

import pytest

from servtec.models.schemas import DocumentType, NumberFormat, Priority, TicketCreate
from servtec.repositories.memory_repository import InMemoryTicketStore
from servtec.services.numbering import DEFAULT_FORMATS, NumberingService

DAY = date(2026, 10, 19)


@pytest.fixture
def numbering(store):
    return NumberingService(store)


def _insert(store, number):
    store.create_ticket(TicketCreate(
        document_number=number,
        description="Falla en pantalla",
        priority=Priority.MEDIUM,
    ))


class TestGenerate:
    """Test number generation"""

    def test_first_number_of_the_day(self, numbering):
        assert numbering.generate(DocumentType.TICKET, DAY) == "RPT-20261019-001"

    def test_invoice_uses_four_digits(self, numbering):
        assert numbering.generate(DocumentType.INVOICE, DAY) == "FACT-20261019-0001"

    def test_sequence_increments_from_stored_max(self, store, numbering):
        _insert(store, "RPT-20261019-001")
        _insert(store, "RPT-20261019-007")
        assert numbering.generate(DocumentType.REPORT, DAY) == "RPT-20261019-008"

    def test_sequence_restarts_each_day(self, store, numbering):
        _insert(store, "RPT-20261018-012")
        assert numbering.generate(DocumentType.TICKET, DAY) == "RPT-20261019-001"

    def test_serial_generation_has_no_gaps(self, store, numbering):
        issued = []
        for _ in range(5):
            number = numbering.generate(DocumentType.TICKET, DAY)
            _insert(store, number)
            issued.append(NumberingService.parse(number).sequential)
        assert issued == [1, 2, 3, 4, 5]

    def test_accepts_plain_string_type(self, numbering):
        assert numbering.generate("work_order", DAY) == "OT-20261019-001"

    def test_fallback_on_store_failure(self):
        store = MagicMock()
        store.find_max_number.side_effect = RuntimeError("connection reset")
        numbering = NumberingService(store)

        number = numbering.generate(DocumentType.TICKET, DAY)

        assert number.startswith("RPT-FALLBACK-")

    def test_fallback_on_unparseable_stored_number(self):
        store = MagicMock()
        store.find_max_number.return_value = "RPT-20261019-ABC"
        numbering = NumberingService(store)

        assert numbering.generate(DocumentType.TICKET, DAY).startswith("RPT-FALLBACK-")

    def test_custom_format_override(self, store):
        numbering = NumberingService(
            store, {DocumentType.TICKET: NumberFormat(prefix="TKT", digits=4)}
        )
        assert numbering.generate(DocumentType.TICKET, DAY) == "TKT-20261019-0001"
        assert numbering.format_for(DocumentType.REPORT) == DEFAULT_FORMATS[DocumentType.REPORT]


class TestValidateAndParse:
    """Test validation and parsing"""

    @pytest.mark.parametrize("doc_type", list(DocumentType))
    def test_parse_recovers_prefix_and_date(self, numbering, doc_type):
        number = numbering.generate(doc_type, DAY)
        parsed = NumberingService.parse(number)

        assert parsed.prefix == numbering.format_for(doc_type).prefix
        assert parsed.date == "20261019"
        assert numbering.validate(number, doc_type)

    def test_validate_rejects_wrong_width(self, numbering):
        assert not numbering.validate("FACT-20261019-001", DocumentType.INVOICE)
        assert numbering.validate("FACT-20261019-0001", DocumentType.INVOICE)

    def test_validate_rejects_wrong_prefix(self, numbering):
        assert not numbering.validate("OT-20261019-001", DocumentType.TICKET)

    def test_parse_invalid_returns_none(self):
        assert NumberingService.parse("TKT-0007") is None
        assert NumberingService.parse("RPT-FALLBACK-123") is None

    def test_parse_is_case_insensitive(self):
        parsed = NumberingService.parse("rpt-20261019-042")
        assert parsed.prefix == "RPT"
        assert parsed.sequential == 42


class TestReserveRangeAndStats:
    """Test range reservation and statistics"""

    def test_reserve_range_is_consecutive(self, store, numbering):
        _insert(store, "RPT-20261019-003")
        assert numbering.reserve_range(DocumentType.TICKET, 3, DAY) == [
            "RPT-20261019-004",
            "RPT-20261019-005",
            "RPT-20261019-006",
        ]

    def test_reserve_range_rejects_zero(self, numbering):
        with pytest.raises(ValueError):
            numbering.reserve_range(DocumentType.TICKET, 0, DAY)

    def test_stats(self, store, numbering):
        _insert(store, "RPT-20261001-001")
        _insert(store, "RPT-20261019-001")
        _insert(store, "RPT-20261019-002")
        _insert(store, "RPT-20260930-009")

        stats = numbering.stats(DocumentType.TICKET, DAY)

        assert stats.total_today == 2
        assert stats.total_this_month == 3
        assert stats.last_number == "RPT-20261019-002"

    def test_stats_for_non_ticket_table(self):
        store = InMemoryTicketStore()
        fmt = DEFAULT_FORMATS[DocumentType.DELIVERY_NOTE]
        store.register_number(fmt, "REM-20261019-0001")
        numbering = NumberingService(store)

        assert numbering.generate(DocumentType.DELIVERY_NOTE, DAY) == "REM-20261019-0002"
        assert numbering.stats(DocumentType.DELIVERY_NOTE, DAY).total_today == 1
