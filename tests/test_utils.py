"""
Tests for utility helpers
"""
from datetime import datetime, timedelta, timezone

import pytest

from servtec.utils.dates import local_midnight, resolve_tz, whole_hours
from servtec.utils.logger import mask_address
from servtec.utils.text import matching_keywords, title_case
from servtec.utils.validators import sanitize_input, validate_document_number


class TestDates:
    """Test local-calendar helpers"""

    def test_unknown_zone_falls_back_to_utc(self):
        now = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)
        assert resolve_tz("Not/AZone").utcoffset(now).total_seconds() == 0
        assert resolve_tz("").utcoffset(now).total_seconds() == 0

    def test_local_midnight_utc(self):
        now = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)
        assert local_midnight(now, "UTC") == datetime(2026, 10, 19, tzinfo=timezone.utc)

    def test_local_midnight_with_fixed_offset(self):
        offset = timezone(timedelta(hours=-3))
        # 01:00 UTC is still the previous evening at UTC-3
        now = datetime(2026, 10, 19, 1, 0, tzinfo=timezone.utc)

        assert local_midnight(now, offset) == datetime(2026, 10, 18, 3, 0, tzinfo=timezone.utc)

    def test_whole_hours_truncates(self):
        then = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)
        now = datetime(2026, 10, 19, 14, 59, tzinfo=timezone.utc)
        assert whole_hours(now, then) == 6


class TestValidators:
    """Test input validation"""

    @pytest.mark.parametrize("number", [
        "RPT-20261019-004",
        "fact-20261019-0001",
        "RPT-FALLBACK-123456789",
    ])
    def test_valid_numbers(self, number):
        assert validate_document_number(number)

    @pytest.mark.parametrize("number", ["RPT-2026-004", "20261019-004", "RPT_20261019_004"])
    def test_invalid_numbers(self, number):
        assert not validate_document_number(number)

    def test_sanitize_input(self):
        assert sanitize_input("  hola\x00 mundo  ") == "hola mundo"
        assert len(sanitize_input("x" * 5000)) == 4096


class TestText:
    """Test text helpers"""

    def test_matching_keywords(self):
        found = matching_keywords("no funciona y hay una falla", ["falla", "roto", "no funciona"])
        assert set(found) == {"falla", "no funciona"}

    def test_title_case(self):
        assert title_case("pieza de mano") == "Pieza De Mano"


class TestMaskAddress:
    """Test address masking in logs"""

    def test_keeps_prefix_only(self):
        masked = mask_address("595981234567@c.us")
        assert masked == "59598123***"
        assert mask_address("") == ""
