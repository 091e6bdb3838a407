"""Tests for utils/timezone.py - UTC-everywhere time handling."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from utils.timezone import now_utc, parse_iso, to_utc


class TestNowUtc:
    """Tests for now_utc()."""

    def test_returns_timezone_aware(self):
        """Result must have tzinfo set (not naive)."""
        assert now_utc().tzinfo is not None

    def test_is_utc(self):
        assert now_utc().tzinfo == timezone.utc


class TestToUtc:
    """Tests for to_utc()."""

    def test_raises_on_naive(self):
        """Naive datetime must raise ValueError."""
        with pytest.raises(ValueError, match="naive"):
            to_utc(datetime(2024, 1, 1, 12, 0, 0))

    def test_converts_other_timezone(self):
        """Chicago 12:00 in January should become UTC 18:00."""
        chicago = datetime(2024, 1, 1, 12, 0, 0, tzinfo=ZoneInfo("America/Chicago"))
        result = to_utc(chicago)
        assert result.tzinfo == timezone.utc
        assert result.hour == 18


class TestParseIso:
    """Tests for parse_iso() - token expiry read back from Valkey."""

    def test_roundtrips_isoformat(self):
        expires = datetime(2030, 1, 1, 12, 30, tzinfo=timezone.utc)
        assert parse_iso(expires.isoformat()) == expires

    def test_offset_normalized_to_utc(self):
        result = parse_iso("2024-01-01T12:00:00-06:00")
        assert result.tzinfo == timezone.utc
        assert result.hour == 18

    def test_raises_on_naive_string(self):
        with pytest.raises(ValueError, match="naive"):
            parse_iso("2024-01-01T12:00:00")
