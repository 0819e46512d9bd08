"""Tests for raw timestamp canonicalization."""

from datetime import date, datetime, timedelta, timezone

import pytest

from core.domain.models import NOT_AVAILABLE
from core.services.canonicalizer import canonicalize, instant_to_date, parse_long_form

EPOCH = 1768867200  # 2026-01-20T00:00:00Z


class FirestoreTimestamp:
    """Minimal stand-in for a Firestore Timestamp object."""

    def __init__(self, seconds, nanoseconds=0):
        self.seconds = seconds
        self.nanoseconds = nanoseconds


class MillisOnly:
    def __init__(self, millis):
        self._millis = millis

    def toMillis(self):
        return self._millis


class DateOnly:
    def __init__(self, value):
        self._value = value

    def toDate(self):
        return self._value


class BrokenAccessor:
    def toDate(self):
        raise RuntimeError("backend offline")


class TestInstantToDate:
    """Tests for instant_to_date."""

    def test_fixed_offset(self):
        """Test that the offset moves the instant to the previous local day."""
        assert instant_to_date(EPOCH, -6) == "2026-01-19"
        assert instant_to_date(EPOCH, 0) == "2026-01-20"

    def test_negative_epoch(self):
        """Test instants before 1970."""
        assert instant_to_date(0, 0) == "1970-01-01"
        assert instant_to_date(0, -6) == "1969-12-31"
        assert instant_to_date(-1, 0) == "1969-12-31"


class TestCanonicalizeInstants:
    """Tests for numeric and object timestamp shapes."""

    def test_same_instant_same_date(self):
        """Test every representation of one instant yields one date."""
        expected = "2026-01-19"
        assert canonicalize(EPOCH) == expected
        assert canonicalize(float(EPOCH) + 0.75) == expected
        assert canonicalize({"seconds": EPOCH}) == expected
        assert canonicalize({"_seconds": EPOCH, "_nanoseconds": 0}) == expected
        assert canonicalize(FirestoreTimestamp(EPOCH)) == expected
        assert canonicalize(MillisOnly(EPOCH * 1000)) == expected
        assert canonicalize(DateOnly(datetime(2026, 1, 20, tzinfo=timezone.utc))) == expected

    def test_offset_string_matches_epoch(self):
        """Test an ISO string at -06:00 lands on the same day as its epoch."""
        from_string = canonicalize("2026-01-19T18:00:00-06:00")
        assert from_string == canonicalize(EPOCH) == canonicalize({"seconds": EPOCH})
        assert from_string == "2026-01-19"

    def test_explicit_offset(self):
        """Test the offset argument is honored."""
        assert canonicalize(EPOCH, 0) == "2026-01-20"
        assert canonicalize({"seconds": EPOCH}, 0) == "2026-01-20"

    def test_datetime_values(self):
        """Test aware, naive and date values."""
        aware = datetime(2026, 1, 20, 3, 0, tzinfo=timezone(timedelta(hours=-6)))
        assert canonicalize(aware) == "2026-01-20"
        # Naive datetimes are read as UTC.
        assert canonicalize(datetime(2026, 1, 20, 3, 0)) == "2026-01-19"
        assert canonicalize(date(2026, 1, 20)) == "2026-01-20"

    def test_is_deterministic(self):
        """Test repeated calls return the same value."""
        assert {canonicalize({"seconds": EPOCH}) for _ in range(5)} == {"2026-01-19"}


class TestCanonicalizeText:
    """Tests for string timestamp shapes."""

    def test_canonical_passthrough(self):
        """Test canonical strings are returned unchanged."""
        assert canonicalize("2026-01-19") == "2026-01-19"
        assert canonicalize("  2026-01-19 ") == "2026-01-19"

    def test_iso_with_time_keeps_date_part(self):
        """Test ISO strings with a time component."""
        assert canonicalize("2026-01-20T05:00:00.000Z") == "2026-01-20"
        assert canonicalize("2026-01-20 10:30") == "2026-01-20"

    @pytest.mark.parametrize(
        "text",
        ["12 de enero de 2026", "Lunes 12 de Enero 2026", "12 de enero del 2026", "12 DE ENERO DE 2026"],
    )
    def test_long_spanish_form(self, text):
        """Test long Spanish dates with optional weekday and 'de/del'."""
        assert canonicalize(text) == "2026-01-12"

    def test_long_form_accented_month_table(self):
        """Test month lookup ignores accents in the table and the input."""
        names = ("énero",) + tuple(f"mes{i}" for i in range(2, 13))
        assert parse_long_form("3 de enero de 2026", names) == "2026-01-03"

    def test_long_form_unknown_month(self):
        """Test unknown month names are not guessed."""
        assert parse_long_form("3 de brumario de 2026") is None

    def test_javascript_date_string(self):
        """Test Date.toString() output with an explicit GMT offset."""
        text = "Tue Jan 20 2026 23:33:34 GMT-0600 (hora estándar central)"
        assert canonicalize(text) == "2026-01-20"
        assert canonicalize(text, 0) == "2026-01-21"


class TestCanonicalizeUnrecognized:
    """Tests for values that must map to N/A."""

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "",
            "   ",
            "mañana",
            "2026-02-30",
            "31 de febrero de 2026",
            {"foo": 1},
            {"seconds": "1768867200"},
            True,
            float("nan"),
            [EPOCH],
            BrokenAccessor(),
            DateOnly("no es fecha"),
        ],
    )
    def test_not_available(self, raw):
        """Test unrecognized inputs return N/A without raising."""
        assert canonicalize(raw) == NOT_AVAILABLE
