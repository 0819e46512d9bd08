"""Tests for the Julian-day calendar kernel."""

import pytest

from core.services.calendar_kernel import (
    INVALID_JULIAN_DAY,
    MAX_JULIAN_DAY,
    MIN_JULIAN_DAY,
    add_days,
    days_between,
    format_long_date,
    format_short_date,
    from_julian_day,
    is_canonical_date,
    normalize_text,
    to_julian_day,
    upcoming_weekday_dates,
    weekday,
    weekday_from_label,
)


class TestJulianDay:
    """Tests for to_julian_day / from_julian_day."""

    def test_known_dates(self):
        """Test reference dates against their Julian day numbers."""
        assert to_julian_day("0001-01-01") == MIN_JULIAN_DAY
        assert to_julian_day("9999-12-31") == MAX_JULIAN_DAY
        assert to_julian_day("1970-01-01") == 2440588
        assert to_julian_day("2026-01-20") == 2461061

    @pytest.mark.parametrize(
        "value",
        ["2026-02-30", "2026-13-01", "2026-00-10", "0000-01-01", "2026-1-5", "20260105", "", "hoy", None, 20260105],
    )
    def test_invalid_returns_sentinel(self, value):
        """Test that malformed or impossible dates return the sentinel."""
        assert to_julian_day(value) == INVALID_JULIAN_DAY

    def test_leap_years(self):
        """Test Gregorian leap year rules."""
        assert to_julian_day("2024-02-29") != INVALID_JULIAN_DAY
        assert to_julian_day("2000-02-29") != INVALID_JULIAN_DAY
        assert to_julian_day("2023-02-29") == INVALID_JULIAN_DAY
        assert to_julian_day("1900-02-29") == INVALID_JULIAN_DAY

    def test_round_trip_edges_of_range(self):
        """Test from(to(d)) == d near both ends of the supported range."""
        for jd in list(range(MIN_JULIAN_DAY, MIN_JULIAN_DAY + 400)) + list(range(MAX_JULIAN_DAY - 400, MAX_JULIAN_DAY + 1)):
            date = from_julian_day(jd)
            assert to_julian_day(date) == jd

    def test_round_trip_across_leap_days(self):
        """Test round trip on every day of 2023-2025."""
        start = to_julian_day("2023-01-01")
        for jd in range(start, start + 3 * 366):
            assert to_julian_day(from_julian_day(jd)) == jd

    def test_is_canonical_date(self):
        """Test the canonical-date predicate."""
        assert is_canonical_date("2026-01-19")
        assert not is_canonical_date("2026-02-30")
        assert not is_canonical_date({"seconds": 1})
        assert not is_canonical_date(None)


class TestArithmetic:
    """Tests for add_days, weekday and days_between."""

    def test_weekday_of_known_monday(self):
        """Test that 2026-01-19 is a Monday."""
        assert weekday("2026-01-19") == 1
        assert weekday("2026-01-21") == 3
        assert weekday("2026-01-24") == 6
        assert weekday("2026-01-25") == 0

    def test_weekday_is_total(self):
        """Test weekday is defined (0..6) for every day of a year."""
        start = to_julian_day("2026-01-01")
        values = {weekday(from_julian_day(start + k)) for k in range(365)}
        assert values == set(range(7))

    def test_add_days(self):
        """Test day arithmetic including month and year rollover."""
        assert add_days("2026-01-19", 7) == "2026-01-26"
        assert add_days("2025-12-31", 1) == "2026-01-01"
        assert add_days("2024-03-01", -1) == "2024-02-29"
        assert add_days("2026-01-19", 0) == "2026-01-19"

    def test_add_days_inverse(self):
        """Test add_days(add_days(d, n), -n) == d for n in [-400, 400]."""
        for date in ("2026-01-19", "2024-02-29", "1999-12-31"):
            for n in range(-400, 401):
                moved = add_days(date, n)
                assert add_days(moved, -n) == date

    def test_add_days_out_of_range_or_invalid(self):
        """Test that invalid input or overflow yields None."""
        assert add_days("9999-12-31", 1) is None
        assert add_days("0001-01-01", -1) is None
        assert add_days("no-es-fecha", 1) is None
        assert weekday("2026-02-30") is None

    def test_days_between(self):
        """Test signed difference in days."""
        assert days_between("2026-01-19", "2026-01-26") == 7
        assert days_between("2026-01-26", "2026-01-19") == -7
        assert days_between("2026-01-19", "basura") is None


class TestLabels:
    """Tests for Spanish weekday labels and formatting."""

    def test_normalize_text(self):
        """Test accent and case folding."""
        assert normalize_text("Miércoles") == "miercoles"
        assert normalize_text("  SÁBADO ") == "sabado"

    @pytest.mark.parametrize(
        ("label", "expected"),
        [("Martes", 2), ("martes", 2), ("Miércoles", 3), ("MIERCOLES", 3), (" sábado ", 6), ("Domingo", 0)],
    )
    def test_weekday_from_label(self, label, expected):
        """Test that labels resolve regardless of accents and case."""
        assert weekday_from_label(label) == expected

    def test_weekday_from_unknown_label(self):
        """Test unknown labels resolve to None."""
        assert weekday_from_label("Feriado") is None
        assert weekday_from_label("") is None
        assert weekday_from_label(None) is None

    def test_format_long_date(self):
        """Test the long Spanish format."""
        assert format_long_date("2025-01-24") == "Viernes 24 de Enero 2025"
        assert format_long_date("2026-01-21") == "Miércoles 21 de Enero 2026"
        assert format_long_date("N/A") == "Sin fecha"

    def test_format_short_date(self):
        """Test the compact format."""
        assert format_short_date("2025-01-24") == "Vie 24/1"
        assert format_short_date("2026-01-17") == "Sáb 17/1"


class TestUpcomingWeekdayDates:
    """Tests for upcoming_weekday_dates."""

    def test_next_wednesdays_from_monday(self):
        """Test the series starts at the next matching day."""
        assert upcoming_weekday_dates("Miércoles", "2026-01-19", count=3) == [
            "2026-01-21",
            "2026-01-28",
            "2026-02-04",
        ]

    def test_same_weekday_skips_today(self):
        """Test that today is never included."""
        assert upcoming_weekday_dates("Miércoles", "2026-01-21", count=1) == ["2026-01-28"]

    def test_offset_weeks(self):
        """Test shifting the whole series by full weeks."""
        assert upcoming_weekday_dates("Sábado", "2026-01-19", count=2, offset_weeks=1) == [
            "2026-01-31",
            "2026-02-07",
        ]

    def test_unknown_label_or_date(self):
        """Test that bad inputs return an empty list."""
        assert upcoming_weekday_dates("Feriado", "2026-01-19") == []
        assert upcoming_weekday_dates("Martes", "2026-02-30") == []
