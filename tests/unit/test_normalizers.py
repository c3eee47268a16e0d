"""
Unit tests for date and number normalizers.

Run: pytest tests/unit/test_normalizers.py -v
"""

import pytest

from parsers.normalizers import (
    parse_flexible_date,
    parse_numeric_value,
    parse_numeric_or_none,
    expand_year,
    format_iso_date,
)


class TestParseFlexibleDate:
    """Tests for parse_flexible_date()"""

    def test_iso_passes_through(self):
        assert parse_flexible_date("2026-03-01") == "2026-03-01"

    def test_idempotent_on_own_output(self):
        once = parse_flexible_date("15/08/2026")
        assert parse_flexible_date(once) == once

    def test_day_first_when_first_part_exceeds_twelve(self):
        assert parse_flexible_date("15/08/2026") == "2026-08-15"

    def test_month_first_when_ambiguous(self):
        assert parse_flexible_date("05/03/2026") == "2026-05-03"

    def test_single_digit_parts_are_padded(self):
        assert parse_flexible_date("7/4/2026") == "2026-07-04"

    def test_month_year_defaults_to_first(self):
        assert parse_flexible_date("03/2027") == "2027-03-01"

    def test_dash_date_is_day_first(self):
        assert parse_flexible_date("25-12-2026") == "2026-12-25"

    def test_surrounding_whitespace(self):
        assert parse_flexible_date("  2026-03-01 ") == "2026-03-01"

    @pytest.mark.parametrize("value,expected", [
        ("Mar 2026", "2026-03-01"),
        ("15 March 2026", "2026-03-15"),
        ("2026/03/15", "2026-03-15"),
    ])
    def test_fallback_parsing(self, value, expected):
        assert parse_flexible_date(value) == expected

    @pytest.mark.parametrize("value", ["", "   ", None, "not a date", "now", "12", "13/13/2026"])
    def test_unparseable_returns_none(self, value):
        assert parse_flexible_date(value) is None


class TestParseNumericValue:
    """Tests for parse_numeric_value() and parse_numeric_or_none()"""

    def test_naira_with_commas(self):
        assert parse_numeric_value("₦3,500.00") == 3500.00

    def test_dollar_and_spaces(self):
        assert parse_numeric_value(" $ 1 200 ") == 1200.0

    def test_empty_is_zero(self):
        assert parse_numeric_value("") == 0
        assert parse_numeric_value(None) == 0

    def test_garbage_is_zero_not_nan(self):
        assert parse_numeric_value("abc") == 0

    def test_numeric_prefix_is_kept(self):
        assert parse_numeric_value("1500NGN") == 1500.0

    @pytest.mark.parametrize("text,value", [
        ("1e3", 1000.0),
        ("1.5E2", 150.0),
        ("2.5e-1", 0.25),
    ])
    def test_exponent_notation(self, text, value):
        assert parse_numeric_value(text) == value

    def test_or_none_distinguishes_zero(self):
        assert parse_numeric_or_none("0") == 0.0
        assert parse_numeric_or_none("n/a") is None
        assert parse_numeric_or_none("") is None


class TestHelpers:
    """Tests for expand_year() and format_iso_date()"""

    def test_two_digit_year(self):
        assert expand_year("26") == 2026
        assert expand_year("2031") == 2031

    def test_invalid_date_parts(self):
        assert format_iso_date(2026, 2, 30) is None
        assert format_iso_date(2026, 2) == "2026-02-01"
