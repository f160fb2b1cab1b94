"""
Unit tests for utils.py module.
"""

from datetime import date

import pytest

from cashplan.exceptions import TimeIndexError, ValidationError
from cashplan.utils import (
    add_months,
    check_non_negative,
    check_window,
    clamp_day,
    format_currency,
    month_index,
    month_key,
    months_between,
    parse_month_key,
    round_down_to_multiple,
    safe_pct,
    split_cents,
)


class TestValidation:

    def test_check_non_negative_accepts_zero(self):
        check_non_negative("x", 0)

    def test_check_non_negative_rejects_negative(self):
        with pytest.raises(ValidationError, match="x must be non-negative"):
            check_non_negative("x", -1)

    def test_check_window_rejects_inverted(self):
        with pytest.raises(TimeIndexError):
            check_window(date(2025, 2, 1), date(2025, 1, 31))

    def test_check_window_accepts_single_day(self):
        check_window(date(2025, 2, 1), date(2025, 2, 1))


class TestMonths:

    def test_month_key(self):
        assert month_key(date(2025, 3, 9)) == "2025-03"

    def test_parse_month_key(self):
        assert parse_month_key("2024-12") == (2024, 12)

    @pytest.mark.parametrize("bad", ["2025-13", "2025-1", "202501", "", None])
    def test_parse_month_key_rejects(self, bad):
        with pytest.raises(TimeIndexError):
            parse_month_key(bad)

    def test_clamp_day(self):
        assert clamp_day(2025, 2, 31) == date(2025, 2, 28)
        assert clamp_day(2024, 2, 31) == date(2024, 2, 29)

    def test_add_months_clamps(self):
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)

    def test_add_months_year_wrap(self):
        assert add_months(date(2025, 11, 10), 3) == date(2026, 2, 10)
        assert add_months(date(2025, 1, 10), -1) == date(2024, 12, 10)

    def test_add_months_explicit_day(self):
        assert add_months(date(2025, 1, 3), 2, day=31) == date(2025, 3, 31)

    def test_months_between_inclusive(self):
        assert months_between(date(2024, 11, 20), date(2025, 2, 1)) == [
            (2024, 11), (2024, 12), (2025, 1), (2025, 2)
        ]

    def test_months_between_single_month(self):
        assert months_between(date(2025, 3, 1), date(2025, 3, 31)) == [(2025, 3)]

    def test_months_between_inverted_is_empty(self):
        assert months_between(date(2025, 3, 1), date(2025, 1, 31)) == []

    def test_month_index(self):
        idx = month_index(date(2025, 12, 15), 3)
        assert list(idx.strftime("%Y-%m")) == ["2025-12", "2026-01", "2026-02"]

    def test_month_index_empty(self):
        assert len(month_index(date(2025, 1, 1), 0)) == 0


class TestPercentagesAndRounding:

    def test_safe_pct(self):
        assert safe_pct(20, 100) == 20.0

    def test_safe_pct_zero_denominator(self):
        assert safe_pct(50, 0) == 0.0

    def test_round_down_to_multiple(self):
        assert round_down_to_multiple(1_299.99, 100) == 1_200

    def test_round_down_rejects_zero_multiple(self):
        with pytest.raises(ValidationError):
            round_down_to_multiple(100, 0)

    def test_split_cents_last_absorbs(self):
        parts = split_cents(100.00, 3)
        assert parts == [33.33, 33.33, 33.34]
        assert round(sum(parts), 2) == 100.00

    def test_split_cents_single(self):
        assert split_cents(99.99, 1) == [99.99]


class TestFormatting:

    def test_format_currency(self):
        assert format_currency(1_500_000, "ARS") == "ARS 1,500,000"
        assert format_currency(12.5, decimals=2) == "12.50"
