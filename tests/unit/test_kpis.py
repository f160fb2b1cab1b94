"""
Unit tests for kpis.py module.
"""

from datetime import date

import pytest

from cashplan.aggregation import MonthlyAggregate
from cashplan.kpis import compute_kpis, expense_breakdown, previous_month_key, trailing_average
from cashplan.models import ObservedExpense


def _agg(month, observed):
    return MonthlyAggregate(
        month=month, planned_total=0.0, observed_total=float(observed),
        variance=float(observed), variance_pct=0.0,
    )


@pytest.fixture
def half_year():
    """Observed 100, 200, ..., 600 for Jan..Jun 2025."""
    return [_agg(f"2025-{m:02d}", 100 * m) for m in range(1, 7)]


class TestPreviousMonthKey:

    def test_thirty_days(self):
        assert previous_month_key(date(2025, 6, 15)) == "2025-05"

    def test_thirty_days_can_repeat_current_month(self):
        assert previous_month_key(date(2025, 3, 31)) == "2025-03"

    def test_calendar_rule(self):
        assert previous_month_key(date(2025, 3, 31), "calendar") == "2025-02"
        assert previous_month_key(date(2025, 1, 5), "calendar") == "2024-12"

    def test_unknown_rule(self):
        with pytest.raises(ValueError):
            previous_month_key(date(2025, 1, 5), "lunar")


class TestTrailingAverage:

    def test_uses_present_months_only(self, half_year):
        assert trailing_average(half_year, 12) == pytest.approx(350.0)

    def test_last_three(self, half_year):
        assert trailing_average(half_year, 3) == pytest.approx(500.0)

    def test_empty(self):
        assert trailing_average([], 3) == 0.0


class TestComputeKPIs:

    def test_headline_figures(self, half_year):
        kpis = compute_kpis(half_year, as_of=date(2025, 6, 15))
        assert kpis.current_key == "2025-06"
        assert kpis.previous_key == "2025-05"
        assert kpis.current_month == 600
        assert kpis.previous_month == 500
        assert kpis.mom_pct == pytest.approx(20.0)
        assert kpis.ytd == 2100
        assert kpis.avg_3m == pytest.approx(500.0)
        assert kpis.avg_6m == pytest.approx(350.0)
        assert kpis.avg_12m == pytest.approx(350.0)

    def test_ytd_only_current_year(self):
        aggs = [_agg("2024-12", 1_000), _agg("2025-01", 100)]
        kpis = compute_kpis(aggs, as_of=date(2025, 1, 20))
        assert kpis.ytd == 100

    def test_previous_zero_gives_zero_mom(self):
        kpis = compute_kpis([_agg("2025-06", 600)], as_of=date(2025, 6, 15))
        assert kpis.previous_month == 0
        assert kpis.mom_pct == 0.0

    def test_empty_series(self):
        kpis = compute_kpis([], as_of=date(2025, 6, 15))
        assert kpis.current_month == 0
        assert kpis.ytd == 0
        assert kpis.avg_3m == 0

    def test_calendar_rule_changes_previous(self, half_year):
        default = compute_kpis(half_year, as_of=date(2025, 3, 31))
        calendar = compute_kpis(half_year, as_of=date(2025, 3, 31), previous_month_rule="calendar")
        assert default.previous_month == 300
        assert calendar.previous_month == 200

    def test_to_dict(self, half_year):
        data = compute_kpis(half_year, as_of=date(2025, 6, 15)).to_dict()
        assert data["current_month"] == 600
        assert data["current_key"] == "2025-06"


class TestExpenseBreakdown:

    def test_top_categories_and_credit_split(self, credit_purchase, rent_plan, normalizer):
        observed = [
            ObservedExpense(id="a", category="housing", currency="ARS", amount=300,
                            date=date(2025, 6, 5), planned_id=rent_plan.id),
            ObservedExpense(id="b", category="tech", currency="ARS", amount=100,
                            date=date(2025, 6, 10), planned_id=credit_purchase.id),
            ObservedExpense(id="c", category="food", currency="ARS", amount=50, date=date(2025, 6, 11)),
            ObservedExpense(id="d", category="fun", currency="ARS", amount=50, date=date(2025, 6, 12)),
            ObservedExpense(id="old", category="tech", currency="ARS", amount=999, date=date(2025, 5, 1)),
        ]
        breakdown = expense_breakdown(
            observed, [rent_plan, credit_purchase], normalizer, as_of=date(2025, 6, 15)
        )
        assert breakdown.month == "2025-06"
        assert breakdown.total == 500
        assert [c.category for c in breakdown.top_categories] == ["housing", "tech", "food"]
        assert breakdown.top_categories[0].percentage == pytest.approx(60.0)
        assert breakdown.credit_pct == pytest.approx(20.0)
        assert breakdown.debit_pct == pytest.approx(80.0)

    def test_empty_month(self, normalizer):
        breakdown = expense_breakdown([], [], normalizer, as_of=date(2025, 6, 15))
        assert breakdown.total == 0
        assert breakdown.credit_pct == 0
        assert breakdown.debit_pct == 0
