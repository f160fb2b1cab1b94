"""
Unit tests for recurrence.py module.
"""

from datetime import date

import pytest

from cashplan.exceptions import TimeIndexError
from cashplan.models import PlannedExpense, PlannedIncome, Recurrence, VariableBand
from cashplan.recurrence import base_scenario, expand_plan, expand_plans, resolve_target_date


def _income(**overrides):
    params = dict(
        id="p1", source="ACME", category="salary", currency="ARS",
        amount=100.0, recurrence=Recurrence("monthly", "fixed_day", anchor_day=15),
    )
    params.update(overrides)
    return PlannedIncome(**params)


class TestResolveTargetDate:

    def test_fixed_day_not_adjusted(self):
        r = Recurrence("monthly", "fixed_day", anchor_day=15)
        assert resolve_target_date(r, 2025, 3) == date(2025, 3, 15)  # Saturday

    def test_next_business_day(self):
        r = Recurrence("monthly", "next_business_day", anchor_day=15)
        assert resolve_target_date(r, 2025, 3) == date(2025, 3, 17)

    def test_last_business_day(self):
        r = Recurrence("monthly", "last_business_day")
        assert resolve_target_date(r, 2025, 5) == date(2025, 5, 30)

    def test_anchor_clamped_to_month_length(self):
        r = Recurrence("monthly", "fixed_day", anchor_day=31)
        assert resolve_target_date(r, 2025, 2) == date(2025, 2, 28)


class TestExpandPlan:

    def test_band_yields_three_scenarios(self, freelance_plan, normalizer):
        out = expand_plan(freelance_plan, date(2025, 1, 1), date(2025, 1, 31), normalizer,
                          as_of=date(2025, 1, 1))
        assert [(e.scenario, e.amount_original) for e in out] == [
            ("conservative", 1000.0),
            ("base", 1500.0),
            ("optimistic", 2000.0),
        ]
        assert {e.date for e in out} == {date(2025, 1, 15)}

    def test_scenario_amounts_ordered(self, freelance_plan, normalizer):
        out = expand_plan(freelance_plan, date(2025, 1, 1), date(2025, 6, 30), normalizer,
                          as_of=date(2025, 1, 1))
        for i in range(0, len(out), 3):
            low, mid, high = out[i:i + 3]
            assert low.amount_reporting <= mid.amount_reporting <= high.amount_reporting

    def test_fixed_amount_one_per_month(self, normalizer):
        out = expand_plan(_income(), date(2025, 1, 1), date(2025, 3, 31), normalizer,
                          as_of=date(2025, 1, 1))
        assert [e.date for e in out] == [date(2025, 1, 15), date(2025, 2, 15), date(2025, 3, 15)]
        assert all(e.scenario == "base" for e in out)

    def test_window_containment(self, normalizer):
        start, end = date(2025, 1, 20), date(2025, 3, 10)
        out = expand_plan(_income(), start, end, normalizer, as_of=start)
        assert [e.date for e in out] == [date(2025, 2, 15)]
        assert all(start <= e.date <= end for e in out)

    def test_inverted_window(self, normalizer):
        with pytest.raises(TimeIndexError):
            expand_plan(_income(), date(2025, 2, 1), date(2025, 1, 1), normalizer)

    def test_reporting_conversion(self, normalizer):
        out = expand_plan(_income(currency="USD"), date(2025, 1, 1), date(2025, 1, 31), normalizer,
                          as_of=date(2025, 1, 1))
        assert out[0].amount_reporting == 100_000.0
        assert out[0].amount_original == 100.0

    def test_estimate_overrides_rate_table(self, normalizer):
        plan = PlannedExpense(
            id="e1", category="subs", currency="USD", amount=10.0, amount_reporting_est=12_500.0,
            recurrence=Recurrence("monthly", "fixed_day", anchor_day=1),
        )
        out = expand_plan(plan, date(2025, 1, 1), date(2025, 1, 31), normalizer, as_of=date(2025, 1, 1))
        assert out[0].amount_reporting == 12_500.0

    def test_is_pending(self, normalizer):
        out = expand_plan(_income(), date(2025, 1, 1), date(2025, 3, 31), normalizer,
                          as_of=date(2025, 2, 15))
        assert [e.is_pending for e in out] == [True, False, False]

    def test_no_recurrence_produces_nothing(self, normalizer):
        plan = _income(recurrence=None)
        assert expand_plan(plan, date(2025, 1, 1), date(2025, 12, 31), normalizer) == []

    def test_one_time_skipped_by_default(self, normalizer):
        plan = _income(recurrence=Recurrence("one_time", "fixed_day", anchor_day=1), date=date(2025, 2, 3))
        assert expand_plan(plan, date(2025, 1, 1), date(2025, 12, 31), normalizer) == []

    def test_one_time_included_on_request(self, normalizer):
        plan = _income(recurrence=Recurrence("one_time", "fixed_day", anchor_day=1), date=date(2025, 2, 3))
        out = expand_plan(plan, date(2025, 1, 1), date(2025, 12, 31), normalizer,
                          as_of=date(2025, 1, 1), include_one_time=True)
        assert [e.date for e in out] == [date(2025, 2, 3)]

    def test_to_dict_isoformat(self, normalizer):
        out = expand_plan(_income(), date(2025, 1, 1), date(2025, 1, 31), normalizer, as_of=date(2025, 1, 1))
        assert out[0].to_dict()["date"] == "2025-01-15"


class TestExpandPlans:

    def test_inactive_plans_skipped(self, normalizer):
        plans = [_income(), _income(id="p2", is_active=False)]
        out = expand_plans(plans, date(2025, 1, 1), date(2025, 1, 31), normalizer, as_of=date(2025, 1, 1))
        assert {e.planned_id for e in out} == {"p1"}

    def test_sorted_by_date(self, salary_plan, freelance_plan, normalizer):
        out = expand_plans([salary_plan, freelance_plan], date(2025, 1, 1), date(2025, 3, 31),
                           normalizer, as_of=date(2025, 1, 1))
        dates = [e.date for e in out]
        assert dates == sorted(dates)

    def test_base_scenario_filter(self, freelance_plan, normalizer):
        out = expand_plans([freelance_plan], date(2025, 1, 1), date(2025, 2, 28), normalizer,
                           as_of=date(2025, 1, 1))
        base = base_scenario(out)
        assert len(base) == 2
        assert all(e.amount_original == 1500.0 for e in base)
