"""
Unit tests for goals.py module.
"""

from datetime import date

import pytest

from cashplan.exceptions import ValidationError
from cashplan.goals import SavingGoal, contribute, goal_progress, summarize_goals


def _goal(**overrides):
    params = dict(id="g1", name="Fund", target_amount=1_000.0, current_amount=250.0, base_currency="ARS")
    params.update(overrides)
    return SavingGoal(**params)


class TestSavingGoal:

    def test_valid(self):
        goal = _goal()
        assert goal.remaining == 750.0
        assert not goal.is_completed

    def test_overfunded_is_completed(self):
        goal = _goal(current_amount=1_500.0)
        assert goal.is_completed
        assert goal.remaining == 0.0

    def test_negative_target(self):
        with pytest.raises(ValidationError, match="target_amount"):
            _goal(target_amount=-1)

    def test_negative_current(self):
        with pytest.raises(ValidationError, match="current_amount"):
            _goal(current_amount=-1)

    def test_requires_currency(self):
        with pytest.raises(ValidationError, match="base_currency"):
            _goal(base_currency="")

    def test_unknown_priority(self):
        with pytest.raises(ValidationError, match="priority"):
            _goal(priority="urgent")

    def test_repr(self):
        assert "250/1,000 ARS" in repr(_goal())


class TestContribute:

    def test_adds(self):
        goal = contribute(_goal(), 250.0)
        assert goal.current_amount == 500.0

    def test_negative_contribution(self):
        with pytest.raises(ValidationError):
            contribute(_goal(), -1.0)

    def test_original_unchanged(self):
        goal = _goal()
        contribute(goal, 100.0)
        assert goal.current_amount == 250.0


class TestProgress:

    def test_progress(self):
        progress = goal_progress(_goal(due_date=date(2025, 7, 1)), as_of=date(2025, 6, 1))
        assert progress.progress_pct == 25.0
        assert progress.remaining == 750.0
        assert progress.days_until_due == 30

    def test_capped(self):
        assert goal_progress(_goal(current_amount=3_000.0), as_of=date(2025, 6, 1)).progress_pct == 100.0

    def test_zero_target(self):
        progress = goal_progress(_goal(target_amount=0.0, current_amount=0.0), as_of=date(2025, 6, 1))
        assert progress.progress_pct == 100.0
        assert progress.is_completed

    def test_overdue_negative_days(self):
        progress = goal_progress(_goal(due_date=date(2025, 5, 30)), as_of=date(2025, 6, 1))
        assert progress.days_until_due == -2

    def test_no_due_date(self):
        assert goal_progress(_goal(), as_of=date(2025, 6, 1)).days_until_due is None


class TestSummary:

    def test_summary(self, goals):
        summary = summarize_goals(goals)
        assert summary.total == 3
        assert summary.completed == 1
        assert summary.saved_by_currency == {"ARS": 120_000.0, "USD": 500.0}

    def test_empty(self):
        summary = summarize_goals([])
        assert (summary.total, summary.completed, summary.saved_by_currency) == (0, 0, {})
