"""
Unit tests for forecast.py module.
"""

from datetime import date

import pytest

from cashplan.aggregation import MonthlyAggregate
from cashplan.exceptions import ValidationError
from cashplan.forecast import base_monthly, forecast, forecast_to_frame


def _series(values):
    return [
        MonthlyAggregate(
            month=f"2025-{i:02d}", planned_total=0.0, observed_total=float(v),
            variance=float(v), variance_pct=0.0,
        )
        for i, v in enumerate(values, start=1)
    ]


class TestForecast:

    def test_base_monthly(self):
        # avg_3m = 500, avg_6m = 350
        assert base_monthly(_series([100, 200, 300, 400, 500, 600])) == pytest.approx(425.0)

    def test_scenarios(self):
        out = forecast(_series([100, 200, 300, 400, 500, 600]), 3, as_of=date(2025, 6, 15))
        assert [m.month for m in out] == ["2025-07", "2025-08", "2025-09"]
        first = out[0]
        assert first.base == pytest.approx(425.0)
        assert first.conservative == pytest.approx(361.25)
        assert first.optimistic == pytest.approx(488.75)

    def test_scenario_ordering(self):
        for m in forecast(_series([10, 0, 50]), 6, as_of=date(2025, 3, 1)):
            assert m.conservative <= m.base <= m.optimistic

    def test_year_wrap(self):
        out = forecast(_series([100]), 3, as_of=date(2025, 11, 3))
        assert [m.month for m in out] == ["2025-12", "2026-01", "2026-02"]

    def test_from_month_end(self):
        out = forecast(_series([100]), 1, as_of=date(2025, 1, 31))
        assert out[0].month == "2025-02"

    def test_empty_history_projects_zero(self):
        out = forecast([], 2, as_of=date(2025, 6, 15))
        assert [(m.conservative, m.base, m.optimistic) for m in out] == [(0.0, 0.0, 0.0)] * 2

    def test_zero_horizon(self):
        assert forecast(_series([100]), 0, as_of=date(2025, 6, 15)) == []

    def test_negative_horizon(self):
        with pytest.raises(ValidationError):
            forecast(_series([100]), -1, as_of=date(2025, 6, 15))

    def test_custom_factors(self):
        out = forecast(_series([100]), 1, as_of=date(2025, 1, 15),
                       conservative_factor=0.5, optimistic_factor=2.0)
        assert out[0].conservative == pytest.approx(50.0)
        assert out[0].optimistic == pytest.approx(200.0)

    def test_frame(self):
        df = forecast_to_frame(forecast(_series([100]), 2, as_of=date(2025, 1, 15)))
        assert list(df.index) == ["2025-02", "2025-03"]
        assert list(df.columns) == ["conservative", "base", "optimistic"]
