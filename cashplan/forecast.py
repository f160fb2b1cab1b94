"""
Forward projection of monthly totals.

Purpose
-------
Projects the next N months from trailing observed averages and emits three
deterministic scenarios per month:

    base_monthly = (avg_3m + avg_6m) / 2
    conservative = base_monthly * 0.85
    base         = base_monthly
    optimistic   = base_monthly * 1.15

The multipliers are fixed constants, not statistically derived. Forecast
month i (1..N) is the month of ``as_of`` shifted by i months.

Example
-------
>>> months = forecast(aggregates, months=3, as_of=date(2025, 6, 15))
>>> [m.month for m in months]
['2025-07', '2025-08', '2025-09']
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import List, Optional, Sequence

import pandas as pd

from .aggregation import MonthlyAggregate
from .constants import CONSERVATIVE_FACTOR, DEFAULT_FORECAST_MONTHS, OPTIMISTIC_FACTOR
from .exceptions import ValidationError
from .kpis import trailing_average
from .types import ForecastMonthDict
from .utils import add_months, month_index

__all__ = ["ForecastMonth", "base_monthly", "forecast", "forecast_to_frame"]


@dataclass(frozen=True)
class ForecastMonth:
    month: str
    conservative: float
    base: float
    optimistic: float

    def to_dict(self) -> ForecastMonthDict:
        return asdict(self)


def base_monthly(aggregates: Sequence[MonthlyAggregate]) -> float:
    """Average of the 3- and 6-month trailing observed means."""
    return (trailing_average(aggregates, 3) + trailing_average(aggregates, 6)) / 2


def forecast(
    aggregates: Sequence[MonthlyAggregate],
    months: int = DEFAULT_FORECAST_MONTHS,
    *,
    as_of: Optional[date] = None,
    conservative_factor: float = CONSERVATIVE_FACTOR,
    optimistic_factor: float = OPTIMISTIC_FACTOR,
) -> List[ForecastMonth]:
    """
    Project *months* future months from the aggregate series.

    Parameters
    ----------
    aggregates : sequence of MonthlyAggregate
        Month-sorted history.
    months : int, default 3
        Horizon. Zero yields an empty list; negative raises ValidationError.
    as_of : date, optional
        Reference "today". Defaults to ``date.today()``.
    conservative_factor, optimistic_factor : float
        Scenario multipliers applied to the base projection.

    Returns
    -------
    list of ForecastMonth
    """
    if months < 0:
        raise ValidationError(f"months must be >= 0, got {months}")
    as_of = as_of or date.today()
    base = base_monthly(aggregates)
    index = month_index(add_months(as_of.replace(day=1), 1), months)
    return [
        ForecastMonth(
            month=ts.strftime("%Y-%m"),
            conservative=base * conservative_factor,
            base=base,
            optimistic=base * optimistic_factor,
        )
        for ts in index
    ]


def forecast_to_frame(months: Sequence[ForecastMonth]) -> pd.DataFrame:
    """Tabular view indexed by month key."""
    frame = pd.DataFrame(
        [asdict(m) for m in months],
        columns=["month", "conservative", "base", "optimistic"],
    )
    return frame.set_index("month")
