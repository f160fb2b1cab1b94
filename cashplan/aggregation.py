"""
Monthly aggregation of planned vs observed activity.

Purpose
-------
Buckets observed records and base-scenario expanded plans into calendar
months (YYYY-MM) in the reporting currency, producing planned/observed
totals, variance and a per-category breakdown. The resulting series is the
input of the KPI calculator and the forecaster.

Conventions
-----------
- Only ``scenario == "base"`` instances count as planned.
- variance = observed - planned
- variance_pct = variance / planned * 100, or 0 when planned is 0. The zero
  masks the true variance of unplanned activity; this is the documented
  behaviour.
- One aggregate per month with any activity, sorted by month.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple, Union

import pandas as pd

from .currency import CurrencyNormalizer
from .models import ObservedExpense, ObservedIncome
from .recurrence import ExpandedPlan
from .types import CategoryBreakdownDict, MonthlyAggregateDict
from .utils import month_key, safe_pct

__all__ = [
    "CategoryBreakdown",
    "MonthlyAggregate",
    "observed_reporting",
    "monthly_aggregate",
    "aggregates_to_frame",
]

Observed = Union[ObservedIncome, ObservedExpense]

_COLUMNS = ["month", "category", "planned", "observed"]


@dataclass(frozen=True)
class CategoryBreakdown:
    category: str
    planned: float
    observed: float
    variance: float
    variance_pct: float

    def to_dict(self) -> CategoryBreakdownDict:
        return {
            "category": self.category,
            "planned": self.planned,
            "observed": self.observed,
            "variance": self.variance,
            "variance_pct": self.variance_pct,
        }


@dataclass(frozen=True)
class MonthlyAggregate:
    """Planned vs observed totals for one calendar month (reporting currency)."""
    month: str
    planned_total: float
    observed_total: float
    variance: float
    variance_pct: float
    by_category: Tuple[CategoryBreakdown, ...] = field(default_factory=tuple)

    def to_dict(self) -> MonthlyAggregateDict:
        return {
            "month": self.month,
            "planned_total": self.planned_total,
            "observed_total": self.observed_total,
            "variance": self.variance,
            "variance_pct": self.variance_pct,
            "by_category": [c.to_dict() for c in self.by_category],
        }


def observed_reporting(record: Observed, normalizer: CurrencyNormalizer) -> float:
    """Reporting-currency amount of an observed record.

    A booked ``amount_reporting`` wins over the rate table.
    """
    if record.amount_reporting is not None:
        return float(record.amount_reporting)
    return normalizer.to_reporting(record.amount, record.currency)


def monthly_aggregate(
    observed: Iterable[Observed],
    expanded: Iterable[ExpandedPlan],
    normalizer: CurrencyNormalizer,
) -> List[MonthlyAggregate]:
    """
    Aggregate observed records and base-scenario plan instances by month.

    Parameters
    ----------
    observed : iterable of ObservedIncome or ObservedExpense
    expanded : iterable of ExpandedPlan
        Output of the recurrence expander; non-base scenarios are ignored.
    normalizer : CurrencyNormalizer

    Returns
    -------
    list of MonthlyAggregate
        Sorted by month key.
    """
    rows = [
        (month_key(o.date), o.category, 0.0, observed_reporting(o, normalizer))
        for o in observed
    ]
    rows.extend(
        (month_key(e.date), e.category, e.amount_reporting, 0.0)
        for e in expanded
        if e.scenario == "base"
    )
    if not rows:
        return []

    df = pd.DataFrame(rows, columns=_COLUMNS)
    totals = df.groupby("month", sort=True)[["planned", "observed"]].sum()
    by_category = df.groupby(["month", "category"], sort=True)[["planned", "observed"]].sum()

    aggregates: List[MonthlyAggregate] = []
    for month, row in totals.iterrows():
        planned = float(row["planned"])
        observed_total = float(row["observed"])
        variance = observed_total - planned
        breakdown = []
        for category, cat in by_category.loc[month].iterrows():
            cat_planned = float(cat["planned"])
            cat_variance = float(cat["observed"]) - cat_planned
            breakdown.append(
                CategoryBreakdown(
                    category=str(category),
                    planned=cat_planned,
                    observed=float(cat["observed"]),
                    variance=cat_variance,
                    variance_pct=safe_pct(cat_variance, cat_planned),
                )
            )
        aggregates.append(
            MonthlyAggregate(
                month=str(month),
                planned_total=planned,
                observed_total=observed_total,
                variance=variance,
                variance_pct=safe_pct(variance, planned),
                by_category=tuple(breakdown),
            )
        )
    return aggregates


def aggregates_to_frame(aggregates: Sequence[MonthlyAggregate]) -> pd.DataFrame:
    """Tabular view indexed by month key (columns planned/observed/variance/variance_pct)."""
    columns = ["planned", "observed", "variance", "variance_pct"]
    if not aggregates:
        return pd.DataFrame(columns=columns, index=pd.Index([], name="month"))
    return pd.DataFrame(
        {
            "planned": [a.planned_total for a in aggregates],
            "observed": [a.observed_total for a in aggregates],
            "variance": [a.variance for a in aggregates],
            "variance_pct": [a.variance_pct for a in aggregates],
        },
        index=pd.Index([a.month for a in aggregates], name="month"),
    )
