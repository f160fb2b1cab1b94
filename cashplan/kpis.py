"""
Trailing KPIs over the monthly aggregate series.

Purpose
-------
Derives headline figures from observed totals: current vs previous month,
month-over-month change, year-to-date sum and 3/6/12-month trailing
averages. Also provides the expense breakdown shown next to expense KPIs
(top categories and credit/debit split for the current month).

Previous month
--------------
By default the "previous" bucket is the month containing ``as_of - 30
days``. Near month boundaries this can land on the current month again
(e.g. as_of = 31 March -> 1 March) or skip a month. Pass
``previous_month_rule="calendar"`` for the true previous calendar month.

Trailing averages use the last N aggregates *present* in the series: a
short history averages fewer months, months without activity are not
padded with zero.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Tuple

import numpy as np

from .aggregation import MonthlyAggregate, observed_reporting
from .constants import PREVIOUS_MONTH_OFFSET_DAYS
from .currency import CurrencyNormalizer
from .models import ObservedExpense, PlannedExpense
from .types import KPISetDict
from .utils import add_months, month_key, safe_pct

__all__ = [
    "PreviousMonthRule",
    "KPISet",
    "CategoryShare",
    "ExpenseBreakdown",
    "previous_month_key",
    "trailing_average",
    "compute_kpis",
    "expense_breakdown",
]

PreviousMonthRule = Literal["thirty_days", "calendar"]


@dataclass(frozen=True)
class KPISet:
    """Headline figures in reporting currency."""
    current_month: float
    previous_month: float
    mom_pct: float
    ytd: float
    avg_3m: float
    avg_6m: float
    avg_12m: float
    current_key: str = ""
    previous_key: str = ""

    def to_dict(self) -> KPISetDict:
        return asdict(self)


@dataclass(frozen=True)
class CategoryShare:
    category: str
    amount: float
    percentage: float


@dataclass(frozen=True)
class ExpenseBreakdown:
    month: str
    total: float
    top_categories: Tuple[CategoryShare, ...] = field(default_factory=tuple)
    credit_pct: float = 0.0
    debit_pct: float = 0.0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["top_categories"] = [asdict(c) for c in self.top_categories]
        return data


def previous_month_key(as_of: date, rule: PreviousMonthRule = "thirty_days") -> str:
    """Month key of the "previous month" KPI bucket."""
    if rule == "thirty_days":
        return month_key(as_of - timedelta(days=PREVIOUS_MONTH_OFFSET_DAYS))
    if rule == "calendar":
        return month_key(add_months(as_of.replace(day=1), -1))
    raise ValueError(f"previous_month_rule must be 'thirty_days' or 'calendar', got {rule!r}")


def trailing_average(aggregates: Sequence[MonthlyAggregate], n: int) -> float:
    """Mean observed total of the last *n* aggregates present (0.0 when empty)."""
    window = list(aggregates)[-n:] if n > 0 else []
    if not window:
        return 0.0
    return float(np.mean([a.observed_total for a in window]))


def compute_kpis(
    aggregates: Sequence[MonthlyAggregate],
    *,
    as_of: Optional[date] = None,
    previous_month_rule: PreviousMonthRule = "thirty_days",
) -> KPISet:
    """
    Compute KPIs from a month-sorted aggregate series.

    Parameters
    ----------
    aggregates : sequence of MonthlyAggregate
        Sorted by month (as returned by ``monthly_aggregate``).
    as_of : date, optional
        Reference "today". Defaults to ``date.today()``.
    previous_month_rule : {"thirty_days", "calendar"}, default "thirty_days"

    Returns
    -------
    KPISet
    """
    as_of = as_of or date.today()
    by_month: Dict[str, MonthlyAggregate] = {a.month: a for a in aggregates}

    current_key = month_key(as_of)
    previous_key = previous_month_key(as_of, previous_month_rule)
    current = by_month[current_key].observed_total if current_key in by_month else 0.0
    previous = by_month[previous_key].observed_total if previous_key in by_month else 0.0

    year_prefix = f"{as_of.year:04d}"
    ytd = sum(a.observed_total for a in aggregates if a.month.startswith(year_prefix))

    return KPISet(
        current_month=current,
        previous_month=previous,
        mom_pct=safe_pct(current - previous, previous),
        ytd=float(ytd),
        avg_3m=trailing_average(aggregates, 3),
        avg_6m=trailing_average(aggregates, 6),
        avg_12m=trailing_average(aggregates, 12),
        current_key=current_key,
        previous_key=previous_key,
    )


def expense_breakdown(
    observed: Iterable[ObservedExpense],
    planned: Iterable[PlannedExpense],
    normalizer: CurrencyNormalizer,
    *,
    as_of: Optional[date] = None,
    top_n: int = 3,
) -> ExpenseBreakdown:
    """
    Current-month spending by category and by payment kind.

    Observed expenses linked to a credit plan (``planned_id``) count as
    credit; everything else counts as debit.
    """
    as_of = as_of or date.today()
    key = month_key(as_of)
    kinds = {p.id: p.kind for p in planned}

    by_category: Dict[str, float] = {}
    credit = 0.0
    total = 0.0
    for record in observed:
        if month_key(record.date) != key:
            continue
        amount = observed_reporting(record, normalizer)
        total += amount
        by_category[record.category] = by_category.get(record.category, 0.0) + amount
        if kinds.get(record.planned_id) == "credit":
            credit += amount

    ranked: List[Tuple[str, float]] = sorted(by_category.items(), key=lambda kv: (-kv[1], kv[0]))
    top = tuple(
        CategoryShare(category=cat, amount=amount, percentage=safe_pct(amount, total))
        for cat, amount in ranked[:top_n]
    )
    credit_pct = safe_pct(credit, total)
    return ExpenseBreakdown(
        month=key,
        total=total,
        top_categories=top,
        credit_pct=credit_pct,
        debit_pct=100.0 - credit_pct if total > 0 else 0.0,
    )
