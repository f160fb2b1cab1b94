"""
Recurrence expansion for CashPlan.

Purpose
-------
Turns declarative plans (fixed amount or variable band + recurrence rule)
into concrete dated instances inside a closed date window. Expanded
instances feed the monthly aggregator, the comparison generator and, via
the aggregates, the KPI calculator and forecaster.

Algorithm
---------
For a ``monthly`` plan, every calendar month from the window start's month
through the window end's month gets a target date from the day rule:

- fixed_day:          anchor day of the month, no adjustment
- last_business_day:  last calendar day, moved backward off weekends
- next_business_day:  anchor day, moved forward off weekends

Anchor days beyond the month length are clamped to the month's last day.
The target is kept only when ``start <= target <= end``. A variable band
yields three instances on the same date (conservative=min,
base=(min+max)/2, optimistic=max); a fixed amount yields one ``base``
instance. ``is_pending`` marks instances dated before ``as_of``; matching
them against observed records is left to the consumer.

Plans without recurrence produce nothing. One-time plans produce nothing
unless ``include_one_time=True``, in which case a plan carrying a ``date``
yields its instances on that date when it falls inside the window.

Example
-------
>>> from datetime import date
>>> plan = PlannedIncome(
...     id="plan_1", source="Freelance", category="freelance", currency="ARS",
...     variable_band=VariableBand(1000, 2000),
...     recurrence=Recurrence("monthly", "fixed_day", anchor_day=15),
... )
>>> [(e.scenario, e.amount_original) for e in
...  expand_plan(plan, date(2025, 1, 1), date(2025, 1, 31), CurrencyNormalizer())]
[('conservative', 1000.0), ('base', 1500.0), ('optimistic', 2000.0)]
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Iterable, List, Optional, Union

from .business_days import last_business_day, resolve_business_day
from .constants import SCENARIO_ORDER
from .currency import CurrencyNormalizer
from .models import Confidence, PlannedExpense, PlannedIncome, Recurrence, Scenario
from .utils import check_window, clamp_day, months_between

__all__ = [
    "ExpandedPlan",
    "resolve_target_date",
    "expand_plan",
    "expand_plans",
    "base_scenario",
]

logger = logging.getLogger(__name__)

Plan = Union[PlannedIncome, PlannedExpense]


@dataclass(frozen=True)
class ExpandedPlan:
    """One materialized occurrence of a plan under one scenario."""
    planned_id: str
    source: str
    category: str
    currency: str
    date: date
    amount_original: float
    amount_reporting: float
    confidence: Confidence
    scenario: Scenario
    is_pending: bool

    def to_dict(self) -> dict:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data


def resolve_target_date(recurrence: Recurrence, year: int, month: int) -> date:
    """Resolve a recurrence's day rule inside one calendar month."""
    if recurrence.day_rule == "last_business_day":
        return last_business_day(year, month)
    target = clamp_day(year, month, recurrence.anchor_day)
    if recurrence.day_rule == "next_business_day":
        return resolve_business_day(target, "forward")
    return target


def _instances(
    plan: Plan,
    on: date,
    normalizer: CurrencyNormalizer,
    as_of: date,
) -> List[ExpandedPlan]:
    estimate = plan.amount_reporting_est
    pairs = plan.scenario_amounts()
    # the estimate prices the base amount; other scenarios scale with it
    reference = dict(pairs)["base"]
    out = []
    for scenario, amount in pairs:
        if estimate is not None and reference > 0:
            reporting = estimate * amount / reference
        elif estimate is not None:
            reporting = estimate
        else:
            reporting = normalizer.to_reporting(amount, plan.currency)
        out.append(
            ExpandedPlan(
                planned_id=plan.id,
                source=plan.source,
                category=plan.category,
                currency=plan.currency,
                date=on,
                amount_original=amount,
                amount_reporting=reporting,
                confidence=plan.confidence,
                scenario=scenario,
                is_pending=on < as_of,
            )
        )
    return out


def expand_plan(
    plan: Plan,
    start: date,
    end: date,
    normalizer: CurrencyNormalizer,
    *,
    as_of: Optional[date] = None,
    include_one_time: bool = False,
) -> List[ExpandedPlan]:
    """
    Expand a single plan inside the closed window [start, end].

    Parameters
    ----------
    plan : PlannedIncome or PlannedExpense
    start, end : date
        Inclusive window bounds. ``start > end`` raises TimeIndexError.
    normalizer : CurrencyNormalizer
        Converts instance amounts to the reporting currency.
    as_of : date, optional
        Reference "today" for ``is_pending``. Defaults to ``date.today()``.
    include_one_time : bool, default False
        Emit dated one-time plans instead of skipping them.

    Returns
    -------
    list of ExpandedPlan
        Ordered by date, then scenario (conservative, base, optimistic).
    """
    check_window(start, end)
    as_of = as_of or date.today()
    recurrence = plan.recurrence
    if recurrence is None:
        return []

    if recurrence.type == "one_time":
        if include_one_time and plan.date is not None and start <= plan.date <= end:
            return _instances(plan, plan.date, normalizer, as_of)
        return []

    expanded: List[ExpandedPlan] = []
    for year, month in months_between(start, end):
        target = resolve_target_date(recurrence, year, month)
        if start <= target <= end:
            expanded.extend(_instances(plan, target, normalizer, as_of))
    return expanded


def expand_plans(
    plans: Iterable[Plan],
    start: date,
    end: date,
    normalizer: CurrencyNormalizer,
    *,
    as_of: Optional[date] = None,
    include_one_time: bool = False,
) -> List[ExpandedPlan]:
    """Expand every active plan; results sorted by (date, planned_id, scenario)."""
    check_window(start, end)
    as_of = as_of or date.today()
    expanded: List[ExpandedPlan] = []
    for plan in plans:
        if not plan.is_active:
            continue
        expanded.extend(
            expand_plan(plan, start, end, normalizer, as_of=as_of, include_one_time=include_one_time)
        )
    expanded.sort(key=lambda e: (e.date, e.planned_id, SCENARIO_ORDER.index(e.scenario)))
    logger.debug("Expanded %d instances in %s..%s", len(expanded), start, end)
    return expanded


def base_scenario(expanded: Iterable[ExpandedPlan]) -> List[ExpandedPlan]:
    """Keep only ``base`` instances (the ones compared against observed activity)."""
    return [e for e in expanded if e.scenario == "base"]
