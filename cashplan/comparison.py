"""
Planned vs observed comparison for a single month.

Purpose
-------
Groups one month's observed records and base-scenario plan instances by
category (and by source, for incomes), sums both sides in the reporting
currency and classifies each group's variance.

Status rules
------------
The thresholds are asymmetric because the undesirable direction differs:

- income:  variance_pct < -10          -> bad (shortfall)
           |variance_pct| > 10          -> warning
           otherwise                    -> good
- expense: variance_pct > 10            -> bad (overspend)
           |variance_pct| > 10          -> warning
           otherwise                    -> good

The band edges are exclusive: exactly ±10% is still good.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Literal, Tuple, Union

from .aggregation import observed_reporting
from .constants import VARIANCE_THRESHOLD_PCT
from .currency import CurrencyNormalizer
from .models import ObservedExpense, ObservedIncome
from .recurrence import ExpandedPlan
from .types import ComparisonDict
from .utils import month_key, parse_month_key, safe_pct

__all__ = [
    "Direction",
    "Status",
    "Comparison",
    "classify_variance",
    "compare",
    "compare_incomes",
    "compare_expenses",
]

Direction = Literal["income", "expense"]
Status = Literal["good", "warning", "bad"]


@dataclass(frozen=True)
class Comparison:
    category: str
    source: str
    planned: float
    observed: float
    variance: float
    variance_pct: float
    status: Status

    @property
    def key(self) -> Tuple[str, str]:
        return (self.category, self.source)

    def to_dict(self) -> ComparisonDict:
        return asdict(self)


def classify_variance(
    variance_pct: float,
    direction: Direction,
    threshold: float = VARIANCE_THRESHOLD_PCT,
) -> Status:
    """Three-level status of a variance percentage for incomes or expenses."""
    if direction == "income":
        if variance_pct < -threshold:
            return "bad"
    elif direction == "expense":
        if variance_pct > threshold:
            return "bad"
    else:
        raise ValueError(f"direction must be 'income' or 'expense', got {direction!r}")
    if abs(variance_pct) > threshold:
        return "warning"
    return "good"


def compare(
    observed: Iterable[Union[ObservedIncome, ObservedExpense]],
    expanded: Iterable[ExpandedPlan],
    month: str,
    normalizer: CurrencyNormalizer,
    *,
    direction: Direction,
    by_source: bool,
    threshold: float = VARIANCE_THRESHOLD_PCT,
) -> List[Comparison]:
    """
    Compare observed vs planned for *month* (YYYY-MM).

    Groups are keyed by category, or by (category, source) when
    ``by_source`` is set. Output is sorted by group key.
    """
    parse_month_key(month)
    groups: Dict[Tuple[str, str], List[float]] = {}

    def bucket(category: str, source: str) -> List[float]:
        key = (category, source if by_source else "")
        return groups.setdefault(key, [0.0, 0.0])

    for e in expanded:
        if e.scenario == "base" and month_key(e.date) == month:
            bucket(e.category, e.source)[0] += e.amount_reporting

    for o in observed:
        if month_key(o.date) == month:
            bucket(o.category, o.source)[1] += observed_reporting(o, normalizer)

    comparisons = []
    for (category, source), (planned, observed_total) in sorted(groups.items()):
        variance = observed_total - planned
        pct = safe_pct(variance, planned)
        comparisons.append(
            Comparison(
                category=category,
                source=source,
                planned=planned,
                observed=observed_total,
                variance=variance,
                variance_pct=pct,
                status=classify_variance(pct, direction, threshold),
            )
        )
    return comparisons


def compare_incomes(
    observed: Iterable[ObservedIncome],
    expanded: Iterable[ExpandedPlan],
    month: str,
    normalizer: CurrencyNormalizer,
    *,
    threshold: float = VARIANCE_THRESHOLD_PCT,
) -> List[Comparison]:
    """Income comparison grouped by (category, source)."""
    return compare(
        observed, expanded, month, normalizer,
        direction="income", by_source=True, threshold=threshold,
    )


def compare_expenses(
    observed: Iterable[ObservedExpense],
    expanded: Iterable[ExpandedPlan],
    month: str,
    normalizer: CurrencyNormalizer,
    *,
    threshold: float = VARIANCE_THRESHOLD_PCT,
) -> List[Comparison]:
    """Expense comparison grouped by category."""
    return compare(
        observed, expanded, month, normalizer,
        direction="expense", by_source=False, threshold=threshold,
    )
