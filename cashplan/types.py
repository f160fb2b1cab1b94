"""
Type definitions for CashPlan.

Purpose
-------
Provides TypedDict definitions for the dictionary shapes produced by the
derived views' ``to_dict()`` methods and consumed by the CLI and JSON
output. Using TypedDicts documents expected dictionary structures and
enables IDE autocompletion.

Usage
-----
>>> from cashplan.types import ForecastMonthDict
>>>
>>> row: ForecastMonthDict = {
...     "month": "2025-07", "conservative": 850.0, "base": 1000.0, "optimistic": 1150.0
... }

Type Definitions
----------------
CategoryBreakdownDict, MonthlyAggregateDict
    Planned vs observed totals per month and category
KPISetDict
    Headline KPIs: {"current_month", "previous_month", "mom_pct", "ytd", ...}
ForecastMonthDict
    One projected month: {"month", "conservative", "base", "optimistic"}
ComparisonDict
    One comparison row: {"category", "source", "planned", "observed", ...}
InstallmentDict
    One scheduled installment, with optional deficit and suggestions
AllocationDict, AllocationSuggestionDict
    Surplus allocator output
"""

from typing import List, Optional
from typing_extensions import TypedDict, NotRequired

__all__ = [
    "CategoryBreakdownDict",
    "MonthlyAggregateDict",
    "KPISetDict",
    "ForecastMonthDict",
    "ComparisonDict",
    "DeficitDict",
    "CoverageSuggestionDict",
    "InstallmentDict",
    "AllocationDict",
    "AllocationSuggestionDict",
]


class CategoryBreakdownDict(TypedDict):
    category: str
    planned: float
    observed: float
    variance: float
    variance_pct: float


class MonthlyAggregateDict(TypedDict):
    """
    Planned vs observed totals for one month.

    Attributes
    ----------
    month : str
        YYYY-MM key
    planned_total, observed_total : float
        Reporting-currency totals (base scenario only on the planned side)
    variance : float
        observed_total - planned_total
    variance_pct : float
        variance / planned_total * 100, or 0 when nothing was planned
    by_category : list of CategoryBreakdownDict
    """

    month: str
    planned_total: float
    observed_total: float
    variance: float
    variance_pct: float
    by_category: List[CategoryBreakdownDict]


class KPISetDict(TypedDict):
    current_month: float
    previous_month: float
    mom_pct: float
    ytd: float
    avg_3m: float
    avg_6m: float
    avg_12m: float
    current_key: NotRequired[str]
    previous_key: NotRequired[str]


class ForecastMonthDict(TypedDict):
    month: str
    conservative: float
    base: float
    optimistic: float


class ComparisonDict(TypedDict):
    """
    One planned vs observed comparison row.

    Attributes
    ----------
    status : str
        "good", "warning" or "bad"; thresholds differ for incomes and
        expenses.
    """

    category: str
    source: str
    planned: float
    observed: float
    variance: float
    variance_pct: float
    status: str


class DeficitDict(TypedDict):
    currency: str
    amount: float


class CoverageSuggestionDict(TypedDict):
    from_currency: str
    amount_from_est: float
    est_rate: str
    est_spread_pct: Optional[float]
    platform_suggested: Optional[str]


class InstallmentDict(TypedDict):
    id: str
    planned_expense_id: str
    installment_number: int
    total_installments: int
    due_date: str
    status: str
    currency: str
    amount_base: float
    amount_reporting_est: Optional[float]
    weekend_adjusted: bool
    deficit: Optional[DeficitDict]
    suggestions: List[CoverageSuggestionDict]


class AllocationDict(TypedDict):
    goal_id: str
    goal_name: str
    amount_reporting: float
    amount_in_base: float
    base_currency: str
    score: float


class AllocationSuggestionDict(TypedDict):
    total_surplus: float
    allocations: List[AllocationDict]
    remaining: float


