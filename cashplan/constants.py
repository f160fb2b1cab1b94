"""
Global constants for CashPlan.

Purpose
-------
Centralizes default values and magic numbers used throughout the CashPlan
codebase. Using constants instead of hardcoded values improves maintainability,
ensures consistency, and makes configuration intentions explicit.

Usage
-----
>>> from cashplan.constants import DEFAULT_RATES, DEFAULT_FORECAST_MONTHS
>>>
>>> normalizer = CurrencyNormalizer(DEFAULT_RATES)
>>> months = forecast(aggregates, months=DEFAULT_FORECAST_MONTHS)

Categories
----------
- Currency: Reporting currency and the illustrative rate table
- Forecast: Horizon and scenario multipliers
- Comparison: Variance threshold
- Installments: Payment day, status windows, coverage routes
- Allocation: Priority weights, rounding, per-goal cap, score weights
"""

from typing import Dict, Tuple

__all__ = [
    # Currency
    "DEFAULT_REPORTING_CURRENCY",
    "DEFAULT_RATES",
    # Calendar
    "MONTHS_PER_YEAR",
    "PREVIOUS_MONTH_OFFSET_DAYS",
    # Forecast
    "DEFAULT_FORECAST_MONTHS",
    "CONSERVATIVE_FACTOR",
    "OPTIMISTIC_FACTOR",
    "TRAILING_WINDOWS",
    # Comparison
    "VARIANCE_THRESHOLD_PCT",
    # Installments
    "DEFAULT_PAYMENT_DAY",
    "MAX_INSTALLMENTS",
    "URGENT_DAYS",
    "WARNING_DAYS",
    "DEFAULT_COVERAGE_ROUTES",
    # Allocation
    "DEFAULT_PRIORITY_WEIGHTS",
    "DEFAULT_ROUND_TO_MULTIPLE",
    "DEFAULT_MAX_ALLOCATION_PER_GOAL",
    "SCORE_WEIGHT_PRIORITY",
    "SCORE_WEIGHT_URGENCY",
    "SCORE_WEIGHT_SHORTFALL",
    "URGENCY_TIERS",
    "URGENCY_BEYOND",
    "URGENCY_NO_DUE_DATE",
    # Scenarios
    "SCENARIO_ORDER",
]


# =============================================================================
# Currency Defaults
# =============================================================================

DEFAULT_REPORTING_CURRENCY: str = "ARS"
"""Currency into which all amounts are normalized for aggregation."""

DEFAULT_RATES: Dict[str, float] = {
    "ARS": 1.0,
    "USD": 1000.0,
    "BRL": 200.0,
    "USDT": 1000.0,
    "EUR": 1100.0,
}
"""Illustrative rate table: units of ARS per 1 unit of each currency.

Callers supply their own table through ``EngineConfig.rates``; this one only
seeds defaults and examples.
"""


# =============================================================================
# Calendar
# =============================================================================

MONTHS_PER_YEAR: int = 12
"""Number of months in a year."""

PREVIOUS_MONTH_OFFSET_DAYS: int = 30
"""Day offset used to locate the "previous month" KPI bucket (now - 30 days)."""


# =============================================================================
# Forecast Defaults
# =============================================================================

DEFAULT_FORECAST_MONTHS: int = 3
"""Default number of future months to project."""

CONSERVATIVE_FACTOR: float = 0.85
"""Multiplier applied to the base projection for the conservative scenario."""

OPTIMISTIC_FACTOR: float = 1.15
"""Multiplier applied to the base projection for the optimistic scenario."""

TRAILING_WINDOWS: Tuple[int, ...] = (3, 6, 12)
"""Trailing-average windows reported by the KPI calculator (months)."""


# =============================================================================
# Comparison
# =============================================================================

VARIANCE_THRESHOLD_PCT: float = 10.0
"""Half-width of the "good" variance band, in percent."""


# =============================================================================
# Installments
# =============================================================================

DEFAULT_PAYMENT_DAY: int = 10
"""Payment day used when the credit card has none configured."""

MAX_INSTALLMENTS: int = 24
"""Upper bound on installments for a credit purchase."""

URGENT_DAYS: int = 3
"""Installments due within this many days are 'urgent'."""

WARNING_DAYS: int = 7
"""Installments due within this many days are 'warning'."""

DEFAULT_COVERAGE_ROUTES: Tuple[Dict[str, object], ...] = (
    {"from_currency": "USDT", "rate": 5.20, "spread_pct": -0.22, "platform": "Binance P2P"},
    {"from_currency": "ARS", "rate": 0.005, "spread_pct": None, "platform": "Manual"},
)
"""Illustrative deficit coverage routes (units of target currency per unit of source)."""


# =============================================================================
# Allocation Defaults
# =============================================================================

DEFAULT_PRIORITY_WEIGHTS: Dict[str, float] = {"high": 1.0, "medium": 0.6, "low": 0.3}
"""Priority weight per goal priority."""

DEFAULT_ROUND_TO_MULTIPLE: float = 100.0
"""Allocations are floored to a multiple of this amount."""

DEFAULT_MAX_ALLOCATION_PER_GOAL: float = 0.7
"""Maximum share of the surplus any single goal can receive."""

SCORE_WEIGHT_PRIORITY: float = 0.4
SCORE_WEIGHT_URGENCY: float = 0.35
SCORE_WEIGHT_SHORTFALL: float = 0.25

URGENCY_TIERS: Tuple[Tuple[int, float], ...] = ((30, 1.0), (90, 0.8), (180, 0.6))
"""(max days until due, urgency) pairs, checked in order."""

URGENCY_BEYOND: float = 0.3
"""Urgency for goals due beyond the last tier."""

URGENCY_NO_DUE_DATE: float = 0.5
"""Urgency for goals without a due date."""


# =============================================================================
# Scenarios
# =============================================================================

SCENARIO_ORDER: Tuple[str, ...] = ("conservative", "base", "optimistic")
"""Canonical ordering of expansion scenarios."""
