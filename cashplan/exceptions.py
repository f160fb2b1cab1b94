"""
Custom exceptions for CashPlan.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all CashPlan modules. All exceptions inherit from CashPlanError,
enabling catch-all handling when needed.

The computation functions themselves favour documented, silent degradation
(unknown currency -> rate 1, zero denominators -> 0, no active goals -> empty
allocation). Exceptions are raised where records and configuration enter the
engine: record construction, config loading and repository lookups.

Exception Hierarchy
-------------------
CashPlanError (base)
├── ConfigurationError - Invalid configuration or parameters
├── ValidationError - Record validation failures
│   ├── RecurrenceError - Malformed recurrence rules
│   ├── TimeIndexError - Month/date window errors
│   └── UnknownCurrencyError - Currency missing from a strict rate table
└── RecordNotFoundError - Repository lookup for an unknown id

Usage
-----
>>> from cashplan.exceptions import ValidationError, CashPlanError
>>>
>>> # Raise specific exception
>>> raise ValidationError("n_installments must be in 1..24, got 36")
>>>
>>> # Catch all CashPlan exceptions
>>> try:
...     repo.get_goal("goal_missing")
... except CashPlanError as e:
...     print(f"CashPlan error: {e}")
"""

__all__ = [
    "CashPlanError",
    "ConfigurationError",
    "ValidationError",
    "RecurrenceError",
    "TimeIndexError",
    "UnknownCurrencyError",
    "RecordNotFoundError",
]


class CashPlanError(Exception):
    """
    Base exception for all CashPlan errors.

    All CashPlan-specific exceptions inherit from this class,
    enabling unified error handling when needed.

    Examples
    --------
    >>> try:
    ...     engine.installments_for("exp_404")
    ... except CashPlanError as e:
    ...     logger.error(f"Installment schedule failed: {e}")
    """
    pass


class ConfigurationError(CashPlanError):
    """
    Invalid configuration or parameters.

    Raised when engine configuration is invalid, such as:
    - Non-positive round_to_multiple in allocation options
    - A rate table with non-positive rates
    - Unreadable configuration files

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "round_to_multiple must be > 0, got 0. "
    ...     "Allocations are floored to this multiple."
    ... )
    """
    pass


class ValidationError(CashPlanError):
    """
    Record validation failures.

    Raised when a planned/observed record or a savings goal violates
    its invariants, such as:
    - Both (or neither of) a fixed amount and a variable band set
    - Credit expenses without card, date or installment count
    - Negative amounts or contributions

    Examples
    --------
    >>> raise ValidationError(
    ...     "PlannedIncome 'plan_1' requires exactly one of 'amount' "
    ...     "or 'variable_band'"
    ... )
    """
    pass


class RecurrenceError(ValidationError):
    """
    Malformed recurrence rule.

    Raised at the data-entry boundary (record construction), never during
    expansion:
    - Missing anchor_day for fixed_day / next_business_day rules
    - anchor_day outside 1..31
    - Unknown recurrence type or day rule

    Examples
    --------
    >>> raise RecurrenceError(
    ...     "day_rule 'fixed_day' requires anchor_day (1..31), got None"
    ... )
    """
    pass


class TimeIndexError(ValidationError):
    """
    Month/date window errors.

    Raised when a date window or month key is invalid:
    - Window start after window end
    - Month key not in YYYY-MM form

    Examples
    --------
    >>> raise TimeIndexError(
    ...     f"Window start {start} is after end {end}."
    ... )
    """
    pass


class UnknownCurrencyError(ValidationError):
    """
    Currency missing from a strict rate table.

    Only raised by a CurrencyNormalizer built with ``strict=True``; the
    default normalizer falls back to a rate of 1.

    Examples
    --------
    >>> raise UnknownCurrencyError("No rate for 'CLP' in reporting currency ARS")
    """
    pass


class RecordNotFoundError(CashPlanError):
    """
    Repository lookup for an unknown id.

    Examples
    --------
    >>> raise RecordNotFoundError("SavingGoal 'goal_9' not found")
    """
    pass
