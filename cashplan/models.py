"""
Source records for CashPlan.

Purpose
-------
Immutable records created and edited by the data-entry layer and read by
the engine: planned and observed incomes/expenses, credit cards and ledger
movements. Invariants are checked once, at construction, so the
computation modules can trust every record they receive.

Key components
--------------
- VariableBand, Recurrence:
    Value objects describing how much and when a plan recurs.
- PlannedIncome / PlannedExpense:
    Declarative plans with either a fixed amount or a variable band
    (exactly one), a confidence tag and an optional recurrence rule.
    Credit expenses additionally carry card, purchase date and
    installment count.
- ObservedIncome / ObservedExpense:
    Booked activity with an optional back-reference to a plan.
- Card:
    Minimal credit-card data needed for installment due dates and cycles.
- Movement:
    Ledger entry produced by contributions and transfers.

Design principles
-----------------
- Frozen dataclasses; edits go through ``dataclasses.replace``.
- Categories and sources are opaque tags, not display lookups.
- Validation errors are raised here (the data-entry boundary), never
  during expansion or aggregation.

Example
-------
>>> from datetime import date
>>> salary = PlannedIncome(
...     id="plan_1", source="ACME", category="salary", currency="ARS",
...     amount=1_500_000, recurrence=Recurrence("monthly", "last_business_day"),
... )
>>> salary.scenario_amounts()
[('base', 1500000.0)]
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Literal, Optional, Tuple

from .constants import MAX_INSTALLMENTS
from .exceptions import RecurrenceError, ValidationError
from .utils import check_non_negative

__all__ = [
    "Confidence",
    "Scenario",
    "RecurrenceType",
    "DayRule",
    "ExpenseKind",
    "VariableBand",
    "Recurrence",
    "PlannedIncome",
    "PlannedExpense",
    "ObservedIncome",
    "ObservedExpense",
    "Card",
    "Movement",
]

Confidence = Literal["high", "medium", "low"]
Scenario = Literal["conservative", "base", "optimistic"]
RecurrenceType = Literal["monthly", "one_time"]
DayRule = Literal["fixed_day", "last_business_day", "next_business_day"]
ExpenseKind = Literal["debit", "credit"]
MovementType = Literal[
    "saving_contribution", "saving_withdrawal", "expense", "income", "transfer"
]

_CONFIDENCES = ("high", "medium", "low")
_RECURRENCE_TYPES = ("monthly", "one_time")
_DAY_RULES = ("fixed_day", "last_business_day", "next_business_day")
_ANCHORED_RULES = ("fixed_day", "next_business_day")


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VariableBand:
    """Inclusive [min, max] range for plans whose amount varies month to month."""
    min: float
    max: float

    def __post_init__(self) -> None:
        check_non_negative("variable_band.min", self.min)
        if self.max < self.min:
            raise ValidationError(
                f"variable_band.max ({self.max}) must be >= min ({self.min})"
            )

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


@dataclass(frozen=True)
class Recurrence:
    """
    When a plan repeats.

    Parameters
    ----------
    type : {"monthly", "one_time"}
    day_rule : {"fixed_day", "last_business_day", "next_business_day"}
        How the target day is resolved inside each month.
    anchor_day : int, optional
        Day of month (1..31). Required for ``fixed_day`` and
        ``next_business_day``; ignored by ``last_business_day``.
    """
    type: RecurrenceType
    day_rule: DayRule
    anchor_day: Optional[int] = None

    def __post_init__(self) -> None:
        if self.type not in _RECURRENCE_TYPES:
            raise RecurrenceError(f"Unknown recurrence type {self.type!r}")
        if self.day_rule not in _DAY_RULES:
            raise RecurrenceError(f"Unknown day_rule {self.day_rule!r}")
        if self.day_rule in _ANCHORED_RULES and self.anchor_day is None:
            raise RecurrenceError(
                f"day_rule {self.day_rule!r} requires anchor_day (1..31), got None"
            )
        if self.anchor_day is not None and not (1 <= self.anchor_day <= 31):
            raise RecurrenceError(f"anchor_day must be in 1..31, got {self.anchor_day}")


def _check_amount_or_band(
    kind: str, record_id: str, amount: Optional[float], band: Optional[VariableBand]
) -> None:
    if (amount is None) == (band is None):
        raise ValidationError(
            f"{kind} {record_id!r} requires exactly one of 'amount' or 'variable_band'"
        )
    if amount is not None:
        check_non_negative(f"{kind}.amount", amount)


def _scenario_amounts(
    amount: Optional[float], band: Optional[VariableBand]
) -> List[Tuple[str, float]]:
    if band is not None:
        return [
            ("conservative", float(band.min)),
            ("base", float(band.midpoint)),
            ("optimistic", float(band.max)),
        ]
    return [("base", float(amount))]


# ---------------------------------------------------------------------------
# Planned records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PlannedIncome:
    """
    Declarative recurring (or one-off) income.

    Exactly one of ``amount`` and ``variable_band`` must be set. ``date``
    is only used for one-time plans.
    """
    id: str
    source: str
    category: str
    currency: str
    amount: Optional[float] = None
    variable_band: Optional[VariableBand] = None
    confidence: Confidence = "high"
    recurrence: Optional[Recurrence] = None
    is_active: bool = True
    notes: str = ""
    date: Optional[date] = None

    def __post_init__(self) -> None:
        if not self.currency:
            raise ValidationError(f"PlannedIncome {self.id!r} requires a currency")
        _check_amount_or_band("PlannedIncome", self.id, self.amount, self.variable_band)
        if self.confidence not in _CONFIDENCES:
            raise ValidationError(f"Unknown confidence {self.confidence!r}")

    def scenario_amounts(self) -> List[Tuple[str, float]]:
        """(scenario, amount) pairs in original currency."""
        return _scenario_amounts(self.amount, self.variable_band)

    @property
    def amount_reporting_est(self) -> Optional[float]:
        return None


@dataclass(frozen=True)
class PlannedExpense:
    """
    Declarative expense, paid by debit or by credit card in installments.

    Credit expenses need ``card_id``, ``n_installments`` (1..24), the
    purchase ``date`` and a fixed ``amount``. ``amount_reporting_est`` is an
    optional pre-estimated reporting-currency equivalent that takes
    precedence over the rate table.
    """
    id: str
    category: str
    currency: str
    amount: Optional[float] = None
    variable_band: Optional[VariableBand] = None
    kind: ExpenseKind = "debit"
    card_id: Optional[str] = None
    n_installments: Optional[int] = None
    date: Optional[date] = None
    recurrence: Optional[Recurrence] = None
    confidence: Confidence = "high"
    is_active: bool = True
    concept: str = ""
    notes: str = ""
    amount_reporting_est: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.currency:
            raise ValidationError(f"PlannedExpense {self.id!r} requires a currency")
        _check_amount_or_band("PlannedExpense", self.id, self.amount, self.variable_band)
        if self.confidence not in _CONFIDENCES:
            raise ValidationError(f"Unknown confidence {self.confidence!r}")
        if self.kind not in ("debit", "credit"):
            raise ValidationError(f"Unknown expense kind {self.kind!r}")
        if self.amount_reporting_est is not None:
            check_non_negative("amount_reporting_est", self.amount_reporting_est)
        if self.kind == "credit":
            if not self.card_id:
                raise ValidationError(f"Credit expense {self.id!r} requires card_id")
            if self.n_installments is None or not (1 <= self.n_installments <= MAX_INSTALLMENTS):
                raise ValidationError(
                    f"Credit expense {self.id!r} requires n_installments in "
                    f"1..{MAX_INSTALLMENTS}, got {self.n_installments}"
                )
            if self.date is None:
                raise ValidationError(f"Credit expense {self.id!r} requires a purchase date")
            if self.amount is None:
                raise ValidationError(
                    f"Credit expense {self.id!r} requires a fixed amount, not a variable band"
                )

    @property
    def source(self) -> str:
        return self.concept

    def scenario_amounts(self) -> List[Tuple[str, float]]:
        """(scenario, amount) pairs in original currency."""
        return _scenario_amounts(self.amount, self.variable_band)


# ---------------------------------------------------------------------------
# Observed records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ObservedIncome:
    id: str
    source: str
    category: str
    currency: str
    amount: float
    date: date
    account_id: Optional[str] = None
    planned_id: Optional[str] = None

    def __post_init__(self) -> None:
        check_non_negative("ObservedIncome.amount", self.amount)

    @property
    def amount_reporting(self) -> Optional[float]:
        return None


@dataclass(frozen=True)
class ObservedExpense:
    """Booked expense. ``amount_reporting`` overrides rate conversion when set."""
    id: str
    category: str
    currency: str
    amount: float
    date: date
    planned_id: Optional[str] = None
    amount_reporting: Optional[float] = None

    def __post_init__(self) -> None:
        check_non_negative("ObservedExpense.amount", self.amount)

    @property
    def source(self) -> str:
        return ""


# ---------------------------------------------------------------------------
# Cards and movements
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Card:
    id: str
    name: str = ""
    payment_day: Optional[int] = None
    cutoff_day: Optional[int] = None
    currencies: Tuple[str, ...] = ()
    kind: ExpenseKind = "credit"

    def __post_init__(self) -> None:
        for name in ("payment_day", "cutoff_day"):
            value = getattr(self, name)
            if value is not None and not (1 <= value <= 31):
                raise ValidationError(f"Card {self.id!r}: {name} must be in 1..31, got {value}")


@dataclass(frozen=True)
class Movement:
    id: str
    type: MovementType
    date: date
    amount: float
    currency: str
    from_account: Optional[str] = None
    to_account: Optional[str] = None
    to_goal: Optional[str] = None
    from_goal: Optional[str] = None
    description: str = ""

    def __post_init__(self) -> None:
        check_non_negative("Movement.amount", self.amount)
