"""
Configuration management module for CashPlan.

Purpose
-------
Centralized configuration using Pydantic models for type-safe parameter
management, validation, and serialization. Covers engine tuning (rates,
forecast factors, thresholds, allocator and installment options), the
record schemas used to load JSON datasets, and environment-driven
application settings.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation
- Serializable: Easy conversion to/from JSON for config and data files
- Environment-aware: Supports .env files via pydantic-settings
- Defaults: Sensible defaults for all parameters
- Bridged: record configs build the frozen domain dataclasses through
  ``to_record()``, so domain validation runs on every loaded record

Example
-------
>>> from cashplan.config import EngineConfig
>>> config = EngineConfig(reporting_currency="ARS", forecast_months=6)
>>> config.normalizer().to_reporting(10, "USD")
10000.0
>>>
>>> # Serialize to dict/JSON
>>> json_str = config.model_dump_json()
>>> loaded = EngineConfig.model_validate_json(json_str)
"""

from __future__ import annotations
from typing import Dict, List, Literal, Optional
import datetime
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from pydantic_settings import BaseSettings

from .allocation import AllocationOptions
from .constants import (
    CONSERVATIVE_FACTOR,
    DEFAULT_COVERAGE_ROUTES,
    DEFAULT_FORECAST_MONTHS,
    DEFAULT_MAX_ALLOCATION_PER_GOAL,
    DEFAULT_PAYMENT_DAY,
    DEFAULT_PRIORITY_WEIGHTS,
    DEFAULT_RATES,
    DEFAULT_REPORTING_CURRENCY,
    DEFAULT_ROUND_TO_MULTIPLE,
    MAX_INSTALLMENTS,
    OPTIMISTIC_FACTOR,
    URGENT_DAYS,
    VARIANCE_THRESHOLD_PCT,
    WARNING_DAYS,
)
from .coverage import CoverageRoute
from .currency import CurrencyNormalizer
from .goals import SavingGoal
from .models import (
    Card,
    ObservedExpense,
    ObservedIncome,
    PlannedExpense,
    PlannedIncome,
    Recurrence,
    VariableBand,
)

__all__ = [
    "AllocationConfig",
    "CoverageRouteConfig",
    "InstallmentConfig",
    "EngineConfig",
    "RecurrenceConfig",
    "VariableBandConfig",
    "PlannedIncomeConfig",
    "PlannedExpenseConfig",
    "ObservedIncomeConfig",
    "ObservedExpenseConfig",
    "CardConfig",
    "SavingGoalConfig",
    "DatasetConfig",
    "AppSettings",
]

ConfidenceLevel = Literal["high", "medium", "low"]


# ---------------------------------------------------------------------------
# Allocation Configuration
# ---------------------------------------------------------------------------

class AllocationConfig(BaseModel):
    """
    Surplus allocator options.

    Attributes
    ----------
    priority_weights : dict
        Weight per goal priority; must define high, medium and low.
    round_to_multiple : float
        Allocations are floored to a multiple of this amount (> 0).
    max_allocation_per_goal : float
        Maximum share of the surplus a single goal can receive, in (0, 1].

    Examples
    --------
    >>> AllocationConfig(round_to_multiple=1000).to_options().round_to_multiple
    1000.0
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    priority_weights: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_PRIORITY_WEIGHTS),
        description="Weight per goal priority"
    )
    round_to_multiple: float = Field(
        default=DEFAULT_ROUND_TO_MULTIPLE,
        gt=0,
        description="Allocation rounding multiple"
    )
    max_allocation_per_goal: float = Field(
        default=DEFAULT_MAX_ALLOCATION_PER_GOAL,
        gt=0,
        le=1,
        description="Max share of surplus per goal"
    )

    @field_validator("priority_weights")
    @classmethod
    def validate_priority_weights(cls, v):
        """Ensure every priority level has a non-negative weight."""
        missing = {"high", "medium", "low"} - set(v)
        if missing:
            raise ValueError(f"priority_weights missing {sorted(missing)}")
        if any(w < 0 for w in v.values()):
            raise ValueError("priority weights must be non-negative")
        return v

    def to_options(self) -> AllocationOptions:
        return AllocationOptions(
            priority_weights=dict(self.priority_weights),
            round_to_multiple=float(self.round_to_multiple),
            max_allocation_per_goal=float(self.max_allocation_per_goal),
        )


# ---------------------------------------------------------------------------
# Installment Configuration
# ---------------------------------------------------------------------------

class CoverageRouteConfig(BaseModel):
    """One deficit coverage route (units of payment currency per unit of source)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    from_currency: str = Field(min_length=1, description="Source currency")
    rate: float = Field(gt=0, description="Target units per source unit")
    spread_pct: Optional[float] = Field(default=None, description="Estimated spread (%)")
    platform: Optional[str] = Field(default=None, description="Suggested platform")

    def to_route(self) -> CoverageRoute:
        return CoverageRoute(
            from_currency=self.from_currency,
            rate=self.rate,
            spread_pct=self.spread_pct,
            platform=self.platform,
        )


class InstallmentConfig(BaseModel):
    """Installment scheduler options."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_payment_day: int = Field(
        default=DEFAULT_PAYMENT_DAY,
        ge=1,
        le=31,
        description="Payment day when the card has none"
    )
    urgent_days: int = Field(
        default=URGENT_DAYS,
        ge=0,
        description="Days until due for 'urgent' status"
    )
    warning_days: int = Field(
        default=WARNING_DAYS,
        ge=0,
        description="Days until due for 'warning' status"
    )
    routes: List[CoverageRouteConfig] = Field(
        default_factory=lambda: [CoverageRouteConfig(**r) for r in DEFAULT_COVERAGE_ROUTES],
        description="Deficit coverage routes"
    )

    @field_validator("warning_days")
    @classmethod
    def validate_warning_days(cls, v, info):
        """Ensure urgent_days <= warning_days."""
        urgent = info.data.get("urgent_days", URGENT_DAYS)
        if v < urgent:
            raise ValueError(f"warning_days ({v}) must be >= urgent_days ({urgent})")
        return v

    def to_routes(self) -> List[CoverageRoute]:
        return [r.to_route() for r in self.routes]


# ---------------------------------------------------------------------------
# Engine Configuration
# ---------------------------------------------------------------------------

class EngineConfig(BaseModel):
    """
    Top-level engine configuration.

    Attributes
    ----------
    reporting_currency : str
        Currency all aggregates are expressed in.
    rates : dict
        Units of reporting currency per unit of each currency (> 0).
    strict_currency : bool
        Raise on unknown currencies instead of falling back to rate 1.
    previous_month_rule : {"thirty_days", "calendar"}
        How the "previous month" KPI bucket is located.
    forecast_months : int
        Default forecast horizon (0-60).
    conservative_factor, optimistic_factor : float
        Forecast scenario multipliers.
    comparison_threshold_pct : float
        Half-width of the "good" variance band.
    include_one_time : bool
        Expand dated one-time plans.
    allocation : AllocationConfig
    installments : InstallmentConfig

    Examples
    --------
    >>> config = EngineConfig(rates={"ARS": 1, "USD": 1200})
    >>> config.normalizer().rate_for("USD")
    1200.0
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    reporting_currency: str = Field(
        default=DEFAULT_REPORTING_CURRENCY,
        min_length=1,
        description="Reporting currency"
    )
    rates: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_RATES),
        description="Rate table (reporting units per unit)"
    )
    strict_currency: bool = Field(
        default=False,
        description="Raise on unknown currency codes"
    )
    previous_month_rule: Literal["thirty_days", "calendar"] = Field(
        default="thirty_days",
        description="Previous-month KPI rule"
    )
    forecast_months: int = Field(
        default=DEFAULT_FORECAST_MONTHS,
        ge=0,
        le=60,
        description="Forecast horizon (months)"
    )
    conservative_factor: float = Field(
        default=CONSERVATIVE_FACTOR,
        gt=0,
        le=1,
        description="Conservative scenario multiplier"
    )
    optimistic_factor: float = Field(
        default=OPTIMISTIC_FACTOR,
        ge=1,
        description="Optimistic scenario multiplier"
    )
    comparison_threshold_pct: float = Field(
        default=VARIANCE_THRESHOLD_PCT,
        ge=0,
        description="Variance band half-width (%)"
    )
    include_one_time: bool = Field(
        default=False,
        description="Expand dated one-time plans"
    )
    allocation: AllocationConfig = Field(
        default_factory=AllocationConfig,
        description="Surplus allocator options"
    )
    installments: InstallmentConfig = Field(
        default_factory=InstallmentConfig,
        description="Installment scheduler options"
    )

    @field_validator("rates")
    @classmethod
    def validate_rates(cls, v):
        """Ensure every rate is strictly positive."""
        bad = {code: rate for code, rate in v.items() if rate <= 0}
        if bad:
            raise ValueError(f"Rates must be > 0, got {bad}")
        return v

    def normalizer(self) -> CurrencyNormalizer:
        return CurrencyNormalizer(
            rates=dict(self.rates),
            reporting_currency=self.reporting_currency,
            strict=self.strict_currency,
        )


# ---------------------------------------------------------------------------
# Record Configuration (dataset schema)
# ---------------------------------------------------------------------------

class RecurrenceConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["monthly", "one_time"]
    day_rule: Literal["fixed_day", "last_business_day", "next_business_day"]
    anchor_day: Optional[int] = Field(default=None, ge=1, le=31)

    def to_record(self) -> Recurrence:
        return Recurrence(type=self.type, day_rule=self.day_rule, anchor_day=self.anchor_day)


class VariableBandConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    min: float = Field(ge=0)
    max: float = Field(ge=0)

    @model_validator(mode="after")
    def validate_order(self):
        if self.max < self.min:
            raise ValueError(f"variable_band.max ({self.max}) must be >= min ({self.min})")
        return self

    def to_record(self) -> VariableBand:
        return VariableBand(min=self.min, max=self.max)


class _PlanConfig(BaseModel):
    """Fields shared by planned incomes and expenses."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    category: str
    currency: str = Field(min_length=1)
    amount: Optional[float] = Field(default=None, ge=0)
    variable_band: Optional[VariableBandConfig] = None
    confidence: ConfidenceLevel = "high"
    recurrence: Optional[RecurrenceConfig] = None
    is_active: bool = True
    notes: str = ""
    date: Optional[datetime.date] = None

    @model_validator(mode="after")
    def validate_amount_or_band(self):
        """Exactly one of amount / variable_band."""
        if (self.amount is None) == (self.variable_band is None):
            raise ValueError(
                f"plan {self.id!r} requires exactly one of 'amount' or 'variable_band'"
            )
        return self

    def _common(self) -> dict:
        return dict(
            id=self.id,
            category=self.category,
            currency=self.currency,
            amount=self.amount,
            variable_band=self.variable_band.to_record() if self.variable_band else None,
            confidence=self.confidence,
            recurrence=self.recurrence.to_record() if self.recurrence else None,
            is_active=self.is_active,
            notes=self.notes,
            date=self.date,
        )


class PlannedIncomeConfig(_PlanConfig):
    source: str = ""

    def to_record(self) -> PlannedIncome:
        return PlannedIncome(source=self.source, **self._common())


class PlannedExpenseConfig(_PlanConfig):
    kind: Literal["debit", "credit"] = "debit"
    card_id: Optional[str] = None
    n_installments: Optional[int] = Field(default=None, ge=1, le=MAX_INSTALLMENTS)
    concept: str = ""
    amount_reporting_est: Optional[float] = Field(default=None, ge=0)

    def to_record(self) -> PlannedExpense:
        return PlannedExpense(
            kind=self.kind,
            card_id=self.card_id,
            n_installments=self.n_installments,
            concept=self.concept,
            amount_reporting_est=self.amount_reporting_est,
            **self._common(),
        )


class ObservedIncomeConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    source: str = ""
    category: str
    currency: str = Field(min_length=1)
    amount: float = Field(ge=0)
    date: datetime.date
    account_id: Optional[str] = None
    planned_id: Optional[str] = None

    def to_record(self) -> ObservedIncome:
        return ObservedIncome(**self.model_dump())


class ObservedExpenseConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    category: str
    currency: str = Field(min_length=1)
    amount: float = Field(ge=0)
    date: datetime.date
    planned_id: Optional[str] = None
    amount_reporting: Optional[float] = Field(default=None, ge=0)

    def to_record(self) -> ObservedExpense:
        return ObservedExpense(**self.model_dump())


class CardConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    name: str = ""
    payment_day: Optional[int] = Field(default=None, ge=1, le=31)
    cutoff_day: Optional[int] = Field(default=None, ge=1, le=31)
    currencies: List[str] = Field(default_factory=list)
    kind: Literal["debit", "credit"] = "credit"

    def to_record(self) -> Card:
        return Card(
            id=self.id,
            name=self.name,
            payment_day=self.payment_day,
            cutoff_day=self.cutoff_day,
            currencies=tuple(self.currencies),
            kind=self.kind,
        )


class SavingGoalConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    name: str
    target_amount: float = Field(ge=0)
    current_amount: float = Field(default=0.0, ge=0)
    base_currency: str = Field(min_length=1)
    priority: ConfidenceLevel = "medium"
    due_date: Optional[datetime.date] = None
    category: str = "other"
    description: str = ""

    def to_record(self) -> SavingGoal:
        return SavingGoal(**self.model_dump())


class DatasetConfig(BaseModel):
    """
    Complete household dataset as stored on disk.

    Examples
    --------
    >>> data = DatasetConfig.model_validate_json(Path("household.json").read_text())
    >>> len(data.planned_incomes)
    2
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    schema_version: str = Field(default="0.1.0", description="Dataset schema version")
    planned_incomes: List[PlannedIncomeConfig] = Field(default_factory=list)
    observed_incomes: List[ObservedIncomeConfig] = Field(default_factory=list)
    planned_expenses: List[PlannedExpenseConfig] = Field(default_factory=list)
    observed_expenses: List[ObservedExpenseConfig] = Field(default_factory=list)
    cards: List[CardConfig] = Field(default_factory=list)
    goals: List[SavingGoalConfig] = Field(default_factory=list)
    paid_installments: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Supports .env files for local development. Environment variables
    should be prefixed with CASHPLAN_ (e.g., CASHPLAN_LOG_LEVEL=DEBUG).

    Attributes
    ----------
    debug : bool
        Enable debug mode with verbose logging
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR"
    data_path : Path, optional
        Default dataset file used by the CLI when --data is omitted
    reporting_currency : str, optional
        Overrides the engine config's reporting currency

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.log_level
    'WARNING'
    """

    model_config = ConfigDict(
        env_prefix="CASHPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    data_path: Optional[Path] = Field(
        default=None,
        description="Default dataset file"
    )
    reporting_currency: Optional[str] = Field(
        default=None,
        description="Reporting currency override"
    )
