"""
CashPlan: Household Planning & Forecasting Engine

Turns declarative income/expense plans and booked activity into monthly
plan-vs-actual views, KPIs, forecasts, credit-card installment schedules
and surplus allocation suggestions.

Modules
-------
- models        : Planned/observed records, cards, movements
- currency      : Reporting-currency normalization
- business_days : Weekend-aware date resolution
- recurrence    : Plan expansion into dated scenario instances
- aggregation   : Monthly planned vs observed totals
- kpis          : Trailing KPIs and expense breakdown
- forecast      : Three-scenario projection
- comparison    : Planned vs observed status per category/source
- installments  : Credit installment schedules and card cycles
- coverage      : Liquidity checks and conversion suggestions
- goals         : Saving goals and progress
- allocation    : Surplus allocation across goals
- repository    : In-memory record store
- engine        : Facade wiring repository and configuration
- config        : Pydantic configuration and dataset schemas
- serialization : JSON persistence
- utils         : Shared helpers (months, percentages, rounding)

"""

from .models import (
    VariableBand,
    Recurrence,
    PlannedIncome,
    PlannedExpense,
    ObservedIncome,
    ObservedExpense,
    Card,
    Movement,
)
from .currency import CurrencyNormalizer
from .goals import SavingGoal
from .repository import InMemoryRepository
from .config import EngineConfig
from .engine import PlanningEngine
from . import utils

__version__ = "0.1.0"
