"""
Planning engine facade.

Purpose
-------
Wires a repository, an ``EngineConfig`` and an optional coverage checker
into the pure computation modules:

    repository ─► recurrence ─► aggregation ─► kpis / forecast
                       │
                       └──────► comparison
    repository ─► installments (+ coverage) ─► card cycle
    repository ─► allocation / goals

Every method takes ``as_of`` explicitly (defaulting to today), so results
are reproducible given the same records, configuration and reference date.

Example
-------
>>> engine = PlanningEngine(load_dataset("household.json"))
>>> kpis = engine.income_kpis(date(2025, 1, 1), date(2025, 6, 30), as_of=date(2025, 6, 15))
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional

from .aggregation import MonthlyAggregate, monthly_aggregate
from .allocation import AllocationSuggestion, allocate_surplus
from .comparison import Comparison, compare_expenses, compare_incomes
from .config import EngineConfig
from .coverage import CoverageChecker
from .currency import CurrencyNormalizer
from .forecast import ForecastMonth, forecast
from .goals import GoalProgress, GoalSummary, goal_progress, summarize_goals
from .installments import CardCycle, ExpenseInstallment, card_cycle, schedule_installments
from .kpis import ExpenseBreakdown, KPISet, compute_kpis, expense_breakdown
from .recurrence import ExpandedPlan, expand_plans
from .repository import InMemoryRepository
from .utils import last_day_of_month, month_key, parse_month_key

__all__ = ["PlanningEngine"]

logger = logging.getLogger(__name__)


class PlanningEngine:
    """
    Read-side facade over an ``InMemoryRepository``.

    Parameters
    ----------
    repository : InMemoryRepository
    config : EngineConfig, optional
    coverage : CoverageChecker, optional
        Liquidity source asked about unpaid installments. Without one no
        deficits are reported.
    """

    def __init__(
        self,
        repository: InMemoryRepository,
        config: Optional[EngineConfig] = None,
        coverage: Optional[CoverageChecker] = None,
    ):
        self.repository = repository
        self.config = config or EngineConfig()
        self.coverage = coverage
        self.normalizer: CurrencyNormalizer = self.config.normalizer()
        logger.debug("PlanningEngine ready (reporting currency %s)", self.config.reporting_currency)

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    def expand_incomes(
        self, start: date, end: date, *, as_of: Optional[date] = None
    ) -> List[ExpandedPlan]:
        return expand_plans(
            self.repository.planned_incomes(), start, end, self.normalizer,
            as_of=as_of, include_one_time=self.config.include_one_time,
        )

    def expand_expenses(
        self, start: date, end: date, *, as_of: Optional[date] = None
    ) -> List[ExpandedPlan]:
        return expand_plans(
            self.repository.planned_expenses(), start, end, self.normalizer,
            as_of=as_of, include_one_time=self.config.include_one_time,
        )

    # ------------------------------------------------------------------
    # Aggregates, KPIs, forecasts
    # ------------------------------------------------------------------

    def income_aggregates(
        self, start: date, end: date, *, as_of: Optional[date] = None
    ) -> List[MonthlyAggregate]:
        observed = [o for o in self.repository.observed_incomes() if start <= o.date <= end]
        return monthly_aggregate(observed, self.expand_incomes(start, end, as_of=as_of), self.normalizer)

    def expense_aggregates(
        self, start: date, end: date, *, as_of: Optional[date] = None
    ) -> List[MonthlyAggregate]:
        observed = [o for o in self.repository.observed_expenses() if start <= o.date <= end]
        return monthly_aggregate(observed, self.expand_expenses(start, end, as_of=as_of), self.normalizer)

    def income_kpis(self, start: date, end: date, *, as_of: Optional[date] = None) -> KPISet:
        return compute_kpis(
            self.income_aggregates(start, end, as_of=as_of),
            as_of=as_of, previous_month_rule=self.config.previous_month_rule,
        )

    def expense_kpis(self, start: date, end: date, *, as_of: Optional[date] = None) -> KPISet:
        return compute_kpis(
            self.expense_aggregates(start, end, as_of=as_of),
            as_of=as_of, previous_month_rule=self.config.previous_month_rule,
        )

    def expense_breakdown(self, *, as_of: Optional[date] = None, top_n: int = 3) -> ExpenseBreakdown:
        return expense_breakdown(
            self.repository.observed_expenses(), self.repository.planned_expenses(),
            self.normalizer, as_of=as_of, top_n=top_n,
        )

    def forecast_incomes(
        self, start: date, end: date, *, months: Optional[int] = None, as_of: Optional[date] = None
    ) -> List[ForecastMonth]:
        return self._forecast(self.income_aggregates(start, end, as_of=as_of), months, as_of)

    def forecast_expenses(
        self, start: date, end: date, *, months: Optional[int] = None, as_of: Optional[date] = None
    ) -> List[ForecastMonth]:
        return self._forecast(self.expense_aggregates(start, end, as_of=as_of), months, as_of)

    def _forecast(
        self, aggregates: List[MonthlyAggregate], months: Optional[int], as_of: Optional[date]
    ) -> List[ForecastMonth]:
        return forecast(
            aggregates,
            self.config.forecast_months if months is None else months,
            as_of=as_of,
            conservative_factor=self.config.conservative_factor,
            optimistic_factor=self.config.optimistic_factor,
        )

    # ------------------------------------------------------------------
    # Comparisons
    # ------------------------------------------------------------------

    @staticmethod
    def _month_bounds(month: str):
        year, mon = parse_month_key(month)
        return date(year, mon, 1), date(year, mon, last_day_of_month(year, mon))

    def compare_incomes(self, month: str, *, as_of: Optional[date] = None) -> List[Comparison]:
        start, end = self._month_bounds(month)
        return compare_incomes(
            self.repository.observed_incomes(), self.expand_incomes(start, end, as_of=as_of),
            month, self.normalizer, threshold=self.config.comparison_threshold_pct,
        )

    def compare_expenses(self, month: str, *, as_of: Optional[date] = None) -> List[Comparison]:
        start, end = self._month_bounds(month)
        return compare_expenses(
            self.repository.observed_expenses(), self.expand_expenses(start, end, as_of=as_of),
            month, self.normalizer, threshold=self.config.comparison_threshold_pct,
        )

    # ------------------------------------------------------------------
    # Installments
    # ------------------------------------------------------------------

    def installments_for(
        self, expense_id: str, *, as_of: Optional[date] = None
    ) -> List[ExpenseInstallment]:
        expense = self.repository.get_planned_expense(expense_id)
        options = self.config.installments
        return schedule_installments(
            expense,
            self.repository.find_card(expense.card_id),
            as_of=as_of,
            coverage=self.coverage,
            routes=options.to_routes(),
            paid_ids=self.repository.paid_installments(),
            default_payment_day=options.default_payment_day,
            urgent_days=options.urgent_days,
            warning_days=options.warning_days,
        )

    def all_installments(self, *, as_of: Optional[date] = None) -> List[ExpenseInstallment]:
        """Installments of every active credit expense, ordered by due date."""
        schedule: List[ExpenseInstallment] = []
        for expense in self.repository.planned_expenses():
            if expense.is_active and expense.kind == "credit":
                schedule.extend(self.installments_for(expense.id, as_of=as_of))
        schedule.sort(key=lambda i: (i.due_date, i.id))
        return schedule

    def card_cycle_for(self, card_id: str, *, as_of: Optional[date] = None) -> CardCycle:
        card = self.repository.get_card(card_id)
        installments = [
            i for i in self.all_installments(as_of=as_of)
            if self.repository.get_planned_expense(i.planned_expense_id).card_id == card_id
        ]
        return card_cycle(card, installments, as_of=as_of)

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    def allocate_surplus(self, surplus: float, *, as_of: Optional[date] = None) -> AllocationSuggestion:
        return allocate_surplus(
            surplus, self.repository.goals(), self.normalizer,
            self.config.allocation.to_options(), as_of=as_of,
        )

    def goal_summary(self) -> GoalSummary:
        return summarize_goals(self.repository.goals())

    def goal_progress(self, *, as_of: Optional[date] = None) -> Dict[str, GoalProgress]:
        return {g.id: goal_progress(g, as_of) for g in self.repository.goals()}

    def month_surplus(self, month: Optional[str] = None, *, as_of: Optional[date] = None) -> float:
        """Observed income minus observed expenses in *month* (default: as_of's month)."""
        month = month or month_key(as_of or date.today())
        start, end = self._month_bounds(month)
        income = sum(a.observed_total for a in self.income_aggregates(start, end, as_of=as_of))
        spent = sum(a.observed_total for a in self.expense_aggregates(start, end, as_of=as_of))
        return float(income - spent)
