"""
In-memory record store.

Purpose
-------
Explicit repository object owned by the caller. Holds planned and observed
incomes/expenses, cards, saving goals, ledger movements and the set of
installment ids marked paid. The computation modules never read from it;
``PlanningEngine`` pulls records out and passes them to the pure functions.

Records are immutable: updates replace the stored record with
``dataclasses.replace(record, **changes)``, so constructor validation runs
again on every edit.

Example
-------
>>> repo = InMemoryRepository()
>>> repo.add_goal(SavingGoal(id="g1", name="Trip", target_amount=500,
...                          current_amount=0, base_currency="USD"))
>>> repo.record_contribution("g1", 100, "USD", on=date(2025, 3, 1))
>>> repo.get_goal("g1").current_amount
100
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Set, TypeVar

from .exceptions import RecordNotFoundError, ValidationError
from .goals import SavingGoal, contribute
from .models import (
    Card,
    Movement,
    ObservedExpense,
    ObservedIncome,
    PlannedExpense,
    PlannedIncome,
)

__all__ = ["InMemoryRepository"]

logger = logging.getLogger(__name__)

R = TypeVar("R")

_KINDS = (
    "planned_income",
    "observed_income",
    "planned_expense",
    "observed_expense",
    "card",
    "goal",
    "movement",
)


class InMemoryRepository:
    """
    Dictionary-backed store keyed by record kind and id.

    Each kind gets ``add_<kind>``, ``get_<kind>``, ``update_<kind>``,
    ``delete_<kind>`` and a plural listing (``planned_incomes()``, ...).
    Missing ids raise ``RecordNotFoundError``; adding a duplicate id raises
    ``ValidationError``.
    """

    def __init__(
        self,
        planned_incomes: Iterable[PlannedIncome] = (),
        observed_incomes: Iterable[ObservedIncome] = (),
        planned_expenses: Iterable[PlannedExpense] = (),
        observed_expenses: Iterable[ObservedExpense] = (),
        cards: Iterable[Card] = (),
        goals: Iterable[SavingGoal] = (),
        movements: Iterable[Movement] = (),
        paid_installments: Iterable[str] = (),
    ):
        self._store: Dict[str, Dict[str, Any]] = {kind: {} for kind in _KINDS}
        self._paid: Set[str] = set(paid_installments)
        self._seq = 0
        for kind, records in (
            ("planned_income", planned_incomes),
            ("observed_income", observed_incomes),
            ("planned_expense", planned_expenses),
            ("observed_expense", observed_expenses),
            ("card", cards),
            ("goal", goals),
            ("movement", movements),
        ):
            for record in records:
                self._add(kind, record)

    # ------------------------------------------------------------------
    # Generic operations
    # ------------------------------------------------------------------

    def _add(self, kind: str, record: R) -> R:
        table = self._store[kind]
        if record.id in table:
            raise ValidationError(f"Duplicate {kind} id {record.id!r}")
        table[record.id] = record
        return record

    def _get(self, kind: str, record_id: str) -> Any:
        try:
            return self._store[kind][record_id]
        except KeyError:
            raise RecordNotFoundError(f"{kind} {record_id!r} not found") from None

    def _update(self, kind: str, record_id: str, **changes: Any) -> Any:
        updated = replace(self._get(kind, record_id), **changes)
        self._store[kind][record_id] = updated
        return updated

    def _delete(self, kind: str, record_id: str) -> None:
        self._get(kind, record_id)
        del self._store[kind][record_id]

    def _list(self, kind: str) -> List[Any]:
        return list(self._store[kind].values())

    # ------------------------------------------------------------------
    # Planned incomes
    # ------------------------------------------------------------------

    def add_planned_income(self, record: PlannedIncome) -> PlannedIncome:
        return self._add("planned_income", record)

    def get_planned_income(self, record_id: str) -> PlannedIncome:
        return self._get("planned_income", record_id)

    def update_planned_income(self, record_id: str, **changes: Any) -> PlannedIncome:
        return self._update("planned_income", record_id, **changes)

    def delete_planned_income(self, record_id: str) -> None:
        self._delete("planned_income", record_id)

    def planned_incomes(self) -> List[PlannedIncome]:
        return self._list("planned_income")

    # ------------------------------------------------------------------
    # Observed incomes
    # ------------------------------------------------------------------

    def add_observed_income(self, record: ObservedIncome) -> ObservedIncome:
        return self._add("observed_income", record)

    def get_observed_income(self, record_id: str) -> ObservedIncome:
        return self._get("observed_income", record_id)

    def update_observed_income(self, record_id: str, **changes: Any) -> ObservedIncome:
        return self._update("observed_income", record_id, **changes)

    def delete_observed_income(self, record_id: str) -> None:
        self._delete("observed_income", record_id)

    def observed_incomes(self) -> List[ObservedIncome]:
        return self._list("observed_income")

    # ------------------------------------------------------------------
    # Planned expenses
    # ------------------------------------------------------------------

    def add_planned_expense(self, record: PlannedExpense) -> PlannedExpense:
        return self._add("planned_expense", record)

    def get_planned_expense(self, record_id: str) -> PlannedExpense:
        return self._get("planned_expense", record_id)

    def update_planned_expense(self, record_id: str, **changes: Any) -> PlannedExpense:
        return self._update("planned_expense", record_id, **changes)

    def delete_planned_expense(self, record_id: str) -> None:
        self._delete("planned_expense", record_id)

    def planned_expenses(self) -> List[PlannedExpense]:
        return self._list("planned_expense")

    # ------------------------------------------------------------------
    # Observed expenses
    # ------------------------------------------------------------------

    def add_observed_expense(self, record: ObservedExpense) -> ObservedExpense:
        return self._add("observed_expense", record)

    def get_observed_expense(self, record_id: str) -> ObservedExpense:
        return self._get("observed_expense", record_id)

    def update_observed_expense(self, record_id: str, **changes: Any) -> ObservedExpense:
        return self._update("observed_expense", record_id, **changes)

    def delete_observed_expense(self, record_id: str) -> None:
        self._delete("observed_expense", record_id)

    def observed_expenses(self) -> List[ObservedExpense]:
        return self._list("observed_expense")

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def add_card(self, record: Card) -> Card:
        return self._add("card", record)

    def get_card(self, record_id: str) -> Card:
        return self._get("card", record_id)

    def find_card(self, record_id: Optional[str]) -> Optional[Card]:
        """Card by id, or None when missing or unset."""
        if record_id is None:
            return None
        return self._store["card"].get(record_id)

    def update_card(self, record_id: str, **changes: Any) -> Card:
        return self._update("card", record_id, **changes)

    def delete_card(self, record_id: str) -> None:
        self._delete("card", record_id)

    def cards(self) -> List[Card]:
        return self._list("card")

    # ------------------------------------------------------------------
    # Goals and movements
    # ------------------------------------------------------------------

    def add_goal(self, record: SavingGoal) -> SavingGoal:
        return self._add("goal", record)

    def get_goal(self, record_id: str) -> SavingGoal:
        return self._get("goal", record_id)

    def update_goal(self, record_id: str, **changes: Any) -> SavingGoal:
        return self._update("goal", record_id, **changes)

    def delete_goal(self, record_id: str) -> None:
        self._delete("goal", record_id)

    def goals(self) -> List[SavingGoal]:
        return self._list("goal")

    def movements(self) -> List[Movement]:
        return self._list("movement")

    def record_contribution(
        self,
        goal_id: str,
        amount: float,
        currency: str,
        *,
        on: Optional[date] = None,
        account_id: Optional[str] = None,
        description: str = "",
    ) -> Movement:
        """
        Add a contribution to a goal and log it as a movement.

        The goal's ``current_amount`` grows by ``amount``; the amount is
        assumed to be in the goal's base currency.
        """
        goal = self.get_goal(goal_id)
        updated = contribute(goal, amount)
        self._seq += 1
        while f"mov_{goal_id}_{self._seq}" in self._store["movement"]:
            self._seq += 1
        movement = Movement(
            id=f"mov_{goal_id}_{self._seq}",
            type="saving_contribution",
            date=on or date.today(),
            amount=amount,
            currency=currency,
            from_account=account_id,
            to_goal=goal_id,
            description=description or f"Contribution to {goal.name}",
        )
        self._add("movement", movement)
        self._store["goal"][goal_id] = updated
        logger.debug("Contribution of %s %s to goal %s", amount, currency, goal_id)
        return movement

    # ------------------------------------------------------------------
    # Installments
    # ------------------------------------------------------------------

    def mark_installment_paid(self, installment_id: str) -> None:
        self._paid.add(installment_id)

    def paid_installments(self) -> Set[str]:
        return set(self._paid)

    def __repr__(self) -> str:
        counts = ", ".join(f"{kind}s={len(table)}" for kind, table in self._store.items())
        return f"InMemoryRepository({counts}, paid={len(self._paid)})"
