"""
Pytest configuration and fixtures for CashPlan test suite.

This module provides reusable fixtures for testing all CashPlan components.
Fixtures follow the principle of "arrange-act-assert" with clear separation.
"""

import json
from datetime import date
from typing import List

import pytest

from cashplan.currency import CurrencyNormalizer
from cashplan.goals import SavingGoal
from cashplan.models import (
    Card,
    ObservedExpense,
    ObservedIncome,
    PlannedExpense,
    PlannedIncome,
    Recurrence,
    VariableBand,
)
from cashplan.repository import InMemoryRepository


# ---------------------------------------------------------------------------
# Date Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def as_of() -> date:
    """Reference "today" for tests (a Sunday)."""
    return date(2025, 6, 15)


@pytest.fixture
def window_start() -> date:
    return date(2025, 1, 1)


@pytest.fixture
def window_end() -> date:
    return date(2025, 6, 30)


# ---------------------------------------------------------------------------
# Currency Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def normalizer() -> CurrencyNormalizer:
    """ARS reporting currency with the illustrative rate table."""
    return CurrencyNormalizer(
        {"ARS": 1.0, "USD": 1000.0, "BRL": 200.0, "USDT": 1000.0},
        reporting_currency="ARS",
    )


# ---------------------------------------------------------------------------
# Plan Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def salary_plan() -> PlannedIncome:
    """Fixed salary paid on the last business day of each month."""
    return PlannedIncome(
        id="plan_salary",
        source="ACME",
        category="salary",
        currency="ARS",
        amount=1_000_000,
        recurrence=Recurrence("monthly", "last_business_day"),
    )


@pytest.fixture
def freelance_plan() -> PlannedIncome:
    """Variable freelance income anchored on the 15th."""
    return PlannedIncome(
        id="plan_freelance",
        source="Clients",
        category="freelance",
        currency="ARS",
        variable_band=VariableBand(1000, 2000),
        confidence="medium",
        recurrence=Recurrence("monthly", "fixed_day", anchor_day=15),
    )


@pytest.fixture
def rent_plan() -> PlannedExpense:
    return PlannedExpense(
        id="exp_rent",
        category="housing",
        currency="ARS",
        amount=300_000,
        concept="Rent",
        recurrence=Recurrence("monthly", "next_business_day", anchor_day=5),
    )


@pytest.fixture
def card() -> Card:
    return Card(id="visa", name="Visa", payment_day=10, cutoff_day=25, currencies=("ARS",))


@pytest.fixture
def credit_purchase() -> PlannedExpense:
    """Three installments from a 2025-01-10 purchase."""
    return PlannedExpense(
        id="exp_laptop",
        category="tech",
        currency="ARS",
        amount=90_000,
        kind="credit",
        card_id="visa",
        n_installments=3,
        date=date(2025, 1, 10),
        concept="Laptop",
    )


# ---------------------------------------------------------------------------
# Goal Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def goals() -> List[SavingGoal]:
    return [
        SavingGoal(
            id="goal_emergency",
            name="Emergency fund",
            target_amount=1_000_000,
            current_amount=0,
            base_currency="ARS",
            priority="high",
            due_date=date(2025, 7, 5),
        ),
        SavingGoal(
            id="goal_trip",
            name="Trip",
            target_amount=1_000,
            current_amount=500,
            base_currency="USD",
            priority="low",
        ),
        SavingGoal(
            id="goal_done",
            name="Bike",
            target_amount=100_000,
            current_amount=120_000,
            base_currency="ARS",
            priority="medium",
        ),
    ]


# ---------------------------------------------------------------------------
# Repository / dataset Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def repository(salary_plan, freelance_plan, rent_plan, card, credit_purchase, goals) -> InMemoryRepository:
    observed_incomes = [
        ObservedIncome(
            id=f"inc_{m}", source="ACME", category="salary", currency="ARS",
            amount=1_000_000 + 10_000 * m, date=date(2025, m, 28), planned_id="plan_salary",
        )
        for m in range(1, 7)
    ]
    observed_expenses = [
        ObservedExpense(
            id=f"out_{m}", category="housing", currency="ARS",
            amount=300_000, date=date(2025, m, 5), planned_id="exp_rent",
        )
        for m in range(1, 7)
    ]
    observed_expenses.append(
        ObservedExpense(
            id="out_laptop_6", category="tech", currency="ARS",
            amount=30_000, date=date(2025, 6, 10), planned_id="exp_laptop",
        )
    )
    return InMemoryRepository(
        planned_incomes=[salary_plan, freelance_plan],
        observed_incomes=observed_incomes,
        planned_expenses=[rent_plan, credit_purchase],
        observed_expenses=observed_expenses,
        cards=[card],
        goals=goals,
    )


@pytest.fixture
def dataset_dict() -> dict:
    """Minimal on-disk dataset document."""
    return {
        "schema_version": "0.1.0",
        "planned_incomes": [
            {
                "id": "plan_salary",
                "source": "ACME",
                "category": "salary",
                "currency": "ARS",
                "amount": 1000000,
                "recurrence": {"type": "monthly", "day_rule": "last_business_day"},
            },
            {
                "id": "plan_freelance",
                "source": "Clients",
                "category": "freelance",
                "currency": "USD",
                "variable_band": {"min": 100, "max": 300},
                "confidence": "low",
                "recurrence": {"type": "monthly", "day_rule": "fixed_day", "anchor_day": 15},
            },
        ],
        "observed_incomes": [
            {
                "id": "inc_1",
                "source": "ACME",
                "category": "salary",
                "currency": "ARS",
                "amount": 950000,
                "date": "2025-05-30",
                "planned_id": "plan_salary",
            }
        ],
        "planned_expenses": [
            {
                "id": "exp_laptop",
                "category": "tech",
                "currency": "ARS",
                "amount": 90000,
                "kind": "credit",
                "card_id": "visa",
                "n_installments": 3,
                "date": "2025-01-10",
                "concept": "Laptop",
            }
        ],
        "observed_expenses": [
            {
                "id": "out_1",
                "category": "tech",
                "currency": "ARS",
                "amount": 30000,
                "date": "2025-05-12",
                "planned_id": "exp_laptop",
            }
        ],
        "cards": [{"id": "visa", "name": "Visa", "payment_day": 10, "cutoff_day": 25}],
        "goals": [
            {
                "id": "goal_emergency",
                "name": "Emergency fund",
                "target_amount": 500000,
                "current_amount": 100000,
                "base_currency": "ARS",
                "priority": "high",
                "due_date": "2025-12-31",
            }
        ],
        "paid_installments": ["inst_exp_laptop_1"],
    }


@pytest.fixture
def dataset_file(tmp_path, dataset_dict):
    path = tmp_path / "household.json"
    with open(path, "w") as f:
        json.dump(dataset_dict, f)
    return path
