"""
Credit-card installment scheduling.

Purpose
-------
Splits a credit expense into N monthly installments, dates each one on the
card's payment day, flags urgency relative to ``as_of`` and, through an
injected ``CoverageChecker``, attaches deficits and conversion suggestions.
Also computes the card's current and next billing cycle.

Scheduling rules
----------------
- Installment i (1..N) is due ``i`` months after the purchase date, on the
  card's ``payment_day`` (10 when the card has none), clamped to the month
  length and moved forward off weekends.
- Amounts are split in integer cents; the last installment absorbs the
  remainder, so installments always sum to the purchase amount.
- Status from ``days_until_due = due_date - as_of``:

      paid      id listed in ``paid_ids``
      due       days <= 0
      urgent    days <= 3
      warning   days <= 7
      upcoming  otherwise

Example
-------
>>> expense = PlannedExpense(id="e1", category="tech", currency="ARS",
...                          amount=90_000, kind="credit", card_id="visa",
...                          n_installments=3, date=date(2025, 1, 10))
>>> [i.due_date.isoformat() for i in schedule_installments(expense, as_of=date(2025, 1, 10))]
['2025-02-10', '2025-03-10', '2025-04-10']
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from .business_days import resolve_business_day
from .constants import DEFAULT_PAYMENT_DAY, URGENT_DAYS, WARNING_DAYS
from .coverage import (
    CoverageChecker,
    CoverageRoute,
    CoverageSuggestion,
    Deficit,
    suggest_coverage,
)
from .exceptions import ValidationError
from .models import Card, PlannedExpense
from .types import InstallmentDict
from .utils import add_months, split_cents

__all__ = [
    "InstallmentStatus",
    "ExpenseInstallment",
    "CardCycle",
    "installment_id",
    "installment_status",
    "schedule_installments",
    "card_cycle",
]

logger = logging.getLogger(__name__)

InstallmentStatus = Literal["upcoming", "warning", "urgent", "due", "paid"]


@dataclass(frozen=True)
class ExpenseInstallment:
    id: str
    planned_expense_id: str
    installment_number: int
    total_installments: int
    due_date: date
    status: InstallmentStatus
    currency: str
    amount_base: float
    amount_reporting_est: Optional[float] = None
    weekend_adjusted: bool = False
    deficit: Optional[Deficit] = None
    suggestions: Tuple[CoverageSuggestion, ...] = field(default_factory=tuple)

    def to_dict(self) -> InstallmentDict:
        data = asdict(self)
        data["due_date"] = self.due_date.isoformat()
        data["deficit"] = self.deficit.to_dict() if self.deficit else None
        data["suggestions"] = [s.to_dict() for s in self.suggestions]
        return data


def installment_id(expense_id: str, number: int) -> str:
    return f"inst_{expense_id}_{number}"


def installment_status(
    days_until_due: int,
    urgent_days: int = URGENT_DAYS,
    warning_days: int = WARNING_DAYS,
) -> InstallmentStatus:
    """Urgency bucket for an unpaid installment."""
    if days_until_due <= 0:
        return "due"
    if days_until_due <= urgent_days:
        return "urgent"
    if days_until_due <= warning_days:
        return "warning"
    return "upcoming"


def schedule_installments(
    expense: PlannedExpense,
    card: Optional[Card] = None,
    *,
    as_of: Optional[date] = None,
    coverage: Optional[CoverageChecker] = None,
    routes: Optional[Sequence[CoverageRoute]] = None,
    paid_ids: Iterable[str] = (),
    default_payment_day: int = DEFAULT_PAYMENT_DAY,
    urgent_days: int = URGENT_DAYS,
    warning_days: int = WARNING_DAYS,
) -> List[ExpenseInstallment]:
    """
    Build the installment schedule of a credit expense.

    Parameters
    ----------
    expense : PlannedExpense
        Debit expenses yield an empty schedule.
    card : Card, optional
        Supplies ``payment_day``; ``default_payment_day`` is used otherwise.
    as_of : datetime.date, optional
        Reference "today" for statuses. Defaults to ``date.today()``.
    coverage : CoverageChecker, optional
        Asked about every unpaid installment on its due date. Without a
        checker no deficit is attached.
    routes : sequence of CoverageRoute, optional
        Conversion routes for deficit suggestions (defaults when None).
    paid_ids : iterable of str
        Installment ids already marked paid.
    default_payment_day, urgent_days, warning_days : int

    Returns
    -------
    list of ExpenseInstallment
        Ordered by installment number.
    """
    if expense.kind != "credit":
        return []
    as_of = as_of or date.today()
    paid = set(paid_ids)
    n = expense.n_installments
    payment_day = card.payment_day if card is not None and card.payment_day else default_payment_day
    amounts = split_cents(expense.amount, n)
    estimate = expense.amount_reporting_est / n if expense.amount_reporting_est is not None else None

    schedule: List[ExpenseInstallment] = []
    for number, amount in enumerate(amounts, start=1):
        nominal = add_months(expense.date, number, day=payment_day)
        due = resolve_business_day(nominal, "forward")
        inst_id = installment_id(expense.id, number)

        deficit = None
        suggestions: Tuple[CoverageSuggestion, ...] = ()
        if inst_id in paid:
            status: InstallmentStatus = "paid"
        else:
            status = installment_status((due - as_of).days, urgent_days, warning_days)
            if coverage is not None:
                deficit = coverage.check_coverage(expense.currency, amount, due)
                if deficit is not None:
                    suggestions = tuple(suggest_coverage(deficit, routes))

        schedule.append(
            ExpenseInstallment(
                id=inst_id,
                planned_expense_id=expense.id,
                installment_number=number,
                total_installments=n,
                due_date=due,
                status=status,
                currency=expense.currency,
                amount_base=amount,
                amount_reporting_est=estimate,
                weekend_adjusted=due != nominal,
                deficit=deficit,
                suggestions=suggestions,
            )
        )

    logger.debug("Scheduled %d installments for %s", len(schedule), expense.id)
    return schedule


# ---------------------------------------------------------------------------
# Card cycle
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CardCycle:
    card_id: str
    current_cutoff: date
    current_payment: date
    next_cutoff: date
    next_payment: date
    due_in_current_payment: Dict[str, float] = field(default_factory=dict)
    future_installments: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = asdict(self)
        for key in ("current_cutoff", "current_payment", "next_cutoff", "next_payment"):
            data[key] = getattr(self, key).isoformat()
        return data


def _payment_after(cutoff: date, cutoff_day: int, payment_day: int) -> date:
    months = 0 if payment_day > cutoff_day else 1
    return resolve_business_day(add_months(cutoff, months, day=payment_day), "forward")


def card_cycle(
    card: Card,
    installments: Iterable[ExpenseInstallment] = (),
    *,
    as_of: Optional[date] = None,
) -> CardCycle:
    """
    Current and next billing cycle of a credit card.

    The current cutoff is the card's cutoff day in ``as_of``'s month, or in
    the next month once that day has passed. Payment falls in the cutoff's
    month when ``payment_day > cutoff_day`` and in the following month
    otherwise, moved forward off weekends.

    Unpaid installments due on or before the current payment date are
    summed per currency into ``due_in_current_payment``; later ones into
    ``future_installments``.

    Raises
    ------
    ValidationError
        If the card has no cutoff or payment day.
    """
    if card.cutoff_day is None or card.payment_day is None:
        raise ValidationError(f"Card {card.id!r} needs cutoff_day and payment_day for a cycle")
    as_of = as_of or date.today()

    cutoff = add_months(as_of, 0, day=card.cutoff_day)
    if as_of > cutoff:
        cutoff = add_months(as_of, 1, day=card.cutoff_day)
    next_cutoff = add_months(cutoff, 1, day=card.cutoff_day)
    payment = _payment_after(cutoff, card.cutoff_day, card.payment_day)
    next_payment = _payment_after(next_cutoff, card.cutoff_day, card.payment_day)

    current: Dict[str, float] = {}
    future: Dict[str, float] = {}
    for inst in installments:
        if inst.status == "paid":
            continue
        bucket = current if inst.due_date <= payment else future
        bucket[inst.currency] = bucket.get(inst.currency, 0.0) + inst.amount_base

    return CardCycle(
        card_id=card.id,
        current_cutoff=cutoff,
        current_payment=payment,
        next_cutoff=next_cutoff,
        next_payment=next_payment,
        due_in_current_payment=current,
        future_installments=future,
    )
