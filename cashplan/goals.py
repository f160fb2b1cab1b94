"""
Saving goals and progress tracking.

Purpose
-------
Domain-level abstraction for household saving goals: a target amount in a
base currency, the amount saved so far, a priority and an optional due
date. Goals are inputs to the surplus allocator; this module also derives
the per-goal progress card and the savings summary.

Key components
--------------
- SavingGoal: frozen goal record, validated at construction
- contribute: returns a goal with a larger ``current_amount``
- goal_progress: progress percentage (capped at 100), remaining amount,
  completion flag and days until due
- summarize_goals: goal count, completed count and saved amount per currency

Design principles
-----------------
- Immutable records: contributions produce a new goal
- Over-funding is allowed; a goal with current >= target is completed
- Current amount never decreases through ``contribute``

Example
-------
>>> from datetime import date
>>> goal = SavingGoal(id="g1", name="Emergency fund", target_amount=1_000_000,
...                   current_amount=250_000, base_currency="ARS",
...                   priority="high", due_date=date(2025, 12, 31))
>>> goal_progress(contribute(goal, 250_000), as_of=date(2025, 6, 1)).progress_pct
50.0
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import date
from typing import Dict, Iterable, Literal, Optional

from .exceptions import ValidationError
from .utils import check_non_negative

__all__ = [
    "Priority",
    "SavingGoal",
    "GoalProgress",
    "GoalSummary",
    "contribute",
    "goal_progress",
    "summarize_goals",
]

Priority = Literal["high", "medium", "low"]

_PRIORITIES = ("high", "medium", "low")


# ---------------------------------------------------------------------------
# Goal Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SavingGoal:
    """
    Household saving goal.

    Parameters
    ----------
    id : str
        Goal identifier
    name : str
        Display name
    target_amount : float
        Amount to reach, in ``base_currency`` (>= 0)
    current_amount : float
        Amount saved so far, in ``base_currency`` (>= 0, may exceed target)
    base_currency : str
        Currency the goal is denominated in
    priority : {"high", "medium", "low"}
    due_date : datetime.date, optional
    category : str, default "other"
    description : str, default ""

    Notes
    -----
    - Goals with ``current_amount >= target_amount`` are completed and are
      skipped by the surplus allocator.
    """
    id: str
    name: str
    target_amount: float
    current_amount: float
    base_currency: str
    priority: Priority = "medium"
    due_date: Optional[date] = None
    category: str = "other"
    description: str = ""

    def __post_init__(self):
        """Validate goal parameters."""
        check_non_negative("target_amount", self.target_amount)
        check_non_negative("current_amount", self.current_amount)
        if not self.base_currency:
            raise ValidationError(f"SavingGoal {self.id!r} requires a base_currency")
        if self.priority not in _PRIORITIES:
            raise ValidationError(
                f"priority must be one of {_PRIORITIES}, got {self.priority!r}"
            )

    @property
    def remaining(self) -> float:
        """Amount still missing, never negative."""
        return max(0.0, self.target_amount - self.current_amount)

    @property
    def is_completed(self) -> bool:
        return self.current_amount >= self.target_amount

    def __repr__(self) -> str:
        return (
            f"SavingGoal(id={self.id!r}, name={self.name!r}, "
            f"{self.current_amount:,.0f}/{self.target_amount:,.0f} {self.base_currency}, "
            f"priority={self.priority!r})"
        )


def contribute(goal: SavingGoal, amount: float) -> SavingGoal:
    """Return *goal* with ``amount`` added to ``current_amount``.

    Raises
    ------
    ValidationError
        If ``amount`` is negative.
    """
    check_non_negative("contribution amount", amount)
    return replace(goal, current_amount=goal.current_amount + amount)


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GoalProgress:
    goal_id: str
    progress_pct: float
    remaining: float
    is_completed: bool
    days_until_due: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class GoalSummary:
    total: int
    completed: int
    saved_by_currency: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


def goal_progress(goal: SavingGoal, as_of: Optional[date] = None) -> GoalProgress:
    """
    Progress card for one goal.

    Parameters
    ----------
    goal : SavingGoal
    as_of : datetime.date, optional
        Reference "today" for ``days_until_due``. Defaults to ``date.today()``.

    Returns
    -------
    GoalProgress
        ``progress_pct`` is current / target * 100 capped at 100 (100 when the
        target is zero). ``days_until_due`` is negative for overdue goals and
        None without a due date.
    """
    as_of = as_of or date.today()
    if goal.target_amount > 0:
        pct = min(100.0, goal.current_amount / goal.target_amount * 100.0)
    else:
        pct = 100.0
    days = (goal.due_date - as_of).days if goal.due_date is not None else None
    return GoalProgress(
        goal_id=goal.id,
        progress_pct=pct,
        remaining=goal.remaining,
        is_completed=goal.is_completed,
        days_until_due=days,
    )


def summarize_goals(goals: Iterable[SavingGoal]) -> GoalSummary:
    """Goal count, completed count and total saved per base currency."""
    total = 0
    completed = 0
    saved: Dict[str, float] = {}
    for goal in goals:
        total += 1
        if goal.is_completed:
            completed += 1
        saved[goal.base_currency] = saved.get(goal.base_currency, 0.0) + goal.current_amount
    return GoalSummary(total=total, completed=completed, saved_by_currency=saved)
