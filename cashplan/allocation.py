"""
Surplus allocation across saving goals.

Purpose
-------
Given a monthly surplus in the reporting currency, suggests how much to
put towards each unfinished saving goal. Goals are scored on priority,
deadline urgency and relative shortfall; the surplus is then shared in
proportion to scores, capped per goal and floored to a round multiple.

Scoring
-------
    score = 0.4 * priority_weight + 0.35 * urgency + 0.25 * shortfall_rel

    urgency:   1.0 (<= 30 days), 0.8 (<= 90), 0.6 (<= 180), 0.3 beyond,
               0.5 without a due date; overdue goals count as 0 days
    shortfall_rel = min(1, shortfall / target), 0 when target is 0

Distribution
------------
Goals are visited by descending score (ties keep input order). Each gets

    cap     = min(shortfall, surplus * max_allocation_per_goal,
                  score / sum(scores) * surplus)
    rounded = floor(cap / round_to_multiple) * round_to_multiple

and receives ``rounded`` when ``0 < rounded <= remaining``. The loop stops
as soon as nothing remains.

Example
-------
>>> result = allocate_surplus(200_000, goals, CurrencyNormalizer(), as_of=date(2025, 6, 1))
>>> result.remaining + sum(a.amount_reporting for a in result.allocations)
200000.0
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .constants import (
    DEFAULT_MAX_ALLOCATION_PER_GOAL,
    DEFAULT_PRIORITY_WEIGHTS,
    DEFAULT_ROUND_TO_MULTIPLE,
    SCORE_WEIGHT_PRIORITY,
    SCORE_WEIGHT_SHORTFALL,
    SCORE_WEIGHT_URGENCY,
    URGENCY_BEYOND,
    URGENCY_NO_DUE_DATE,
    URGENCY_TIERS,
)
from .currency import CurrencyNormalizer
from .exceptions import ConfigurationError
from .goals import SavingGoal
from .types import AllocationDict, AllocationSuggestionDict
from .utils import round_down_to_multiple

__all__ = [
    "AllocationOptions",
    "GoalScore",
    "Allocation",
    "AllocationSuggestion",
    "urgency_for",
    "score_goal",
    "scores_by_goal",
    "allocate_surplus",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllocationOptions:
    """Tuning knobs of the allocator (see ``config.AllocationConfig``)."""
    priority_weights: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_PRIORITY_WEIGHTS)
    )
    round_to_multiple: float = DEFAULT_ROUND_TO_MULTIPLE
    max_allocation_per_goal: float = DEFAULT_MAX_ALLOCATION_PER_GOAL

    def __post_init__(self):
        if self.round_to_multiple <= 0:
            raise ConfigurationError(
                f"round_to_multiple must be > 0, got {self.round_to_multiple}"
            )
        if not (0 < self.max_allocation_per_goal <= 1):
            raise ConfigurationError(
                f"max_allocation_per_goal must be in (0, 1], got {self.max_allocation_per_goal}"
            )
        missing = {"high", "medium", "low"} - set(self.priority_weights)
        if missing:
            raise ConfigurationError(f"priority_weights missing {sorted(missing)}")


@dataclass(frozen=True)
class GoalScore:
    goal_id: str
    score: float
    priority_weight: float
    urgency: float
    shortfall_rel: float
    shortfall_reporting: float
    rate: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Allocation:
    goal_id: str
    goal_name: str
    amount_reporting: float
    amount_in_base: float
    base_currency: str
    score: float

    def to_dict(self) -> AllocationDict:
        return asdict(self)


@dataclass(frozen=True)
class AllocationSuggestion:
    total_surplus: float
    allocations: Tuple[Allocation, ...] = field(default_factory=tuple)
    remaining: float = 0.0

    @property
    def allocated(self) -> float:
        return sum(a.amount_reporting for a in self.allocations)

    def to_dict(self) -> AllocationSuggestionDict:
        return {
            "total_surplus": self.total_surplus,
            "allocations": [a.to_dict() for a in self.allocations],
            "remaining": self.remaining,
        }


def urgency_for(due_date: Optional[date], as_of: date) -> float:
    """Deadline urgency in [0.3, 1.0]; 0.5 without a due date."""
    if due_date is None:
        return URGENCY_NO_DUE_DATE
    days = max(0, (due_date - as_of).days)
    for limit, urgency in URGENCY_TIERS:
        if days <= limit:
            return urgency
    return URGENCY_BEYOND


def score_goal(
    goal: SavingGoal,
    normalizer: CurrencyNormalizer,
    options: Optional[AllocationOptions] = None,
    as_of: Optional[date] = None,
) -> GoalScore:
    """Score one goal (unrounded)."""
    options = options or AllocationOptions()
    as_of = as_of or date.today()
    rate = normalizer.rate_for(goal.base_currency)
    target = goal.target_amount * rate
    shortfall = target - goal.current_amount * rate
    shortfall_rel = min(1.0, shortfall / target) if target > 0 else 0.0
    weight = float(options.priority_weights[goal.priority])
    urgency = urgency_for(goal.due_date, as_of)
    score = (
        SCORE_WEIGHT_PRIORITY * weight
        + SCORE_WEIGHT_URGENCY * urgency
        + SCORE_WEIGHT_SHORTFALL * shortfall_rel
    )
    return GoalScore(
        goal_id=goal.id,
        score=score,
        priority_weight=weight,
        urgency=urgency,
        shortfall_rel=shortfall_rel,
        shortfall_reporting=shortfall,
        rate=rate,
    )


def allocate_surplus(
    surplus: float,
    goals: Iterable[SavingGoal],
    normalizer: CurrencyNormalizer,
    options: Optional[AllocationOptions] = None,
    *,
    as_of: Optional[date] = None,
) -> AllocationSuggestion:
    """
    Suggest how to split *surplus* (reporting currency) across goals.

    Parameters
    ----------
    surplus : float
        Amount available, in the normalizer's reporting currency.
    goals : iterable of SavingGoal
        Completed goals (current >= target) are ignored.
    normalizer : CurrencyNormalizer
        Converts goal amounts to the reporting currency.
    options : AllocationOptions, optional
    as_of : datetime.date, optional
        Reference "today" for urgency. Defaults to ``date.today()``.

    Returns
    -------
    AllocationSuggestion
        Allocations in descending score order; ``remaining`` is the surplus
        left unallocated.
    """
    options = options or AllocationOptions()
    as_of = as_of or date.today()
    active = [g for g in goals if g.current_amount < g.target_amount]
    if not active:
        return AllocationSuggestion(total_surplus=surplus, allocations=(), remaining=surplus)

    scored: List[Tuple[SavingGoal, GoalScore]] = [
        (g, score_goal(g, normalizer, options, as_of)) for g in active
    ]
    scored.sort(key=lambda pair: pair[1].score, reverse=True)
    total_score = sum(s.score for _, s in scored)

    remaining = surplus
    allocations: List[Allocation] = []
    for goal, s in scored:
        if remaining <= 0:
            break
        proportional = s.score / total_score * surplus if total_score > 0 else 0.0
        cap = min(s.shortfall_reporting, surplus * options.max_allocation_per_goal, proportional)
        rounded = round_down_to_multiple(cap, options.round_to_multiple)
        if 0 < rounded <= remaining:
            allocations.append(
                Allocation(
                    goal_id=goal.id,
                    goal_name=goal.name,
                    amount_reporting=rounded,
                    amount_in_base=round(rounded / s.rate, 2),
                    base_currency=goal.base_currency,
                    score=round(s.score, 3),
                )
            )
            remaining -= rounded

    logger.info(
        "Allocated %.2f of %.2f across %d goals", surplus - remaining, surplus, len(allocations)
    )
    return AllocationSuggestion(
        total_surplus=surplus, allocations=tuple(allocations), remaining=remaining
    )


def scores_by_goal(
    goals: Iterable[SavingGoal],
    normalizer: CurrencyNormalizer,
    options: Optional[AllocationOptions] = None,
    as_of: Optional[date] = None,
) -> Dict[str, GoalScore]:
    """Scores of every goal keyed by id, for inspection."""
    return {g.id: score_goal(g, normalizer, options, as_of) for g in goals}
