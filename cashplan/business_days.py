"""
Business-day resolution for CashPlan.

Only weekends are modeled; there is no holiday calendar. Used by the
recurrence day rules (last/next business day) and by installment due dates.

Example
-------
>>> from datetime import date
>>> resolve_business_day(date(2025, 3, 8), "forward")    # Saturday
datetime.date(2025, 3, 10)
>>> resolve_business_day(date(2025, 3, 9), "backward")   # Sunday
datetime.date(2025, 3, 7)
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Literal

from .utils import last_day_of_month

__all__ = [
    "Direction",
    "is_business_day",
    "resolve_business_day",
    "last_business_day",
]

Direction = Literal["forward", "backward"]

_SATURDAY = 5
_SUNDAY = 6

# (forward shift, backward shift) in days
_SHIFTS = {
    _SATURDAY: (2, -1),
    _SUNDAY: (1, -2),
}


def is_business_day(d: date) -> bool:
    """True for Monday..Friday."""
    return d.weekday() < _SATURDAY


def resolve_business_day(d: date, direction: Direction = "forward") -> date:
    """
    Move a weekend date to the nearest weekday in *direction*.

    Saturday moves +2 days forward or -1 backward; Sunday moves +1 forward
    or -2 backward. Weekdays are returned unchanged.
    """
    if direction not in ("forward", "backward"):
        raise ValueError(f"direction must be 'forward' or 'backward', got {direction!r}")
    shift = _SHIFTS.get(d.weekday())
    if shift is None:
        return d
    forward, backward = shift
    return d + timedelta(days=forward if direction == "forward" else backward)


def last_business_day(year: int, month: int) -> date:
    """Last calendar day of the month, moved back to a weekday."""
    return resolve_business_day(date(year, month, last_day_of_month(year, month)), "backward")
