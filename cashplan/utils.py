"""General utilities for CashPlan

Contents
--------
- Validation helpers
- Month arithmetic (month keys, month offsets, month-end clamping)
- Index builders (first-of-month DatetimeIndex)
- Percentage and rounding helpers (zero-safe percentages, floor-to-multiple,
  cent splitting)
- Formatting helpers (format_currency)
"""

from __future__ import annotations

import calendar
import math
import re
from datetime import date
from typing import List, Optional, Tuple

import pandas as pd

from .exceptions import TimeIndexError, ValidationError

__all__ = [
    # Validation
    "check_non_negative",
    "check_window",
    # Months
    "month_key",
    "parse_month_key",
    "add_months",
    "last_day_of_month",
    "clamp_day",
    "month_index",
    "months_between",
    # Percentages / rounding
    "safe_pct",
    "round_down_to_multiple",
    "split_cents",
    # Formatting
    "format_currency",
]

_MONTH_KEY_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_non_negative(name: str, value: float) -> None:
    """Raise if *value* is negative (strict)."""
    if value < 0:
        raise ValidationError(f"{name} must be non-negative (got {value}).")


def check_window(start: date, end: date) -> None:
    """Raise if the closed window [start, end] is empty."""
    if start > end:
        raise TimeIndexError(f"Window start {start.isoformat()} is after end {end.isoformat()}.")


# ---------------------------------------------------------------------------
# Month arithmetic
# ---------------------------------------------------------------------------

def month_key(d: date) -> str:
    """Return the YYYY-MM bucket key of *d*."""
    return f"{d.year:04d}-{d.month:02d}"


def parse_month_key(key: str) -> Tuple[int, int]:
    """Split a YYYY-MM key into (year, month)."""
    if not isinstance(key, str) or not _MONTH_KEY_RE.match(key):
        raise TimeIndexError(f"Month key must look like YYYY-MM, got {key!r}.")
    year, month = key.split("-")
    return int(year), int(month)


def last_day_of_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, clamping *day* to the month's last day (Feb 31 -> Feb 28/29)."""
    return date(year, month, min(day, last_day_of_month(year, month)))


def add_months(d: date, months: int, day: Optional[int] = None) -> date:
    """Shift *d* by *months* calendar months.

    The resulting day is *day* (or ``d.day``), clamped to the month length.
    """
    total = d.month - 1 + months
    year = d.year + total // 12
    month = total % 12 + 1
    return clamp_day(year, month, d.day if day is None else day)


def months_between(start: date, end: date) -> List[Tuple[int, int]]:
    """Every (year, month) from *start*'s month through *end*'s month, inclusive."""
    periods = pd.period_range(
        start=pd.Timestamp(start).to_period("M"), end=pd.Timestamp(end).to_period("M"), freq="M"
    )
    return [(int(p.year), int(p.month)) for p in periods]


def month_index(start: Optional[date], months: int) -> pd.DatetimeIndex:
    """Construct a first-of-month DatetimeIndex for *months* periods.

    If *start* is None, uses the current month as the first period.
    """
    if months <= 0:
        return pd.DatetimeIndex([], dtype="datetime64[ns]")
    if start is None:
        today = pd.Timestamp.today().normalize()
        first = pd.Timestamp(today.year, today.month, 1)
    else:
        first = pd.Timestamp(start.year, start.month, 1)
    return pd.date_range(start=first, periods=months, freq="MS")


# ---------------------------------------------------------------------------
# Percentages / rounding
# ---------------------------------------------------------------------------

def safe_pct(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0.0 when the denominator is not positive.

    Masks the true variance when nothing was planned; callers rely on the
    zero rather than NaN/inf.
    """
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100.0


def round_down_to_multiple(amount: float, multiple: float) -> float:
    """Floor *amount* to the nearest multiple of *multiple*."""
    if multiple <= 0:
        raise ValidationError(f"multiple must be > 0 (got {multiple}).")
    return math.floor(amount / multiple) * multiple


def split_cents(total: float, parts: int) -> List[float]:
    """Split *total* into *parts* equal cent amounts; the last part absorbs the remainder.

    >>> split_cents(400.03, 4)
    [100.0, 100.0, 100.0, 100.03]
    """
    if parts < 1:
        raise ValidationError(f"parts must be >= 1 (got {parts}).")
    total_cents = int(round(total * 100))
    base, remainder = divmod(total_cents, parts)
    cents = [base] * parts
    cents[-1] += remainder
    return [c / 100 for c in cents]


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_currency(value: float, currency: str = "", decimals: int = 0) -> str:
    """
    Format an amount for tables and CLI output.

    Examples
    --------
    >>> format_currency(1_500_000, "ARS")
    'ARS 1,500,000'
    >>> format_currency(12.5, decimals=2)
    '12.50'
    """
    body = f"{value:,.{decimals}f}"
    return f"{currency} {body}" if currency else body
