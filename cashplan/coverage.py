"""
Liquidity coverage for upcoming payments.

Purpose
-------
The installment scheduler asks a ``CoverageChecker`` whether an amount in a
currency is covered on a date. A checker returns a ``Deficit`` when it is
not; the configured ``CoverageRoute`` list then turns the deficit into
conversion suggestions ("buy ARS with USDT on Binance P2P").

Key components
--------------
- Deficit, CoverageSuggestion: result records
- CoverageChecker: protocol implemented by liquidity sources
- NoCoverageCheck: never reports a deficit
- BalanceCoverageChecker: deterministic check against known balances
- CoverageRoute / suggest_coverage: conversion suggestions

Rates on routes are units of the deficit currency obtained per unit of the
source currency, so ``amount_from_est = deficit / rate``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from .constants import DEFAULT_COVERAGE_ROUTES
from .exceptions import ConfigurationError

__all__ = [
    "Deficit",
    "CoverageSuggestion",
    "CoverageChecker",
    "NoCoverageCheck",
    "BalanceCoverageChecker",
    "CoverageRoute",
    "default_routes",
    "suggest_coverage",
]


@dataclass(frozen=True)
class Deficit:
    currency: str
    amount: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CoverageSuggestion:
    from_currency: str
    amount_from_est: float
    est_rate: str
    est_spread_pct: Optional[float] = None
    platform_suggested: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


class CoverageChecker(Protocol):
    def check_coverage(self, currency: str, amount: float, as_of: date) -> Optional[Deficit]:
        ...


class NoCoverageCheck:
    """Checker that never reports a deficit."""

    def check_coverage(self, currency: str, amount: float, as_of: date) -> Optional[Deficit]:
        return None


class BalanceCoverageChecker:
    """
    Deficit = amount - balance in the payment currency, when positive.

    Balances are fixed at construction; ``as_of`` is accepted for protocol
    compatibility and ignored. Currencies without a balance count as 0.

    Examples
    --------
    >>> checker = BalanceCoverageChecker({"ARS": 50_000})
    >>> checker.check_coverage("ARS", 80_000, date(2025, 2, 10))
    Deficit(currency='ARS', amount=30000.0)
    """

    def __init__(self, balances: Mapping[str, float]):
        self.balances: Dict[str, float] = {k.upper(): float(v) for k, v in balances.items()}

    def check_coverage(self, currency: str, amount: float, as_of: date) -> Optional[Deficit]:
        shortfall = amount - self.balances.get(currency.upper(), 0.0)
        if shortfall > 0:
            return Deficit(currency=currency, amount=float(shortfall))
        return None


@dataclass(frozen=True)
class CoverageRoute:
    """One way of sourcing the deficit currency."""
    from_currency: str
    rate: float
    spread_pct: Optional[float] = None
    platform: Optional[str] = None

    def __post_init__(self):
        if self.rate <= 0:
            raise ConfigurationError(
                f"Coverage route from {self.from_currency!r} needs rate > 0, got {self.rate}"
            )

    def suggest(self, deficit: Deficit) -> CoverageSuggestion:
        return CoverageSuggestion(
            from_currency=self.from_currency,
            amount_from_est=deficit.amount / self.rate,
            est_rate=f"{self.from_currency}→{deficit.currency} {self.rate}",
            est_spread_pct=self.spread_pct,
            platform_suggested=self.platform,
        )


def default_routes() -> List[CoverageRoute]:
    """Routes built from ``DEFAULT_COVERAGE_ROUTES``."""
    return [CoverageRoute(**route) for route in DEFAULT_COVERAGE_ROUTES]


def suggest_coverage(
    deficit: Deficit, routes: Optional[Sequence[CoverageRoute]] = None
) -> List[CoverageSuggestion]:
    """Suggestions for every route except those already in the deficit currency."""
    routes: Iterable[CoverageRoute] = default_routes() if routes is None else routes
    return [
        route.suggest(deficit)
        for route in routes
        if route.from_currency.upper() != deficit.currency.upper()
    ]
