"""
Currency normalization for CashPlan.

Purpose
-------
Single conversion point from any record currency into the reporting
currency. The engine consumes a static rate table (units of reporting
currency per 1 unit of each currency); sourcing or refreshing rates is the
caller's concern.

Unknown currencies fall back to a rate of 1 and never raise, unless the
normalizer is built with ``strict=True``.

Example
-------
>>> normalizer = CurrencyNormalizer({"USD": 1000.0, "BRL": 200.0}, reporting_currency="ARS")
>>> normalizer.to_reporting(150.0, "USD")
150000.0
>>> normalizer.to_reporting(10.0, "XYZ")   # unknown -> rate 1
10.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from .constants import DEFAULT_RATES, DEFAULT_REPORTING_CURRENCY
from .exceptions import ConfigurationError, UnknownCurrencyError

__all__ = ["CurrencyNormalizer"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrencyNormalizer:
    """
    Converts amounts to and from the reporting currency.

    Parameters
    ----------
    rates : Mapping[str, float]
        Units of reporting currency per 1 unit of each currency code. A table
        quoted in another base is rebased by dividing every rate by the
        reporting currency's own entry, so ``{"ARS": 1, "USD": 1000}`` with
        ``reporting_currency="USD"`` yields ARS 0.001 and USD 1.
    reporting_currency : str, default "ARS"
        Target currency. Its own rate is always 1.
    strict : bool, default False
        Raise UnknownCurrencyError for codes missing from ``rates`` instead
        of falling back to 1.
    """
    rates: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_RATES))
    reporting_currency: str = DEFAULT_REPORTING_CURRENCY
    strict: bool = False

    def __post_init__(self) -> None:
        bad = {code: r for code, r in self.rates.items() if r <= 0}
        if bad:
            raise ConfigurationError(f"Currency rates must be positive, got {bad}")
        rates = {code.upper(): float(r) for code, r in self.rates.items()}
        # rebase onto the reporting currency when the table quotes it
        base = rates.get(self.reporting_currency.upper())
        if base is not None and base != 1.0:
            rates = {code: r / base for code, r in rates.items()}
        object.__setattr__(self, "rates", rates)

    def rate_for(self, currency: Optional[str]) -> float:
        """Units of reporting currency per 1 unit of *currency*."""
        code = (currency or "").upper()
        if code == self.reporting_currency.upper():
            return 1.0
        rate = self.rates.get(code)
        if rate is None:
            if self.strict:
                raise UnknownCurrencyError(
                    f"No rate for {currency!r} in reporting currency {self.reporting_currency}"
                )
            logger.debug("No rate for %r, falling back to 1.0", currency)
            return 1.0
        return rate

    def to_reporting(self, amount: float, currency: Optional[str]) -> float:
        """Convert *amount* in *currency* to the reporting currency."""
        return float(amount) * self.rate_for(currency)

    def from_reporting(self, amount: float, currency: Optional[str]) -> float:
        """Convert a reporting-currency *amount* back into *currency*."""
        return float(amount) / self.rate_for(currency)

    def with_rates(self, rates: Mapping[str, float]) -> "CurrencyNormalizer":
        """Return a normalizer with *rates* merged over the current table."""
        merged: Dict[str, float] = dict(self.rates)
        merged.update({code.upper(): r for code, r in rates.items()})
        return CurrencyNormalizer(merged, self.reporting_currency, self.strict)
