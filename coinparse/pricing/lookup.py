"""Price lookup boundary.

The core never talks to a price source directly. Anything that can answer
lookup(symbol, date) with a PriceQuote or None plugs in here. Network
errors, rate limits and unsupported symbols all collapse to None.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol

from coinparse.config import DEFAULT_STABLECOINS, ParserSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    symbol: str
    date: date
    price: Decimal
    source: str


class PriceLookup(Protocol):
    def lookup(self, symbol: str, on: date) -> PriceQuote | None:
        ...


def safe_lookup(lookup: PriceLookup, symbol: str, on: date) -> PriceQuote | None:
    """Call lookup once; any exception becomes a not-found result."""
    try:
        return lookup.lookup(symbol, on)
    except Exception as e:
        logger.warning("Price lookup failed for %s on %s: %s", symbol, on.isoformat(), e)
        return None


class StablecoinPriceLookup:
    """Answer 1.00 for pegged stablecoins, delegate everything else.

    Args:
        fallback: Lookup used for non-stablecoin symbols. None means those
            symbols are reported as not found.
        stablecoins: Symbols treated as pegged to 1.00.
    """

    PEG = Decimal("1.00")

    def __init__(
        self,
        fallback: PriceLookup | None = None,
        stablecoins: frozenset[str] | set[str] = DEFAULT_STABLECOINS,
    ):
        self.fallback = fallback
        self.stablecoins = frozenset(s.upper() for s in stablecoins)

    @classmethod
    def from_settings(
        cls, settings: ParserSettings, fallback: PriceLookup | None = None
    ) -> StablecoinPriceLookup:
        return cls(fallback=fallback, stablecoins=settings.stablecoins)

    def is_stablecoin(self, symbol: str) -> bool:
        return symbol.upper() in self.stablecoins

    def lookup(self, symbol: str, on: date) -> PriceQuote | None:
        symbol = symbol.upper()
        if symbol in self.stablecoins:
            return PriceQuote(symbol=symbol, date=on, price=self.PEG, source="stablecoin")
        if self.fallback is None:
            return None
        return safe_lookup(self.fallback, symbol, on)
