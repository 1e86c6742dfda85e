"""Convert parsed transactions to a reference-currency value."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from coinparse.parsers.base import Transaction

from .lookup import PriceLookup, PriceQuote, safe_lookup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    transaction: Transaction
    quote: PriceQuote | None = None
    value: Decimal | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.quote is not None


@dataclass
class ConversionSummary:
    results: list[ConversionResult] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return len(self.results) - self.success_count

    @property
    def total_value(self) -> Decimal:
        return sum((r.value for r in self.results if r.value is not None), Decimal("0"))


def convert_transactions(
    transactions: Iterable[Transaction], lookup: PriceLookup
) -> ConversionSummary:
    """Look up one price per transaction, in order. Never raises on lookup failure."""
    summary = ConversionSummary()
    for txn in transactions:
        quote = safe_lookup(lookup, txn.currency, txn.date)
        if quote is None:
            summary.results.append(
                ConversionResult(transaction=txn, error=f"Cryptocurrency not supported: {txn.currency}")
            )
            continue
        summary.results.append(
            ConversionResult(transaction=txn, quote=quote, value=txn.amount * quote.price)
        )

    logger.info(
        "Converted %d/%d transactions, total %s",
        summary.success_count, len(summary.results), summary.total_value,
    )
    return summary
