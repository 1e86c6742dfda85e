"""Semantic rules applied to an interpreted (date, amount, currency) triple."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from coinparse.config import ParserSettings

from .base import (
    AMOUNT_BELOW_MINIMUM,
    AMOUNT_TOO_LARGE,
    DATE_TOO_OLD,
    FUTURE_DATE,
    INVALID_CURRENCY,
    NON_POSITIVE_AMOUNT,
)


@dataclass(frozen=True)
class ValidationFailure:
    kind: str
    message: str
    suggestion: str


def validate(
    txn_date: date,
    amount: Decimal,
    currency: str | None,
    settings: ParserSettings | None = None,
    today: date | None = None,
) -> ValidationFailure | None:
    """Return the first rule violation, or None if the triple is acceptable.

    Rules run in a fixed order: future date, too old, non-positive,
    too large, bad currency, below the per-asset floor.
    """
    settings = settings or ParserSettings()
    today = today or date.today()

    def fail(kind: str, message: str, suggestion: str | None = None) -> ValidationFailure:
        return ValidationFailure(kind, message, suggestion or settings.suggestion_for(kind))

    if txn_date > today:
        return fail(FUTURE_DATE, "Transaction date cannot be in the future")

    if txn_date < settings.min_date:
        return fail(DATE_TOO_OLD, f"Transaction date too old (before {settings.min_date.year})")

    if amount <= 0:
        return fail(NON_POSITIVE_AMOUNT, "Amount must be greater than zero")

    if amount > settings.max_amount:
        return fail(AMOUNT_TOO_LARGE, f"Amount too large (over {settings.max_amount:,})")

    if not currency or len(currency) < 2:
        return fail(INVALID_CURRENCY, "Invalid currency symbol")

    floor = settings.min_denominations.get(currency)
    if floor is not None and amount < floor:
        return fail(
            AMOUNT_BELOW_MINIMUM,
            f"Amount too small for {currency}",
            f"Minimum {currency} amount is {format(floor, 'f')}",
        )

    return None
