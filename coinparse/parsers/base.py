"""Base parser: shared data structures and error kinds for the line pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

# ── Error kinds ────────────────────────────────────────────

INSUFFICIENT_FIELDS = "insufficient_fields"
CURRENCY_NOT_FOUND = "currency_not_found"
AMOUNT_NOT_FOUND = "amount_not_found"
DATE_FORMAT = "date_format"
AMOUNT_FORMAT = "amount_format"
CURRENCY_FORMAT = "currency_format"
FUTURE_DATE = "future_date"
DATE_TOO_OLD = "date_too_old"
NON_POSITIVE_AMOUNT = "non_positive_amount"
AMOUNT_TOO_LARGE = "amount_too_large"
INVALID_CURRENCY = "invalid_currency"
AMOUNT_BELOW_MINIMUM = "amount_below_minimum"
PROCESSING_ERROR = "processing_error"
CRITICAL = "critical"

# Kind → category (the five-way taxonomy plus processing/critical)
ERROR_CATEGORIES: dict[str, str] = {
    INSUFFICIENT_FIELDS: "structural_mismatch",
    CURRENCY_NOT_FOUND: "structural_mismatch",
    AMOUNT_NOT_FOUND: "structural_mismatch",
    DATE_FORMAT: "date_format",
    AMOUNT_FORMAT: "amount_format",
    CURRENCY_FORMAT: "currency_format",
    FUTURE_DATE: "validation",
    DATE_TOO_OLD: "validation",
    NON_POSITIVE_AMOUNT: "validation",
    AMOUNT_TOO_LARGE: "validation",
    INVALID_CURRENCY: "validation",
    AMOUNT_BELOW_MINIMUM: "validation",
    PROCESSING_ERROR: "processing",
    CRITICAL: "critical",
}

DEFAULT_SUGGESTIONS: dict[str, str] = {
    INSUFFICIENT_FIELDS: "Line should contain: date, time, amount, and currency",
    CURRENCY_NOT_FOUND: "Add currency symbol at the end (BTC, ETH, etc.)",
    AMOUNT_NOT_FOUND: "Add numeric amount before currency",
    DATE_FORMAT: "Use American format: M/D/YYYY H:mm:ss (e.g., 9/8/2025 0:57:11)",
    AMOUNT_FORMAT: "Use American format: 15,000.50 (comma = thousands, dot = decimal)",
    CURRENCY_FORMAT: "Use standard symbols: BTC, ETH, USDC, etc.",
    FUTURE_DATE: "Check the date format and value",
    DATE_TOO_OLD: "Cryptocurrencies started from 2009",
    NON_POSITIVE_AMOUNT: "Enter a positive numeric value",
    AMOUNT_TOO_LARGE: "Check if the amount is correct",
    INVALID_CURRENCY: "Use standard symbols like BTC, ETH, USDC",
    AMOUNT_BELOW_MINIMUM: "Check the amount against the asset's smallest unit",
    PROCESSING_ERROR: "Check data format",
    CRITICAL: "Provide the transactions as plain text",
}


# ── Records ────────────────────────────────────────────────


@dataclass(frozen=True)
class RawLine:
    """One trimmed, non-comment input line."""
    number: int   # 1-based position in the filtered line list
    text: str


@dataclass(frozen=True)
class FieldTriple:
    """Raw substrings pulled out of a line by whichever strategy matched."""
    date_text: str
    amount_text: str
    currency_text: str


@dataclass(frozen=True)
class Transaction:
    """A validated transaction. Only built by the line parser."""
    date: date
    amount: Decimal
    currency: str
    source_line_number: int
    original_line: str
    date_text: str = ""

    @property
    def iso_date(self) -> str:
        return self.date.isoformat()

    def to_line(self) -> str:
        """Serialize back into the tab-delimited input grammar."""
        d = self.date
        return f"{d.month}/{d.day}/{d.year:04d} 0:00:00\t{format(self.amount, 'f')}\t{self.currency}"


@dataclass(frozen=True)
class LineError:
    line_number: int
    raw_text: str
    error_kind: str
    message: str
    suggestion: str

    @property
    def category(self) -> str:
        return ERROR_CATEGORIES.get(self.error_kind, "processing")


@dataclass(frozen=True)
class BatchIssue:
    """Advisory finding over the successful set. Never removes transactions."""
    kind: str          # "duplicate" or "outlier"
    line_number: int
    message: str


@dataclass(frozen=True)
class ParseCounters:
    total_lines: int = 0
    parsed_lines: int = 0
    error_lines: int = 0
    recognized_date_formats: int = 0


@dataclass(frozen=True)
class ParseReport:
    transactions: tuple[Transaction, ...] = ()
    errors: tuple[LineError, ...] = ()
    counters: ParseCounters = field(default_factory=ParseCounters)
    issues: tuple[BatchIssue, ...] = ()


class FieldExtractionError(Exception):
    """Raised when no strategy could split a line into date/amount/currency."""

    def __init__(self, kind: str, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)


def compute_dedup_key(txn_date: date, amount: Decimal, currency: str) -> tuple:
    """Composite (date, amount, currency) key used for in-batch duplicates.

    Decimal equality ignores trailing zeros, so 100 and 100.00 collide.
    """
    return (txn_date, amount, currency)


def format_error_summary(errors: list[LineError] | tuple[LineError, ...], limit: int = 3) -> str:
    """Render the first few errors as 'Error in line N: msg', then a '+N more' tail."""
    lines = [f"Error in line {e.line_number}: {e.message}" for e in list(errors)[:limit]]
    remaining = len(errors) - limit
    if remaining > 0:
        lines.append(f"...and {remaining} more errors")
    return "\n".join(lines)
