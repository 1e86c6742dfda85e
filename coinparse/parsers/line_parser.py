"""Line-oriented transaction parser for American date/number formats.

Each line goes tokenizer → date/amount/currency interpreters → validator.
A bad line becomes a LineError and parsing moves on; only a non-text input
aborts the whole batch. BatchAnalyzer runs once over the successful set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from coinparse.analysis.batch import analyze
from coinparse.config import ParserSettings

from .base import (
    AMOUNT_FORMAT,
    CRITICAL,
    CURRENCY_FORMAT,
    DATE_FORMAT,
    PROCESSING_ERROR,
    FieldExtractionError,
    LineError,
    ParseCounters,
    ParseReport,
    RawLine,
    Transaction,
)
from .currency import parse_currency
from .dates import parse_date
from .numbers import parse_amount
from .tokenizer import extract_fields, tokenize
from .validator import validate

logger = logging.getLogger(__name__)

EXAMPLE_TRANSACTIONS = (
    "9/8/2025 0:57:11\t3,989.50\tBTC\n"
    "9/10/2025 17:44:11\t2.062399\tETH\n"
    "9/15/2025 20:15:11\t15,000\tUSDC\n"
    "9/19/2025 17:56:11\t20,500.75\tUSDT\n"
    "3/10/2022 16:45:00\t1,234.567\tADA"
)


@dataclass
class LineOutcome:
    """Result of one line: exactly one of transaction/error is set."""
    transaction: Transaction | None = None
    error: LineError | None = None
    date_recognized: bool = False


class TransactionParser:
    """Parse blocks of transaction text into a ParseReport.

    Args:
        settings: Limits and suggestion strings. Defaults to ParserSettings().
        today: Fixed "now" for the future-date rule. When None, the current
            date is read once at the start of each parse() call.
    """

    def __init__(self, settings: ParserSettings | None = None, today: date | None = None):
        self.settings = settings or ParserSettings()
        self.today = today

    def parse(self, text: str) -> ParseReport:
        if not isinstance(text, str):
            logger.error("Critical parsing error: expected text, got %s", type(text).__name__)
            return ParseReport(
                errors=(
                    LineError(
                        line_number=0,
                        raw_text=repr(text),
                        error_kind=CRITICAL,
                        message="Critical parsing error",
                        suggestion=self.settings.suggestion_for(CRITICAL),
                    ),
                ),
            )

        today = self.today or date.today()
        lines = tokenize(text)
        transactions: list[Transaction] = []
        errors: list[LineError] = []
        recognized = 0

        for raw in lines:
            outcome = self.parse_line(raw, today)
            if outcome.date_recognized:
                recognized += 1
            if outcome.transaction is not None:
                transactions.append(outcome.transaction)
            else:
                logger.debug("Line %d rejected (%s): %s",
                             raw.number, outcome.error.error_kind, outcome.error.message)
                errors.append(outcome.error)

        issues = analyze(transactions, outlier_factor=self.settings.outlier_factor)

        logger.info(
            "Parsing complete: %d valid, %d errors, %d batch issues",
            len(transactions), len(errors), len(issues),
        )
        return ParseReport(
            transactions=tuple(transactions),
            errors=tuple(errors),
            counters=ParseCounters(
                total_lines=len(lines),
                parsed_lines=len(transactions),
                error_lines=len(errors),
                recognized_date_formats=recognized,
            ),
            issues=tuple(issues),
        )

    def parse_line(self, raw: RawLine, today: date | None = None) -> LineOutcome:
        today = today or self.today or date.today()
        try:
            return self._parse_line(raw, today)
        except (ValueError, ArithmeticError) as e:
            return LineOutcome(error=self._error(raw, PROCESSING_ERROR, f"Processing error: {e}"))

    def _parse_line(self, raw: RawLine, today: date) -> LineOutcome:
        try:
            fields = extract_fields(raw.text)
        except FieldExtractionError as e:
            return LineOutcome(error=self._error(raw, e.kind, e.message))

        txn_date = parse_date(fields.date_text)
        if txn_date is None:
            return LineOutcome(
                error=self._error(raw, DATE_FORMAT, f'Invalid date format: "{fields.date_text}"')
            )

        amount = parse_amount(fields.amount_text)
        if amount is None:
            return LineOutcome(
                error=self._error(raw, AMOUNT_FORMAT, f'Invalid amount: "{fields.amount_text}"'),
                date_recognized=True,
            )

        currency = parse_currency(fields.currency_text)
        if currency is None:
            return LineOutcome(
                error=self._error(raw, CURRENCY_FORMAT, f'Invalid currency: "{fields.currency_text}"'),
                date_recognized=True,
            )

        failure = validate(txn_date, amount, currency, self.settings, today)
        if failure is not None:
            return LineOutcome(
                error=LineError(raw.number, raw.text, failure.kind, failure.message, failure.suggestion),
                date_recognized=True,
            )

        return LineOutcome(
            transaction=Transaction(
                date=txn_date,
                amount=amount,
                currency=currency,
                source_line_number=raw.number,
                original_line=raw.text,
                date_text=fields.date_text,
            ),
            date_recognized=True,
        )

    def _error(self, raw: RawLine, kind: str, message: str) -> LineError:
        return LineError(
            line_number=raw.number,
            raw_text=raw.text,
            error_kind=kind,
            message=message,
            suggestion=self.settings.suggestion_for(kind),
        )


def parse_transactions(
    text: str,
    settings: ParserSettings | None = None,
    today: date | None = None,
) -> ParseReport:
    """Convenience wrapper: TransactionParser(settings, today).parse(text)."""
    return TransactionParser(settings=settings, today=today).parse(text)
