"""Batch-level anomaly checks over successfully parsed transactions.

Checks:
1. Duplicate: same (date, amount, currency) as an earlier transaction.
   The first occurrence is never flagged.
2. Outlier: amount greater than outlier_factor × the batch mean. The mean
   is computed once over the whole batch, outliers included.

Both are advisory: transactions stay in the report either way.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from coinparse.parsers.base import BatchIssue, Transaction, compute_dedup_key

DUPLICATE = "duplicate"
OUTLIER = "outlier"


def find_duplicates(transactions: list[Transaction]) -> list[BatchIssue]:
    seen: set[tuple] = set()
    issues: list[BatchIssue] = []
    for txn in transactions:
        key = compute_dedup_key(txn.date, txn.amount, txn.currency)
        if key in seen:
            issues.append(BatchIssue(DUPLICATE, txn.source_line_number,
                                     "Possible duplicate transaction"))
        seen.add(key)
    return issues


def find_outliers(
    transactions: list[Transaction], factor: Decimal = Decimal("50")
) -> list[BatchIssue]:
    if len(transactions) <= 1:
        return []
    mean = sum((t.amount for t in transactions), Decimal("0")) / len(transactions)
    threshold = mean * factor
    return [
        BatchIssue(OUTLIER, t.source_line_number, "Unusually large amount compared to others")
        for t in transactions
        if t.amount > threshold
    ]


def analyze(
    transactions: Iterable[Transaction], outlier_factor: Decimal = Decimal("50")
) -> list[BatchIssue]:
    """Duplicate issues first, then outliers, each in input order."""
    txns = list(transactions)
    return find_duplicates(txns) + find_outliers(txns, Decimal(outlier_factor))
