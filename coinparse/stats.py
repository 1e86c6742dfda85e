"""Usage statistics: a fire-and-forget counter sink fed from ParseReports."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Mapping, Protocol

from coinparse.parsers.base import ParseReport

logger = logging.getLogger(__name__)


class StatsSink(Protocol):
    def record(self, metric: str, delta: int = 1) -> None:
        ...

    def record_many(self, counts: Mapping[str, int]) -> None:
        ...


class MemoryStatsSink:
    """In-process sink, used for dry runs and tests."""

    def __init__(self):
        self.counts: Counter[str] = Counter()

    def record(self, metric: str, delta: int = 1) -> None:
        self.counts[metric] += delta

    def record_many(self, counts: Mapping[str, int]) -> None:
        self.counts.update(counts)

    def get_stats(self) -> dict[str, int]:
        return dict(sorted(self.counts.items()))


def report_metrics(report: ParseReport) -> dict[str, int]:
    return {
        "parse_runs": 1,
        "parsed_transactions": len(report.transactions),
        "parse_errors": len(report.errors),
        "batch_issues": len(report.issues),
    }


def record_parse_stats(sink: StatsSink | None, report: ParseReport) -> bool:
    """Push report counters to the sink as one batch. Returns False if the sink failed.

    Sink failures are logged and never propagate to the caller.
    """
    if sink is None:
        return False
    try:
        sink.record_many(report_metrics(report))
    except Exception as e:
        logger.warning("Stats sink unavailable: %s", e)
        return False
    return True
