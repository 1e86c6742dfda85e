"""CLI entry point for coinparse.

Commands:
    coinparse parse [FILE] [--json] [--no-stats]   Parse transactions from FILE or stdin
    coinparse stats [--runs N]                     Show usage counters and recent parse runs
    coinparse formats                              Show accepted date/number formats
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sqlite3
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def _setup_logging() -> None:
    """Configure logging based on COINPARSE_LOG_LEVEL env var."""
    level = os.environ.get("COINPARSE_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _get_settings():
    """Load ParserSettings from the config directory, or defaults if absent."""
    from coinparse.config import Config, ParserSettings

    config_dir = Path(os.environ.get("COINPARSE_CONFIG_DIR", "config"))
    if not (config_dir / "parser.yaml").exists():
        logger.debug("No parser.yaml in %s, using built-in defaults", config_dir)
        return ParserSettings()
    return Config(config_dir=config_dir).parser_settings


def _get_repo():
    """Create a StatsRepository connected to the configured database."""
    from coinparse.database.repository import StatsRepository

    db_path = os.environ.get("COINPARSE_DB_PATH", "coinparse.db")
    return StatsRepository(db_path=db_path)


def _record_stats(report) -> None:
    """Persist counters for a finished parse. Failures only log a warning."""
    from coinparse.database.models import ParseRun
    from coinparse.stats import record_parse_stats

    repo = _get_repo()
    try:
        repo.apply_migrations()
        if record_parse_stats(repo, report):
            repo.insert_parse_run(ParseRun(
                total_lines=report.counters.total_lines,
                parsed_lines=report.counters.parsed_lines,
                error_lines=report.counters.error_lines,
                recognized_date_formats=report.counters.recognized_date_formats,
                batch_issues=len(report.issues),
            ))
    except (sqlite3.Error, OSError) as e:
        logger.warning("Stats database not available: %s", e)
    finally:
        repo.close()


def _report_to_dict(report) -> dict:
    return {
        "transactions": [
            {
                "line": t.source_line_number,
                "date": t.iso_date,
                "amount": format(t.amount, "f"),
                "currency": t.currency,
            }
            for t in report.transactions
        ],
        "errors": [
            {
                "line": e.line_number,
                "kind": e.error_kind,
                "category": e.category,
                "message": e.message,
                "suggestion": e.suggestion,
            }
            for e in report.errors
        ],
        "issues": [
            {"line": i.line_number, "kind": i.kind, "message": i.message}
            for i in report.issues
        ],
        "counters": {
            "total_lines": report.counters.total_lines,
            "parsed_lines": report.counters.parsed_lines,
            "error_lines": report.counters.error_lines,
            "recognized_date_formats": report.counters.recognized_date_formats,
        },
    }


# ── Command handlers ─────────────────────────────────────


def cmd_parse(args: argparse.Namespace) -> int:
    """Parse a transaction file (or stdin) and print the report."""
    from coinparse.parsers.base import format_error_summary
    from coinparse.parsers.line_parser import TransactionParser

    if args.file:
        filepath = args.file.resolve()
        if not filepath.exists():
            print(f"Error: File not found: {filepath}")
            return 1
        text = filepath.read_text(encoding="utf-8-sig", errors="replace")
    else:
        text = sys.stdin.read()

    settings = _get_settings()
    report = TransactionParser(settings=settings).parse(text)

    if not args.no_stats:
        _record_stats(report)

    if args.json:
        print(json.dumps(_report_to_dict(report), indent=2))
        return 0 if report.transactions else 1

    for t in report.transactions:
        print(f"  {t.source_line_number:>4}  {t.iso_date}  {format(t.amount, 'f'):>22}  {t.currency}")

    if report.errors:
        print("\nInvalid transaction format:")
        print(format_error_summary(report.errors, settings.error_preview_limit))

    if report.issues:
        print("\nBatch warnings:")
        for issue in report.issues:
            print(f"  line {issue.line_number}: {issue.kind} - {issue.message}")

    c = report.counters
    print(f"\nParsed {c.parsed_lines}/{c.total_lines} lines ({c.error_lines} errors)")
    return 0 if report.transactions else 1


def cmd_stats(args: argparse.Namespace) -> int:
    """Display persisted usage counters and the most recent parse runs."""
    repo = _get_repo()
    try:
        repo.apply_migrations()
        stats = repo.get_stats()
        print("coinparse usage")
        print("=" * 40)
        if not stats:
            print("  No usage recorded yet.")
        for metric, value in stats.items():
            print(f"  {metric:<24} {value:,}")
        first = repo.get_stat("parse_runs")
        if first:
            print(f"\n  First used: {first.first_recorded_at}")
        last = repo.last_used()
        if last:
            print(f"  Last used: {last}")

        runs = repo.get_recent_parse_runs(limit=args.runs)
        if runs:
            print(f"\nRecent parse runs ({len(runs)}):")
            for run in runs:
                print(
                    f"  {run.created_at[:19]}  {run.parsed_lines}/{run.total_lines} lines"
                    f"  {run.error_lines} errors  {run.batch_issues} warnings"
                )
    finally:
        repo.close()
    return 0


def cmd_formats(args: argparse.Namespace) -> int:
    """Print supported date and number formats plus a sample input."""
    from coinparse.parsers.dates import SUPPORTED_DATE_FORMATS
    from coinparse.parsers.line_parser import EXAMPLE_TRANSACTIONS
    from coinparse.parsers.numbers import SUPPORTED_NUMBER_FORMATS

    print("Date formats (month first):")
    for fmt, desc in SUPPORTED_DATE_FORMATS:
        print(f"  {fmt:<22} {desc}")
    print("\nNumber formats (comma = thousands, dot = decimal):")
    for fmt, desc in SUPPORTED_NUMBER_FORMATS:
        print(f"  {fmt:<22} {desc}")
    print("\nExample input:")
    print(EXAMPLE_TRANSACTIONS)
    return 0


_COMMANDS = {
    "parse": cmd_parse,
    "stats": cmd_stats,
    "formats": cmd_formats,
}


def main(argv: list[str] | None = None):
    _setup_logging()

    parser = argparse.ArgumentParser(
        prog="coinparse",
        description="coinparse crypto transaction parser",
    )
    subparsers = parser.add_subparsers(dest="command")

    # parse
    parse_p = subparsers.add_parser("parse", help="Parse transactions from a file or stdin")
    parse_p.add_argument("file", type=Path, nargs="?", help="Text file with one transaction per line")
    parse_p.add_argument("--json", action="store_true", help="Print the report as JSON")
    parse_p.add_argument("--no-stats", action="store_true", help="Do not record usage counters")

    # stats
    stats_p = subparsers.add_parser("stats", help="Show persisted usage counters and recent runs")
    stats_p.add_argument("--runs", type=int, default=5, help="Number of recent parse runs to list (default: 5)")

    # formats
    subparsers.add_parser("formats", help="Show accepted date and number formats")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    handler = _COMMANDS.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}")
        sys.exit(1)

    sys.exit(handler(args))


if __name__ == "__main__":
    main()
