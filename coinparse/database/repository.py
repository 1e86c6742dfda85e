"""Repository: usage counters and parse-run history in SQLite using raw SQL.

StatsRepository is the persistent StatsSink. All methods take/return
dataclass instances from models.py.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Mapping

from .models import ParseRun, UsageStat

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


class StatsRepository:
    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # ── Migrations ──────────────────────────────────────────

    def apply_migrations(self, migrations_dir: Path = MIGRATIONS_DIR):
        """Apply all pending SQL migrations in order.

        Each migration runs in a transaction: if the SQL fails, the
        schema_version row is not inserted, allowing retry on next startup.
        """
        self.conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_version ("
            "  version INTEGER PRIMARY KEY,"
            "  description TEXT,"
            "  applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP"
            ")"
        )
        self.conn.commit()

        row = self.conn.execute(
            "SELECT MAX(version) FROM schema_version"
        ).fetchone()
        current = row[0] or 0

        for sql_file in sorted(migrations_dir.glob("*.sql")):
            version = int(sql_file.name.split("_")[0])
            if version > current:
                try:
                    self.conn.execute("BEGIN")
                    # executescript auto-commits, so we split statements manually
                    for statement in sql_file.read_text().split(";"):
                        statement = statement.strip()
                        if statement:
                            self.conn.execute(statement)
                    self.conn.execute(
                        "INSERT INTO schema_version (version, description) VALUES (?, ?)",
                        (version, sql_file.stem),
                    )
                    self.conn.commit()
                except Exception:
                    self.conn.rollback()
                    raise

    # ── Counters (StatsSink) ───────────────────────────────

    def record(self, metric: str, delta: int = 1):
        """Upsert a usage_stats row: add delta to the metric's value."""
        self.record_many({metric: delta})

    def record_many(self, counts: Mapping[str, int]):
        """Upsert several counters in one transaction: all or nothing."""
        try:
            self.conn.executemany(
                "INSERT INTO usage_stats (metric, value, first_recorded_at, updated_at)"
                " VALUES (?, ?, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)"
                " ON CONFLICT(metric) DO UPDATE SET"
                "  value = value + excluded.value,"
                "  updated_at = CURRENT_TIMESTAMP",
                list(counts.items()),
            )
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise

    def get_stat(self, metric: str) -> UsageStat | None:
        row = self.conn.execute(
            "SELECT * FROM usage_stats WHERE metric = ?", (metric,)
        ).fetchone()
        return self._row_to_stat(row) if row else None

    def get_stats(self) -> dict[str, int]:
        """All counters as {metric: value}, sorted by metric name."""
        rows = self.conn.execute(
            "SELECT metric, value FROM usage_stats ORDER BY metric"
        ).fetchall()
        return {r["metric"]: r["value"] for r in rows}

    def last_used(self) -> str | None:
        row = self.conn.execute("SELECT MAX(updated_at) FROM usage_stats").fetchone()
        return row[0]

    # ── Parse runs ─────────────────────────────────────────

    def insert_parse_run(self, run: ParseRun) -> ParseRun:
        self.conn.execute(
            "INSERT INTO parse_runs (id, total_lines, parsed_lines, error_lines,"
            " recognized_date_formats, batch_issues, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?)",
            (run.id, run.total_lines, run.parsed_lines, run.error_lines,
             run.recognized_date_formats, run.batch_issues, run.created_at),
        )
        self.conn.commit()
        return run

    def get_recent_parse_runs(self, limit: int = 10) -> list[ParseRun]:
        rows = self.conn.execute(
            "SELECT * FROM parse_runs ORDER BY created_at DESC LIMIT ?", (limit,)
        ).fetchall()
        return [self._row_to_parse_run(r) for r in rows]

    # ── Row mappers ────────────────────────────────────────

    @staticmethod
    def _row_to_stat(row: sqlite3.Row) -> UsageStat:
        return UsageStat(
            metric=row["metric"],
            value=row["value"],
            first_recorded_at=row["first_recorded_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_parse_run(row: sqlite3.Row) -> ParseRun:
        return ParseRun(
            id=row["id"],
            total_lines=row["total_lines"],
            parsed_lines=row["parsed_lines"],
            error_lines=row["error_lines"],
            recognized_date_formats=row["recognized_date_formats"],
            batch_issues=row["batch_issues"],
            created_at=row["created_at"],
        )
