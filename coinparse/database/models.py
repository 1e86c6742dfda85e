"""Dataclass models matching the SQLite schema.

Each dataclass corresponds to one table. Fields match column names exactly.
Primary keys are TEXT (UUID strings generated via uuid4()).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4


def _new_id() -> str:
    return str(uuid4())


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class UsageStat:
    metric: str
    value: int = 0
    first_recorded_at: str | None = None
    updated_at: str | None = None


@dataclass
class ParseRun:
    total_lines: int
    parsed_lines: int
    error_lines: int
    recognized_date_formats: int
    batch_issues: int = 0
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=_now)
