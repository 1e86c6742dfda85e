"""American date parsing: M/D/YYYY with a mandatory time component.

Month always comes first. 3/4/2025 is March 4th even though 4/3 would
also be a valid reading; there is no magnitude-based guessing.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta

_DATE_SHAPES = (
    # M/D/YYYY H:mm:ss
    re.compile(r"([0-9]{1,2})/([0-9]{1,2})/([0-9]{4})\s+([0-9]{1,2}):([0-9]{2}):([0-9]{2})"),
    # M/D/YYYY H:mm
    re.compile(r"([0-9]{1,2})/([0-9]{1,2})/([0-9]{4})\s+([0-9]{1,2}):([0-9]{2})"),
)

SUPPORTED_DATE_FORMATS = [
    ("9/8/2025 0:57:11", "American format with seconds"),
    ("9/8/2025 0:57", "American format without seconds"),
    ("09/08/2025 00:57:11", "Zero-padded American format"),
    ("12/31/2025 23:59:59", "End of year example"),
]


def _build(year: int, month: int, day: int, hours: int, minutes: int, seconds: int) -> date | None:
    """Assemble a timestamp and keep it only if the calendar day survived.

    Time fields are added to midnight, so an hour of 24+ rolls into the
    next day and fails the round-trip check.
    """
    try:
        midnight = datetime(year, month, day)
        stamp = midnight + timedelta(hours=hours, minutes=minutes, seconds=seconds)
    except (ValueError, OverflowError):
        return None
    if (stamp.year, stamp.month, stamp.day) != (year, month, day):
        return None
    return stamp.date()


def parse_date(text: str) -> date | None:
    """Parse 'M/D/YYYY H:mm[:ss]' into a calendar date, or None."""
    text = text.strip()
    for shape in _DATE_SHAPES:
        m = shape.fullmatch(text)
        if m is None:
            continue
        month, day, year, hours, minutes = (int(g) for g in m.groups()[:5])
        seconds = int(m.group(6)) if m.lastindex == 6 else 0
        return _build(year, month, day, hours, minutes, seconds)
    return None


def format_iso(value: date) -> str:
    """YYYY-MM-DD."""
    return value.isoformat()
