"""American number parsing: comma groups thousands, dot marks the fraction."""

from __future__ import annotations

import re
from decimal import Decimal

_STRIP_RE = re.compile(r"\s+|[$€£¥₽]")

_DIGITS_RE = re.compile(r"[0-9]+")
_DECIMAL_RE = re.compile(r"[0-9]+\.[0-9]+")
_GROUPED_RE = re.compile(r"[0-9,]+")
_GROUPED_DECIMAL_RE = re.compile(r"[0-9,]+\.[0-9]+")

SUPPORTED_NUMBER_FORMATS = [
    ("3,989", "Thousands with comma → 3989"),
    ("15,000.50", "American format → 15000.50"),
    ("2.062399", "Decimal number → 2.062399"),
    ("1,234,567.89", "Large number → 1234567.89"),
]


def is_valid_comma_grouping(text: str) -> bool:
    """First group 1-3 digits, every later group exactly 3 digits.

    >>> is_valid_comma_grouping("1,234,567")
    True
    >>> is_valid_comma_grouping("12,34")
    False
    """
    groups = text.split(",")
    if not 1 <= len(groups[0]) <= 3 or not groups[0].isdigit():
        return False
    return all(len(g) == 3 and g.isdigit() for g in groups[1:])


def parse_amount(text: str) -> Decimal | None:
    """Parse an amount string, returning None for any unrecognized shape."""
    clean = _STRIP_RE.sub("", text)

    if _DIGITS_RE.fullmatch(clean):
        return Decimal(clean)

    if _DECIMAL_RE.fullmatch(clean):
        return Decimal(clean)

    if _GROUPED_RE.fullmatch(clean):
        if is_valid_comma_grouping(clean):
            return Decimal(clean.replace(",", ""))
        return None

    if _GROUPED_DECIMAL_RE.fullmatch(clean):
        integer_part, fraction = clean.split(".")
        if is_valid_comma_grouping(integer_part) and fraction.isdigit():
            return Decimal(f"{integer_part.replace(',', '')}.{fraction}")

    return None
