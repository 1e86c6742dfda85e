"""Tokenizer: split raw text into lines and lines into date/amount/currency.

Field extraction tries an ordered chain of strategies, first match wins:
    1. Tab-delimited         9/8/2025 0:57:11<TAB>3,989.50<TAB>BTC
    2. Multi-word date       9/8/2025 0:57:11 3,989.50 BTC
    3. Single-space fallback (non-greedy date phrase)
    4. Heuristic token scan  currency = last letter token, amount = nearest
                             numeric token before it, date = the rest
"""

from __future__ import annotations

import logging
import re

from .base import (
    AMOUNT_NOT_FOUND,
    CURRENCY_NOT_FOUND,
    INSUFFICIENT_FIELDS,
    FieldExtractionError,
    FieldTriple,
    RawLine,
)

logger = logging.getLogger(__name__)

_COMMENT_RE = re.compile(r"^(#|//|;|\*|--)")

_TAB_RE = re.compile(r"([^\t]+)\t+([0-9.,\s]+)\t+([A-Za-z]{2,10})")
_MULTI_WORD_RE = re.compile(r"(\S+\s+\S+(?:\s+\S+)*)\s+([0-9.,\s]+)\s+([A-Za-z]{2,10})")
_SINGLE_SPACE_RE = re.compile(r"(.+?)\s+([0-9.,\s]+)\s+([A-Za-z]{2,10})")

_CURRENCY_TOKEN_RE = re.compile(r"[A-Za-z]{2,10}")
_AMOUNT_TOKEN_RE = re.compile(r"[0-9.,]+")


def is_comment_line(line: str) -> bool:
    return bool(_COMMENT_RE.match(line.strip()))


def _trim(line: str) -> str:
    """Strip whitespace and any byte-order mark from both ends."""
    return line.strip().strip("\ufeff").strip()


def tokenize(text: str) -> list[RawLine]:
    """Split text into trimmed, non-blank, non-comment lines.

    Numbers are positions in the filtered list, so a comment on line 1
    makes the first transaction line number 1, not 2.
    """
    kept = [_trim(line) for line in text.split("\n")]
    kept = [line for line in kept if line and not is_comment_line(line)]
    return [RawLine(number=i, text=line) for i, line in enumerate(kept, start=1)]


def _triple(match: re.Match) -> FieldTriple:
    date_text, amount_text, currency_text = match.groups()
    return FieldTriple(date_text.strip(), amount_text.strip(), currency_text.strip())


def match_tab_delimited(line: str) -> FieldTriple | None:
    m = _TAB_RE.fullmatch(line)
    return _triple(m) if m else None


def match_multi_word(line: str) -> FieldTriple | None:
    m = _MULTI_WORD_RE.fullmatch(line)
    return _triple(m) if m else None


def match_single_space(line: str) -> FieldTriple | None:
    m = _SINGLE_SPACE_RE.fullmatch(line)
    return _triple(m) if m else None


STRATEGIES = (
    ("tab_delimited", match_tab_delimited),
    ("multi_word", match_multi_word),
    ("single_space", match_single_space),
)


def detect_fields(line: str) -> FieldTriple:
    """Heuristic fallback: locate currency and amount tokens from the end.

    Raises:
        FieldExtractionError: with kind insufficient_fields, currency_not_found
            or amount_not_found.
    """
    parts = line.split()
    if len(parts) < 3:
        raise FieldExtractionError(INSUFFICIENT_FIELDS, "Insufficient data in line")

    currency_index = -1
    for i in range(len(parts) - 1, -1, -1):
        if _CURRENCY_TOKEN_RE.fullmatch(parts[i]):
            currency_index = i
            break
    if currency_index == -1:
        raise FieldExtractionError(CURRENCY_NOT_FOUND, "Currency symbol not found")

    amount_index = -1
    for i in range(currency_index - 1, -1, -1):
        if _AMOUNT_TOKEN_RE.fullmatch(parts[i]):
            amount_index = i
            break
    if amount_index == -1:
        raise FieldExtractionError(AMOUNT_NOT_FOUND, "Amount not found")

    return FieldTriple(
        date_text=" ".join(parts[:amount_index]),
        amount_text=parts[amount_index],
        currency_text=parts[currency_index],
    )


def extract_fields(line: str) -> FieldTriple:
    """Split one line into its three raw fields."""
    for name, matcher in STRATEGIES:
        triple = matcher(line)
        if triple is not None:
            logger.debug("Matched %s strategy: %r", name, line)
            return triple
    triple = detect_fields(line)
    logger.debug("Matched heuristic detection: %r", line)
    return triple
