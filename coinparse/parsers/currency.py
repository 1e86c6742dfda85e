"""Currency symbol normalization."""

from __future__ import annotations

import re

_SYMBOL_RE = re.compile(r"[A-Z]{2,10}")


def parse_currency(text: str) -> str | None:
    """Uppercase and trim; accept 2-10 Latin letters only.

    No known-asset check happens here. Unsupported symbols surface later,
    when the price lookup comes back empty.
    """
    symbol = text.upper().strip()
    if _SYMBOL_RE.fullmatch(symbol):
        return symbol
    return None
