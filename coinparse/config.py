"""YAML configuration loader for coinparse.

Loads parser.yaml from the config/ directory. Every key is optional;
anything left out falls back to the built-in ParserSettings defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path

import yaml

from coinparse.parsers.base import DEFAULT_SUGGESTIONS

# Smallest unit per asset: 1 satoshi, 1 gwei, 1 litoshi
DEFAULT_MIN_DENOMINATIONS: dict[str, Decimal] = {
    "BTC": Decimal("0.00000001"),
    "ETH": Decimal("0.000000001"),
    "LTC": Decimal("0.00000001"),
}

DEFAULT_STABLECOINS: frozenset[str] = frozenset(
    {"USDT", "USDC", "DAI", "BUSD", "TUSD", "FRAX", "UST", "LUSD"}
)


@dataclass(frozen=True)
class ParserSettings:
    """Limits and presentation strings passed explicitly into the parser."""
    min_date: date = date(2009, 1, 1)  # Bitcoin genesis year
    max_amount: Decimal = Decimal("1000000000")
    outlier_factor: Decimal = Decimal("50")
    error_preview_limit: int = 3
    min_denominations: dict[str, Decimal] = field(
        default_factory=lambda: dict(DEFAULT_MIN_DENOMINATIONS)
    )
    stablecoins: frozenset[str] = DEFAULT_STABLECOINS
    suggestions: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SUGGESTIONS))

    def suggestion_for(self, kind: str) -> str:
        return self.suggestions.get(kind, DEFAULT_SUGGESTIONS.get(kind, ""))


def _to_decimal(value, key: str) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Invalid number for '{key}': {value!r}") from e


def _to_date(value, key: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as e:
        raise ValueError(f"Invalid date for '{key}': {value!r}") from e


class Config:
    """Loads and provides access to the YAML configuration files."""

    def __init__(self, config_dir: Path | str = "config"):
        self.config_dir = Path(config_dir)
        if not self.config_dir.is_dir():
            raise FileNotFoundError(f"Config directory not found: {self.config_dir}")

        self._parser: dict | None = None

    def _load(self, filename: str) -> dict:
        path = self.config_dir / filename
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if data is None:
            raise ValueError(f"Empty config file: {path}")
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping in {path}, got {type(data).__name__}")
        return data

    @property
    def parser(self) -> dict:
        """Raw parser.yaml contents."""
        if self._parser is None:
            self._parser = self._load("parser.yaml")
        return self._parser

    @property
    def parser_settings(self) -> ParserSettings:
        """Build ParserSettings from parser.yaml, defaults for missing keys.

        min_denominations and suggestions are merged over the defaults, so a
        file can add DOGE without restating BTC. stablecoins replaces the set.
        """
        raw = self.parser
        defaults = ParserSettings()
        kwargs: dict = {}

        if "min_date" in raw:
            kwargs["min_date"] = _to_date(raw["min_date"], "min_date")
        if "max_amount" in raw:
            kwargs["max_amount"] = _to_decimal(raw["max_amount"], "max_amount")
        if "outlier_factor" in raw:
            kwargs["outlier_factor"] = _to_decimal(raw["outlier_factor"], "outlier_factor")
        if "error_preview_limit" in raw:
            kwargs["error_preview_limit"] = int(raw["error_preview_limit"])

        floors = dict(defaults.min_denominations)
        for symbol, floor in (raw.get("min_denominations") or {}).items():
            floors[str(symbol).upper()] = _to_decimal(floor, f"min_denominations.{symbol}")
        kwargs["min_denominations"] = floors

        if "stablecoins" in raw:
            kwargs["stablecoins"] = frozenset(str(s).upper() for s in raw["stablecoins"] or ())

        suggestions = dict(defaults.suggestions)
        suggestions.update({str(k): str(v) for k, v in (raw.get("suggestions") or {}).items()})
        kwargs["suggestions"] = suggestions

        return ParserSettings(**kwargs)
