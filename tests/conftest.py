"""Shared test fixtures."""

from datetime import date
from pathlib import Path

# Test fixture config directory with synthetic data
FIXTURE_CONFIG_DIR = Path(__file__).parent / "fixtures" / "config"

# Fixed "now" so future-date checks don't drift
TODAY = date(2025, 10, 1)
