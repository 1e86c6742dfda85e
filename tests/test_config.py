"""Tests for coinparse.config: YAML configuration loader."""

from datetime import date
from decimal import Decimal

import pytest

from coinparse.config import DEFAULT_MIN_DENOMINATIONS, Config, ParserSettings
from coinparse.parsers.base import DATE_FORMAT, DEFAULT_SUGGESTIONS, FUTURE_DATE
from tests.conftest import FIXTURE_CONFIG_DIR


class TestConfigInit:
    def test_loads_from_config_dir(self):
        config = Config(FIXTURE_CONFIG_DIR)
        assert config.config_dir == FIXTURE_CONFIG_DIR

    def test_raises_on_missing_directory(self):
        with pytest.raises(FileNotFoundError, match="Config directory not found"):
            Config("/nonexistent/path")

    def test_raises_on_file_not_directory(self, tmp_path):
        f = tmp_path / "not_a_dir.yaml"
        f.write_text("test: true")
        with pytest.raises(FileNotFoundError, match="Config directory not found"):
            Config(f)

    def test_lazy_loading(self):
        config = Config(FIXTURE_CONFIG_DIR)
        assert config._parser is None
        _ = config.parser
        assert config._parser is not None


class TestConfigErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            Config(tmp_path).parser

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / "parser.yaml").write_text("min_date: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            Config(tmp_path).parser

    def test_empty_file(self, tmp_path):
        (tmp_path / "parser.yaml").write_text("")
        with pytest.raises(ValueError, match="Empty config file"):
            Config(tmp_path).parser

    def test_not_a_mapping(self, tmp_path):
        (tmp_path / "parser.yaml").write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="Expected a mapping"):
            Config(tmp_path).parser

    def test_bad_number(self, tmp_path):
        (tmp_path / "parser.yaml").write_text("max_amount: lots\n")
        with pytest.raises(ValueError, match="Invalid number for 'max_amount'"):
            Config(tmp_path).parser_settings

    def test_bad_date(self, tmp_path):
        (tmp_path / "parser.yaml").write_text("min_date: soon\n")
        with pytest.raises(ValueError, match="Invalid date for 'min_date'"):
            Config(tmp_path).parser_settings


class TestParserSettings:
    @pytest.fixture
    def settings(self):
        return Config(FIXTURE_CONFIG_DIR).parser_settings

    def test_scalars(self, settings):
        assert settings.min_date == date(2015, 7, 30)
        assert settings.max_amount == Decimal("5000000")
        assert settings.outlier_factor == Decimal("10")
        assert settings.error_preview_limit == 2

    def test_min_denominations_merge_over_defaults(self, settings):
        assert settings.min_denominations["DOGE"] == Decimal("0.00000001")
        assert settings.min_denominations["BTC"] == Decimal("0.0001")
        assert settings.min_denominations["ETH"] == DEFAULT_MIN_DENOMINATIONS["ETH"]

    def test_stablecoins_replace_defaults(self, settings):
        assert settings.stablecoins == frozenset({"USDT", "PYUSD"})

    def test_empty_stablecoin_list_disables_peg(self, tmp_path):
        (tmp_path / "parser.yaml").write_text("stablecoins: []\n")
        assert Config(tmp_path).parser_settings.stablecoins == frozenset()

    def test_suggestion_override(self, settings):
        assert settings.suggestion_for(DATE_FORMAT) == "Write dates as month/day/year"
        assert settings.suggestion_for(FUTURE_DATE) == DEFAULT_SUGGESTIONS[FUTURE_DATE]

    def test_minimal_file_gives_defaults(self, tmp_path):
        (tmp_path / "parser.yaml").write_text("error_preview_limit: 3\n")
        assert Config(tmp_path).parser_settings == ParserSettings()

    def test_defaults(self):
        settings = ParserSettings()
        assert settings.min_date == date(2009, 1, 1)
        assert settings.max_amount == Decimal("1000000000")
        assert settings.outlier_factor == Decimal("50")
        assert set(settings.min_denominations) == {"BTC", "ETH", "LTC"}
        assert "USDC" in settings.stablecoins

    def test_unknown_kind_has_empty_suggestion(self):
        assert ParserSettings().suggestion_for("no_such_kind") == ""

    def test_shipped_config_matches_defaults(self):
        from pathlib import Path

        shipped = Path(__file__).parent.parent / "config"
        assert Config(shipped).parser_settings == ParserSettings()
