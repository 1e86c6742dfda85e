"""Tests for coinparse.cli: argument parsing and command handlers.

Tests call main(argv=[...]) with env vars pointed at tmp_path so no real
config directory or database is touched.
"""

from __future__ import annotations

import io
import json
import subprocess
import sys
from pathlib import Path

import pytest

from coinparse.cli import main

PROJECT_ROOT = Path(__file__).parent.parent

SAMPLE = "9/8/2020 0:57:11\t3,989.50\tBTC\n9/10/2020 17:44:11\t2.062399\tETH\n"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("COINPARSE_DB_PATH", str(tmp_path / "stats.db"))
    monkeypatch.setenv("COINPARSE_CONFIG_DIR", str(tmp_path / "no-config"))
    return tmp_path


def _run(argv) -> int:
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


def _write(tmp_path: Path, text: str, name: str = "txns.txt") -> Path:
    f = tmp_path / name
    f.write_text(text)
    return f


class TestCliHelp:
    def test_help_exits_zero(self):
        result = subprocess.run(
            [sys.executable, "-m", "coinparse.cli", "--help"],
            capture_output=True, text=True, cwd=PROJECT_ROOT,
        )
        assert result.returncode == 0
        assert "coinparse crypto transaction parser" in result.stdout

    def test_no_args_prints_help(self, capsys):
        assert _run([]) == 0
        assert "usage:" in capsys.readouterr().out.lower()


class TestParseCommand:
    def test_parses_file(self, tmp_path, capsys):
        f = _write(tmp_path, SAMPLE)
        assert _run(["parse", str(f)]) == 0
        out = capsys.readouterr().out
        assert "2020-09-08" in out
        assert "3989.50" in out
        assert "Parsed 2/2 lines (0 errors)" in out

    def test_reads_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "stdin", io.StringIO(SAMPLE))
        assert _run(["parse", "--no-stats"]) == 0
        assert "Parsed 2/2" in capsys.readouterr().out

    def test_file_with_byte_order_mark(self, tmp_path, capsys):
        f = tmp_path / "bom.txt"
        f.write_text(SAMPLE, encoding="utf-8-sig")
        assert _run(["parse", str(f), "--no-stats"]) == 0
        out = capsys.readouterr().out
        assert "Invalid transaction format" not in out
        assert "Parsed 2/2 lines (0 errors)" in out

    def test_missing_file(self, tmp_path, capsys):
        assert _run(["parse", str(tmp_path / "nope.txt")]) == 1
        assert "File not found" in capsys.readouterr().out

    def test_error_summary_truncated(self, tmp_path, capsys):
        f = _write(tmp_path, "a\nb\nc\nd\ne\n" + SAMPLE)
        assert _run(["parse", str(f), "--no-stats"]) == 0
        out = capsys.readouterr().out
        assert "Error in line 1: Insufficient data in line" in out
        assert "Error in line 4" not in out
        assert "...and 2 more errors" in out

    def test_no_transactions_exits_one(self, tmp_path):
        f = _write(tmp_path, "just words here\n")
        assert _run(["parse", str(f), "--no-stats"]) == 1

    def test_batch_warnings(self, tmp_path, capsys):
        line = "9/8/2020 0:57:11\t1\tBTC\n"
        f = _write(tmp_path, line + line)
        _run(["parse", str(f), "--no-stats"])
        assert "line 2: duplicate" in capsys.readouterr().out

    def test_json_output(self, tmp_path, capsys):
        f = _write(tmp_path, SAMPLE + "bad line\n")
        assert _run(["parse", str(f), "--json", "--no-stats"]) == 0
        doc = json.loads(capsys.readouterr().out)
        assert doc["transactions"][0] == {
            "line": 1, "date": "2020-09-08", "amount": "3989.50", "currency": "BTC",
        }
        assert doc["errors"][0]["line"] == 3
        assert doc["errors"][0]["category"] == "structural_mismatch"
        assert doc["counters"]["total_lines"] == 3

    def test_uses_config_dir(self, tmp_path, monkeypatch, capsys):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "parser.yaml").write_text("max_amount: 100\n")
        monkeypatch.setenv("COINPARSE_CONFIG_DIR", str(config_dir))
        f = _write(tmp_path, SAMPLE)
        _run(["parse", str(f), "--no-stats"])
        assert "Amount too large (over 100)" in capsys.readouterr().out


class TestStats:
    def test_no_stats_flag_skips_database(self, tmp_path):
        f = _write(tmp_path, SAMPLE)
        _run(["parse", str(f), "--no-stats"])
        assert not (tmp_path / "stats.db").exists()

    def test_parse_records_counters(self, tmp_path, capsys):
        f = _write(tmp_path, SAMPLE)
        _run(["parse", str(f)])
        _run(["parse", str(f)])
        capsys.readouterr()
        assert _run(["stats"]) == 0
        out = capsys.readouterr().out
        assert "parsed_transactions" in out
        assert "4" in out
        assert "Last used:" in out

    def test_lists_recent_runs(self, tmp_path, capsys):
        f = _write(tmp_path, SAMPLE + "bad line\n")
        _run(["parse", str(f)])
        _run(["parse", str(f)])
        capsys.readouterr()
        assert _run(["stats", "--runs", "1"]) == 0
        out = capsys.readouterr().out
        assert "First used:" in out
        assert "Recent parse runs (1):" in out
        assert "2/3 lines  1 errors  0 warnings" in out

    def test_empty_stats(self, capsys):
        assert _run(["stats"]) == 0
        assert "No usage recorded yet." in capsys.readouterr().out

    def test_unwritable_database_does_not_fail_parse(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("COINPARSE_DB_PATH", str(tmp_path / "missing-dir" / "stats.db"))
        f = _write(tmp_path, SAMPLE)
        assert _run(["parse", str(f)]) == 0
        assert "Parsed 2/2" in capsys.readouterr().out


class TestFormats:
    def test_lists_formats_and_example(self, capsys):
        assert _run(["formats"]) == 0
        out = capsys.readouterr().out
        assert "9/8/2025 0:57:11" in out
        assert "1,234,567.89" in out
        assert "3/10/2022 16:45:00\t1,234.567\tADA" in out
