"""Tests for the CLI entry point."""

import os

import pytest
from click.testing import CliRunner
from loguru import logger

from finlit.core.cli import main


@pytest.fixture(autouse=True)
def _drop_log_sinks():
    yield
    # Sinks added during invoke point at the runner's captured streams
    logger.remove()


class TestCliGroup:
    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "financial calculation engine" in result.output
        for command in ("paycheck", "simulate", "option", "credit"):
            assert command in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_bad_config_file(self, tmp_dir):
        path = os.path.join(tmp_dir, "broken.yaml")
        with open(path, "w") as f:
            f.write("monte_carlo: [unclosed\n")
        runner = CliRunner()
        result = runner.invoke(main, ["--config", path, "credit"])
        assert result.exit_code != 0

    def test_missing_config_file(self, tmp_dir):
        runner = CliRunner()
        result = runner.invoke(main, ["--config", os.path.join(tmp_dir, "nope.yaml"), "credit"])
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_bad_log_level(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--log-level", "chatty", "credit"])
        assert result.exit_code == 1
        assert "Unknown log level" in result.output


class TestPaycheckCommand:
    def test_breakdown(self):
        runner = CliRunner()
        result = runner.invoke(main, ["paycheck", "5000", "--state", "CA", "--401k", "6"])
        assert result.exit_code == 0
        assert "Gross pay" in result.output
        assert "5,000.00" in result.output
        assert "Net pay" in result.output

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(main, ["paycheck", "--help"])
        assert result.exit_code == 0
        assert "GROSS_PAY" in result.output


class TestSimulateCommand:
    def test_seeded_run(self, tmp_config_file):
        runner = CliRunner()
        args = ["--config", tmp_config_file, "simulate", "--years", "5", "--seed", "7"]
        first = runner.invoke(main, args)
        second = runner.invoke(main, args)
        assert first.exit_code == 0
        assert "Success rate" in first.output
        assert "200" in first.output  # trials from config
        median = [line for line in first.output.splitlines() if line.startswith("Final value (median)")]
        assert median == [line for line in second.output.splitlines() if line.startswith("Final value (median)")]

    def test_trials_override(self):
        runner = CliRunner()
        result = runner.invoke(main, ["simulate", "--trials", "50", "--years", "3", "--seed", "1"])
        assert result.exit_code == 0
        assert "50" in result.output

    def test_invalid_parameters(self):
        runner = CliRunner()
        result = runner.invoke(main, ["simulate", "--stocks", "150", "--trials", "10"])
        assert result.exit_code == 1
        assert "stock_percent" in result.output


class TestOptionCommand:
    def test_long_call(self):
        runner = CliRunner()
        result = runner.invoke(main, ["option", "long_call", "--spot", "100", "--strike", "100", "--premium", "5"])
        assert result.exit_code == 0
        assert "long_call" in result.output
        assert "unlimited" in result.output
        assert "500.00" in result.output

    def test_spread(self):
        runner = CliRunner()
        args = ["option", "bull_call", "--spot", "100", "--strike", "95", "--upper-strike", "105"]
        result = runner.invoke(main, args)
        assert result.exit_code == 0
        assert "bull_call_spread" in result.output
        assert "Break-even" in result.output

    def test_spread_needs_upper_strike(self):
        runner = CliRunner()
        result = runner.invoke(main, ["option", "bear_put", "--spot", "100", "--strike", "95"])
        assert result.exit_code == 2
        assert "--upper-strike" in result.output

    def test_unknown_strategy(self):
        runner = CliRunner()
        result = runner.invoke(main, ["option", "straddle", "--spot", "100", "--strike", "100"])
        assert result.exit_code == 2


class TestCreditCommand:
    def test_defaults(self):
        runner = CliRunner()
        result = runner.invoke(main, ["credit"])
        assert result.exit_code == 0
        assert "697 (Good)" in result.output
        assert "Factors by impact:" in result.output
        assert "Credit Utilization" in result.output

    def test_custom_profile(self):
        runner = CliRunner()
        result = runner.invoke(
            main,
            ["credit", "--payment-history", "100", "--utilization", "0", "--age", "10", "--mix", "5", "--inquiries", "0"],
        )
        assert result.exit_code == 0
        assert "850 (Exceptional)" in result.output
