"""Tests for finlit.core.utils.logging."""

import os

import pytest
from loguru import logger

from finlit.core.exceptions import ConfigurationError
from finlit.core.utils.logging import ENGINE_MODULE, level_filter, normalize_level, setup_logging
from finlit.financial.primitives import parse_amount


class TestSetupLogging:
    def test_file_sink_receives_messages(self, tmp_dir):
        log_file = os.path.join(tmp_dir, "finlit.log")
        setup_logging(level="info", log_file=log_file)
        logger.info("simulation started")
        logger.debug("hidden detail")
        logger.remove()

        with open(log_file) as f:
            content = f.read()
        assert "simulation started" in content
        assert "hidden detail" not in content

    def test_stderr_only(self, capsys):
        setup_logging(level="WARNING")
        logger.warning("watch out")
        logger.remove()
        assert "watch out" in capsys.readouterr().err

    def test_engine_level_quiets_calculator_trail(self, tmp_dir):
        log_file = os.path.join(tmp_dir, "finlit.log")
        setup_logging(level="DEBUG", log_file=log_file, engine_level="WARNING")
        parse_amount("not a number")
        logger.debug("cli detail")
        logger.remove()

        with open(log_file) as f:
            content = f.read()
        assert "cli detail" in content
        assert "Unparseable amount" not in content

    def test_engine_level_can_be_louder(self, tmp_dir):
        log_file = os.path.join(tmp_dir, "finlit.log")
        setup_logging(level="WARNING", log_file=log_file, engine_level="debug")
        parse_amount("not a number")
        logger.info("cli detail")
        logger.remove()

        with open(log_file) as f:
            content = f.read()
        assert "Unparseable amount" in content
        assert "cli detail" not in content

    def test_unknown_level(self):
        with pytest.raises(ConfigurationError, match="Unknown log level"):
            setup_logging(level="chatty")


class TestLevelFilter:
    def test_default_only(self):
        assert level_filter("info") == {"": "INFO"}

    def test_engine_override(self):
        assert level_filter("warning", " debug ") == {"": "WARNING", ENGINE_MODULE: "DEBUG"}

    def test_normalize(self):
        assert normalize_level("Success") == "SUCCESS"
