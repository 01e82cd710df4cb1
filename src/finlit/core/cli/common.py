"""Shared setup and output helpers for CLI commands."""

from __future__ import annotations

import click

from finlit.core.config import Config
from finlit.core.config_schema import EngineConfig
from finlit.core.exceptions import ConfigurationError
from finlit.core.utils.logging import setup_logging
from finlit.financial.models import Insight, InsightLevel


def configure(config_file: str | None, log_level: str | None) -> EngineConfig:
    """Load and validate config, then install log sinks."""
    try:
        engine = Config(config_file=config_file).validated()
        setup_logging(
            level=log_level or engine.logging.level,
            log_file=engine.logging.file,
            engine_level=engine.logging.engine_level,
        )
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    return engine


def echo_field(label: str, value: float | str | None, suffix: str = "", missing: str = "unlimited") -> None:
    if value is None:
        text = missing
    elif isinstance(value, float):
        text = f"{value:,.2f}{suffix}"
    else:
        text = f"{value}{suffix}"
    click.echo(f"{label:<28}{text}")


_MARKERS = {
    InsightLevel.SUCCESS: "+",
    InsightLevel.INFO: "-",
    InsightLevel.WARNING: "!",
}


def echo_insights(insights: list[Insight]) -> None:
    for insight in insights:
        click.echo(f"  {_MARKERS[insight.level]} {insight.message}")
