"""finlit CLI: run the calculators from a terminal."""

import click

from finlit import __version__
from finlit.core.cli.common import configure


@click.group()
@click.version_option(version=__version__, package_name="finlit")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), help="YAML or JSON config file.")
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR (overrides config).")
@click.pass_context
def main(ctx: click.Context, config_file: str | None, log_level: str | None) -> None:
    """finlit: financial calculation engine."""
    ctx.obj = configure(config_file, log_level)


# Register subcommands
from .credit_cmd import credit
from .option_cmd import option
from .paycheck_cmd import paycheck
from .simulate_cmd import simulate

main.add_command(paycheck)
main.add_command(simulate)
main.add_command(option)
main.add_command(credit)
