"""finlit simulate: Monte Carlo portfolio projection."""

from __future__ import annotations

import random

import click

from finlit.core.cli.common import echo_field, echo_insights
from finlit.core.exceptions import InvalidInputError


@click.command()
@click.option("--initial", "initial_amount", default="100000", show_default=True)
@click.option("--monthly", "monthly_contribution", default="1000", show_default=True)
@click.option("--years", "time_horizon", default=30, show_default=True)
@click.option("--stocks", "stock_percent", default="80", show_default=True, help="Stock allocation percent.")
@click.option("--bonds", "bond_percent", default="20", show_default=True, help="Bond allocation percent.")
@click.option("--withdrawal-rate", default="4", show_default=True)
@click.option("--trials", type=int, default=None, help="Overrides monte_carlo.trials from config.")
@click.option("--seed", type=int, default=None, help="Seed for a reproducible run.")
@click.pass_obj
def simulate(engine, initial_amount, monthly_contribution, time_horizon, stock_percent, bond_percent, withdrawal_rate, trials, seed):
    """Project portfolio outcomes across many randomized trials."""
    from finlit.financial.calculators.monte_carlo import run_simulation

    overrides = {
        "initial_amount": initial_amount,
        "monthly_contribution": monthly_contribution,
        "time_horizon": time_horizon,
        "stock_percent": stock_percent,
        "bond_percent": bond_percent,
        "withdrawal_rate": withdrawal_rate,
    }
    if trials is not None:
        overrides["trials"] = trials
    params = engine.simulation_parameters(**overrides)
    rng = random.Random(seed).random if seed is not None else None

    try:
        result = run_simulation(params, rng)
    except InvalidInputError as e:
        for name, message in e.errors.items():
            click.echo(f"{name}: {message}", err=True)
        raise click.ClickException("Invalid simulation parameters") from e

    final = result.final
    echo_field("Trials", str(result.trials))
    echo_field("Success rate", result.success_rate, "%")
    echo_field("Final value (10th pct)", final.p10)
    echo_field("Final value (median)", final.p50)
    echo_field("Final value (90th pct)", final.p90)
    click.echo(result.success_message)
    echo_insights(result.warnings)
