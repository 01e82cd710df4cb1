"""finlit option: price an option strategy and show its risk profile."""

from __future__ import annotations

import click

from finlit.core.cli.common import echo_field
from finlit.core.exceptions import InvalidInputError

STRATEGIES = ("long_call", "long_put", "short_call", "short_put", "bull_call", "bear_call", "bull_put", "bear_put")


@click.command()
@click.argument("strategy", type=click.Choice(STRATEGIES))
@click.option("--spot", required=True, help="Underlying price.")
@click.option("--strike", required=True, help="Strike (lower strike for spreads).")
@click.option("--upper-strike", default=None, help="Upper strike for spreads.")
@click.option("--premium", default=None, help="Premium per share; defaults to the theoretical price.")
@click.option("--days", default="30", show_default=True, help="Days to expiration.")
@click.option("--vol", default="25", show_default=True, help="Implied volatility, percent.")
@click.option("--rate", default="5", show_default=True, help="Risk-free rate, percent.")
@click.option("--dividend", default="0", show_default=True, help="Dividend yield, percent.")
@click.option("--contracts", default=1, show_default=True)
def option(strategy, spot, strike, upper_strike, premium, days, vol, rate, dividend, contracts):
    """Analyze STRATEGY at expiration and today."""
    from finlit.financial.calculators import options

    market = options.MarketParameters(
        spot=spot,
        days_to_expiration=days,
        volatility_pct=vol,
        risk_free_rate_pct=rate,
        dividend_yield_pct=dividend,
        contracts=contracts,
    )
    try:
        if strategy in ("long_call", "long_put", "short_call", "short_put"):
            built = getattr(options, strategy)(market, strike, premium)
        else:
            if upper_strike is None:
                raise click.UsageError("Spreads need --upper-strike")
            built = getattr(options, f"{strategy}_spread")(market, strike, upper_strike)
    except InvalidInputError as e:
        raise click.ClickException(str(e)) from e

    analysis = options.analyze_strategy(built)
    echo_field("Strategy", built.type.value)
    echo_field("Net premium (per share)", analysis.net_premium)
    echo_field("Max profit", analysis.max_profit)
    echo_field("Max loss", analysis.max_loss)
    echo_field("Break-even", ", ".join(f"{be:.2f}" for be in analysis.break_evens) or "none")
    echo_field("Probability of profit", analysis.probability_of_profit, "%")
    echo_field("Expected value", analysis.expected_value, missing="n/a")
    echo_field("Delta", analysis.greeks.delta)
    echo_field("Theta (per day)", analysis.greeks.theta)
    echo_field("Vega (per 1%)", analysis.greeks.vega)
