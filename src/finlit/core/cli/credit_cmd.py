"""finlit credit: score a credit profile and plan toward a target."""

from __future__ import annotations

import click

from finlit.core.cli.common import echo_field, echo_insights


@click.command()
@click.option("--payment-history", default="85", show_default=True, help="Percent of on-time payments.")
@click.option("--utilization", default="30", show_default=True, help="Percent of revolving credit used.")
@click.option("--age", default="5", show_default=True, help="Average account age in years.")
@click.option("--mix", default="3", show_default=True, help="Credit mix, 0-5.")
@click.option("--inquiries", default="2", show_default=True, help="Recent hard inquiries.")
@click.option("--target-payment-history", default="100", show_default=True)
@click.option("--target-utilization", default="10", show_default=True)
@click.option("--target-age", default="8", show_default=True)
@click.option("--target-mix", default="4", show_default=True)
@click.option("--target-inquiries", default="1", show_default=True)
def credit(
    payment_history,
    utilization,
    age,
    mix,
    inquiries,
    target_payment_history,
    target_utilization,
    target_age,
    target_mix,
    target_inquiries,
):
    """Compare a current credit profile with a target one."""
    from finlit.financial.calculators.credit import analyze_credit
    from finlit.financial.models import CreditProfile

    current = CreditProfile(payment_history, utilization, age, mix, inquiries)
    target = CreditProfile(target_payment_history, target_utilization, target_age, target_mix, target_inquiries)
    analysis = analyze_credit(current, target)

    echo_field("Current score", f"{analysis.current_score} ({analysis.current_grade.value})")
    echo_field("Target score", f"{analysis.target_score} ({analysis.target_grade.value})")
    echo_field("Time to target", analysis.time_to_target)
    click.echo("Factors by impact:")
    for factor in analysis.factors:
        click.echo(f"  {factor.factor.value:<22}{factor.impact:+7.1f} pts  [{factor.priority.value}]")
    echo_insights(analysis.insights)
