"""finlit paycheck: break one paycheck into taxes and deductions."""

from __future__ import annotations

import click

from finlit.core.cli.common import echo_field


@click.command()
@click.argument("gross_pay")
@click.option("--status", "filing_status", default="single", show_default=True, help="Filing status.")
@click.option("--state", "state_code", default="", help="Two-letter state code.")
@click.option("--health", "health_insurance", default="0", help="Pre-tax health premium per period.")
@click.option("--401k", "retirement_percent", default="0", help="401k contribution, percent of gross.")
@click.option("--extra-withholding", default="0", help="Extra federal withholding per period.")
@click.option("--periods", default=12, show_default=True, help="Pay periods per year.")
@click.pass_obj
def paycheck(engine, gross_pay, filing_status, state_code, health_insurance, retirement_percent, extra_withholding, periods):
    """Show deductions and net pay for GROSS_PAY."""
    from finlit.financial.calculators.tax import PaycheckInputs, calculate_paycheck

    inputs = PaycheckInputs(
        gross_pay=gross_pay,
        filing_status=filing_status,
        state_code=state_code,
        health_insurance=health_insurance,
        retirement_percent=retirement_percent,
        additional_withholding=extra_withholding,
        pay_periods_per_year=periods,
    )
    result = calculate_paycheck(inputs, wage_base=engine.tax.social_security_wage_base)

    echo_field("Gross pay", result.gross_pay)
    for name, amount in result.deduction_lines().items():
        echo_field(name.replace("_", " ").capitalize(), amount)
    echo_field("Net pay", result.net_pay)
    echo_field("Take-home", result.take_home_percent, "%")
    echo_field("Effective tax rate", result.effective_tax_rate, "%")
    echo_field("Deduction used", result.deduction_method)
