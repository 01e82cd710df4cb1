"""Compound growth engine: annuity future value, amortization and friends.

Single home for the time-value-of-money formulas. Mortgage, retirement,
debt and compound-interest calculators all call into this module instead
of carrying their own copy of the annuity math.

Degenerate inputs (zero rate, zero or negative time, rates at or below
-100%) have explicit special cases and return a finite number; nothing here
raises for bad numbers.

Rates are monthly decimals for the core routines (``0.005`` for 6%/yr) and
annual percents for the calculator-level helpers (``6.0``).
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from finlit.financial.primitives import finite_or, parse_amount

IRR_MAX_ITERATIONS = 100
IRR_TOLERANCE = 1e-6
MAX_HORIZON_YEARS = 100  # longest schedule the tabular helpers will build


def _growth_factor(rate: float, periods: float) -> float:
    """``(1 + rate) ** periods``, with overflow mapped to infinity."""
    try:
        return (1.0 + rate) ** periods
    except OverflowError:
        return math.inf


def future_value_annuity(
    principal: float,
    monthly_rate: float,
    total_months: float,
    monthly_contribution: float = 0.0,
) -> float:
    """Future value of a lump sum plus an ordinary monthly annuity.

    ``principal*(1+r)^n + contribution*((1+r)^n - 1)/r``, degrading to
    ``principal + contribution*n`` when ``r == 0``.

    Returns:
        The balance after ``total_months``; ``principal`` when the horizon
        is not positive, 0 when the rate wipes out the balance (``r <= -1``)
        or the result overflows.
    """
    p = parse_amount(principal)
    r = parse_amount(monthly_rate)
    n = parse_amount(total_months)
    c = parse_amount(monthly_contribution)

    if n <= 0:
        return p
    if r <= -1:
        return 0.0
    if r == 0:
        return p + c * n

    growth = _growth_factor(r, n)
    return finite_or(p * growth + c * (growth - 1) / r)


def amortized_payment(loan_amount: float, monthly_rate: float, total_payments: float) -> float:
    """Level payment that retires ``loan_amount`` over ``total_payments`` periods.

    Ordinary annuity (payments at period end). Zero rate divides the loan
    evenly; a non-positive loan or term owes nothing.
    """
    loan = parse_amount(loan_amount)
    r = parse_amount(monthly_rate)
    n = parse_amount(total_payments)

    if loan <= 0 or n <= 0:
        return 0.0
    if r == 0 or r <= -1:
        return loan / n

    growth = _growth_factor(r, n)
    if math.isinf(growth):
        # Interest-only in the limit
        return loan * r
    return finite_or(loan * r * growth / (growth - 1))


def years_to_double(annual_rate_pct: float) -> float:
    """Rule-of-72 doubling time; 0 for non-positive rates (never doubles)."""
    rate = parse_amount(annual_rate_pct)
    if rate <= 0:
        return 0.0
    return 72.0 / rate


def present_value(
    future_value: float,
    annual_rate_pct: float,
    years: float,
    periods_per_year: int = 12,
) -> float:
    """Amount needed today to grow into ``future_value``."""
    fv = parse_amount(future_value)
    periods = max(1, int(parse_amount(periods_per_year, 12)))
    rate = parse_amount(annual_rate_pct) / 100 / periods
    n = max(0.0, parse_amount(years)) * periods
    if rate <= -1:
        return 0.0
    growth = _growth_factor(rate, n)
    if growth == 0:
        return 0.0
    return finite_or(fv / growth)


def required_monthly_savings(
    goal: float,
    annual_rate_pct: float,
    years: float,
    current_savings: float = 0.0,
) -> float:
    """Monthly deposit that closes the gap between projected savings and ``goal``.

    Returns 0 when current savings already get there, or when there is no
    time left to save.
    """
    target = parse_amount(goal)
    r = parse_amount(annual_rate_pct) / 100 / 12
    n = max(0.0, parse_amount(years)) * 12

    remaining = target - future_value_annuity(current_savings, r, n)
    if remaining <= 0 or n <= 0:
        return 0.0
    if r == 0 or r <= -1:
        return remaining / n
    growth = _growth_factor(r, n)
    return finite_or(remaining * r / (growth - 1))


def internal_rate_of_return(cashflows: Sequence[float], guess_pct: float = 10.0) -> float | None:
    """Periodic IRR in percent by Newton-Raphson.

    Args:
        cashflows: Per-period flows, investments negative, returns positive.
        guess_pct: Starting rate in percent.

    Returns:
        The rate in percent, or ``None`` when the iteration does not converge.
    """
    flows = [parse_amount(cf) for cf in cashflows]
    if len(flows) < 2:
        return None

    rate = parse_amount(guess_pct, 10.0) / 100
    for _ in range(IRR_MAX_ITERATIONS):
        if rate <= -1:
            break
        npv = flows[0]
        d_npv = 0.0
        for t, cf in enumerate(flows[1:], start=1):
            discount = _growth_factor(rate, t)
            npv += cf / discount
            d_npv -= t * cf / (discount * (1 + rate))
        if d_npv == 0 or not math.isfinite(npv) or not math.isfinite(d_npv):
            break
        new_rate = rate - npv / d_npv
        if abs(new_rate - rate) < IRR_TOLERANCE:
            return new_rate * 100
        rate = new_rate

    logger.debug(f"IRR did not converge for {len(flows)} cashflows")
    return None


# =============================================================================
# CALCULATORS
# =============================================================================


@dataclass
class YearBalance:
    year: int
    balance: float
    contributions: float
    interest: float


@dataclass
class CompoundInterestResult:
    final_amount: float
    total_contributions: float
    total_interest: float
    years_to_double: float
    yearly: list[YearBalance] = field(default_factory=list)


def _horizon_years(raw: object) -> float:
    years = max(0.0, parse_amount(raw))
    if years > MAX_HORIZON_YEARS:
        logger.debug(f"Horizon of {years} years capped at {MAX_HORIZON_YEARS}")
        return float(MAX_HORIZON_YEARS)
    return years


def compound_interest(
    principal: float,
    annual_rate_pct: float,
    years: float,
    monthly_contribution: float = 0.0,
) -> CompoundInterestResult:
    """Monthly-compounded growth of a deposit plus monthly contributions.

    ``years`` is capped at ``MAX_HORIZON_YEARS``.
    """
    p = max(0.0, parse_amount(principal))
    rate = parse_amount(annual_rate_pct)
    horizon = _horizon_years(years)
    contribution = max(0.0, parse_amount(monthly_contribution))
    monthly_rate = rate / 100 / 12

    yearly = []
    for year in range(1, int(horizon) + 1):
        balance = future_value_annuity(p, monthly_rate, year * 12, contribution)
        contributed = p + contribution * 12 * year
        yearly.append(YearBalance(year, balance, contributed, balance - contributed))

    final = future_value_annuity(p, monthly_rate, horizon * 12, contribution)
    total_contributions = p + contribution * 12 * horizon
    return CompoundInterestResult(
        final_amount=final,
        total_contributions=total_contributions,
        total_interest=final - total_contributions,
        years_to_double=years_to_double(rate),
        yearly=yearly,
    )


@dataclass
class AmortizationRow:
    month: int
    payment: float
    principal: float
    interest: float
    balance: float
    total_interest: float


def amortization_schedule(principal: float, annual_rate_pct: float, years: float) -> list[AmortizationRow]:
    """Month-by-month split of a level payment into interest and principal.

    Terms longer than ``MAX_HORIZON_YEARS`` are cut to that many years.
    """
    loan = max(0.0, parse_amount(principal))
    monthly_rate = parse_amount(annual_rate_pct) / 100 / 12
    months = int(_horizon_years(years) * 12)
    payment = amortized_payment(loan, monthly_rate, months)

    rows = []
    balance = loan
    total_interest = 0.0
    for month in range(1, months + 1):
        interest = balance * monthly_rate
        principal_paid = payment - interest
        total_interest += interest
        balance -= principal_paid
        if abs(balance) < 1e-6:
            # Rounding drift on the last payment
            balance = 0.0
        rows.append(AmortizationRow(month, payment, principal_paid, interest, balance, total_interest))
    return rows
