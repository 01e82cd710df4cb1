"""Mortgage calculator.

Computes the monthly housing payment for a purchase:
- Principal and interest via the shared amortized-payment formula
- Property tax and insurance escrow
- PMI while the down payment is under 20%

Also projects payoff with an extra monthly principal payment.
"""

from dataclasses import dataclass

from finlit.financial.primitives import parse_amount, safe_divide

from .growth import amortized_payment

PMI_EQUITY_THRESHOLD = 0.20  # PMI applies below 20% down
MAX_TERM_MONTHS = 600


@dataclass
class MortgageInputs:
    """Purchase and loan terms.

    Escrow items (property tax, insurance, PMI) are monthly amounts.
    """

    home_price: float
    down_payment: float
    interest_rate: float  # Annual percent (e.g., 6.5)
    loan_term_years: int = 30
    property_tax: float = 0.0
    insurance: float = 0.0
    pmi: float = 0.0

    def __post_init__(self):
        self.home_price = max(0.0, parse_amount(self.home_price))
        self.down_payment = min(self.home_price, max(0.0, parse_amount(self.down_payment)))
        self.interest_rate = max(0.0, parse_amount(self.interest_rate))
        self.loan_term_years = max(0, int(parse_amount(self.loan_term_years)))
        self.property_tax = max(0.0, parse_amount(self.property_tax))
        self.insurance = max(0.0, parse_amount(self.insurance))
        self.pmi = max(0.0, parse_amount(self.pmi))


@dataclass
class MortgageResult:
    """Monthly payment breakdown and lifetime totals."""

    loan_amount: float
    principal_and_interest: float
    monthly_payment: float  # P&I + escrow + PMI
    pmi_applied: bool
    total_interest: float
    total_cost: float  # Home price + interest
    down_payment_percent: float


def calculate_monthly_payment(principal: float, annual_rate: float, years: int) -> float:
    """Calculate monthly payment for amortizing loan.

    Args:
        principal: Loan amount
        annual_rate: Annual interest rate (e.g., 0.07 for 7%)
        years: Loan term in years

    Returns:
        Monthly payment amount; a zero rate divides the principal evenly.
    """
    return amortized_payment(principal, parse_amount(annual_rate) / 12, parse_amount(years) * 12)


def calculate_mortgage(inputs: MortgageInputs) -> MortgageResult:
    """Calculate the full monthly payment for a home purchase.

    Args:
        inputs: Purchase and loan terms

    Returns:
        MortgageResult with P&I, escrow-inclusive payment and totals
    """
    loan = inputs.home_price - inputs.down_payment
    payments = inputs.loan_term_years * 12
    p_and_i = calculate_monthly_payment(loan, inputs.interest_rate / 100, inputs.loan_term_years)

    pmi_applied = loan > 0 and inputs.down_payment < inputs.home_price * PMI_EQUITY_THRESHOLD
    monthly = p_and_i + inputs.property_tax + inputs.insurance + (inputs.pmi if pmi_applied else 0.0)

    total_interest = max(0.0, p_and_i * payments - loan)
    return MortgageResult(
        loan_amount=loan,
        principal_and_interest=p_and_i,
        monthly_payment=monthly,
        pmi_applied=pmi_applied,
        total_interest=total_interest,
        total_cost=inputs.home_price + total_interest,
        down_payment_percent=safe_divide(inputs.down_payment, inputs.home_price) * 100,
    )


@dataclass
class PrepayProjection:
    """Payoff with and without an extra monthly principal payment."""

    months_to_payoff: int
    baseline_months: int
    total_interest: float
    baseline_interest: float

    @property
    def months_saved(self) -> int:
        return self.baseline_months - self.months_to_payoff

    @property
    def interest_saved(self) -> float:
        return self.baseline_interest - self.total_interest


def _payoff(balance: float, monthly_rate: float, payment: float) -> tuple[int, float]:
    """Months and interest to retire ``balance`` at a fixed ``payment``."""
    months = 0
    total_interest = 0.0
    while balance > 0.01 and months < MAX_TERM_MONTHS:
        interest = balance * monthly_rate
        total_interest += interest
        balance = balance + interest - payment
        months += 1
    return months, total_interest


def project_prepayment(inputs: MortgageInputs, extra_monthly: float) -> PrepayProjection:
    """Project payoff when ``extra_monthly`` goes to principal every month.

    Args:
        inputs: Purchase and loan terms
        extra_monthly: Extra principal payment each month

    Returns:
        PrepayProjection comparing against the scheduled payoff
    """
    result = calculate_mortgage(inputs)
    monthly_rate = inputs.interest_rate / 100 / 12
    extra = max(0.0, parse_amount(extra_monthly))

    baseline_months, baseline_interest = _payoff(result.loan_amount, monthly_rate, result.principal_and_interest)
    months, interest = _payoff(result.loan_amount, monthly_rate, result.principal_and_interest + extra)
    return PrepayProjection(
        months_to_payoff=months,
        baseline_months=baseline_months,
        total_interest=interest,
        baseline_interest=baseline_interest,
    )
