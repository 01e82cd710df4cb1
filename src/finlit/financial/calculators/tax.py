"""Tax engine: progressive brackets, payroll taxes and paycheck composition.

Every amount is coerced through ``parse_amount`` on the way in, so the
functions here return a number for any input. Rates in the tables are
illustrative constants from ``tax_tables``, not filing-grade law.

Two calculators sit on top of the primitives:

- ``calculate_paycheck``: one pay period, itemised deduction lines and net pay.
- ``calculate_income_tax``: one tax year, bracket breakdown and insights.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from finlit.financial.models import Insight, InsightLevel
from finlit.financial.primitives import finite_or, parse_amount, safe_divide

from .tax_tables import (
    FEDERAL_BRACKETS_2025,
    HSA_LIMIT_2025_FAMILY,
    HSA_LIMIT_2025_SELF,
    IRA_LIMIT_2025,
    MEDICARE_RATE,
    RETIREMENT_401K_LIMIT_2025,
    SELF_EMPLOYMENT_TAX_RATE,
    SOCIAL_SECURITY_RATE,
    SOCIAL_SECURITY_WAGE_BASE_2025,
    STANDARD_DEDUCTION_2025,
    STATE_DISABILITY_RATES,
    STATE_TAX_RATES,
    FilingStatus,
    TaxBracket,
)

_STATUS_ALIASES = {
    "married": FilingStatus.MARRIED_FILING_JOINTLY,
    "mfj": FilingStatus.MARRIED_FILING_JOINTLY,
    "mfs": FilingStatus.MARRIED_FILING_SEPARATELY,
    "hoh": FilingStatus.HEAD_OF_HOUSEHOLD,
    "headofhousehold": FilingStatus.HEAD_OF_HOUSEHOLD,
}


def parse_filing_status(raw: object) -> FilingStatus:
    """Map a status name (or enum) to ``FilingStatus``; unknown values mean SINGLE."""
    if isinstance(raw, FilingStatus):
        return raw
    text = str(raw or "").strip().lower()
    try:
        return FilingStatus(text)
    except ValueError:
        pass
    status = _STATUS_ALIASES.get(text.replace("_", "").replace(" ", ""))
    if status is None:
        logger.debug(f"Unknown filing status {raw!r}, using single")
        return FilingStatus.SINGLE
    return status


def brackets_for(status: FilingStatus | str) -> list[TaxBracket]:
    return FEDERAL_BRACKETS_2025[parse_filing_status(status)]


# =============================================================================
# BRACKET INTEGRATION
# =============================================================================


@dataclass
class BracketTax:
    """Tax owed inside one bracket."""

    min: float
    max: float
    rate: float
    taxable: float
    tax: float


def bracket_breakdown(annual_taxable_income: float, brackets: Sequence[TaxBracket]) -> list[BracketTax]:
    """Slice income across ``brackets`` in ascending order.

    Every bracket appears in the result; slices above the income carry 0.
    """
    remaining = max(0.0, parse_amount(annual_taxable_income))
    rows = []
    for bracket in brackets:
        taxable = min(remaining, bracket.width) if remaining > 0 else 0.0
        rows.append(BracketTax(bracket.min, bracket.max, bracket.rate, taxable, taxable * bracket.rate))
        remaining -= taxable
    return rows


def federal_tax(annual_taxable_income: float, brackets: Sequence[TaxBracket] | None = None) -> float:
    """Progressive tax on annual taxable income.

    Income above the top bracket's floor is taxed at the top rate without
    limit; zero or negative income owes nothing.

    Args:
        annual_taxable_income: Income after deductions.
        brackets: Ascending, contiguous brackets. Defaults to 2025 single.
    """
    if brackets is None:
        brackets = FEDERAL_BRACKETS_2025[FilingStatus.SINGLE]
    remaining = max(0.0, parse_amount(annual_taxable_income))
    tax = 0.0
    for bracket in brackets:
        if remaining <= 0:
            break
        taxable = min(remaining, bracket.width)
        tax += taxable * bracket.rate
        remaining -= taxable
    return tax


def marginal_rate(taxable_income: float, brackets: Sequence[TaxBracket] | None = None) -> float:
    """Rate of the first bracket whose ``[min, max]`` contains the income."""
    if brackets is None:
        brackets = FEDERAL_BRACKETS_2025[FilingStatus.SINGLE]
    income = max(0.0, parse_amount(taxable_income))
    for bracket in brackets:
        if bracket.min <= income <= bracket.max:
            return bracket.rate
    return brackets[-1].rate


# =============================================================================
# PAYROLL AND STATE
# =============================================================================


@dataclass
class PayrollTaxes:
    social_security: float
    medicare: float
    disability: float

    @property
    def total(self) -> float:
        return self.social_security + self.medicare + self.disability


def payroll_taxes(
    gross_period_pay: float,
    annual_wage_base_cap: float = SOCIAL_SECURITY_WAGE_BASE_2025,
    state_code: str | None = None,
    pay_periods_per_year: int = 12,
) -> PayrollTaxes:
    """FICA and state disability for one pay period.

    Social Security for the period never exceeds the wage base pro-rated
    over ``pay_periods_per_year``. Medicare has no cap. Disability applies
    only in states listed in ``STATE_DISABILITY_RATES``.
    """
    gross = max(0.0, parse_amount(gross_period_pay))
    cap = max(0.0, parse_amount(annual_wage_base_cap, SOCIAL_SECURITY_WAGE_BASE_2025))
    periods = max(1, int(parse_amount(pay_periods_per_year, 12)))

    social_security = min(gross * SOCIAL_SECURITY_RATE, (cap / periods) * SOCIAL_SECURITY_RATE)
    medicare = gross * MEDICARE_RATE
    disability_rate = STATE_DISABILITY_RATES.get(_normalize_state(state_code), 0.0)
    return PayrollTaxes(social_security, medicare, gross * disability_rate)


def _normalize_state(state_code: object) -> str:
    return str(state_code or "").strip().upper()


def state_tax_rate(state_code: str | None) -> float:
    """Flat rate for ``state_code``; unknown codes are taxed at 0."""
    code = _normalize_state(state_code)
    if code not in STATE_TAX_RATES:
        logger.debug(f"No state tax rate for {state_code!r}, using 0")
    return STATE_TAX_RATES.get(code, 0.0)


def state_tax(taxable_income: float, state_code: str | None) -> float:
    return max(0.0, parse_amount(taxable_income)) * state_tax_rate(state_code)


def effective_rate(total_tax: float, gross_income: float) -> float:
    """Total tax as a percent of gross income (0 when income is 0)."""
    return safe_divide(parse_amount(total_tax), parse_amount(gross_income)) * 100


def take_home_percent(net_pay: float, gross_pay: float) -> float:
    return safe_divide(parse_amount(net_pay), parse_amount(gross_pay)) * 100


@dataclass
class DeductionChoice:
    amount: float
    method: str  # "standard" or "itemized"
    standard: float
    itemized: float


def select_deduction(status: FilingStatus | str, itemized: float = 0.0) -> DeductionChoice:
    """Take the larger of the standard deduction and itemized deductions."""
    standard = float(STANDARD_DEDUCTION_2025[parse_filing_status(status)])
    itemized_amount = max(0.0, parse_amount(itemized))
    if itemized_amount > standard:
        return DeductionChoice(itemized_amount, "itemized", standard, itemized_amount)
    return DeductionChoice(standard, "standard", standard, itemized_amount)


# =============================================================================
# PAYCHECK
# =============================================================================


@dataclass(frozen=True)
class PaycheckInputs:
    """One paycheck's inputs. Raw strings are accepted and coerced.

    Attributes:
        gross_pay: Pay for one period.
        filing_status: ``FilingStatus`` or its name.
        state_code: Two-letter state code.
        health_insurance: Pre-tax (section 125) premium per period.
        retirement_percent: 401k contribution as a percent of gross.
        additional_withholding: Flat extra federal withholding per period.
        pay_periods_per_year: 12 for monthly, 26 for biweekly, and so on.
        itemized_deductions: Annual itemized deductions.
    """

    gross_pay: float
    filing_status: FilingStatus = FilingStatus.SINGLE
    state_code: str = ""
    health_insurance: float = 0.0
    retirement_percent: float = 0.0
    additional_withholding: float = 0.0
    pay_periods_per_year: int = 12
    itemized_deductions: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "gross_pay", max(0.0, parse_amount(self.gross_pay)))
        object.__setattr__(self, "filing_status", parse_filing_status(self.filing_status))
        object.__setattr__(self, "state_code", _normalize_state(self.state_code))
        object.__setattr__(self, "health_insurance", max(0.0, parse_amount(self.health_insurance)))
        object.__setattr__(
            self, "retirement_percent", min(100.0, max(0.0, parse_amount(self.retirement_percent)))
        )
        object.__setattr__(self, "additional_withholding", max(0.0, parse_amount(self.additional_withholding)))
        object.__setattr__(self, "pay_periods_per_year", max(1, int(parse_amount(self.pay_periods_per_year, 12))))
        object.__setattr__(self, "itemized_deductions", max(0.0, parse_amount(self.itemized_deductions)))


@dataclass
class PaycheckResult:
    gross_pay: float
    federal_tax: float
    state_tax: float
    social_security: float
    medicare: float
    disability: float
    health_insurance: float
    retirement: float
    additional_withholding: float
    net_pay: float
    annual_taxable_income: float = 0.0
    deduction_method: str = "standard"
    marginal_rate: float = 0.0

    def deduction_lines(self) -> dict[str, float]:
        return {
            "federal_tax": self.federal_tax,
            "state_tax": self.state_tax,
            "social_security": self.social_security,
            "medicare": self.medicare,
            "disability": self.disability,
            "health_insurance": self.health_insurance,
            "retirement": self.retirement,
            "additional_withholding": self.additional_withholding,
        }

    @property
    def total_deductions(self) -> float:
        return sum(self.deduction_lines().values())

    @property
    def total_taxes(self) -> float:
        return self.federal_tax + self.state_tax + self.social_security + self.medicare + self.disability

    @property
    def effective_tax_rate(self) -> float:
        return effective_rate(self.total_taxes, self.gross_pay)

    @property
    def take_home_percent(self) -> float:
        return take_home_percent(self.net_pay, self.gross_pay)


def calculate_paycheck(
    inputs: PaycheckInputs,
    wage_base: float = SOCIAL_SECURITY_WAGE_BASE_2025,
) -> PaycheckResult:
    """Compose every deduction line for one pay period.

    Health insurance comes off the top of federal, state and payroll wages;
    the 401k contribution reduces income-tax wages only. Income tax is
    computed on the annualised period amount and divided back down.
    """
    gross = inputs.gross_pay
    periods = inputs.pay_periods_per_year

    health = min(inputs.health_insurance, gross)
    payroll_wages = gross - health
    retirement = min(gross * inputs.retirement_percent / 100, payroll_wages)
    income_wages = payroll_wages - retirement

    deduction = select_deduction(inputs.filing_status, inputs.itemized_deductions)
    annual_taxable = max(0.0, income_wages * periods - deduction.amount)
    brackets = FEDERAL_BRACKETS_2025[inputs.filing_status]

    federal = federal_tax(annual_taxable, brackets) / periods
    state = state_tax(annual_taxable, inputs.state_code) / periods
    payroll = payroll_taxes(payroll_wages, wage_base, inputs.state_code, periods)

    lines = {
        "federal_tax": finite_or(federal),
        "state_tax": finite_or(state),
        "social_security": finite_or(payroll.social_security),
        "medicare": finite_or(payroll.medicare),
        "disability": finite_or(payroll.disability),
        "health_insurance": health,
        "retirement": finite_or(retirement),
        "additional_withholding": inputs.additional_withholding,
    }
    net = gross - sum(lines.values())

    return PaycheckResult(
        gross_pay=gross,
        net_pay=net,
        annual_taxable_income=annual_taxable,
        deduction_method=deduction.method,
        marginal_rate=marginal_rate(annual_taxable, brackets),
        **lines,
    )


# =============================================================================
# ANNUAL INCOME TAX
# =============================================================================


@dataclass
class IncomeTaxInputs:
    """Annual income-tax inputs. Amounts are yearly; ``state_tax_rate`` is a percent."""

    income: float
    filing_status: FilingStatus = FilingStatus.SINGLE
    dependents: int = 0
    itemized_deductions: float = 0.0
    retirement_401k: float = 0.0
    traditional_ira: float = 0.0
    roth_ira: float = 0.0
    hsa: float = 0.0
    state_tax_rate: float = 5.0
    self_employed: bool = False
    capital_gains: float = 0.0
    dividend_income: float = 0.0
    rental_income: float = 0.0
    other_income: float = 0.0

    def __post_init__(self):
        self.filing_status = parse_filing_status(self.filing_status)
        self.dependents = max(0, int(parse_amount(self.dependents)))
        self.state_tax_rate = min(100.0, max(0.0, parse_amount(self.state_tax_rate)))
        for name in (
            "income",
            "itemized_deductions",
            "retirement_401k",
            "traditional_ira",
            "roth_ira",
            "hsa",
            "capital_gains",
            "dividend_income",
            "rental_income",
            "other_income",
        ):
            setattr(self, name, max(0.0, parse_amount(getattr(self, name))))

    @property
    def total_income(self) -> float:
        return self.income + self.capital_gains + self.dividend_income + self.rental_income + self.other_income


@dataclass
class DeductionSummary:
    standard: float
    itemized: float
    retirement: float
    hsa: float
    total: float


@dataclass
class IncomeTaxResult:
    effective_tax_rate: float
    marginal_tax_rate: float
    federal_tax: float
    state_tax: float
    self_employment_tax: float
    total_tax: float
    take_home_pay: float
    taxable_income: float
    deductions: DeductionSummary
    brackets: list[BracketTax] = field(default_factory=list)
    tax_savings: float = 0.0
    insights: list[Insight] = field(default_factory=list)


def calculate_income_tax(inputs: IncomeTaxInputs) -> IncomeTaxResult:
    """Annual federal, state and self-employment tax with a bracket breakdown.

    The marginal rate reported here is the top bracket that actually collects
    tax, so zero taxable income reports 0%.
    """
    total_income = inputs.total_income
    deduction = select_deduction(inputs.filing_status, inputs.itemized_deductions)
    retirement_deduction = inputs.retirement_401k + inputs.traditional_ira
    total_deductions = deduction.amount + retirement_deduction + inputs.hsa

    taxable = max(0.0, total_income - total_deductions)
    rows = bracket_breakdown(taxable, FEDERAL_BRACKETS_2025[inputs.filing_status])
    federal = sum(row.tax for row in rows)
    state = taxable * inputs.state_tax_rate / 100
    self_employment = inputs.income * SELF_EMPLOYMENT_TAX_RATE if inputs.self_employed else 0.0

    total_tax = federal + state + self_employment
    taxed_rows = [row for row in rows if row.tax > 0]
    marginal_pct = taxed_rows[-1].rate * 100 if taxed_rows else 0.0

    return IncomeTaxResult(
        effective_tax_rate=effective_rate(total_tax, total_income),
        marginal_tax_rate=marginal_pct,
        federal_tax=federal,
        state_tax=state,
        self_employment_tax=self_employment,
        total_tax=total_tax,
        take_home_pay=total_income - total_tax,
        taxable_income=taxable,
        deductions=DeductionSummary(
            standard=deduction.standard,
            itemized=inputs.itemized_deductions,
            retirement=retirement_deduction,
            hsa=inputs.hsa,
            total=total_deductions,
        ),
        brackets=rows,
        tax_savings=total_deductions * marginal_pct / 100,
        insights=_income_tax_insights(inputs, taxable, rows, deduction.standard),
    )


def _income_tax_insights(
    inputs: IncomeTaxInputs,
    taxable: float,
    rows: list[BracketTax],
    standard: float,
) -> list[Insight]:
    insights = []

    total_retirement = inputs.retirement_401k + inputs.traditional_ira + inputs.roth_ira
    if total_retirement < inputs.income * 0.15:
        insights.append(
            Insight(InsightLevel.INFO, "Consider increasing retirement contributions to reduce taxable income.")
        )
    if inputs.retirement_401k > RETIREMENT_401K_LIMIT_2025:
        insights.append(
            Insight(InsightLevel.WARNING, f"401k contributions exceed the ${RETIREMENT_401K_LIMIT_2025:,} limit.")
        )
    if inputs.traditional_ira + inputs.roth_ira > IRA_LIMIT_2025:
        insights.append(
            Insight(InsightLevel.WARNING, f"Total IRA contributions exceed the ${IRA_LIMIT_2025:,} limit.")
        )

    hsa_limit = HSA_LIMIT_2025_FAMILY if inputs.dependents > 0 else HSA_LIMIT_2025_SELF
    if inputs.hsa < hsa_limit:
        insights.append(
            Insight(InsightLevel.INFO, f"You can contribute up to ${hsa_limit:,} to your HSA for additional tax savings.")
        )

    if 0 < inputs.itemized_deductions < standard:
        insights.append(Insight(InsightLevel.INFO, "Standard deduction provides more tax savings than itemizing."))

    next_bracket = next((row for row in rows if row.min > taxable), None)
    if next_bracket is not None:
        to_next = next_bracket.min - taxable
        insights.append(
            Insight(
                InsightLevel.INFO,
                f"${to_next:,.0f} until next tax bracket ({next_bracket.rate * 100:g}%).",
            )
        )

    if inputs.self_employed:
        insights.append(
            Insight(InsightLevel.WARNING, "Consider making quarterly estimated tax payments to avoid penalties.")
        )
    return insights
