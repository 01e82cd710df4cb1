"""Retirement projection built on the compound growth engine.

Projects savings to retirement age, sizes the nest egg with the 4% rule,
and reports the gap plus the monthly contribution that would close it.
"""

from dataclasses import dataclass, field

from finlit.financial.models import Insight, InsightLevel
from finlit.financial.primitives import clamp, parse_amount, safe_divide

from .growth import future_value_annuity, required_monthly_savings

SAFE_WITHDRAWAL_RATE = 4.0  # percent
MIN_SAVINGS_RATE = 15.0  # percent of income
REPLACEMENT_RATIO = 80.0  # percent of current income
MODERATE_RETURN = 8.0  # percent; above this is flagged as optimistic
MAX_AGE = 120.0


@dataclass
class RetirementInputs:
    """Retirement plan inputs.

    Rates are annual percents. Ages are capped at ``MAX_AGE``.
    """

    current_age: float = 30
    retirement_age: float = 65
    life_expectancy: float = 90
    current_savings: float = 0.0
    monthly_contribution: float = 0.0
    expected_return: float = 7.0
    inflation_rate: float = 2.5
    desired_income: float = 80_000
    social_security_income: float = 0.0
    other_income: float = 0.0

    def __post_init__(self):
        self.current_age = clamp(parse_amount(self.current_age), 0.0, MAX_AGE)
        self.retirement_age = clamp(parse_amount(self.retirement_age), self.current_age, MAX_AGE)
        self.life_expectancy = clamp(parse_amount(self.life_expectancy), self.retirement_age, MAX_AGE)
        self.current_savings = max(0.0, parse_amount(self.current_savings))
        self.monthly_contribution = max(0.0, parse_amount(self.monthly_contribution))
        self.expected_return = parse_amount(self.expected_return)
        self.inflation_rate = parse_amount(self.inflation_rate)
        self.desired_income = max(0.0, parse_amount(self.desired_income))
        self.social_security_income = max(0.0, parse_amount(self.social_security_income))
        self.other_income = max(0.0, parse_amount(self.other_income))


@dataclass
class ProjectionYear:
    age: float
    contributions: float
    returns: float
    total: float


@dataclass
class RetirementResult:
    total_savings_needed: float
    monthly_income_needed: float
    projected_savings: float
    savings_gap: float
    required_monthly_contribution: float
    years_to_retirement: float
    retirement_duration: float
    inflation_adjusted_income: float
    savings_rate: float
    replacement_rate: float
    projection: list[ProjectionYear] = field(default_factory=list)
    insights: list[Insight] = field(default_factory=list)

    @property
    def on_track(self) -> bool:
        return self.savings_gap <= 0


def calculate_retirement(inputs: RetirementInputs) -> RetirementResult:
    """Project savings to retirement and size the gap against the 4% rule.

    Args:
        inputs: Plan inputs; already coerced by ``RetirementInputs``.

    Returns:
        RetirementResult with a year-by-year projection and insights.
    """
    years = inputs.retirement_age - inputs.current_age
    duration = inputs.life_expectancy - inputs.retirement_age

    # Annual compounding for inflation
    adjusted_income = future_value_annuity(inputs.desired_income, inputs.inflation_rate / 100, years)
    monthly_needed = adjusted_income / 12
    passive_monthly = (inputs.social_security_income + inputs.other_income) / 12
    from_savings_annual = max(0.0, monthly_needed - passive_monthly) * 12
    total_needed = from_savings_annual / (SAFE_WITHDRAWAL_RATE / 100)

    monthly_rate = inputs.expected_return / 100 / 12
    projection = []
    balance = inputs.current_savings
    contributions = 0.0
    returns = 0.0
    for year in range(1, int(years) + 1):
        yearly_contribution = inputs.monthly_contribution * 12
        new_balance = future_value_annuity(balance, monthly_rate, 12, inputs.monthly_contribution)
        contributions += yearly_contribution
        returns += new_balance - balance - yearly_contribution
        balance = new_balance
        projection.append(ProjectionYear(inputs.current_age + year, contributions, returns, balance))

    projected = future_value_annuity(inputs.current_savings, monthly_rate, years * 12, inputs.monthly_contribution)
    gap = max(0.0, total_needed - projected)
    required = (
        required_monthly_savings(total_needed, inputs.expected_return, years, inputs.current_savings)
        if gap > 0
        else 0.0
    )

    savings_rate = safe_divide(inputs.monthly_contribution * 12, inputs.desired_income) * 100
    replacement_rate = safe_divide(adjusted_income, inputs.desired_income) * 100

    result = RetirementResult(
        total_savings_needed=total_needed,
        monthly_income_needed=monthly_needed,
        projected_savings=projected,
        savings_gap=gap,
        required_monthly_contribution=required,
        years_to_retirement=years,
        retirement_duration=duration,
        inflation_adjusted_income=adjusted_income,
        savings_rate=savings_rate,
        replacement_rate=replacement_rate,
        projection=projection,
    )
    result.insights = _retirement_insights(inputs, result)
    return result


def _retirement_insights(inputs: RetirementInputs, result: RetirementResult) -> list[Insight]:
    insights = []
    if result.savings_rate < MIN_SAVINGS_RATE:
        insights.append(
            Insight(
                InsightLevel.WARNING,
                f"Consider increasing your savings rate to at least {MIN_SAVINGS_RATE:g}% of income",
            )
        )
    if inputs.expected_return > MODERATE_RETURN:
        insights.append(
            Insight(
                InsightLevel.WARNING,
                "Your expected return may be optimistic. Consider using a more conservative estimate.",
            )
        )
    if result.retirement_duration > 30:
        insights.append(
            Insight(
                InsightLevel.INFO,
                "Planning for a long retirement. Consider increasing savings to account for longevity.",
            )
        )
    if result.savings_gap > 0:
        insights.append(
            Insight(
                InsightLevel.WARNING,
                f"You need to save ${result.required_monthly_contribution:,.0f} monthly to reach your goal",
            )
        )
    else:
        insights.append(Insight(InsightLevel.SUCCESS, "You are on track to meet your retirement savings goal"))
    if result.replacement_rate < REPLACEMENT_RATIO:
        insights.append(
            Insight(
                InsightLevel.INFO,
                f"Consider a retirement income target of at least {REPLACEMENT_RATIO:g}% of current income",
            )
        )
    return insights
