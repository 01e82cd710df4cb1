"""Monthly budget breakdown and emergency fund planning."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from finlit.financial.models import Insight, InsightLevel
from finlit.financial.primitives import parse_amount, safe_divide

MIN_SAVINGS_RATE = 15.0
MAX_DEBT_TO_INCOME = 43.0
MAX_ESSENTIAL_RATIO = 50.0
LOW_CASH_FLOW_RATIO = 0.10


class CategoryType(Enum):
    ESSENTIAL = "essential"
    DISCRETIONARY = "discretionary"
    SAVINGS = "savings"


@dataclass
class BudgetCategory:
    name: str
    amount: float
    type: CategoryType = CategoryType.ESSENTIAL
    annual: bool = False  # amount is per year rather than per month

    def __post_init__(self):
        self.amount = max(0.0, parse_amount(self.amount))
        self.type = CategoryType(self.type)

    @property
    def monthly_amount(self) -> float:
        return self.amount / 12 if self.annual else self.amount


@dataclass
class CategorySummary:
    monthly: float
    annual: float
    percent_of_income: float


@dataclass
class BudgetResult:
    monthly_income: float
    after_tax_income: float
    summaries: dict[CategoryType, CategorySummary]
    total_monthly_expenses: float
    monthly_cash_flow: float
    savings_rate: float
    debt_to_income: float
    essential_ratio: float
    discretionary_ratio: float
    emergency_fund_months: float
    insights: list[Insight] = field(default_factory=list)

    @property
    def annual_cash_flow(self) -> float:
        return self.monthly_cash_flow * 12


def calculate_budget(
    monthly_income: float,
    categories: list[BudgetCategory],
    debt_payments: float = 0.0,
    emergency_fund: float = 0.0,
    tax_rate: float = 0.0,
) -> BudgetResult:
    """Summarize spending by category type against after-tax income.

    Args:
        monthly_income: Gross monthly income from all sources.
        categories: Budget lines; annual lines are spread over 12 months.
        debt_payments: Monthly debt payments, for the debt-to-income ratio.
        emergency_fund: Emergency fund balance or target.
        tax_rate: Flat percent withheld from income (0 when income is net).
    """
    income = max(0.0, parse_amount(monthly_income))
    rate = min(100.0, max(0.0, parse_amount(tax_rate)))
    after_tax = income * (1 - rate / 100)

    summaries = {}
    for kind in CategoryType:
        monthly = sum(c.monthly_amount for c in categories if c.type is kind)
        summaries[kind] = CategorySummary(monthly, monthly * 12, safe_divide(monthly, after_tax) * 100)

    total = sum(s.monthly for s in summaries.values())
    essentials = summaries[CategoryType.ESSENTIAL].monthly
    result = BudgetResult(
        monthly_income=income,
        after_tax_income=after_tax,
        summaries=summaries,
        total_monthly_expenses=total,
        monthly_cash_flow=after_tax - total,
        savings_rate=summaries[CategoryType.SAVINGS].percent_of_income,
        debt_to_income=safe_divide(max(0.0, parse_amount(debt_payments)), after_tax) * 100,
        essential_ratio=summaries[CategoryType.ESSENTIAL].percent_of_income,
        discretionary_ratio=summaries[CategoryType.DISCRETIONARY].percent_of_income,
        emergency_fund_months=safe_divide(max(0.0, parse_amount(emergency_fund)), essentials),
    )
    result.insights = _budget_insights(result)
    return result


def _budget_insights(result: BudgetResult) -> list[Insight]:
    insights = []
    if result.savings_rate < MIN_SAVINGS_RATE:
        insights.append(
            Insight(
                InsightLevel.WARNING,
                f"Savings rate ({result.savings_rate:.1f}%) is below the recommended {MIN_SAVINGS_RATE:g}%",
            )
        )
    if result.emergency_fund_months < 3:
        insights.append(Insight(InsightLevel.WARNING, "Emergency fund covers less than 3 months of expenses"))
    elif result.emergency_fund_months < 6:
        insights.append(Insight(InsightLevel.INFO, "Consider building emergency fund to 6 months of expenses"))
    if result.debt_to_income > MAX_DEBT_TO_INCOME:
        insights.append(
            Insight(
                InsightLevel.WARNING,
                f"Debt-to-income ratio ({result.debt_to_income:.1f}%) exceeds recommended maximum",
            )
        )
    if result.essential_ratio > MAX_ESSENTIAL_RATIO:
        insights.append(Insight(InsightLevel.WARNING, "Essential expenses exceed 50% of income"))
    if result.monthly_cash_flow < 0:
        insights.append(Insight(InsightLevel.WARNING, "Negative monthly cash flow - review expenses"))
    elif result.monthly_cash_flow < result.monthly_income * LOW_CASH_FLOW_RATIO:
        insights.append(Insight(InsightLevel.INFO, "Cash flow is under 10% of income; little room for surprises"))
    return insights


# =============================================================================
# EMERGENCY FUND
# =============================================================================


@dataclass
class EmergencyFundPlan:
    target_amount: float
    remaining_needed: float
    months_to_goal: int | None  # None when no savings are planned
    progress_percent: float
    is_complete: bool


def calculate_emergency_fund(
    monthly_expenses: float,
    current_savings: float,
    monthly_savings: float,
    months_of_expenses: int = 6,
) -> EmergencyFundPlan:
    """Size an emergency fund and the months needed to reach it."""
    expenses = max(0.0, parse_amount(monthly_expenses))
    saved = max(0.0, parse_amount(current_savings))
    per_month = max(0.0, parse_amount(monthly_savings))
    months = max(0, int(parse_amount(months_of_expenses, 6)))

    target = expenses * months
    remaining = max(0.0, target - saved)
    if remaining == 0:
        months_to_goal: int | None = 0
    elif per_month > 0:
        months_to_goal = math.ceil(remaining / per_month)
    else:
        months_to_goal = None

    progress = min(100.0, safe_divide(saved, target) * 100) if target > 0 else 100.0
    return EmergencyFundPlan(
        target_amount=target,
        remaining_needed=remaining,
        months_to_goal=months_to_goal,
        progress_percent=progress,
        is_complete=saved >= target,
    )
