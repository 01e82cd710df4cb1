"""Tests for finlit.financial.calculators.budget."""

import pytest

from finlit.financial.calculators.budget import (
    BudgetCategory,
    CategoryType,
    calculate_budget,
    calculate_emergency_fund,
)
from finlit.financial.models import InsightLevel


def _categories():
    return [
        BudgetCategory("rent", 2000),
        BudgetCategory("insurance", 1200, annual=True),
        BudgetCategory("dining", 500, "discretionary"),
        BudgetCategory("401k", 1000, CategoryType.SAVINGS),
    ]


class TestBudget:
    def test_summaries(self):
        result = calculate_budget(5000, _categories(), debt_payments=500, emergency_fund=6300)
        assert result.summaries[CategoryType.ESSENTIAL].monthly == pytest.approx(2100)
        assert result.total_monthly_expenses == pytest.approx(3600)
        assert result.monthly_cash_flow == pytest.approx(1400)
        assert result.annual_cash_flow == pytest.approx(16_800)
        assert result.savings_rate == pytest.approx(20)
        assert result.debt_to_income == pytest.approx(10)
        assert result.emergency_fund_months == pytest.approx(3)

    def test_emergency_fund_info(self):
        result = calculate_budget(5000, _categories(), emergency_fund=6300)
        assert any(i.level is InsightLevel.INFO and "6 months" in i.message for i in result.insights)

    def test_tax_rate_reduces_income(self):
        result = calculate_budget(5000, [], tax_rate=20)
        assert result.after_tax_income == pytest.approx(4000)

    def test_negative_cash_flow_warning(self):
        result = calculate_budget(1000, [BudgetCategory("rent", 2000)])
        assert result.monthly_cash_flow == pytest.approx(-1000)
        assert any("Negative monthly cash flow" in i.message for i in result.insights)

    def test_zero_income(self):
        result = calculate_budget("abc", _categories())
        assert result.savings_rate == 0
        assert result.debt_to_income == 0


class TestEmergencyFund:
    def test_plan(self):
        plan = calculate_emergency_fund(3000, 6000, 1000)
        assert plan.target_amount == 18_000
        assert plan.remaining_needed == 12_000
        assert plan.months_to_goal == 12
        assert plan.progress_percent == pytest.approx(100 / 3)
        assert not plan.is_complete

    def test_no_savings_planned(self):
        assert calculate_emergency_fund(3000, 0, 0).months_to_goal is None

    def test_complete(self):
        plan = calculate_emergency_fund(1000, 9000, 0)
        assert plan.is_complete
        assert plan.months_to_goal == 0
        assert plan.progress_percent == 100
