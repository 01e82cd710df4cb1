"""Financial calculators: tax, growth, portfolio risk, Monte Carlo, options, credit."""

from .budget import BudgetCategory, CategoryType, calculate_budget, calculate_emergency_fund
from .credit import CreditFactor, Grade, analyze_credit, factor_impact, grade, projection_timeline, score
from .debt import Debt, PayoffStrategy, calculate_debt_payoff, compare_strategies
from .growth import (
    amortization_schedule,
    amortized_payment,
    compound_interest,
    future_value_annuity,
    internal_rate_of_return,
    present_value,
    required_monthly_savings,
)
from .monte_carlo import MonteCarloSimulator, SimulationParameters, SimulationState, run_simulation
from .mortgage import MortgageInputs, calculate_monthly_payment, calculate_mortgage, project_prepayment
from .options import MarketParameters, OptionStrategy, analyze_strategy, black_scholes, build_strategy, payoff_diagram
from .portfolio import (
    RiskTolerance,
    ScoreWeights,
    allocation_metrics,
    analyze_portfolio,
    diversification_score,
    rebalance_plan,
)
from .retirement import RetirementInputs, calculate_retirement
from .tax import IncomeTaxInputs, PaycheckInputs, calculate_income_tax, calculate_paycheck, federal_tax
from .tax_tables import FilingStatus

__all__ = [
    "BudgetCategory",
    "CategoryType",
    "CreditFactor",
    "Debt",
    "FilingStatus",
    "Grade",
    "IncomeTaxInputs",
    "MarketParameters",
    "MonteCarloSimulator",
    "MortgageInputs",
    "OptionStrategy",
    "PaycheckInputs",
    "PayoffStrategy",
    "RetirementInputs",
    "RiskTolerance",
    "ScoreWeights",
    "SimulationParameters",
    "SimulationState",
    "allocation_metrics",
    "amortization_schedule",
    "amortized_payment",
    "analyze_credit",
    "analyze_portfolio",
    "analyze_strategy",
    "black_scholes",
    "build_strategy",
    "calculate_budget",
    "calculate_debt_payoff",
    "calculate_emergency_fund",
    "calculate_income_tax",
    "calculate_monthly_payment",
    "calculate_mortgage",
    "calculate_paycheck",
    "calculate_retirement",
    "compare_strategies",
    "compound_interest",
    "diversification_score",
    "factor_impact",
    "federal_tax",
    "future_value_annuity",
    "grade",
    "internal_rate_of_return",
    "payoff_diagram",
    "present_value",
    "project_prepayment",
    "projection_timeline",
    "rebalance_plan",
    "required_monthly_savings",
    "run_simulation",
    "score",
]
