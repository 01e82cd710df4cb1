"""Tests for finlit.financial.calculators.debt."""

import pytest

from finlit.financial.calculators.debt import (
    Debt,
    PayoffStrategy,
    calculate_debt_payoff,
    compare_strategies,
    parse_payoff_strategy,
)


def _debts():
    return [
        Debt("card", 5000, 150, 22),
        Debt("car", 8000, 250, 6),
        Debt("store", 900, 40, 18),
    ]


class TestDebtPayoff:
    def test_zero_interest(self):
        plan = calculate_debt_payoff([Debt("loan", 1000, 100, 0)])
        assert plan.months_to_payoff == 10
        assert plan.total_interest == 0
        assert plan.total_paid == pytest.approx(1000)
        assert plan.is_paid_off

    def test_avalanche_order(self):
        plan = calculate_debt_payoff(_debts(), strategy=PayoffStrategy.AVALANCHE)
        assert plan.order == ["card", "store", "car"]

    def test_snowball_order(self):
        plan = calculate_debt_payoff(_debts(), strategy="snowball")
        assert plan.order == ["store", "card", "car"]

    def test_extra_payment_speeds_payoff(self):
        base = calculate_debt_payoff(_debts())
        faster = calculate_debt_payoff(_debts(), extra_payment=300)
        assert faster.months_to_payoff < base.months_to_payoff
        assert faster.total_interest < base.total_interest

    def test_avalanche_never_costs_more_interest(self):
        plans = compare_strategies(_debts(), extra_payment=200)
        assert plans[PayoffStrategy.AVALANCHE].total_interest <= plans[PayoffStrategy.SNOWBALL].total_interest

    def test_minimum_below_interest_hits_cap(self):
        plan = calculate_debt_payoff([Debt("loan", 10_000, 100, 24)])
        assert plan.months_to_payoff == 360
        assert not plan.is_paid_off

    def test_inputs_not_mutated(self):
        debts = _debts()
        calculate_debt_payoff(debts, extra_payment=100)
        assert debts[0].balance == 5000

    def test_empty(self):
        plan = calculate_debt_payoff([])
        assert plan.months_to_payoff == 0
        assert plan.is_paid_off

    def test_extra_rolls_past_debt_cleared_by_minimum(self):
        debts = [Debt("small", 50, 50, 0), Debt("big", 1000, 10, 0)]
        plan = calculate_debt_payoff(debts, extra_payment=100, strategy=PayoffStrategy.SNOWBALL)
        first = plan.months[0]
        assert first.total_balance == pytest.approx(890)
        assert first.total_paid == pytest.approx(160)
        assert first.debts_paid_off == 1

    def test_extra_spills_into_next_debt(self):
        debts = [Debt("small", 80, 10, 0), Debt("big", 1000, 10, 0)]
        plan = calculate_debt_payoff(debts, extra_payment=100, strategy="snowball")
        assert plan.months[0].total_balance == pytest.approx(1080 - 120)

    def test_unknown_strategy_falls_back_to_avalanche(self):
        plan = calculate_debt_payoff(_debts(), strategy="fastest")
        assert plan.strategy is PayoffStrategy.AVALANCHE
        assert plan.order[0] == "card"


class TestParsePayoffStrategy:
    def test_names(self):
        assert parse_payoff_strategy("Snowball") is PayoffStrategy.SNOWBALL
        assert parse_payoff_strategy(" avalanche ") is PayoffStrategy.AVALANCHE
        assert parse_payoff_strategy(PayoffStrategy.SNOWBALL) is PayoffStrategy.SNOWBALL

    def test_unknown_and_empty(self):
        assert parse_payoff_strategy("fastest") is PayoffStrategy.AVALANCHE
        assert parse_payoff_strategy(None) is PayoffStrategy.AVALANCHE
        assert parse_payoff_strategy("") is PayoffStrategy.AVALANCHE
