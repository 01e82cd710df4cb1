"""Tests for finlit.financial.calculators.options."""

import math

import pytest

from finlit.core.exceptions import InvalidInputError
from finlit.financial.calculators.options import (
    MAX_PAYOFF_POINTS,
    MarketParameters,
    StrategyType,
    analyze_strategy,
    bear_call_spread,
    bear_put_spread,
    black_scholes,
    build_strategy,
    bull_call_spread,
    bull_put_spread,
    long_call,
    long_put,
    payoff_diagram,
    short_call,
    short_put,
)
from finlit.financial.models import OptionLeg


@pytest.fixture
def market():
    return MarketParameters(spot=100, days_to_expiration=30, volatility_pct=25, risk_free_rate_pct=5)


class TestBlackScholes:
    @pytest.mark.smoke
    def test_reference_values(self):
        call = black_scholes(100, 100, 1, 0.05, 0.2)
        put = black_scholes(100, 100, 1, 0.05, 0.2, is_call=False)
        assert call.price == pytest.approx(10.4506, abs=1e-3)
        assert put.price == pytest.approx(5.5735, abs=1e-3)
        assert call.delta == pytest.approx(0.6368, abs=1e-3)
        assert put.delta == pytest.approx(0.6368 - 1, abs=1e-3)

    def test_put_call_parity(self):
        call = black_scholes(100, 100, 0.5, 0.05, 0.3, dividend_yield=0.02)
        put = black_scholes(100, 100, 0.5, 0.05, 0.3, dividend_yield=0.02, is_call=False)
        parity = 100 * math.exp(-0.02 * 0.5) - 100 * math.exp(-0.05 * 0.5)
        assert call.price - put.price == pytest.approx(parity, abs=1e-4)

    def test_greek_signs(self):
        call = black_scholes(100, 100, 0.25, 0.05, 0.25)
        put = black_scholes(100, 100, 0.25, 0.05, 0.25, is_call=False)
        assert call.gamma > 0 and call.gamma == pytest.approx(put.gamma)
        assert call.vega > 0 and call.vega == pytest.approx(put.vega)
        assert call.theta < 0
        assert call.rho > 0
        assert put.rho < 0
        assert put.delta < 0

    def test_expired_prices_at_intrinsic(self):
        call = black_scholes(110, 100, 0, 0.05, 0.2)
        put = black_scholes(90, 100, 0, 0.05, 0.2, is_call=False)
        assert (call.price, call.delta, call.gamma) == (10, 1, 0)
        assert (put.price, put.delta, put.vega) == (10, -1, 0)

    def test_zero_volatility_out_of_the_money(self):
        result = black_scholes(90, 100, 1, 0.05, 0)
        assert result.price == 0
        assert result.delta == 0

    def test_garbage_spot(self):
        assert black_scholes("abc", 100, 1, 0.05, 0.2).price == 0

    @pytest.mark.parametrize("rate, dividend", [(-1000, 0.0), (0.05, -1000)])
    def test_overflowing_discount_prices_at_intrinsic(self, rate, dividend):
        call = black_scholes(100, 100, 1, rate, 0.2, dividend_yield=dividend)
        put = black_scholes(110, 100, 1, rate, 0.2, dividend_yield=dividend, is_call=False)
        for result in (call, put):
            assert all(math.isfinite(v) for v in vars(result).values())
        assert call.price == 0
        assert put.price == 0

    def test_huge_expiry_stays_finite(self):
        result = black_scholes(100, 100, 1e6, 0.05, 0.2)
        assert all(math.isfinite(v) for v in vars(result).values())


class TestStrategyConstruction:
    def test_builders_classify(self, market):
        assert long_call(market, 100).type is StrategyType.LONG_CALL
        assert long_put(market, 100).type is StrategyType.LONG_PUT
        assert short_call(market, 100).type is StrategyType.SHORT_CALL
        assert short_put(market, 100).type is StrategyType.SHORT_PUT
        assert bull_call_spread(market, 95, 105).type is StrategyType.BULL_CALL_SPREAD
        assert bear_call_spread(market, 95, 105).type is StrategyType.BEAR_CALL_SPREAD
        assert bull_put_spread(market, 95, 105).type is StrategyType.BULL_PUT_SPREAD
        assert bear_put_spread(market, 95, 105).type is StrategyType.BEAR_PUT_SPREAD

    def test_missing_premium_uses_theoretical_price(self, market):
        strategy = long_call(market, 100)
        expected = market.price(OptionLeg(100)).price
        assert strategy.legs[0].premium == pytest.approx(expected)
        assert strategy.legs[0].premium > 0

    def test_given_premium_kept(self, market):
        assert long_call(market, 100, premium=5).legs[0].premium == 5

    @pytest.mark.parametrize(
        "legs",
        [
            [],
            [OptionLeg(90, 1), OptionLeg(100, 1, is_long=False), OptionLeg(110, 1)],
            [OptionLeg(95, 1, is_call=True), OptionLeg(105, 1, is_call=False, is_long=False)],
            [OptionLeg(95, 1), OptionLeg(105, 1)],
            [OptionLeg(100, 2), OptionLeg(100, 1, is_long=False)],
        ],
        ids=["no-legs", "three-legs", "mixed-types", "same-side", "same-strike"],
    )
    def test_unsupported_leg_sets(self, market, legs):
        with pytest.raises(InvalidInputError):
            build_strategy(legs, market)

    def test_market_coercion(self):
        market = MarketParameters(spot="$1,250", days_to_expiration=365, contracts=0)
        assert market.spot == 1250
        assert market.years == 1
        assert market.contracts == 1
        assert market.multiplier == 100

    def test_market_validation(self):
        result = MarketParameters(spot=0).validate()
        assert set(result.errors) == {"spot"}
        assert MarketParameters(spot=100).validate().is_valid


class TestSingleLegAnalysis:
    def test_long_call(self, market):
        analysis = analyze_strategy(long_call(market, 100, premium=5))
        assert analysis.max_loss == pytest.approx(500)
        assert analysis.max_profit is None
        assert analysis.break_evens == [pytest.approx(105)]
        assert analysis.expected_value is None
        assert analysis.risk_reward_ratio is None
        assert analysis.current_pnl == pytest.approx(-500)

    def test_short_call(self, market):
        analysis = analyze_strategy(short_call(market, 100, premium=5))
        assert analysis.max_profit == pytest.approx(500)
        assert analysis.max_loss is None
        assert analysis.net_premium == pytest.approx(-5)
        assert analysis.greeks.delta < 0

    def test_long_put(self, market):
        analysis = analyze_strategy(long_put(market, 100, premium=4))
        assert analysis.max_profit == pytest.approx(9600)
        assert analysis.max_loss == pytest.approx(400)
        assert analysis.break_evens == [pytest.approx(96)]
        assert analysis.expected_value is not None

    def test_short_put(self, market):
        analysis = analyze_strategy(short_put(market, 100, premium=5))
        assert analysis.max_profit == pytest.approx(500)
        assert analysis.max_loss == pytest.approx(9500)
        assert analysis.break_evens == [pytest.approx(95)]

    def test_contracts_scale_position(self):
        market = MarketParameters(spot=100, contracts=3)
        one = analyze_strategy(long_call(MarketParameters(spot=100), 100, premium=5))
        three = analyze_strategy(long_call(market, 100, premium=5))
        assert three.max_loss == pytest.approx(1500)
        assert three.greeks.delta == pytest.approx(3 * one.greeks.delta)


class TestSpreadAnalysis:
    def test_bull_call(self, market):
        analysis = analyze_strategy(bull_call_spread(market, 95, 105, lower_premium=7, upper_premium=3))
        assert analysis.net_premium == pytest.approx(4)
        assert analysis.max_profit == pytest.approx(600)
        assert analysis.max_loss == pytest.approx(400)
        assert analysis.break_evens == [pytest.approx(99)]
        assert analysis.risk_reward_ratio == pytest.approx(1.5)

    def test_bear_call(self, market):
        analysis = analyze_strategy(bear_call_spread(market, 95, 105, lower_premium=7, upper_premium=3))
        assert analysis.net_premium == pytest.approx(-4)
        assert analysis.max_profit == pytest.approx(400)
        assert analysis.max_loss == pytest.approx(600)
        assert analysis.break_evens == [pytest.approx(99)]

    def test_bull_put(self, market):
        analysis = analyze_strategy(bull_put_spread(market, 95, 105, lower_premium=3, upper_premium=7))
        assert analysis.max_profit == pytest.approx(400)
        assert analysis.max_loss == pytest.approx(600)
        assert analysis.break_evens == [pytest.approx(101)]

    def test_bear_put(self, market):
        analysis = analyze_strategy(bear_put_spread(market, 95, 105, lower_premium=3, upper_premium=7))
        assert analysis.max_profit == pytest.approx(600)
        assert analysis.max_loss == pytest.approx(400)
        assert analysis.break_evens == [pytest.approx(101)]

    def test_expected_value(self, market):
        analysis = analyze_strategy(bull_call_spread(market, 95, 105, lower_premium=7, upper_premium=3))
        p = analysis.probability_of_profit / 100
        assert analysis.expected_value == pytest.approx(600 * p - 400 * (1 - p))

    def test_short_leg_greeks_subtract(self, market):
        analysis = analyze_strategy(bull_call_spread(market, 95, 105))
        low, high = analysis.leg_prices
        assert analysis.greeks.delta == pytest.approx(low.delta - high.delta)
        assert analysis.greeks.delta > 0


class TestPayoffAndProbability:
    def test_default_grid(self, market):
        points = payoff_diagram(long_call(market, 100, premium=5))
        assert len(points) == 51
        assert points[0].price == pytest.approx(50)
        assert points[-1].price == pytest.approx(150)
        assert points[0].pnl == pytest.approx(-500)
        assert points[-1].pnl == pytest.approx(4500)

    def test_custom_range_skips_negative_prices(self, market):
        points = payoff_diagram(long_put(market, 100, premium=5), price_range=150, step=10)
        assert points[0].price == 0
        assert all(p.price >= 0 for p in points)

    def test_fine_step_is_capped(self, market):
        points = payoff_diagram(long_call(market, 100, premium=5), price_range=50, step=1e-9)
        assert len(points) == MAX_PAYOFF_POINTS + 1
        assert points[0].price == pytest.approx(50)
        assert points[-1].price == pytest.approx(150)

    def test_probability_bounded(self, market):
        analysis = analyze_strategy(long_call(market, 100))
        assert 0 <= analysis.probability_of_profit <= 100

    def test_zero_volatility_probability(self):
        market = MarketParameters(spot=100, volatility_pct=0)
        assert analyze_strategy(long_call(market, 100, premium=5)).probability_of_profit == 0
        assert analyze_strategy(long_call(market, 90, premium=5)).probability_of_profit == 100
