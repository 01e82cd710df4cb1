"""Options pricing engine: Black-Scholes, Greeks and strategy analysis.

``black_scholes`` takes decimal rates and volatility (``0.05``, ``0.25``) and
a time to expiry in years. Strategy-level inputs (``MarketParameters``) use
percents and days, the way a form collects them.

Supported strategies are single legs (long/short call/put) and two-leg
vertical spreads. Maximum profit, maximum loss and break-even points are
derived algebraically from strikes and net premium; only the payoff diagram
samples prices. An unlimited profit or loss is reported as ``None``.

Greeks units: theta per calendar day, vega and rho per 1 percentage point.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum

from loguru import logger

from finlit.core.exceptions import InvalidInputError
from finlit.financial.models import OptionLeg
from finlit.financial.primitives import clamp, finite_or, normal_cdf, normal_pdf, parse_amount, safe_divide
from finlit.financial.validation import OPTIONS_MARKET_SCHEMA, ValidationResult, validate_fields

SHARES_PER_CONTRACT = 100
DAYS_PER_YEAR = 365
PAYOFF_WINDOW = 0.50  # +/- 50% of spot
PAYOFF_STEP = 0.02  # 2% of spot
MAX_PAYOFF_POINTS = 1000


@dataclass
class OptionPrice:
    """Theoretical price and Greeks for one long option, per share."""

    price: float
    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float


def _discount(rate: float, years: float) -> float:
    """``exp(-rate * years)``, with overflow mapped to infinity."""
    try:
        return math.exp(-rate * years)
    except OverflowError:
        return math.inf


def black_scholes(
    spot: float,
    strike: float,
    years_to_expiry: float,
    risk_free_rate: float,
    volatility: float,
    dividend_yield: float = 0.0,
    is_call: bool = True,
) -> OptionPrice:
    """Black-Scholes-Merton price and Greeks with a continuous dividend yield.

    ``d1 = (ln(S/K) + (r - q + sigma**2/2) T) / (sigma sqrt(T))``,
    ``d2 = d1 - sigma sqrt(T)``.

    Expired or zero-volatility inputs (and non-positive spot or strike, or
    rates so extreme a discount factor overflows) price at intrinsic value
    with limiting Greeks: delta is 1 (call) or -1 (put) when in the money
    and 0 otherwise; everything else is 0.
    """
    s = parse_amount(spot)
    k = parse_amount(strike)
    t = parse_amount(years_to_expiry)
    r = parse_amount(risk_free_rate)
    sigma = parse_amount(volatility)
    q = parse_amount(dividend_yield)

    div_discount = _discount(q, t)
    rate_discount = _discount(r, t)

    degenerate = t <= 0 or sigma <= 0 or s <= 0 or k <= 0
    if degenerate or not (math.isfinite(div_discount) and math.isfinite(rate_discount)):
        logger.debug(
            f"Degenerate Black-Scholes input (S={s}, K={k}, T={t}, r={r}, sigma={sigma}, q={q}); using intrinsic value"
        )
        if is_call:
            in_the_money = s > k
            return OptionPrice(max(0.0, s - k), 1.0 if in_the_money else 0.0, 0.0, 0.0, 0.0, 0.0)
        in_the_money = s < k
        return OptionPrice(max(0.0, k - s), -1.0 if in_the_money else 0.0, 0.0, 0.0, 0.0, 0.0)

    sqrt_t = math.sqrt(t)
    d1 = (math.log(s / k) + (r - q + 0.5 * sigma * sigma) * t) / (sigma * sqrt_t)
    d2 = d1 - sigma * sqrt_t
    pdf_d1 = normal_pdf(d1)

    gamma = div_discount * pdf_d1 / (s * sigma * sqrt_t)
    vega = s * div_discount * pdf_d1 * sqrt_t / 100
    decay = -s * div_discount * pdf_d1 * sigma / (2 * sqrt_t)

    if is_call:
        price = s * div_discount * normal_cdf(d1) - k * rate_discount * normal_cdf(d2)
        delta = div_discount * normal_cdf(d1)
        theta = (decay - r * k * rate_discount * normal_cdf(d2) + q * s * div_discount * normal_cdf(d1)) / DAYS_PER_YEAR
        rho = k * t * rate_discount * normal_cdf(d2) / 100
    else:
        price = k * rate_discount * normal_cdf(-d2) - s * div_discount * normal_cdf(-d1)
        delta = div_discount * (normal_cdf(d1) - 1)
        theta = (decay + r * k * rate_discount * normal_cdf(-d2) - q * s * div_discount * normal_cdf(-d1)) / DAYS_PER_YEAR
        rho = -k * t * rate_discount * normal_cdf(-d2) / 100

    return OptionPrice(
        price=max(0.0, finite_or(price)),
        delta=finite_or(delta),
        gamma=finite_or(gamma),
        theta=finite_or(theta),
        vega=finite_or(vega),
        rho=finite_or(rho),
    )


# =============================================================================
# STRATEGIES
# =============================================================================


@dataclass
class MarketParameters:
    """Shared market inputs for every leg of a strategy (percents and days)."""

    spot: float
    days_to_expiration: float = 30
    volatility_pct: float = 25.0
    risk_free_rate_pct: float = 5.0
    dividend_yield_pct: float = 0.0
    contracts: int = 1

    def __post_init__(self):
        self.spot = max(0.0, parse_amount(self.spot))
        self.days_to_expiration = max(0.0, parse_amount(self.days_to_expiration))
        self.volatility_pct = max(0.0, parse_amount(self.volatility_pct))
        self.risk_free_rate_pct = parse_amount(self.risk_free_rate_pct)
        self.dividend_yield_pct = max(0.0, parse_amount(self.dividend_yield_pct))
        self.contracts = max(1, int(parse_amount(self.contracts, 1)))

    @property
    def years(self) -> float:
        return self.days_to_expiration / DAYS_PER_YEAR

    @property
    def multiplier(self) -> int:
        return self.contracts * SHARES_PER_CONTRACT

    def price(self, leg: OptionLeg) -> OptionPrice:
        return black_scholes(
            self.spot,
            leg.strike,
            self.years,
            self.risk_free_rate_pct / 100,
            self.volatility_pct / 100,
            self.dividend_yield_pct / 100,
            leg.is_call,
        )

    def validate(self) -> ValidationResult:
        values = {
            "spot": self.spot,
            "days_to_expiration": self.days_to_expiration,
            "volatility_pct": self.volatility_pct,
            "risk_free_rate_pct": self.risk_free_rate_pct,
            "dividend_yield_pct": self.dividend_yield_pct,
            "contracts": self.contracts,
        }
        return validate_fields(values, OPTIONS_MARKET_SCHEMA)


class StrategyType(Enum):
    LONG_CALL = "long_call"
    LONG_PUT = "long_put"
    SHORT_CALL = "short_call"
    SHORT_PUT = "short_put"
    BULL_CALL_SPREAD = "bull_call_spread"
    BEAR_CALL_SPREAD = "bear_call_spread"
    BULL_PUT_SPREAD = "bull_put_spread"
    BEAR_PUT_SPREAD = "bear_put_spread"


@dataclass
class OptionStrategy:
    """Legs with resolved premiums plus the market they were priced in."""

    type: StrategyType
    legs: list[OptionLeg]
    market: MarketParameters

    @property
    def net_premium(self) -> float:
        """Per-share premium paid (positive, a debit) or received (negative, a credit)."""
        return sum(leg.sign * leg.premium for leg in self.legs)

    def value_at_expiry(self, price: float) -> float:
        """Per-share P&L at expiration for an underlying at ``price``."""
        return sum(leg.sign * leg.intrinsic(price) for leg in self.legs) - self.net_premium


def _classify(legs: list[OptionLeg]) -> StrategyType:
    if len(legs) == 1:
        leg = legs[0]
        if leg.is_call:
            return StrategyType.LONG_CALL if leg.is_long else StrategyType.SHORT_CALL
        return StrategyType.LONG_PUT if leg.is_long else StrategyType.SHORT_PUT

    if len(legs) != 2:
        raise InvalidInputError(f"Strategies need one or two legs, got {len(legs)}", errors={"legs": "1 or 2 legs"})

    low, high = sorted(legs, key=lambda leg: leg.strike)
    if low.is_call != high.is_call:
        raise InvalidInputError("Spread legs must both be calls or both be puts", errors={"legs": "mixed types"})
    if low.is_long == high.is_long:
        raise InvalidInputError("A vertical spread needs one long and one short leg", errors={"legs": "same side"})
    if low.strike == high.strike:
        raise InvalidInputError("Spread legs need different strikes", errors={"legs": "same strike"})

    if low.is_call:
        return StrategyType.BULL_CALL_SPREAD if low.is_long else StrategyType.BEAR_CALL_SPREAD
    return StrategyType.BEAR_PUT_SPREAD if high.is_long else StrategyType.BULL_PUT_SPREAD


def build_strategy(legs: list[OptionLeg], market: MarketParameters) -> OptionStrategy:
    """Resolve premiums and classify the legs.

    A leg without a premium (``None`` or 0) is priced at its Black-Scholes
    value.

    Raises:
        InvalidInputError: The legs do not form a supported strategy.
    """
    resolved = [leg if leg.premium else replace(leg, premium=market.price(leg).price) for leg in legs]
    return OptionStrategy(type=_classify(resolved), legs=resolved, market=market)


def long_call(market: MarketParameters, strike: float, premium: float | None = None) -> OptionStrategy:
    return build_strategy([OptionLeg(strike, premium, is_call=True, is_long=True)], market)


def long_put(market: MarketParameters, strike: float, premium: float | None = None) -> OptionStrategy:
    return build_strategy([OptionLeg(strike, premium, is_call=False, is_long=True)], market)


def short_call(market: MarketParameters, strike: float, premium: float | None = None) -> OptionStrategy:
    return build_strategy([OptionLeg(strike, premium, is_call=True, is_long=False)], market)


def short_put(market: MarketParameters, strike: float, premium: float | None = None) -> OptionStrategy:
    return build_strategy([OptionLeg(strike, premium, is_call=False, is_long=False)], market)


def vertical_spread(
    market: MarketParameters,
    lower_strike: float,
    upper_strike: float,
    is_call: bool,
    long_lower: bool,
    lower_premium: float | None = None,
    upper_premium: float | None = None,
) -> OptionStrategy:
    """Two legs of one type: long minus short at different strikes."""
    legs = [
        OptionLeg(lower_strike, lower_premium, is_call=is_call, is_long=long_lower),
        OptionLeg(upper_strike, upper_premium, is_call=is_call, is_long=not long_lower),
    ]
    return build_strategy(legs, market)


def bull_call_spread(market: MarketParameters, lower_strike: float, upper_strike: float, **premiums) -> OptionStrategy:
    return vertical_spread(market, lower_strike, upper_strike, is_call=True, long_lower=True, **premiums)


def bear_call_spread(market: MarketParameters, lower_strike: float, upper_strike: float, **premiums) -> OptionStrategy:
    return vertical_spread(market, lower_strike, upper_strike, is_call=True, long_lower=False, **premiums)


def bull_put_spread(market: MarketParameters, lower_strike: float, upper_strike: float, **premiums) -> OptionStrategy:
    return vertical_spread(market, lower_strike, upper_strike, is_call=False, long_lower=True, **premiums)


def bear_put_spread(market: MarketParameters, lower_strike: float, upper_strike: float, **premiums) -> OptionStrategy:
    return vertical_spread(market, lower_strike, upper_strike, is_call=False, long_lower=False, **premiums)


# =============================================================================
# ANALYSIS
# =============================================================================


@dataclass
class PayoffPoint:
    price: float
    pnl: float


@dataclass
class NetGreeks:
    """Position Greeks: long legs add, short legs subtract, times contracts."""

    delta: float = 0.0
    gamma: float = 0.0
    theta: float = 0.0
    vega: float = 0.0
    rho: float = 0.0


@dataclass
class StrategyAnalysis:
    strategy: OptionStrategy
    leg_prices: list[OptionPrice]
    net_premium: float  # per share; negative is a credit
    max_profit: float | None  # position dollars; None = unlimited
    max_loss: float | None  # position dollars, positive; None = unlimited
    break_evens: list[float]
    greeks: NetGreeks
    probability_of_profit: float  # percent, heuristic
    expected_value: float | None
    risk_reward_ratio: float | None
    current_pnl: float
    payoff: list[PayoffPoint] = field(default_factory=list)


def _limits(strategy: OptionStrategy) -> tuple[float | None, float | None, list[float]]:
    """Per-share max profit, max loss and break-evens."""
    net = strategy.net_premium
    kind = strategy.type

    if len(strategy.legs) == 1:
        leg = strategy.legs[0]
        k = leg.strike
        premium = leg.premium
        if kind is StrategyType.LONG_CALL:
            return None, premium, [k + premium]
        if kind is StrategyType.SHORT_CALL:
            return premium, None, [k + premium]
        if kind is StrategyType.LONG_PUT:
            return max(0.0, k - premium), premium, [max(0.0, k - premium)]
        return premium, max(0.0, k - premium), [max(0.0, k - premium)]

    low, high = sorted(strategy.legs, key=lambda leg: leg.strike)
    pnl_below = strategy.value_at_expiry(low.strike)
    pnl_above = strategy.value_at_expiry(high.strike)
    max_profit = max(pnl_below, pnl_above)
    max_loss = max(0.0, -min(pnl_below, pnl_above))

    if low.is_call:
        break_even = low.strike + net * low.sign
    else:
        break_even = high.strike - net * high.sign
    break_evens = [break_even] if low.strike <= break_even <= high.strike else []
    return max_profit, max_loss, break_evens


def probability_of_profit(strategy: OptionStrategy, break_evens: list[float]) -> float:
    """Heuristic chance of finishing profitable, in percent.

    ``1 - 2*N(-distance/sd)`` where ``distance`` is the nearest break-even's
    distance from spot and ``sd = sigma * sqrt(days/365) * spot``. This is a
    deliberately rough approximation (it ignores drift, skew and which side
    of the break-even is profitable), not a lognormal probability.
    """
    market = strategy.market
    sd = market.volatility_pct / 100 * math.sqrt(market.years) * market.spot
    if not break_evens or sd <= 0:
        return 100.0 if strategy.value_at_expiry(market.spot) > 0 else 0.0
    distance = min(abs(be - market.spot) for be in break_evens)
    return clamp((1 - 2 * normal_cdf(-distance / sd)) * 100, 0.0, 100.0)


def payoff_diagram(
    strategy: OptionStrategy,
    price_range: float | None = None,
    step: float | None = None,
) -> list[PayoffPoint]:
    """Position P&L at expiration across ``spot +/- price_range``.

    Defaults to +/-50% of spot in 2% steps. Prices below 0 are skipped. A
    step too fine for the window is widened to keep at most
    ``MAX_PAYOFF_POINTS + 1`` points.
    """
    spot = strategy.market.spot
    window = parse_amount(price_range, spot * PAYOFF_WINDOW) if price_range is not None else spot * PAYOFF_WINDOW
    increment = parse_amount(step, spot * PAYOFF_STEP) if step is not None else spot * PAYOFF_STEP
    if window <= 0 or increment <= 0:
        return [PayoffPoint(spot, strategy.value_at_expiry(spot) * strategy.market.multiplier)]

    steps = 2 * window / increment
    if not math.isfinite(steps) or steps > MAX_PAYOFF_POINTS:
        logger.debug(f"Payoff step {increment} too fine for window {window}; capping at {MAX_PAYOFF_POINTS} points")
        increment = 2 * window / MAX_PAYOFF_POINTS
        steps = MAX_PAYOFF_POINTS
    count = int(round(steps))
    points = []
    for i in range(count + 1):
        price = spot - window + i * increment
        if price < 0:
            continue
        points.append(PayoffPoint(price, strategy.value_at_expiry(price) * strategy.market.multiplier))
    return points


def analyze_strategy(strategy: OptionStrategy) -> StrategyAnalysis:
    """Price every leg and derive the strategy's risk profile.

    Args:
        strategy: Output of ``build_strategy`` or one of the builders.

    Returns:
        StrategyAnalysis in position dollars (contracts x 100 shares).
    """
    market = strategy.market
    multiplier = market.multiplier
    prices = [market.price(leg) for leg in strategy.legs]

    greeks = NetGreeks()
    for leg, price in zip(strategy.legs, prices, strict=True):
        weight = leg.sign * market.contracts
        greeks.delta += price.delta * weight
        greeks.gamma += price.gamma * weight
        greeks.theta += price.theta * weight
        greeks.vega += price.vega * weight
        greeks.rho += price.rho * weight

    profit, loss, break_evens = _limits(strategy)
    max_profit = profit * multiplier if profit is not None else None
    max_loss = loss * multiplier if loss is not None else None

    pop = probability_of_profit(strategy, break_evens)
    if max_profit is None or max_loss is None:
        expected_value = None
        risk_reward = None
    else:
        p = pop / 100
        expected_value = max_profit * p - max_loss * (1 - p)
        risk_reward = safe_divide(max_profit, max_loss) if max_loss > 0 else None

    return StrategyAnalysis(
        strategy=strategy,
        leg_prices=prices,
        net_premium=strategy.net_premium,
        max_profit=max_profit,
        max_loss=max_loss,
        break_evens=break_evens,
        greeks=greeks,
        probability_of_profit=pop,
        expected_value=expected_value,
        risk_reward_ratio=risk_reward,
        current_pnl=strategy.value_at_expiry(market.spot) * multiplier,
        payoff=payoff_diagram(strategy),
    )
