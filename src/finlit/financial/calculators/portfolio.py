"""Portfolio risk engine: diversification scoring, allocation metrics, rebalancing.

Diversification is measured with a Herfindahl-Hirschman index over holding
percentages (``HHI = sum(percent**2)``, 10,000 for a single bucket). Each
taxonomy gets its own pair of reference points because the bucket count
differs: the score is 0 at or above the "concentrated" HHI and 100 at or
below the "diversified" HHI, linear in between.

Every score is clamped to [0, 100]. A portfolio with no value scores 0
everywhere and carries a warning instead of raising.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from finlit.financial.models import (
    AssetAllocation,
    Holding,
    Insight,
    InsightLevel,
    Region,
)
from finlit.financial.primitives import clamp, clamp_percent, parse_amount, safe_divide

# =============================================================================
# CONFIGURATION
# =============================================================================


@dataclass(frozen=True)
class HHIReference:
    """Reference points for rescaling an HHI into a 0-100 score."""

    concentrated: float
    diversified: float


ASSET_CLASS_HHI = HHIReference(concentrated=5000, diversified=1667)  # 6 classes
REGION_HHI = HHIReference(concentrated=5000, diversified=2500)  # 4 regions
SECTOR_HHI = HHIReference(concentrated=3333, diversified=1111)  # 9 sectors
ALLOCATION_HHI = HHIReference(concentrated=10000, diversified=2000)  # 5 buckets

CONCENTRATION_TARGET = 5.0  # percent; positions above this are penalised
CONCENTRATION_PENALTY = 2.0  # score points per percent over target


@dataclass(frozen=True)
class ScoreWeights:
    """Weights of the four sub-scores in the overall score."""

    asset_class: float = 0.40
    geographic: float = 0.25
    sector: float = 0.25
    concentration: float = 0.10


DEFAULT_WEIGHTS = ScoreWeights()


class RiskTolerance(Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


# Allocation buckets used by allocation_metrics and target_allocation
CASH = "cash"
BONDS = "bonds"
STOCKS = "stocks"
REAL_ESTATE = "real_estate"
ALTERNATIVES = "alternatives"

BASE_RETURNS = {CASH: 2.0, BONDS: 4.0, STOCKS: 8.0, REAL_ESTATE: 7.0, ALTERNATIVES: 6.0}
BASE_VOLATILITY = {CASH: 0.5, BONDS: 5.0, STOCKS: 18.0, REAL_ESTATE: 15.0, ALTERNATIVES: 20.0}
RISK_MULTIPLIERS = {
    RiskTolerance.CONSERVATIVE: 0.8,
    RiskTolerance.MODERATE: 1.0,
    RiskTolerance.AGGRESSIVE: 1.2,
}
RETURN_BAND = (0.7, 1.3)  # conservative / optimistic multipliers
RISK_FREE_RATE = 2.0
DRAWDOWN_MULTIPLIER = 1.5

TARGET_ALLOCATIONS = {
    RiskTolerance.CONSERVATIVE: {CASH: 10, BONDS: 50, STOCKS: 25, REAL_ESTATE: 10, ALTERNATIVES: 5},
    RiskTolerance.MODERATE: {CASH: 5, BONDS: 30, STOCKS: 50, REAL_ESTATE: 10, ALTERNATIVES: 5},
    RiskTolerance.AGGRESSIVE: {CASH: 5, BONDS: 15, STOCKS: 60, REAL_ESTATE: 15, ALTERNATIVES: 5},
}


def parse_risk_tolerance(raw: object) -> RiskTolerance:
    if isinstance(raw, RiskTolerance):
        return raw
    try:
        return RiskTolerance(str(raw).strip().lower())
    except ValueError:
        return RiskTolerance.MODERATE


# =============================================================================
# SCORING
# =============================================================================


def bucket_percentages(holdings: Sequence[Holding], key: Callable[[Holding], object]) -> dict[str, float]:
    """Percent of total value in each bucket, keyed by bucket name.

    Returns an empty dict when the portfolio has no value.
    """
    total = sum(h.value for h in holdings)
    if total <= 0:
        return {}
    values: dict[str, float] = {}
    for holding in holdings:
        bucket = key(holding)
        name = getattr(bucket, "value", bucket)
        values[name] = values.get(name, 0.0) + holding.value
    return {name: value / total * 100 for name, value in values.items()}


def hhi(percentages: Iterable[float]) -> float:
    return sum(p * p for p in percentages)


def diversification_score(
    percentages: Iterable[float],
    fully_concentrated_hhi: float,
    fully_diversified_hhi: float,
) -> float:
    """Rescale the HHI of ``percentages`` onto 0-100 (100 = diversified).

    An empty or all-zero allocation scores 0.
    """
    shares = [max(0.0, parse_amount(p)) for p in percentages]
    if sum(shares) <= 0:
        return 0.0
    span = fully_concentrated_hhi - fully_diversified_hhi
    score = safe_divide(fully_concentrated_hhi - hhi(shares), span) * 100
    return clamp(score, 0.0, 100.0)


def concentration_score(largest_holding_percent: float, target: float = CONCENTRATION_TARGET) -> float:
    """100 at or below ``target``, losing 2 points per percent above it; floor 0."""
    largest = max(0.0, parse_amount(largest_holding_percent))
    return clamp(100.0 - (largest - target) * CONCENTRATION_PENALTY, 0.0, 100.0)


def overall_score(
    asset_class_score: float,
    geographic_score: float,
    sector_score: float,
    concentration: float,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> float:
    total = (
        asset_class_score * weights.asset_class
        + geographic_score * weights.geographic
        + sector_score * weights.sector
        + concentration * weights.concentration
    )
    return clamp_percent(total)


@dataclass
class PortfolioAnalysis:
    total_value: float
    asset_class_score: float
    geographic_score: float
    sector_score: float
    concentration_score: float
    overall_score: float
    largest_position: str | None
    largest_position_percent: float
    asset_classes: dict[str, float] = field(default_factory=dict)
    sectors: dict[str, float] = field(default_factory=dict)
    regions: dict[str, float] = field(default_factory=dict)
    recommendations: list[Insight] = field(default_factory=list)

    @property
    def international_percent(self) -> float:
        return 100.0 - self.regions.get(Region.US.value, 0.0) if self.regions else 0.0


def analyze_portfolio(holdings: Sequence[Holding], weights: ScoreWeights = DEFAULT_WEIGHTS) -> PortfolioAnalysis:
    """Score a list of holdings on all four diversification axes.

    Args:
        holdings: Positions; zero-value positions are kept but flagged.
        weights: Sub-score weights for the overall score.

    Returns:
        PortfolioAnalysis with scores, breakdowns and recommendations.
    """
    total = sum(h.value for h in holdings)
    recommendations = []

    if total <= 0:
        recommendations.append(
            Insight(InsightLevel.WARNING, "Portfolio has no value; add holdings to calculate diversification.")
        )
        return PortfolioAnalysis(total, 0.0, 0.0, 0.0, 0.0, 0.0, None, 0.0, recommendations=recommendations)

    asset_classes = bucket_percentages(holdings, lambda h: h.asset_class)
    sectors = bucket_percentages(holdings, lambda h: h.sector)
    regions = bucket_percentages(holdings, lambda h: h.region)

    ac_score = diversification_score(asset_classes.values(), ASSET_CLASS_HHI.concentrated, ASSET_CLASS_HHI.diversified)
    geo_score = diversification_score(regions.values(), REGION_HHI.concentrated, REGION_HHI.diversified)
    sector_score = diversification_score(sectors.values(), SECTOR_HHI.concentrated, SECTOR_HHI.diversified)

    largest = max(holdings, key=lambda h: h.value)
    largest_pct = largest.value / total * 100
    conc_score = concentration_score(largest_pct)
    overall = overall_score(ac_score, geo_score, sector_score, conc_score, weights)

    empty = [h.symbol for h in holdings if h.value <= 0]
    if empty:
        recommendations.append(
            Insight(InsightLevel.WARNING, f"Holdings with no value are ignored in scoring: {', '.join(empty)}")
        )
    if overall < 60:
        recommendations.append(
            Insight(
                InsightLevel.WARNING,
                "Your portfolio has significant concentration risk. Consider reducing large individual "
                "positions and adding more asset classes.",
            )
        )
    if geo_score < 70:
        recommendations.append(
            Insight(
                InsightLevel.INFO,
                "Consider increasing international diversification with developed and emerging market funds.",
            )
        )
    if ac_score < 70:
        recommendations.append(
            Insight(
                InsightLevel.INFO,
                "Consider adding bonds for stability and REITs for inflation protection and diversification.",
            )
        )
    if overall >= 80:
        recommendations.append(
            Insight(
                InsightLevel.SUCCESS,
                "Your portfolio is well diversified across asset classes, sectors, and regions. "
                "Continue with regular rebalancing.",
            )
        )

    return PortfolioAnalysis(
        total_value=total,
        asset_class_score=ac_score,
        geographic_score=geo_score,
        sector_score=sector_score,
        concentration_score=conc_score,
        overall_score=overall,
        largest_position=largest.symbol,
        largest_position_percent=largest_pct,
        asset_classes=asset_classes,
        sectors=sectors,
        regions=regions,
        recommendations=recommendations,
    )


# =============================================================================
# ALLOCATION METRICS
# =============================================================================


@dataclass
class AllocationMetrics:
    total_allocation: float
    expected_return: float
    conservative_return: float
    optimistic_return: float
    volatility: float
    sharpe_ratio: float
    max_drawdown: float
    diversification_score: float
    insights: list[Insight] = field(default_factory=list)


def allocation_metrics(
    allocation: AssetAllocation,
    risk_tolerance: RiskTolerance | str = RiskTolerance.MODERATE,
    investment_horizon: float | None = None,
    risk_free_rate: float = RISK_FREE_RATE,
) -> AllocationMetrics:
    """Expected return and risk for a bucket allocation (all values in percent).

    Volatility ignores cross-asset covariance: ``sqrt(sum((w * sigma)**2))``.
    The conservative/optimistic returns are a fixed band around the
    expected return, not a confidence interval.
    """
    tolerance = parse_risk_tolerance(risk_tolerance)
    weights = {bucket: allocation.percent(bucket) / 100 for bucket in BASE_RETURNS}

    base = sum(weights[b] * BASE_RETURNS[b] for b in BASE_RETURNS)
    expected = base * RISK_MULTIPLIERS[tolerance]
    volatility = math.sqrt(sum((weights[b] * BASE_VOLATILITY[b]) ** 2 for b in BASE_VOLATILITY))

    insights = []
    total = allocation.total
    if not allocation.is_complete():
        insights.append(Insight(InsightLevel.WARNING, f"Total allocation ({total:g}%) should equal 100%"))
    if allocation.percent(STOCKS) > 70:
        insights.append(Insight(InsightLevel.WARNING, "High stock allocation may increase portfolio volatility"))
    if allocation.percent(CASH) > 20:
        insights.append(Insight(InsightLevel.INFO, "High cash allocation may drag on long-term returns"))
    if investment_horizon is not None:
        horizon = parse_amount(investment_horizon)
        if tolerance is RiskTolerance.AGGRESSIVE and horizon < 5:
            insights.append(
                Insight(InsightLevel.WARNING, "Aggressive allocation may be unsuitable for short time horizon")
            )
        if tolerance is RiskTolerance.CONSERVATIVE and horizon > 20:
            insights.append(
                Insight(InsightLevel.INFO, "Consider more growth-oriented allocation for long time horizon")
            )

    return AllocationMetrics(
        total_allocation=total,
        expected_return=expected,
        conservative_return=expected * RETURN_BAND[0],
        optimistic_return=expected * RETURN_BAND[1],
        volatility=volatility,
        sharpe_ratio=safe_divide(expected - parse_amount(risk_free_rate), volatility),
        max_drawdown=volatility * DRAWDOWN_MULTIPLIER,
        diversification_score=diversification_score(
            allocation.percentages(), ALLOCATION_HHI.concentrated, ALLOCATION_HHI.diversified
        ),
        insights=insights,
    )


def target_allocation(risk_tolerance: RiskTolerance | str = RiskTolerance.MODERATE) -> AssetAllocation:
    return AssetAllocation(dict(TARGET_ALLOCATIONS[parse_risk_tolerance(risk_tolerance)]))


# =============================================================================
# REBALANCING
# =============================================================================


class RebalanceAction(Enum):
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


def rebalance_action(
    current_percent: float,
    target_percent: float,
    threshold: float,
    minimum_dollar_amount: float,
    total_value: float,
) -> RebalanceAction:
    """Trade only when drift exceeds ``threshold`` points AND the dollar move is worth it."""
    deviation = parse_amount(current_percent) - parse_amount(target_percent)
    dollars = abs(deviation) / 100 * max(0.0, parse_amount(total_value))
    if abs(deviation) <= parse_amount(threshold) or dollars < parse_amount(minimum_dollar_amount):
        return RebalanceAction.HOLD
    return RebalanceAction.SELL if deviation > 0 else RebalanceAction.BUY


@dataclass
class RebalanceTrade:
    bucket: str
    current_percent: float
    target_percent: float
    deviation: float
    amount: float  # dollars to move
    action: RebalanceAction


@dataclass
class RebalancePlan:
    trades: list[RebalanceTrade] = field(default_factory=list)

    @property
    def rebalancing_needed(self) -> bool:
        return any(t.action is not RebalanceAction.HOLD for t in self.trades)

    @property
    def actionable(self) -> list[RebalanceTrade]:
        return [t for t in self.trades if t.action is not RebalanceAction.HOLD]


def rebalance_plan(
    current: AssetAllocation,
    target: AssetAllocation,
    total_value: float,
    threshold: float = 5.0,
    minimum_trade: float = 100.0,
) -> RebalancePlan:
    """One trade line per bucket in either allocation."""
    value = max(0.0, parse_amount(total_value))
    buckets = list(dict.fromkeys([*target.shares, *current.shares]))
    trades = []
    for bucket in buckets:
        now = current.percent(bucket)
        goal = target.percent(bucket)
        deviation = now - goal
        trades.append(
            RebalanceTrade(
                bucket=bucket,
                current_percent=now,
                target_percent=goal,
                deviation=deviation,
                amount=abs(deviation) / 100 * value,
                action=rebalance_action(now, goal, threshold, minimum_trade, value),
            )
        )
    return RebalancePlan(trades=trades)
