"""Credit score model: a weighted five-factor score on an illustrative 300-850 scale.

Each factor is normalized to a 0-100 sub-score, weighted, and the weighted
total (0-100) is mapped linearly onto 300-850. The model is educational; it
is not any bureau's formula.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from finlit.financial.models import CreditProfile, Insight, InsightLevel
from finlit.financial.primitives import clamp
from finlit.financial.validation import CREDIT_PROFILE_SCHEMA, ValidationResult, validate_prefixed

MIN_SCORE = 300
MAX_SCORE = 850
POINTS_PER_UNIT = (MAX_SCORE - MIN_SCORE) / 100  # 5.5
POINTS_PER_MONTH = 10
MILESTONES = {
    0.25: "Early changes start to show on credit reports",
    0.50: "Halfway to the target score",
    0.75: "Most changes reflected in the score",
    1.00: "Target score reached",
}


class CreditFactor(Enum):
    PAYMENT_HISTORY = "Payment History"
    UTILIZATION = "Credit Utilization"
    CREDIT_AGE = "Credit Age"
    CREDIT_MIX = "Credit Mix"
    NEW_CREDIT = "New Credit"


WEIGHTS = {
    CreditFactor.PAYMENT_HISTORY: 0.35,
    CreditFactor.UTILIZATION: 0.30,
    CreditFactor.CREDIT_AGE: 0.15,
    CreditFactor.CREDIT_MIX: 0.10,
    CreditFactor.NEW_CREDIT: 0.10,
}


class Grade(Enum):
    POOR = "Poor"
    FAIR = "Fair"
    GOOD = "Good"
    VERY_GOOD = "Very Good"
    EXCEPTIONAL = "Exceptional"


GRADE_THRESHOLDS = (
    (800, Grade.EXCEPTIONAL),
    (740, Grade.VERY_GOOD),
    (670, Grade.GOOD),
    (580, Grade.FAIR),
)


class Priority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# =============================================================================
# SCORING
# =============================================================================


def sub_scores(profile: CreditProfile) -> dict[CreditFactor, float]:
    """Normalized 0-100 score per factor.

    Utilization and new inquiries are inverted: lower is better.
    """
    return {
        CreditFactor.PAYMENT_HISTORY: clamp(profile.payment_history, 0.0, 100.0),
        CreditFactor.UTILIZATION: clamp(100 - profile.utilization, 0.0, 100.0),
        CreditFactor.CREDIT_AGE: clamp(profile.credit_age_years * 10, 0.0, 100.0),
        CreditFactor.CREDIT_MIX: clamp(profile.credit_mix_score * 20, 0.0, 100.0),
        CreditFactor.NEW_CREDIT: clamp(100 - profile.new_inquiries * 10, 0.0, 100.0),
    }


def score(profile: CreditProfile) -> int:
    """Score on the 300-850 scale, halves rounded up."""
    total = sum(WEIGHTS[f] * s for f, s in sub_scores(profile).items())
    return math.floor(MIN_SCORE + total * POINTS_PER_UNIT + 0.5)


def grade(value: float) -> Grade:
    for threshold, label in GRADE_THRESHOLDS:
        if value >= threshold:
            return label
    return Grade.POOR


# =============================================================================
# FACTOR ANALYSIS
# =============================================================================

_GUIDANCE: dict[CreditFactor, tuple[str, list[str]]] = {
    CreditFactor.PAYMENT_HISTORY: (
        "6-12 months",
        [
            "Set up automatic payments for all accounts",
            "Bring any past-due accounts current",
            "Keep every account paid on time",
        ],
    ),
    CreditFactor.UTILIZATION: (
        "1-2 months",
        [
            "Keep utilization below 30% on every card",
            "Pay balances before the statement closing date",
            "Ask for credit limit increases",
        ],
    ),
    CreditFactor.CREDIT_AGE: (
        "Ongoing",
        [
            "Keep your oldest accounts open",
            "Use older cards occasionally so they stay active",
        ],
    ),
    CreditFactor.CREDIT_MIX: (
        "6-12 months",
        [
            "Keep a balance of revolving and installment credit",
            "Don't open accounts only to improve the mix",
        ],
    ),
    CreditFactor.NEW_CREDIT: (
        "3-6 months",
        [
            "Limit new credit applications",
            "Shop for loan rates within a short window",
        ],
    ),
}


@dataclass
class FactorImpact:
    factor: CreditFactor
    weight: float  # percent
    current: float  # sub-score, 0-100
    target: float
    impact: float  # score points gained (negative = lost) moving to target
    priority: Priority
    time_to_improve: str
    recommendations: list[str] = field(default_factory=list)


def _priority(factor: CreditFactor, profile: CreditProfile) -> Priority:
    if factor is CreditFactor.PAYMENT_HISTORY and profile.payment_history < 90:
        return Priority.HIGH
    if factor is CreditFactor.UTILIZATION and profile.utilization > 30:
        return Priority.HIGH
    if factor is CreditFactor.CREDIT_AGE and profile.credit_age_years < 5:
        return Priority.MEDIUM
    if factor is CreditFactor.CREDIT_MIX and profile.credit_mix_score < 3:
        return Priority.MEDIUM
    if factor is CreditFactor.NEW_CREDIT and profile.new_inquiries > 2:
        return Priority.MEDIUM
    return Priority.LOW


def factor_impact(current: CreditProfile, target: CreditProfile) -> list[FactorImpact]:
    """Score points each factor contributes when moving from current to target.

    Sorted by absolute impact, largest first.
    """
    before = sub_scores(current)
    after = sub_scores(target)
    impacts = []
    for factor, weight in WEIGHTS.items():
        time_to_improve, recommendations = _GUIDANCE[factor]
        impacts.append(
            FactorImpact(
                factor=factor,
                weight=weight * 100,
                current=before[factor],
                target=after[factor],
                impact=(after[factor] - before[factor]) * weight * POINTS_PER_UNIT,
                priority=_priority(factor, current),
                time_to_improve=time_to_improve,
                recommendations=list(recommendations),
            )
        )
    return sorted(impacts, key=lambda f: abs(f.impact), reverse=True)


def time_to_target(impacts: list[FactorImpact]) -> str:
    high = sum(1 for f in impacts if f.priority is Priority.HIGH)
    medium = sum(1 for f in impacts if f.priority is Priority.MEDIUM)
    if high > 1:
        return "12-18 months"
    if high == 1:
        return "6-12 months"
    if medium > 1:
        return "6-9 months"
    if medium == 1:
        return "3-6 months"
    return "1-3 months"


# =============================================================================
# TIMELINE
# =============================================================================


@dataclass
class TimelinePoint:
    month: int
    score: int
    milestones: list[str] = field(default_factory=list)


def projection_timeline(current: CreditProfile, target: CreditProfile) -> list[TimelinePoint]:
    """Month-by-month linear path from the current to the target score.

    The duration is ``ceil(|gap| / 10)`` months. Milestones land on the first
    month at or past 25/50/75/100% of the duration.
    """
    start = score(current)
    end = score(target)
    gap = end - start
    if gap == 0:
        return [TimelinePoint(0, start, [MILESTONES[1.00]])]

    months = max(1, math.ceil(abs(gap) / POINTS_PER_MONTH))
    points = [TimelinePoint(month, math.floor(start + gap * month / months + 0.5)) for month in range(months + 1)]
    for fraction, text in MILESTONES.items():
        points[math.ceil(months * fraction)].milestones.append(text)
    return points


# =============================================================================
# ANALYSIS
# =============================================================================


@dataclass
class CreditAnalysis:
    current_score: int
    target_score: int
    current_grade: Grade
    target_grade: Grade
    factors: list[FactorImpact]
    timeline: list[TimelinePoint]
    time_to_target: str
    insights: list[Insight] = field(default_factory=list)

    @property
    def score_change(self) -> int:
        return self.target_score - self.current_score


def validate_profiles(current: dict, target: dict) -> ValidationResult:
    """Field errors for both raw profiles, keyed ``current.x`` / ``target.x``."""
    first = validate_prefixed(current, CREDIT_PROFILE_SCHEMA, "current")
    second = validate_prefixed(target, CREDIT_PROFILE_SCHEMA, "target")
    return ValidationResult(errors={**first.errors, **second.errors})


def analyze_credit(current: CreditProfile, target: CreditProfile) -> CreditAnalysis:
    """Compare a current profile with a target one."""
    current_score = score(current)
    target_score = score(target)
    factors = factor_impact(current, target)
    analysis = CreditAnalysis(
        current_score=current_score,
        target_score=target_score,
        current_grade=grade(current_score),
        target_grade=grade(target_score),
        factors=factors,
        timeline=projection_timeline(current, target),
        time_to_target=time_to_target(factors),
    )
    analysis.insights = _credit_insights(analysis, current)
    return analysis


def _credit_insights(analysis: CreditAnalysis, current: CreditProfile) -> list[Insight]:
    insights = []
    if analysis.current_score < 580:
        insights.append(Insight(InsightLevel.WARNING, "Current score indicates significant credit challenges"))
    elif analysis.current_score >= 740:
        insights.append(Insight(InsightLevel.SUCCESS, "Current score already qualifies for excellent rates"))

    if analysis.score_change > 100:
        insights.append(Insight(InsightLevel.INFO, "Significant score improvement possible with consistent effort"))
    elif analysis.score_change < 30:
        insights.append(Insight(InsightLevel.SUCCESS, "Close to target score - maintain good credit habits"))

    for factor in analysis.factors:
        if factor.priority is Priority.HIGH:
            insights.append(
                Insight(InsightLevel.WARNING, f"Focus on improving {factor.factor.value.lower()} for biggest impact")
            )

    if current.utilization > 50:
        insights.append(Insight(InsightLevel.INFO, "Reducing credit utilization can provide quick score improvements"))
    if current.credit_age_years < 2:
        insights.append(Insight(InsightLevel.INFO, "Building credit history takes time - focus on consistent habits"))
    return insights
