"""Debt payoff projection using the avalanche or snowball method."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from loguru import logger

from finlit.financial.primitives import parse_amount

MAX_PAYOFF_MONTHS = 360  # 30 years
PAID_OFF_EPSILON = 0.01


class PayoffStrategy(Enum):
    AVALANCHE = "avalanche"  # highest interest rate first
    SNOWBALL = "snowball"  # smallest balance first


def parse_payoff_strategy(raw: object) -> PayoffStrategy:
    """Map a strategy name (or enum) to ``PayoffStrategy``; unknown values mean AVALANCHE."""
    if isinstance(raw, PayoffStrategy):
        return raw
    try:
        return PayoffStrategy(str(raw or "").strip().lower())
    except ValueError:
        logger.debug(f"Unknown payoff strategy {raw!r}, using avalanche")
        return PayoffStrategy.AVALANCHE


@dataclass
class Debt:
    """One debt. ``interest_rate`` is an annual percent."""

    name: str
    balance: float
    minimum_payment: float
    interest_rate: float

    def __post_init__(self):
        self.balance = max(0.0, parse_amount(self.balance))
        self.minimum_payment = max(0.0, parse_amount(self.minimum_payment))
        self.interest_rate = max(0.0, parse_amount(self.interest_rate))


@dataclass
class PayoffMonth:
    month: int
    total_balance: float
    total_paid: float
    total_interest: float
    debts_paid_off: int


@dataclass
class PayoffPlan:
    strategy: PayoffStrategy
    order: list[str]
    months: list[PayoffMonth] = field(default_factory=list)

    @property
    def months_to_payoff(self) -> int:
        return self.months[-1].month if self.months else 0

    @property
    def total_interest(self) -> float:
        return self.months[-1].total_interest if self.months else 0.0

    @property
    def total_paid(self) -> float:
        return self.months[-1].total_paid if self.months else 0.0

    @property
    def is_paid_off(self) -> bool:
        return not self.months or self.months[-1].total_balance < PAID_OFF_EPSILON


def calculate_debt_payoff(
    debts: list[Debt],
    extra_payment: float = 0.0,
    strategy: PayoffStrategy | str = PayoffStrategy.AVALANCHE,
) -> PayoffPlan:
    """Simulate monthly payments until every debt is retired or 360 months pass.

    Each month every open debt accrues interest and receives its minimum
    payment; the extra payment then goes to the first debt still open in
    strategy order, and whatever it does not need rolls to the next one.
    An unknown strategy name falls back to avalanche. Debts whose minimum
    never covers interest leave the plan unpaid at the cap (``is_paid_off`` is False).
    """
    strategy = parse_payoff_strategy(strategy)
    extra = max(0.0, parse_amount(extra_payment))

    if strategy is PayoffStrategy.AVALANCHE:
        ordered = sorted(debts, key=lambda d: d.interest_rate, reverse=True)
    else:
        ordered = sorted(debts, key=lambda d: d.balance)

    plan = PayoffPlan(strategy=strategy, order=[d.name for d in ordered])
    remaining = [replace(d) for d in ordered if d.balance > PAID_OFF_EPSILON]
    total_paid = 0.0
    total_interest = 0.0
    month = 0

    while remaining and month < MAX_PAYOFF_MONTHS:
        month += 1
        for debt in remaining:
            interest = debt.balance * debt.interest_rate / 100 / 12
            total_interest += interest
            debt.balance += interest
            payment = min(debt.minimum_payment, debt.balance)
            debt.balance -= payment
            total_paid += payment

        leftover = extra
        for debt in remaining:
            if leftover <= 0:
                break
            if debt.balance <= PAID_OFF_EPSILON:
                continue
            applied = min(leftover, debt.balance)
            debt.balance -= applied
            leftover -= applied
            total_paid += applied

        remaining = [d for d in remaining if d.balance > PAID_OFF_EPSILON]
        plan.months.append(
            PayoffMonth(
                month=month,
                total_balance=sum(d.balance for d in remaining),
                total_paid=total_paid,
                total_interest=total_interest,
                debts_paid_off=len(ordered) - len(remaining),
            )
        )
    return plan


def compare_strategies(debts: list[Debt], extra_payment: float = 0.0) -> dict[PayoffStrategy, PayoffPlan]:
    """Run both strategies on the same debts."""
    return {s: calculate_debt_payoff(debts, extra_payment, s) for s in PayoffStrategy}
