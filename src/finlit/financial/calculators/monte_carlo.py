"""Monte Carlo simulation of a two-asset (stock/bond) portfolio.

Each trial walks a portfolio forward one year at a time: draw a correlated
(stock, bond) return pair, apply the weighted return, add a year of
contributions, floor at zero. Trials run in batches, and the simulator
yields control between batches so a host event loop stays responsive:

    sim = MonteCarloSimulator(params, rng=random.Random(7).random)
    result = sim.run()                 # blocking
    result = await sim.run_async()     # awaits between batches
    for done in sim.iter_batches():    # manual stepping
        ...

``cancel()`` is honoured at the next batch boundary, including a cancel
issued before the run starts. Paths live only inside the running call until
aggregation; a run abandoned mid-way (an ``iter_batches`` generator closed
or dropped early) ends in the CANCELLED state and leaves nothing behind.

The success rate is a heuristic carried over as-is: a trial succeeds when
its final value, drawn down at the withdrawal rate, covers the goal income.
It has no stated error bound.
"""

from __future__ import annotations

import asyncio
import math
import random
from collections.abc import Iterator
from dataclasses import asdict, dataclass, field
from enum import Enum

from loguru import logger

from finlit.core.exceptions import InvalidInputError, SimulationCancelledError
from finlit.financial.models import ALLOCATION_TOLERANCE, AssetAllocation, Insight, InsightLevel
from finlit.financial.primitives import RandomSource, clamp, correlated_pair, parse_amount
from finlit.financial.validation import MONTE_CARLO_SCHEMA, ValidationResult, validate_fields

PERCENTILES = (0.10, 0.25, 0.50, 0.75, 0.90)
MAX_PORTFOLIO_VALUE = 1e15

STOCK_BUCKETS = frozenset({"stocks", "us_stocks", "intl_stocks", "reits", "real_estate", "commodities", "alternatives"})
BOND_BUCKETS = frozenset({"bonds", "cash"})


class SimulationState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    INVALID = "invalid"


@dataclass
class SimulationParameters:
    """Inputs for one simulation run.

    Allocation and withdrawal figures are percents; market assumptions
    (means, volatilities) are annual decimals. Values may be raw strings;
    they are validated when the run starts.
    """

    trials: int = 1000
    batch_size: int = 50
    stock_percent: float = 80.0
    bond_percent: float = 20.0
    initial_amount: float = 100_000.0
    monthly_contribution: float = 1000.0
    time_horizon: int = 30
    withdrawal_rate: float = 4.0
    income_goal: float | None = None  # annual; defaults to withdrawal_rate% of contributions
    stock_mean: float = 0.10
    stock_volatility: float = 0.20
    bond_mean: float = 0.04
    bond_volatility: float = 0.05
    correlation: float = 0.15

    @classmethod
    def from_allocation(cls, allocation: AssetAllocation, **kwargs) -> SimulationParameters:
        """Collapse a bucket allocation into stock-like and bond-like weights."""
        stock = sum(pct for name, pct in allocation.shares.items() if name in STOCK_BUCKETS)
        bond = sum(pct for name, pct in allocation.shares.items() if name in BOND_BUCKETS)
        return cls(stock_percent=stock, bond_percent=bond, **kwargs)

    def validate(self) -> ValidationResult:
        return validate_fields(asdict(self), MONTE_CARLO_SCHEMA)

    def warnings(self) -> list[Insight]:
        total = parse_amount(self.stock_percent) + parse_amount(self.bond_percent)
        if abs(total - 100.0) > ALLOCATION_TOLERANCE:
            return [Insight(InsightLevel.WARNING, f"Stock and bond allocation sum to {total:g}%, not 100%")]
        return []


@dataclass
class YearPercentiles:
    year: int
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float

    @property
    def median(self) -> float:
        return self.p50


@dataclass
class SimulationResult:
    trials: int
    years: list[YearPercentiles]
    success_rate: float  # percent of trials meeting the goal
    goal: float
    warnings: list[Insight] = field(default_factory=list)

    @property
    def final(self) -> YearPercentiles:
        return self.years[-1]

    @property
    def outcome_range(self) -> float:
        """Spread between the 90th and 10th percentile final values."""
        return self.final.p90 - self.final.p10

    @property
    def success_message(self) -> str:
        rate = self.success_rate
        if rate >= 95:
            return "Excellent probability of success"
        if rate >= 90:
            return "Very good probability of success"
        if rate >= 80:
            return "Good probability of success"
        if rate >= 70:
            return "Moderate probability of success"
        if rate >= 50:
            return "Below average probability of success"
        return "Low probability of success - consider adjusting strategy"


@dataclass(frozen=True)
class _Run:
    """Coerced numeric view of the parameters."""

    trials: int
    batch_size: int
    stock_weight: float
    bond_weight: float
    initial: float
    yearly_contribution: float
    years: int
    withdrawal_rate: float
    goal: float
    stock_mean: float
    stock_volatility: float
    bond_mean: float
    bond_volatility: float
    correlation: float

    @classmethod
    def from_params(cls, p: SimulationParameters) -> _Run:
        initial = parse_amount(p.initial_amount)
        monthly = parse_amount(p.monthly_contribution)
        years = int(parse_amount(p.time_horizon))
        withdrawal_rate = parse_amount(p.withdrawal_rate)
        if p.income_goal is not None:
            goal = max(0.0, parse_amount(p.income_goal))
        else:
            goal = withdrawal_rate * (initial + monthly * 12 * years) / 100
        return cls(
            trials=int(parse_amount(p.trials)),
            batch_size=int(parse_amount(p.batch_size)),
            stock_weight=parse_amount(p.stock_percent) / 100,
            bond_weight=parse_amount(p.bond_percent) / 100,
            initial=initial,
            yearly_contribution=monthly * 12,
            years=years,
            withdrawal_rate=withdrawal_rate,
            goal=goal,
            stock_mean=parse_amount(p.stock_mean),
            stock_volatility=parse_amount(p.stock_volatility),
            bond_mean=parse_amount(p.bond_mean),
            bond_volatility=parse_amount(p.bond_volatility),
            correlation=parse_amount(p.correlation),
        )


def simulate_path(run: _Run, rng: RandomSource) -> list[float]:
    """One trial: portfolio value for year 0 through ``run.years``.

    Values stay within ``[0, MAX_PORTFOLIO_VALUE]``; a year whose growth
    overflows lands on the cap.
    """
    value = run.initial
    path = [value]
    for _ in range(run.years):
        stock_return, bond_return = correlated_pair(
            run.stock_mean,
            run.stock_volatility,
            run.bond_mean,
            run.bond_volatility,
            run.correlation,
            rng,
        )
        portfolio_return = run.stock_weight * stock_return + run.bond_weight * bond_return
        grown = value * (1 + portfolio_return) + run.yearly_contribution
        if math.isnan(grown):
            grown = 0.0
        value = clamp(grown, 0.0, MAX_PORTFOLIO_VALUE)
        path.append(value)
    return path


def _percentile(sorted_values: list[float], p: float) -> float:
    index = min(len(sorted_values) - 1, math.floor(p * len(sorted_values)))
    return sorted_values[index]


def aggregate(paths: list[list[float]], run: _Run) -> tuple[list[YearPercentiles], float]:
    """Per-year percentile bands and the success rate across all trials."""
    years = []
    for year in range(run.years + 1):
        values = sorted(path[year] for path in paths)
        years.append(YearPercentiles(year, *(_percentile(values, p) for p in PERCENTILES)))

    successes = sum(1 for path in paths if path[-1] * run.withdrawal_rate / 100 >= run.goal)
    return years, successes / len(paths) * 100


class MonteCarloSimulator:
    """Batched, cancellable simulation over an injectable random source.

    Args:
        params: Simulation inputs.
        rng: Zero-argument callable returning uniforms in [0, 1). Defaults
            to a fresh unseeded ``random.Random``; pass a seeded one for
            reproducible runs.
    """

    def __init__(self, params: SimulationParameters, rng: RandomSource | None = None):
        self.params = params
        self.rng = rng or random.Random().random
        self.state = SimulationState.IDLE
        self.completed_trials = 0
        self.result: SimulationResult | None = None
        self._cancel_requested = False

    def cancel(self) -> None:
        """Ask the simulation to stop at its next batch boundary.

        Called before a run starts, the next run stops before its first
        batch. The request is consumed by the run it stops; a run that
        finishes first clears it.
        """
        self._cancel_requested = True

    def _start(self) -> _Run:
        validation = self.params.validate()
        if not validation.is_valid:
            self.state = SimulationState.INVALID
            raise InvalidInputError("Invalid simulation parameters", errors=validation.errors)
        self.completed_trials = 0
        self.result = None
        self.state = SimulationState.RUNNING
        return _Run.from_params(self.params)

    def iter_batches(self) -> Iterator[int]:
        """Run one batch per step, yielding the number of completed trials.

        Raises:
            InvalidInputError: Parameters failed validation (state INVALID).
            SimulationCancelledError: ``cancel()`` was called before the run
                or between batches (state CANCELLED).
        """
        run = self._start()
        logger.info(f"Monte Carlo started: {run.trials} trials, {run.years} years, batch size {run.batch_size}")

        paths: list[list[float]] = []
        try:
            while len(paths) < run.trials:
                if self._cancel_requested:
                    self._cancel_requested = False
                    self.state = SimulationState.CANCELLED
                    logger.info(f"Monte Carlo cancelled after {len(paths)} of {run.trials} trials")
                    raise SimulationCancelledError(f"Simulation cancelled after {len(paths)} trials")

                batch = [simulate_path(run, self.rng) for _ in range(min(run.batch_size, run.trials - len(paths)))]
                paths.extend(batch)
                self.completed_trials = len(paths)
                yield self.completed_trials

            years, success_rate = aggregate(paths, run)
            self.result = SimulationResult(
                trials=run.trials,
                years=years,
                success_rate=success_rate,
                goal=run.goal,
                warnings=self.params.warnings(),
            )
            self._cancel_requested = False
            self.state = SimulationState.COMPLETE
            logger.info(f"Monte Carlo complete: success rate {success_rate:.1f}%")
        finally:
            if self.state is SimulationState.RUNNING:
                self.state = SimulationState.CANCELLED
                logger.info(f"Monte Carlo abandoned after {len(paths)} of {run.trials} trials")

    def run(self) -> SimulationResult:
        for _ in self.iter_batches():
            pass
        return self.result

    async def run_async(self) -> SimulationResult:
        """Like ``run`` but awaits between batches."""
        for _ in self.iter_batches():
            await asyncio.sleep(0)
        return self.result


def run_simulation(params: SimulationParameters, rng: RandomSource | None = None) -> SimulationResult:
    return MonteCarloSimulator(params, rng).run()
