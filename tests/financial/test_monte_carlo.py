"""Tests for finlit.financial.calculators.monte_carlo."""

import asyncio
import random

import pytest

from finlit.core.exceptions import InvalidInputError, SimulationCancelledError
from finlit.financial.calculators.monte_carlo import (
    MAX_PORTFOLIO_VALUE,
    MonteCarloSimulator,
    SimulationParameters,
    SimulationState,
    _Run,
    run_simulation,
    simulate_path,
)
from finlit.financial.models import AssetAllocation


class TestParameters:
    def test_from_allocation(self):
        alloc = AssetAllocation({"stocks": 60, "real_estate": 10, "bonds": 25, "cash": 5})
        params = SimulationParameters.from_allocation(alloc, trials=10)
        assert params.stock_percent == 70
        assert params.bond_percent == 30
        assert params.trials == 10

    def test_validation(self):
        result = SimulationParameters(trials=0, correlation=2).validate()
        assert set(result.errors) == {"trials", "correlation"}

    def test_market_assumptions_bounded(self):
        result = SimulationParameters(stock_mean=1e200, bond_mean=-3, stock_volatility=-0.1, bond_volatility=9).validate()
        assert set(result.errors) == {"stock_mean", "bond_mean", "stock_volatility", "bond_volatility"}

    def test_allocation_warning(self):
        warnings = SimulationParameters(stock_percent=60, bond_percent=30).warnings()
        assert len(warnings) == 1
        assert "90%" in warnings[0].message


class TestSimulation:
    @pytest.mark.smoke
    def test_single_year_stock_median(self, seeded_rng):
        params = SimulationParameters(
            trials=1000,
            stock_percent=100,
            bond_percent=0,
            initial_amount=100_000,
            monthly_contribution=0,
            time_horizon=1,
        )
        result = run_simulation(params, seeded_rng)
        assert result.final.median == pytest.approx(110_000, abs=3_000)
        assert result.years[0].p50 == 100_000

    def test_percentiles_ordered(self, seeded_rng):
        result = run_simulation(SimulationParameters(trials=300, time_horizon=15), seeded_rng)
        assert len(result.years) == 16
        for year in result.years:
            assert year.p10 <= year.p25 <= year.p50 <= year.p75 <= year.p90

    def test_reproducible(self):
        params = SimulationParameters(trials=100, time_horizon=5)
        first = run_simulation(params, random.Random(7).random)
        second = run_simulation(params, random.Random(7).random)
        assert first.years == second.years
        assert first.success_rate == second.success_rate

    def test_values_never_negative(self):
        params = SimulationParameters(trials=200, time_horizon=10, stock_volatility=3.0, monthly_contribution=0)
        result = run_simulation(params, random.Random(5).random)
        assert all(year.p10 >= 0 for year in result.years)

    def test_success_rate_extremes(self, seeded_rng):
        easy = run_simulation(SimulationParameters(trials=100, time_horizon=5, income_goal=0), seeded_rng)
        hard = run_simulation(SimulationParameters(trials=100, time_horizon=5, income_goal=1e12), seeded_rng)
        assert easy.success_rate == 100
        assert hard.success_rate == 0
        assert hard.success_message.startswith("Low probability")

    def test_zero_horizon(self, seeded_rng):
        result = run_simulation(SimulationParameters(trials=10, time_horizon=0), seeded_rng)
        assert len(result.years) == 1
        assert result.final.p90 == 100_000


    @pytest.mark.parametrize("mean, expected", [(1e200, MAX_PORTFOLIO_VALUE), (-1e200, 0.0)])
    def test_extreme_returns_stay_bounded(self, seeded_rng, mean, expected):
        params = SimulationParameters(stock_mean=mean, stock_volatility=0, time_horizon=3, trials=10)
        path = simulate_path(_Run.from_params(params), seeded_rng)
        assert len(path) == 4
        assert all(0 <= value <= MAX_PORTFOLIO_VALUE for value in path)
        assert path[-1] == expected


class TestSimulatorLifecycle:
    def test_states(self, seeded_rng):
        sim = MonteCarloSimulator(SimulationParameters(trials=120, batch_size=50, time_horizon=2), seeded_rng)
        assert sim.state is SimulationState.IDLE
        progress = list(sim.iter_batches())
        assert progress == [50, 100, 120]
        assert sim.state is SimulationState.COMPLETE
        assert sim.result.trials == 120

    def test_invalid_parameters(self, seeded_rng):
        sim = MonteCarloSimulator(SimulationParameters(trials="abc"), seeded_rng)
        with pytest.raises(InvalidInputError) as excinfo:
            sim.run()
        assert "trials" in excinfo.value.errors
        assert sim.state is SimulationState.INVALID

    def test_cancel_between_batches(self, seeded_rng):
        sim = MonteCarloSimulator(SimulationParameters(trials=500, batch_size=50, time_horizon=3), seeded_rng)
        batches = sim.iter_batches()
        assert next(batches) == 50
        sim.cancel()
        with pytest.raises(SimulationCancelledError):
            next(batches)
        assert sim.state is SimulationState.CANCELLED
        assert sim.result is None
        assert sim.completed_trials == 50

    def test_rerun_after_cancel(self, seeded_rng):
        sim = MonteCarloSimulator(SimulationParameters(trials=100, batch_size=50, time_horizon=2), seeded_rng)
        batches = sim.iter_batches()
        next(batches)
        sim.cancel()
        with pytest.raises(SimulationCancelledError):
            next(batches)
        result = sim.run()
        assert result.trials == 100
        assert sim.state is SimulationState.COMPLETE

    def test_run_async(self, seeded_rng):
        sim = MonteCarloSimulator(SimulationParameters(trials=200, time_horizon=5), seeded_rng)
        result = asyncio.run(sim.run_async())
        assert result.trials == 200
        assert sim.state is SimulationState.COMPLETE

    def test_async_cancel_yields_to_event_loop(self, seeded_rng):
        sim = MonteCarloSimulator(SimulationParameters(trials=1000, batch_size=10, time_horizon=5), seeded_rng)

        async def scenario():
            task = asyncio.create_task(sim.run_async())
            await asyncio.sleep(0)
            # The simulation has handed control back after its first batch
            assert sim.completed_trials == 10
            sim.cancel()
            with pytest.raises(SimulationCancelledError):
                await task

        asyncio.run(scenario())
        assert sim.state is SimulationState.CANCELLED
        assert sim.completed_trials < 1000

    def test_closed_generator_is_cancelled(self, seeded_rng):
        sim = MonteCarloSimulator(SimulationParameters(trials=500, batch_size=50, time_horizon=3), seeded_rng)
        batches = sim.iter_batches()
        next(batches)
        batches.close()
        assert sim.state is SimulationState.CANCELLED
        assert sim.result is None

    def test_cancel_before_run(self, seeded_rng):
        sim = MonteCarloSimulator(SimulationParameters(trials=100, batch_size=50, time_horizon=2), seeded_rng)
        sim.cancel()
        with pytest.raises(SimulationCancelledError):
            sim.run()
        assert sim.state is SimulationState.CANCELLED
        assert sim.completed_trials == 0
        # The request is used up; the next run goes through
        assert sim.run().trials == 100
        assert sim.state is SimulationState.COMPLETE
