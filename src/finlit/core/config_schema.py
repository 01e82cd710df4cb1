"""Pydantic models for config validation.

Opt-in schema validation for ``Config.config_data``.  Call
``Config.validated()`` to obtain a typed, validated ``EngineConfig``
instance.  Existing dict-based access continues to work unchanged.

Environment overrides are parsed as YAML scalars by ``Config``; anything
still a string (``"5000"`` from a quoted YAML value) is coerced by
pydantic's lax mode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from finlit.core.utils.logging import LEVELS

if TYPE_CHECKING:
    from finlit.financial.calculators.monte_carlo import SimulationParameters
    from finlit.financial.calculators.portfolio import RebalancePlan, ScoreWeights
    from finlit.financial.models import AssetAllocation


class MonteCarloConfig(BaseModel):
    """Market assumptions and batching for the Monte Carlo simulator."""

    trials: int = Field(default=1000, ge=1, le=100_000)
    batch_size: int = Field(default=50, ge=1, le=100_000)
    stock_mean: float = Field(default=0.10, ge=-1, le=1)
    stock_volatility: float = Field(default=0.20, ge=0, le=5)
    bond_mean: float = Field(default=0.04, ge=-1, le=1)
    bond_volatility: float = Field(default=0.05, ge=0, le=5)
    correlation: float = Field(default=0.15, ge=-1, le=1)


class ScoreWeightsConfig(BaseModel):
    """Weights of the four diversification sub-scores."""

    asset_class: float = Field(default=0.40, ge=0)
    geographic: float = Field(default=0.25, ge=0)
    sector: float = Field(default=0.25, ge=0)
    concentration: float = Field(default=0.10, ge=0)

    @model_validator(mode="after")
    def _weights_sum_to_one(self) -> ScoreWeightsConfig:
        total = self.asset_class + self.geographic + self.sector + self.concentration
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"score weights must sum to 1.0, got {total:.4f}")
        return self


class PortfolioConfig(BaseModel):
    """Diversification scoring and rebalancing knobs."""

    weights: ScoreWeightsConfig = ScoreWeightsConfig()
    rebalance_threshold: float = Field(default=5.0, ge=0, le=100)
    minimum_trade: float = Field(default=100.0, ge=0)


class TaxConfig(BaseModel):
    """Payroll assumptions shared by the tax calculators."""

    year: int = 2025
    social_security_wage_base: float = Field(default=176_100, gt=0)


class LoggingConfig(BaseModel):
    """Log sink settings passed to ``setup_logging``."""

    level: str = "WARNING"
    engine_level: str | None = None  # threshold for finlit.financial; None follows level
    file: str | None = None

    @field_validator("level", "engine_level", mode="before")
    @classmethod
    def _known_level(cls, v: object) -> object:
        if not isinstance(v, str):
            return v
        name = v.strip().upper()
        if name not in LEVELS:
            raise ValueError(f"unknown log level {v!r}")
        return name


class EngineConfig(BaseModel):
    """Root configuration model.

    Uses ``extra="allow"`` so consumers can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    monte_carlo: MonteCarloConfig = MonteCarloConfig()
    portfolio: PortfolioConfig = PortfolioConfig()
    tax: TaxConfig = TaxConfig()
    logging: LoggingConfig = LoggingConfig()

    def score_weights(self) -> ScoreWeights:
        """Build the portfolio engine's weight record from this config."""
        from finlit.financial.calculators.portfolio import ScoreWeights

        w = self.portfolio.weights
        return ScoreWeights(
            asset_class=w.asset_class,
            geographic=w.geographic,
            sector=w.sector,
            concentration=w.concentration,
        )

    def simulation_parameters(self, **overrides) -> SimulationParameters:
        """Build Monte Carlo parameters from the market assumptions.

        Keyword overrides (e.g. ``initial_amount``) win over config values.
        """
        from finlit.financial.calculators.monte_carlo import SimulationParameters

        mc = self.monte_carlo
        values = {
            "trials": mc.trials,
            "batch_size": mc.batch_size,
            "stock_mean": mc.stock_mean,
            "stock_volatility": mc.stock_volatility,
            "bond_mean": mc.bond_mean,
            "bond_volatility": mc.bond_volatility,
            "correlation": mc.correlation,
        }
        values.update(overrides)
        return SimulationParameters(**values)

    def rebalance_plan(self, current: AssetAllocation, target: AssetAllocation, total_value: float) -> RebalancePlan:
        """Rebalancing trades using the configured threshold and minimum trade."""
        from finlit.financial.calculators.portfolio import rebalance_plan

        return rebalance_plan(
            current,
            target,
            total_value,
            threshold=self.portfolio.rebalance_threshold,
            minimum_trade=self.portfolio.minimum_trade,
        )
