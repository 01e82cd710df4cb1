"""Core financial data models.

Plain records for the inputs the calculators share: holdings, allocations,
credit profiles and option legs. Each is created fresh per calculation and
coerces its numeric fields in ``__post_init__``. Bad input becomes 0 (or is
clamped) instead of raising, so a form being edited mid-keystroke still
produces a usable object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from finlit.financial.primitives import clamp_percent, parse_amount

ALLOCATION_TOLERANCE = 0.5  # percentage points either side of 100


class AssetClass(Enum):
    US_STOCKS = "us_stocks"
    INTL_STOCKS = "intl_stocks"
    BONDS = "bonds"
    REITS = "reits"
    COMMODITIES = "commodities"
    CASH = "cash"


class Sector(Enum):
    TECH = "tech"
    FINANCE = "finance"
    HEALTHCARE = "healthcare"
    CONSUMER = "consumer"
    ENERGY = "energy"
    UTILITIES = "utilities"
    GOVERNMENT = "government"
    REAL_ESTATE = "real_estate"
    MATERIALS = "materials"


class Region(Enum):
    US = "us"
    DEVELOPED = "developed"
    EMERGING = "emerging"
    GLOBAL = "global"


def _parse_bucket(enum_cls, raw, default):
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw or "").strip().lower())
    except ValueError:
        logger.debug(f"Unknown {enum_cls.__name__} {raw!r}, using {default.value}")
        return default


def parse_asset_class(raw: object) -> AssetClass:
    """Bucket name to ``AssetClass``; unknown names mean US_STOCKS."""
    return _parse_bucket(AssetClass, raw, AssetClass.US_STOCKS)


def parse_sector(raw: object) -> Sector:
    """Bucket name to ``Sector``; unknown names mean TECH."""
    return _parse_bucket(Sector, raw, Sector.TECH)


def parse_region(raw: object) -> Region:
    """Bucket name to ``Region``; unknown names mean GLOBAL."""
    return _parse_bucket(Region, raw, Region.GLOBAL)


class InsightLevel(Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class Insight:
    """A threshold-driven observation attached to a calculator result."""

    level: InsightLevel
    message: str


@dataclass
class Holding:
    """Individual investment position.

    Attributes:
        symbol: Ticker or fund symbol.
        value: Current market value in currency units; negative or
            unparseable values are stored as 0.
        asset_class: Asset-class bucket.
        sector: Sector bucket.
        region: Geographic bucket.
    """

    symbol: str
    value: float
    asset_class: AssetClass
    sector: Sector
    region: Region

    def __post_init__(self):
        self.value = max(0.0, parse_amount(self.value))
        # Raw bucket names from forms; unknown names take the parse_* default
        self.asset_class = parse_asset_class(self.asset_class)
        self.sector = parse_sector(self.sector)
        self.region = parse_region(self.region)


@dataclass
class AssetAllocation:
    """Percent shares keyed by bucket name.

    The 100% total is checked with a tolerance rather than enforced,
    because callers may be mid-edit.

    Attributes:
        shares: Bucket name -> percent (0-100). Negative entries are
            clamped to 0.
    """

    shares: dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        self.shares = {
            getattr(name, "value", name): clamp_percent(parse_amount(pct), 0.0, float("inf"))
            for name, pct in self.shares.items()
        }

    @property
    def total(self) -> float:
        """Sum of all shares."""
        return sum(self.shares.values())

    def is_complete(self, tolerance: float = ALLOCATION_TOLERANCE) -> bool:
        """True when shares add up to 100 within ``tolerance``."""
        return abs(self.total - 100.0) <= tolerance

    def percent(self, bucket: str | Enum) -> float:
        """Share for ``bucket`` (0 when absent)."""
        return self.shares.get(getattr(bucket, "value", bucket), 0.0)

    def percentages(self) -> list[float]:
        return list(self.shares.values())


@dataclass
class CreditProfile:
    """Inputs to the credit-score model.

    Attributes:
        payment_history: Percent of payments made on time (0-100).
        utilization: Percent of revolving credit in use (0-100).
        credit_age_years: Average age of accounts in years.
        credit_mix_score: Variety of credit types on a 0-5 scale.
        new_inquiries: Hard inquiries in the last two years.
    """

    payment_history: float
    utilization: float
    credit_age_years: float
    credit_mix_score: float
    new_inquiries: float

    def __post_init__(self):
        self.payment_history = clamp_percent(parse_amount(self.payment_history))
        self.utilization = clamp_percent(parse_amount(self.utilization))
        self.credit_age_years = max(0.0, parse_amount(self.credit_age_years))
        self.credit_mix_score = max(0.0, parse_amount(self.credit_mix_score))
        self.new_inquiries = max(0.0, parse_amount(self.new_inquiries))

    def as_dict(self) -> dict[str, float]:
        return {
            "payment_history": self.payment_history,
            "utilization": self.utilization,
            "credit_age_years": self.credit_age_years,
            "credit_mix_score": self.credit_mix_score,
            "new_inquiries": self.new_inquiries,
        }


@dataclass
class OptionLeg:
    """One option position.

    Attributes:
        strike: Strike price.
        premium: Per-share premium. ``None`` (or 0) means "use the
            theoretical Black-Scholes price".
        is_call: Call when True, put otherwise.
        is_long: Bought when True, written when False.
    """

    strike: float
    premium: float | None = None
    is_call: bool = True
    is_long: bool = True

    def __post_init__(self):
        self.strike = max(0.0, parse_amount(self.strike))
        if self.premium is not None:
            self.premium = max(0.0, parse_amount(self.premium))

    @property
    def sign(self) -> int:
        """+1 for long legs, -1 for short legs."""
        return 1 if self.is_long else -1

    def intrinsic(self, price: float) -> float:
        """Per-share value at expiration for an underlying at ``price``."""
        if self.is_call:
            return max(0.0, price - self.strike)
        return max(0.0, self.strike - price)
