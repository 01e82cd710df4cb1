"""
Tax Tables for the Paycheck and Income Tax Calculators - 2025 Tax Year

Single source of truth for all tax constants used by the tax engine.
This module has NO dependencies on other modules to prevent import cycles.

These are teaching figures, not filing-grade law: federal brackets and
standard deductions follow the published 2025 numbers, while state taxes are
a single illustrative effective rate per state.

Sources:
- Federal brackets: IRS Rev. Proc. 2024-40
- Standard deduction: OBBBA adjustments for 2025
- Social Security wage base: SSA 2025 fact sheet

Last updated: January 2025
"""

from enum import Enum
from typing import NamedTuple

# =============================================================================
# FILING STATUS
# =============================================================================


class FilingStatus(Enum):
    """Tax filing status."""

    SINGLE = "single"
    MARRIED_FILING_JOINTLY = "married_filing_jointly"
    MARRIED_FILING_SEPARATELY = "married_filing_separately"
    HEAD_OF_HOUSEHOLD = "head_of_household"


class TaxBracket(NamedTuple):
    """One marginal-rate slice of income: ``[min, max)`` taxed at ``rate``."""

    min: float
    max: float
    rate: float

    @property
    def width(self) -> float:
        return self.max - self.min


def _brackets(bounds: list[float], rates: list[float]) -> list[TaxBracket]:
    """Build a contiguous bracket list from upper bounds; the last is unbounded."""
    lows = [0.0, *bounds]
    highs = [*bounds, float("inf")]
    return [TaxBracket(lo, hi, rate) for lo, hi, rate in zip(lows, highs, rates, strict=True)]


_FEDERAL_RATES = [0.10, 0.12, 0.22, 0.24, 0.32, 0.35, 0.37]

# =============================================================================
# FEDERAL TAX BRACKETS 2025
# =============================================================================

TAX_BRACKETS_2025_SINGLE = _brackets(
    [11_925, 48_475, 103_350, 197_300, 250_525, 626_350],
    _FEDERAL_RATES,
)

TAX_BRACKETS_2025_MFJ = _brackets(
    [23_850, 96_950, 206_700, 394_600, 501_050, 751_600],
    _FEDERAL_RATES,
)

TAX_BRACKETS_2025_MFS = _brackets(
    [11_925, 48_475, 103_350, 197_300, 250_525, 375_800],
    _FEDERAL_RATES,
)

TAX_BRACKETS_2025_HOH = _brackets(
    [17_000, 64_850, 103_350, 197_300, 250_500, 626_350],
    _FEDERAL_RATES,
)

FEDERAL_BRACKETS_2025 = {
    FilingStatus.SINGLE: TAX_BRACKETS_2025_SINGLE,
    FilingStatus.MARRIED_FILING_JOINTLY: TAX_BRACKETS_2025_MFJ,
    FilingStatus.MARRIED_FILING_SEPARATELY: TAX_BRACKETS_2025_MFS,
    FilingStatus.HEAD_OF_HOUSEHOLD: TAX_BRACKETS_2025_HOH,
}

# Standard deduction 2025 (OBBBA)
STANDARD_DEDUCTION_2025 = {
    FilingStatus.SINGLE: 15_750,
    FilingStatus.MARRIED_FILING_JOINTLY: 31_500,
    FilingStatus.MARRIED_FILING_SEPARATELY: 15_750,
    FilingStatus.HEAD_OF_HOUSEHOLD: 23_625,
}


# =============================================================================
# PAYROLL (FICA) 2025
# =============================================================================

SOCIAL_SECURITY_RATE = 0.062
SOCIAL_SECURITY_WAGE_BASE_2025 = 176_100
MEDICARE_RATE = 0.0145  # No cap; additional 0.9% surtax not modelled
SELF_EMPLOYMENT_TAX_RATE = 0.153  # 12.4% Social Security + 2.9% Medicare


# =============================================================================
# STATE DISABILITY INSURANCE
# =============================================================================
# Employee-paid short-term disability, only in states that impose it.

STATE_DISABILITY_RATES = {
    "CA": 0.012,
    "HI": 0.005,
    "NJ": 0.0023,
    "NY": 0.005,
    "RI": 0.012,
}


# =============================================================================
# STATE INCOME TAX (flat illustrative effective rates)
# =============================================================================

STATE_TAX_RATES = {
    "AL": 0.04, "AK": 0.00, "AZ": 0.025, "AR": 0.04, "CA": 0.05,
    "CO": 0.044, "CT": 0.05, "DE": 0.05, "DC": 0.06, "FL": 0.00,
    "GA": 0.0539, "HI": 0.07, "ID": 0.058, "IL": 0.0495, "IN": 0.03,
    "IA": 0.038, "KS": 0.05, "KY": 0.04, "LA": 0.03, "ME": 0.06,
    "MD": 0.0475, "MA": 0.05, "MI": 0.0425, "MN": 0.068, "MS": 0.044,
    "MO": 0.047, "MT": 0.059, "NE": 0.052, "NV": 0.00, "NH": 0.00,
    "NJ": 0.045, "NM": 0.049, "NY": 0.06, "NC": 0.0425, "ND": 0.0195,
    "OH": 0.035, "OK": 0.0475, "OR": 0.08, "PA": 0.0307, "RI": 0.0475,
    "SC": 0.062, "SD": 0.00, "TN": 0.00, "TX": 0.00, "UT": 0.0455,
    "VT": 0.066, "VA": 0.0575, "WA": 0.00, "WV": 0.0482, "WI": 0.053,
    "WY": 0.00,
}  # fmt: skip

NO_INCOME_TAX_STATES = frozenset(code for code, rate in STATE_TAX_RATES.items() if rate == 0)


# =============================================================================
# CONTRIBUTION LIMITS 2025
# =============================================================================

RETIREMENT_401K_LIMIT_2025 = 23_500
IRA_LIMIT_2025 = 7_000
HSA_LIMIT_2025_SELF = 4_300
HSA_LIMIT_2025_FAMILY = 8_550
