"""Numeric primitives shared by every calculator.

Safe parsing and clamping, plus the normal-distribution helpers used by the
options pricer and the Monte Carlo simulator. Every calculator routes raw
input through ``parse_amount`` so a half-typed field never reaches the math
as NaN, Infinity or a string.

Pure math; loguru is the only import outside the standard library.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from decimal import Decimal, InvalidOperation

from loguru import logger

RandomSource = Callable[[], float]
"""A zero-argument callable returning uniform floats in [0, 1), e.g. ``random.Random(7).random``."""

# Abramowitz & Stegun 7.1.26 coefficients (max abs error ~1.5e-7)
_ERF_P = 0.3275911
_ERF_A1 = 0.254829592
_ERF_A2 = -0.284496736
_ERF_A3 = 1.421413741
_ERF_A4 = -1.453152027
_ERF_A5 = 1.061405429

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)

_STRIP_CHARS = str.maketrans("", "", "$,%_ ")


def parse_amount(raw: object, default: float = 0.0) -> float:
    """Coerce user input to a finite float.

    Accepts numbers, ``Decimal`` and numeric strings (currency symbols,
    thousands separators and a trailing ``%`` are ignored). Anything else
    (empty strings, ``None``, booleans, garbage text, NaN, Infinity)
    yields ``default``.

    Examples:
        >>> parse_amount("$1,250.50")
        1250.5
        >>> parse_amount("abc")
        0.0
    """
    if raw is None or isinstance(raw, bool):
        return default

    value: float
    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            return default
    elif isinstance(raw, Decimal):
        try:
            value = float(raw)
        except (InvalidOperation, OverflowError, ValueError):
            return default
    elif isinstance(raw, str):
        text = raw.strip().translate(_STRIP_CHARS)
        if not text:
            return default
        try:
            value = float(text)
        except ValueError:
            logger.debug(f"Unparseable amount {raw!r}, using {default}")
            return default
    else:
        logger.debug(f"Unsupported amount type {type(raw).__name__}, using {default}")
        return default

    if not math.isfinite(value):
        return default
    return value


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp ``x`` into ``[lo, hi]``."""
    return max(lo, min(hi, x))


def clamp_percent(x: float, lo: float = 0.0, hi: float = 100.0) -> float:
    """Clamp a percentage into ``[lo, hi]`` (0-100 by default). NaN maps to ``lo``."""
    if math.isnan(x):
        return lo
    return clamp(x, lo, hi)


def parse_percent(raw: object, lo: float = 0.0, hi: float = 100.0) -> float:
    """Parse then clamp a percentage field."""
    return clamp_percent(parse_amount(raw), lo, hi)


def finite_or(x: float, default: float = 0.0) -> float:
    """Return ``x`` if it is a finite number, else ``default``."""
    if isinstance(x, (int, float)) and math.isfinite(x):
        return float(x)
    return default


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` for a zero denominator or non-finite result."""
    if denominator == 0:
        return default
    return finite_or(numerator / denominator, default)


def sample_standard_normal(rng: RandomSource) -> float:
    """Draw one N(0, 1) sample with the Box-Muller transform.

    ``1 - rng()`` keeps the log argument in (0, 1] so ``log(0)`` never occurs.
    """
    u1 = 1.0 - rng()
    u2 = rng()
    return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


def sample_normal(mean: float, stdev: float, rng: RandomSource) -> float:
    """Draw one sample from N(mean, stdev²) using the injected random source."""
    return mean + stdev * sample_standard_normal(rng)


def correlated_pair(
    mean_a: float,
    vol_a: float,
    mean_b: float,
    vol_b: float,
    correlation: float,
    rng: RandomSource,
) -> tuple[float, float]:
    """Draw two normal samples with the given correlation.

    The second standard draw is built as ``corr*z_a + sqrt(1-corr²)*z_indep``
    before scaling, so each marginal keeps its own mean and volatility.
    """
    corr = clamp(correlation, -1.0, 1.0)
    z_a = sample_standard_normal(rng)
    z_indep = sample_standard_normal(rng)
    z_b = corr * z_a + math.sqrt(1.0 - corr * corr) * z_indep
    return mean_a + vol_a * z_a, mean_b + vol_b * z_b


def erf(x: float) -> float:
    """Error function, Abramowitz-Stegun 7.1.26 approximation.

    An approximation, not exact: absolute error is below ~1.5e-7. The
    result is odd-symmetric by construction, so ``erf(-x) == -erf(x)``.
    """
    sign = -1.0 if x < 0 else 1.0
    x = abs(x)
    t = 1.0 / (1.0 + _ERF_P * x)
    poly = ((((_ERF_A5 * t + _ERF_A4) * t + _ERF_A3) * t + _ERF_A2) * t + _ERF_A1) * t
    return sign * (1.0 - poly * math.exp(-x * x))


def normal_cdf(x: float) -> float:
    """Standard normal CDF via the approximate ``erf`` (accuracy ~1e-7)."""
    return 0.5 * (1.0 + erf(x / math.sqrt(2.0)))


def normal_pdf(x: float) -> float:
    """Standard normal density."""
    return _INV_SQRT_2PI * math.exp(-0.5 * x * x)
