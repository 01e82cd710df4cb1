"""Declarative field validation for calculator inputs.

Rules are data: a schema is a mapping of field name to ``ValidationRule``,
so every calculator's schema can be inspected and tested on its own.
Validation is advisory. Calculators still coerce bad input through
``parse_amount`` and compute a best-effort result.

Usage:
    result = validate_fields({"principal": "abc"}, COMPOUND_INTEREST_SCHEMA)
    result.is_valid           # False
    result.errors["principal"]  # "principal must be a valid number"
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any


class FieldType(Enum):
    """Numeric kinds a field can be checked against."""

    NUMBER = "number"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    INTEGER = "integer"


@dataclass(frozen=True)
class ValidationRule:
    """Constraints for a single input field.

    Attributes:
        required: Empty input (``None``, ``""``) is an error when True.
        type: Numeric kind; ``None`` skips the numeric checks.
        min: Inclusive lower bound.
        max: Inclusive upper bound.
        custom: Extra check returning an error message or ``None``.
        message: Overrides every generated message for this field.
    """

    required: bool = False
    type: FieldType | None = None
    min: float | None = None
    max: float | None = None
    custom: Callable[[Any], str | None] | None = None
    message: str | None = None


@dataclass
class ValidationResult:
    """Outcome of ``validate_fields``."""

    errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Combine two results; later messages win for the same field."""
        return ValidationResult(errors={**self.errors, **other.errors})


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_number(value: Any) -> float | None:
    """Strict numeric parse for validation (no currency-symbol stripping)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def _fmt(bound: float) -> str:
    return f"{bound:g}"


def validate_field(value: Any, rule: ValidationRule, field_name: str) -> str | None:
    """Validate one value against its rule.

    Returns:
        ``None`` when valid, otherwise a human-readable message.
    """
    error = _check(value, rule, field_name)
    if error is not None and rule.message:
        return rule.message
    return error


def _check(value: Any, rule: ValidationRule, field_name: str) -> str | None:
    if _is_empty(value):
        return f"{field_name} is required" if rule.required else None

    numeric = _to_number(value)
    if rule.type is not None:
        if numeric is None or math.isinf(numeric):
            return f"{field_name} must be a valid number"
        if rule.type is FieldType.INTEGER and not numeric.is_integer():
            return f"{field_name} must be a whole number"
        if rule.type is FieldType.PERCENTAGE and not 0 <= numeric <= 100:
            return f"{field_name} must be between 0% and 100%"

    if numeric is not None:
        if rule.min is not None and numeric < rule.min:
            return f"{field_name} must be at least {_fmt(rule.min)}"
        if rule.max is not None and numeric > rule.max:
            return f"{field_name} must be no more than {_fmt(rule.max)}"
    elif rule.min is not None or rule.max is not None:
        return f"{field_name} must be a valid number"

    if rule.custom is not None:
        return rule.custom(value)

    return None


def validate_fields(values: Mapping[str, Any], schema: Mapping[str, ValidationRule]) -> ValidationResult:
    """Apply every rule in ``schema`` to the matching entry in ``values``.

    Fields missing from ``values`` are treated as empty.
    """
    errors: dict[str, str] = {}
    for field_name, rule in schema.items():
        error = validate_field(values.get(field_name), rule, field_name)
        if error:
            errors[field_name] = error
    return ValidationResult(errors=errors)


def validate_prefixed(
    values: Mapping[str, Any],
    schema: Mapping[str, ValidationRule],
    prefix: str,
) -> ValidationResult:
    """Validate a nested record, keying errors as ``"{prefix}.{field}"``."""
    result = validate_fields(values, schema)
    return ValidationResult(errors={f"{prefix}.{name}": msg for name, msg in result.errors.items()})


# =============================================================================
# PRESETS
# =============================================================================


def currency(min: float = 0, max: float = 1_000_000_000) -> ValidationRule:
    return ValidationRule(required=True, type=FieldType.CURRENCY, min=min, max=max)


def optional_currency(min: float = 0, max: float = 1_000_000_000) -> ValidationRule:
    return ValidationRule(required=False, type=FieldType.CURRENCY, min=min, max=max)


def percentage(min: float = 0, max: float = 100) -> ValidationRule:
    return ValidationRule(required=True, type=FieldType.PERCENTAGE, min=min, max=max)


def positive_integer(min: float = 1, max: float = 100) -> ValidationRule:
    return ValidationRule(required=True, type=FieldType.INTEGER, min=min, max=max)


def age() -> ValidationRule:
    return ValidationRule(required=True, type=FieldType.INTEGER, min=0, max=120)


def years(min: float = 0, max: float = 50) -> ValidationRule:
    return ValidationRule(required=True, type=FieldType.INTEGER, min=min, max=max)


def interest_rate() -> ValidationRule:
    return ValidationRule(required=True, type=FieldType.PERCENTAGE, min=0, max=50)


def monthly_payment() -> ValidationRule:
    return ValidationRule(required=True, type=FieldType.CURRENCY, min=0, max=100_000)


def number(min: float | None = None, max: float | None = None, required: bool = True) -> ValidationRule:
    return ValidationRule(required=required, type=FieldType.NUMBER, min=min, max=max)


def custom(check: Callable[[Any], str | None], required: bool = True) -> ValidationRule:
    return ValidationRule(required=required, custom=check)


def _one_of(choices: set[str], label: str) -> Callable[[Any], str | None]:
    def check(value: Any) -> str | None:
        raw = getattr(value, "value", value)
        if str(raw).strip().lower() not in choices:
            return f"{label} must be one of: {', '.join(sorted(choices))}"
        return None

    return check


def _retirement_age(value: Any) -> str | None:
    age_value = _to_number(value)
    if age_value is None or not 50 <= age_value <= 80:
        return "Retirement age should be between 50 and 80"
    return None


def _correlation(value: Any) -> str | None:
    corr = _to_number(value)
    if corr is None or not -1 <= corr <= 1:
        return "correlation must be between -1 and 1"
    return None


# =============================================================================
# CALCULATOR SCHEMAS
# =============================================================================

PAYCHECK_SCHEMA: dict[str, ValidationRule] = {
    "gross_pay": currency(0, 10_000_000),
    "filing_status": custom(
        _one_of({"single", "married_filing_jointly", "married_filing_separately", "head_of_household"}, "filing_status")
    ),
    "state_code": ValidationRule(
        required=True,
        custom=lambda v: None if len(str(v).strip()) == 2 else "state_code must be a two-letter code",
    ),
    "health_insurance": optional_currency(0, 100_000),
    "retirement_percent": ValidationRule(type=FieldType.PERCENTAGE, min=0, max=100),
    "additional_withholding": optional_currency(0, 1_000_000),
    "pay_periods_per_year": ValidationRule(type=FieldType.INTEGER, min=1, max=365),
}

COMPOUND_INTEREST_SCHEMA: dict[str, ValidationRule] = {
    "principal": currency(1, 10_000_000),
    "rate": interest_rate(),
    "time": years(1, 50),
    "monthly_contribution": optional_currency(0, 100_000),
}

RETIREMENT_SCHEMA: dict[str, ValidationRule] = {
    "current_age": age(),
    "retirement_age": custom(_retirement_age),
    "current_savings": currency(0, 50_000_000),
    "monthly_contribution": currency(0, 100_000),
    "expected_return": percentage(0, 15),
    "inflation_rate": percentage(0, 10),
}

MORTGAGE_SCHEMA: dict[str, ValidationRule] = {
    "home_price": currency(50_000, 50_000_000),
    "down_payment": currency(0, 10_000_000),
    "interest_rate": percentage(0, 20),
    "loan_term_years": years(1, 50),
    "property_tax": optional_currency(0, 500_000),
    "insurance": optional_currency(0, 100_000),
    "pmi": optional_currency(0, 10_000),
}

DEBT_PAYOFF_SCHEMA: dict[str, ValidationRule] = {
    "balance": currency(1, 1_000_000),
    "minimum_payment": monthly_payment(),
    "interest_rate": interest_rate(),
    "extra_payment": optional_currency(0, 50_000),
}

EMERGENCY_FUND_SCHEMA: dict[str, ValidationRule] = {
    "monthly_expenses": currency(0, 1_000_000),
    "current_savings": currency(0, 10_000_000),
    "monthly_savings": currency(0, 50_000),
    "months_of_expenses": positive_integer(1, 24),
}

MONTE_CARLO_SCHEMA: dict[str, ValidationRule] = {
    "trials": positive_integer(1, 100_000),
    "batch_size": positive_integer(1, 100_000),
    "stock_percent": percentage(),
    "bond_percent": percentage(),
    "initial_amount": currency(0, 1_000_000_000),
    "monthly_contribution": optional_currency(0, 1_000_000),
    "time_horizon": years(0, 100),
    "withdrawal_rate": percentage(0, 100),
    "stock_mean": number(-1, 1),
    "stock_volatility": number(0, 5),
    "bond_mean": number(-1, 1),
    "bond_volatility": number(0, 5),
    "correlation": custom(_correlation),
}

OPTIONS_MARKET_SCHEMA: dict[str, ValidationRule] = {
    "spot": currency(0.01, 100_000),
    "days_to_expiration": positive_integer(1, 1095),
    "volatility_pct": ValidationRule(required=True, type=FieldType.NUMBER, min=1, max=200),
    "risk_free_rate_pct": ValidationRule(required=True, type=FieldType.NUMBER, min=0, max=20),
    "dividend_yield_pct": ValidationRule(required=False, type=FieldType.NUMBER, min=0, max=20),
    "contracts": positive_integer(1, 1000),
}

OPTION_LEG_SCHEMA: dict[str, ValidationRule] = {
    "strike": currency(0.01, 100_000),
    "premium": optional_currency(0, 10_000),
}

CREDIT_PROFILE_SCHEMA: dict[str, ValidationRule] = {
    "payment_history": percentage(0, 100),
    "utilization": percentage(0, 100),
    "credit_age_years": number(min=0, max=50),
    "credit_mix_score": number(min=0, max=5),
    "new_inquiries": number(min=0, max=10),
}

ALLOCATION_SCHEMA: dict[str, ValidationRule] = {
    "total_investment": ValidationRule(required=True, min=1, message="Total investment must be at least $1"),
    "risk_tolerance": custom(_one_of({"conservative", "moderate", "aggressive"}, "risk_tolerance")),
    "investment_horizon": ValidationRule(
        required=True, min=1, max=50, message="Investment horizon must be between 1 and 50 years"
    ),
}
