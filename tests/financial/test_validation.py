"""Tests for finlit.financial.validation."""

from finlit.financial.validation import (
    COMPOUND_INTEREST_SCHEMA,
    CREDIT_PROFILE_SCHEMA,
    MONTE_CARLO_SCHEMA,
    PAYCHECK_SCHEMA,
    RETIREMENT_SCHEMA,
    FieldType,
    ValidationRule,
    validate_field,
    validate_fields,
    validate_prefixed,
)


class TestValidateField:
    def test_required(self):
        rule = ValidationRule(required=True, type=FieldType.CURRENCY)
        assert validate_field("", rule, "principal") == "principal is required"
        assert validate_field(None, rule, "principal") == "principal is required"

    def test_optional_empty_is_fine(self):
        assert validate_field("", ValidationRule(type=FieldType.CURRENCY, min=0), "extra") is None

    def test_not_a_number(self):
        rule = ValidationRule(required=True, type=FieldType.CURRENCY, min=0)
        assert validate_field("abc", rule, "principal") == "principal must be a valid number"

    def test_bounds(self):
        rule = ValidationRule(type=FieldType.NUMBER, min=1, max=10)
        assert validate_field(0, rule, "n") == "n must be at least 1"
        assert validate_field("11", rule, "n") == "n must be no more than 10"
        assert validate_field("5", rule, "n") is None

    def test_integer(self):
        rule = ValidationRule(type=FieldType.INTEGER)
        assert validate_field(2.5, rule, "trials") == "trials must be a whole number"
        assert validate_field(3.0, rule, "trials") is None

    def test_percentage_range(self):
        rule = ValidationRule(type=FieldType.PERCENTAGE)
        assert validate_field(150, rule, "rate") == "rate must be between 0% and 100%"

    def test_custom_message_overrides(self):
        rule = ValidationRule(required=True, message="Enter an amount")
        assert validate_field(None, rule, "amount") == "Enter an amount"

    def test_infinity_rejected(self):
        rule = ValidationRule(type=FieldType.NUMBER)
        assert validate_field(float("inf"), rule, "x") == "x must be a valid number"


class TestSchemas:
    def test_compound_interest_valid(self):
        values = {"principal": 10_000, "rate": 7, "time": 10, "monthly_contribution": ""}
        assert validate_fields(values, COMPOUND_INTEREST_SCHEMA).is_valid

    def test_compound_interest_errors(self):
        result = validate_fields({"principal": "abc", "rate": 60, "time": 10}, COMPOUND_INTEREST_SCHEMA)
        assert not result.is_valid
        assert result.errors["principal"] == "principal must be a valid number"
        assert result.errors["rate"] == "rate must be no more than 50"
        assert "time" not in result.errors

    def test_paycheck_status_and_state(self):
        values = {"gross_pay": 5000, "filing_status": "widowed", "state_code": "California"}
        result = validate_fields(values, PAYCHECK_SCHEMA)
        assert "filing_status" in result.errors
        assert result.errors["state_code"] == "state_code must be a two-letter code"

    def test_retirement_age_window(self):
        values = {
            "current_age": 30,
            "retirement_age": 45,
            "current_savings": 0,
            "monthly_contribution": 500,
            "expected_return": 7,
            "inflation_rate": 3,
        }
        result = validate_fields(values, RETIREMENT_SCHEMA)
        assert result.errors == {"retirement_age": "Retirement age should be between 50 and 80"}

    def test_monte_carlo_correlation(self):
        values = {
            "trials": 1000,
            "batch_size": 50,
            "stock_percent": 60,
            "bond_percent": 40,
            "initial_amount": 1000,
            "time_horizon": 10,
            "withdrawal_rate": 4,
            "stock_volatility": 0.2,
            "bond_volatility": 0.05,
            "correlation": 1.5,
        }
        result = validate_fields(values, MONTE_CARLO_SCHEMA)
        assert list(result.errors) == ["correlation"]


class TestPrefixed:
    def test_profiles_validated_independently(self):
        good = {
            "payment_history": 95,
            "utilization": 20,
            "credit_age_years": 6,
            "credit_mix_score": 3,
            "new_inquiries": 1,
        }
        bad = dict(good, payment_history=120)
        current = validate_prefixed(good, CREDIT_PROFILE_SCHEMA, "current")
        target = validate_prefixed(bad, CREDIT_PROFILE_SCHEMA, "target")
        merged = current.merge(target)
        assert current.is_valid
        assert list(merged.errors) == ["target.payment_history"]
