"""Tests for finlit.financial.models."""

from finlit.financial.models import (
    AssetAllocation,
    AssetClass,
    CreditProfile,
    Holding,
    OptionLeg,
    Region,
    Sector,
    parse_asset_class,
    parse_region,
    parse_sector,
)


class TestHolding:
    def test_coerces_value_and_buckets(self):
        h = Holding("VTI", "$10,000", "us_stocks", "tech", "US")
        assert h.value == 10_000
        assert h.asset_class is AssetClass.US_STOCKS
        assert h.sector is Sector.TECH
        assert h.region is Region.US

    def test_negative_value_becomes_zero(self):
        assert Holding("X", -50, AssetClass.CASH, Sector.FINANCE, Region.US).value == 0.0

    def test_unknown_buckets_take_defaults(self):
        h = Holding("X", 100, "crypto", "space", "moon")
        assert h.value == 100
        assert h.asset_class is AssetClass.US_STOCKS
        assert h.sector is Sector.TECH
        assert h.region is Region.GLOBAL


class TestBucketParsers:
    def test_known_names(self):
        assert parse_asset_class(" Bonds ") is AssetClass.BONDS
        assert parse_sector("REAL_ESTATE") is Sector.REAL_ESTATE
        assert parse_region(Region.EMERGING) is Region.EMERGING

    def test_missing_names(self):
        assert parse_asset_class(None) is AssetClass.US_STOCKS
        assert parse_sector("") is Sector.TECH
        assert parse_region(42) is Region.GLOBAL


class TestAssetAllocation:
    def test_coercion(self):
        alloc = AssetAllocation({"stocks": "60", "bonds": -5, AssetClass.CASH: 40})
        assert alloc.shares == {"stocks": 60.0, "bonds": 0.0, "cash": 40.0}

    def test_completeness_tolerance(self):
        assert AssetAllocation({"stocks": 60, "bonds": 40.3}).is_complete()
        assert not AssetAllocation({"stocks": 60, "bonds": 30}).is_complete()

    def test_percent_lookup(self):
        alloc = AssetAllocation({"cash": 10})
        assert alloc.percent("cash") == 10
        assert alloc.percent(AssetClass.BONDS) == 0.0


class TestCreditProfile:
    def test_clamps(self):
        profile = CreditProfile("120", -10, "abc", 3, 2)
        assert profile.payment_history == 100
        assert profile.utilization == 0
        assert profile.credit_age_years == 0
        assert profile.as_dict()["credit_mix_score"] == 3


class TestOptionLeg:
    def test_defaults(self):
        leg = OptionLeg(100)
        assert leg.premium is None
        assert leg.sign == 1

    def test_short_sign(self):
        assert OptionLeg(100, 2, is_long=False).sign == -1

    def test_intrinsic(self):
        call = OptionLeg(100, 2)
        put = OptionLeg(100, 2, is_call=False)
        assert call.intrinsic(110) == 10
        assert call.intrinsic(90) == 0
        assert put.intrinsic(90) == 10
        assert put.intrinsic(110) == 0
