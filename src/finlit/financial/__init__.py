"""Financial calculation engine: primitives, validation, models, and calculators."""

from .models import AssetAllocation, CreditProfile, Holding, Insight, InsightLevel, OptionLeg

__all__ = [
    "AssetAllocation",
    "CreditProfile",
    "Holding",
    "Insight",
    "InsightLevel",
    "OptionLeg",
]
