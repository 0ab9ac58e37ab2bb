"""Scoring, allocation and position math for the yield router."""

from .scorer import OpportunityScorer
from .allocator import YieldAllocator
from .presets import STRATEGY_PRESETS, get_preset, strategy_name
from .risk import HealthFactorCalculator
from .apy import ApyBlender, BlendedApy
from .aggregator import PositionAggregator, estimate_deposited
from .borrow_simulator import BorrowSimulator
from .router import YieldRouter, format_apy

__all__ = [
    "OpportunityScorer",
    "YieldAllocator",
    "STRATEGY_PRESETS",
    "get_preset",
    "strategy_name",
    "HealthFactorCalculator",
    "ApyBlender",
    "BlendedApy",
    "PositionAggregator",
    "estimate_deposited",
    "BorrowSimulator",
    "YieldRouter",
    "format_apy",
]
