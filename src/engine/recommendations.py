"""Recommendation shortcuts over a ranked opportunity list."""

from typing import List, Optional

from src.core.constants.routing import (
    BALANCED_MIN_TVL,
    HIGH_YIELD_MIN_APY,
    QUICK_START_MIN_TVL,
    RECOMMENDATION_LIMIT,
    SAFE_YIELD_MIN_TVL,
)
from src.core.models import RiskTier, YieldOpportunity


def _by_score(opportunities: List[YieldOpportunity]) -> List[YieldOpportunity]:
    return sorted(opportunities, key=lambda o: o.score, reverse=True)


def quick_start(opportunities: List[YieldOpportunity]) -> Optional[YieldOpportunity]:
    """Best single pick for onboarding.

    Top score among non-high-risk opportunities with at least $100k TVL.
    Falls back to the first entry when nothing qualifies.
    """
    if not opportunities:
        return None

    safe = [
        o for o in opportunities
        if o.risk != RiskTier.HIGH and o.tvl >= QUICK_START_MIN_TVL
    ]
    if not safe:
        return opportunities[0]
    return _by_score(safe)[0]


def safe_yield(opportunities: List[YieldOpportunity]) -> List[YieldOpportunity]:
    """Top 10 low-risk opportunities with at least $500k TVL."""
    safe = [
        o for o in opportunities
        if o.risk == RiskTier.LOW and o.tvl >= SAFE_YIELD_MIN_TVL
    ]
    return _by_score(safe)[:RECOMMENDATION_LIMIT]


def high_yield(opportunities: List[YieldOpportunity]) -> List[YieldOpportunity]:
    """Top 10 by raw APY among non-high-risk opportunities paying 20%+."""
    candidates = [
        o for o in opportunities
        if o.risk != RiskTier.HIGH and o.apy >= HIGH_YIELD_MIN_APY
    ]
    return sorted(candidates, key=lambda o: o.apy, reverse=True)[:RECOMMENDATION_LIMIT]


def balanced_yield(opportunities: List[YieldOpportunity]) -> List[YieldOpportunity]:
    """Top 10 by score among non-high-risk opportunities with $100k+ TVL."""
    candidates = [
        o for o in opportunities
        if o.risk != RiskTier.HIGH and o.tvl >= BALANCED_MIN_TVL
    ]
    return _by_score(candidates)[:RECOMMENDATION_LIMIT]
