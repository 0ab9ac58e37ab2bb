"""Opportunity filtering, scoring and ranking."""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, List

from src.core.constants.routing import (
    APY_SCORE_CAP,
    APY_SCORE_WEIGHT,
    NASCENT_TVL_PENALTY,
    NASCENT_TVL_THRESHOLD,
    SOCIAL_COPY_BOOST,
    TVL_SCORE_LOG_CAP,
    TVL_SCORE_WEIGHT,
)
from src.core.models import RiskTier, YieldOpportunity, YieldRouterConfig, YieldSource

logger = logging.getLogger(__name__)


# Points subtracted per opportunity risk tier
RISK_PENALTY = {
    RiskTier.LOW: Decimal("0"),
    RiskTier.MEDIUM: Decimal("15"),
    RiskTier.HIGH: Decimal("30"),
}

# Low tolerance weighs the penalty harder, high tolerance discounts it
RISK_TOLERANCE_MULTIPLIER = {
    RiskTier.LOW: Decimal("1.5"),
    RiskTier.MEDIUM: Decimal("1.0"),
    RiskTier.HIGH: Decimal("0.8"),
}


class OpportunityScorer:
    """
    Scores yield opportunities on a 0-70ish point scale.

    Components:
    - APY: up to 40 points, full marks at 100% APY
    - TVL: up to 30 points, log-scaled, full marks at $10M
    - Risk penalty: 0 / 15 / 30 points for low / medium / high tier

    The sum is scaled by the user's risk tolerance, boosted for social-copy
    sources, penalized for nascent pools and floored at zero.
    """

    @staticmethod
    def apy_score(apy: Decimal) -> Decimal:
        return min(apy / APY_SCORE_CAP, Decimal("1")) * APY_SCORE_WEIGHT

    @staticmethod
    def tvl_score(tvl: Decimal) -> Decimal:
        depth = (tvl + 1).log10() / TVL_SCORE_LOG_CAP
        return min(depth, Decimal("1")) * TVL_SCORE_WEIGHT

    @classmethod
    def score(cls, opportunity: YieldOpportunity, risk_tolerance: RiskTier) -> Decimal:
        """
        Calculate the score of one opportunity.

        Pure function of the opportunity fields and the tolerance.

        Args:
            opportunity: Opportunity to score
            risk_tolerance: User risk tolerance

        Returns:
            Score, never negative
        """
        raw = (
            cls.apy_score(opportunity.apy)
            + cls.tvl_score(opportunity.tvl)
            - RISK_PENALTY[opportunity.risk]
        ) * RISK_TOLERANCE_MULTIPLIER[risk_tolerance]

        if opportunity.source == YieldSource.SOCIAL_COPY:
            raw *= SOCIAL_COPY_BOOST

        if opportunity.tvl < NASCENT_TVL_THRESHOLD:
            raw *= NASCENT_TVL_PENALTY

        return max(Decimal("0"), raw)

    @staticmethod
    def passes_filters(opportunity: YieldOpportunity, config: YieldRouterConfig) -> bool:
        """Check an opportunity against every filter of the config."""
        if config.chains and opportunity.chain not in config.chains:
            return False

        if config.min_apy is not None and opportunity.apy < config.min_apy:
            return False

        if config.max_risk is not None and opportunity.risk.exceeds(config.max_risk):
            return False

        if config.min_tvl is not None and opportunity.tvl < config.min_tvl:
            return False

        if opportunity.source in config.exclude_sources:
            return False

        return True

    @classmethod
    def filter_opportunities(
        cls,
        opportunities: Iterable[YieldOpportunity],
        config: YieldRouterConfig,
    ) -> List[YieldOpportunity]:
        """Drop opportunities failing any filter. Input order is preserved."""
        return [opp for opp in opportunities if cls.passes_filters(opp, config)]

    @classmethod
    def rank(
        cls,
        opportunities: Iterable[YieldOpportunity],
        risk_tolerance: RiskTier,
    ) -> List[YieldOpportunity]:
        """
        Score and sort opportunities, best first.

        Returns scored copies; ties keep their input order.
        """
        scored = [
            replace(opp, score=cls.score(opp, risk_tolerance))
            for opp in opportunities
        ]
        return sorted(scored, key=lambda o: o.score, reverse=True)

    @classmethod
    def filter_and_rank(
        cls,
        opportunities: Iterable[YieldOpportunity],
        config: YieldRouterConfig,
    ) -> List[YieldOpportunity]:
        """Filter, score and rank in one pass."""
        opportunities = list(opportunities)
        filtered = cls.filter_opportunities(opportunities, config)
        ranked = cls.rank(filtered, config.risk_tolerance)

        logger.debug(
            f"Ranked {len(ranked)} of {len(opportunities)} opportunities "
            f"(tolerance={config.risk_tolerance.value})"
        )
        return ranked
