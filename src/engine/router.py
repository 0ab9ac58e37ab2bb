"""Yield router facade: catalog in, ranked opportunities and allocations out."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Union

from src.core.constants.routing import DEFAULT_MAX_POSITIONS
from src.core.models import (
    AllocationResult,
    RiskTier,
    VaultRecord,
    YieldOpportunity,
    YieldRouterConfig,
)
from src.data.parsers.vault_parser import VaultParser
from src.engine import recommendations
from src.engine.allocator import YieldAllocator
from src.engine.presets import get_preset, strategy_name
from src.engine.scorer import OpportunityScorer

logger = logging.getLogger(__name__)

CatalogItem = Union[VaultRecord, YieldOpportunity]


class YieldRouter:
    """
    Finds and splits deposits across the best yield opportunities.

    Stateless: every call works on the catalog it is given.
    """

    def __init__(
        self,
        allocator: Optional[YieldAllocator] = None,
        max_positions: int = DEFAULT_MAX_POSITIONS,
    ):
        self.allocator = allocator or YieldAllocator()
        self.max_positions = max_positions

    @classmethod
    def from_settings(cls, settings) -> "YieldRouter":
        return cls(max_positions=settings.default_max_positions)

    @staticmethod
    def _to_opportunities(catalog: Iterable[CatalogItem]) -> List[YieldOpportunity]:
        opportunities = []
        for item in catalog:
            if isinstance(item, VaultRecord):
                opportunities.append(VaultParser.to_opportunity(item))
            else:
                opportunities.append(item)
        return opportunities

    def find_best_yields(
        self,
        catalog: Iterable[CatalogItem],
        config: Union[YieldRouterConfig, str],
    ) -> List[YieldOpportunity]:
        """
        Map, filter, score and rank a catalog.

        Args:
            catalog: Vault records and/or opportunities
            config: Router config or preset name

        Returns:
            Scored opportunities, best first
        """
        if isinstance(config, str):
            config = get_preset(config)

        opportunities = self._to_opportunities(catalog)
        ranked = OpportunityScorer.filter_and_rank(opportunities, config)

        logger.info(
            f"{strategy_name(config)} strategy: {len(ranked)} of "
            f"{len(opportunities)} opportunities pass filters"
        )
        return ranked

    def allocate(
        self,
        catalog: Iterable[CatalogItem],
        total_amount: Decimal,
        config: Union[YieldRouterConfig, str],
        max_positions: Optional[int] = None,
    ) -> AllocationResult:
        """Rank the catalog and split `total_amount` across the top picks."""
        if isinstance(config, str):
            config = get_preset(config)

        ranked = self.find_best_yields(catalog, config)
        return self.allocator.allocate(
            ranked,
            total_amount,
            max_positions if max_positions is not None else self.max_positions,
            config,
        )

    def recommendations(
        self,
        catalog: Iterable[CatalogItem],
        risk_tolerance: RiskTier = RiskTier.MEDIUM,
    ) -> Dict[str, object]:
        """
        Recommendation shortcuts over the whole catalog.

        Opportunities are scored with `risk_tolerance` but not filtered.
        """
        ranked = OpportunityScorer.rank(self._to_opportunities(catalog), risk_tolerance)
        return {
            "quick_start": recommendations.quick_start(ranked),
            "safe_yield": recommendations.safe_yield(ranked),
            "high_yield": recommendations.high_yield(ranked),
            "balanced": recommendations.balanced_yield(ranked),
        }

    @staticmethod
    def strategy_name(config: YieldRouterConfig) -> str:
        return strategy_name(config)


def format_apy(apy: Decimal) -> str:
    """Compact APY label: 1.2K% above 1000%, whole percent above 100%."""
    if apy >= 1000:
        return f"{(apy / 1000).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)}K%"
    if apy >= 100:
        return f"{apy.quantize(Decimal('1'), rounding=ROUND_HALF_UP)}%"
    return f"{apy.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}%"
