"""Diversified multi-position deposit allocator."""

import logging
import statistics
from dataclasses import replace
from decimal import Decimal
from typing import Dict, List, Optional

from src.core.constants.routing import (
    DEFAULT_MAX_POSITIONS,
    DIVERSIFICATION_TARGET_CHAINS,
    FIRST_POSITION_SHARE,
    MAX_CHAIN_SHARE,
    MAX_HIGH_RISK_SHARE,
    NEUTRAL_RISK_SCORE,
    POSITION_DECAY,
)
from src.core.models import AllocationResult, RiskTier, YieldOpportunity, YieldRouterConfig

logger = logging.getLogger(__name__)


class YieldAllocator:
    """
    Splits a deposit across a ranked list of opportunities.

    Walks the ranking greedily. The k-th accepted position gets
    total * 0.35 * 0.75^k, clamped to whatever is still unplaced so the
    shares never sum past 100%. The rest is reported as unallocated.

    Caps:
    - At most 50% of the deposit on a single chain
    - At most 30% of the deposit in high-risk opportunities

    A candidate that would break a cap is skipped and the next one is
    tried at the same position index.
    """

    @staticmethod
    def position_share(index: int, max_allocation: Optional[Decimal] = None) -> Decimal:
        """Fraction of the deposit given to the position at `index` (0-based)."""
        share = FIRST_POSITION_SHARE * POSITION_DECAY ** index
        if max_allocation is not None:
            share = min(share, max_allocation)
        return share

    def allocate(
        self,
        ranked: List[YieldOpportunity],
        total_amount: Decimal,
        max_positions: int = DEFAULT_MAX_POSITIONS,
        config: Optional[YieldRouterConfig] = None,
    ) -> AllocationResult:
        """
        Allocate a deposit across ranked opportunities.

        Args:
            ranked: Opportunities sorted best first
            total_amount: Deposit amount (USD)
            max_positions: Maximum number of positions
            config: Router config (only `max_allocation` is used here)

        Returns:
            AllocationResult; all-zero with neutral risk when nothing can be placed
        """
        if not ranked or total_amount <= 0 or max_positions <= 0:
            logger.debug(
                f"Nothing to allocate: {len(ranked)} opportunities, "
                f"amount={total_amount}, max_positions={max_positions}"
            )
            return self.empty_result()

        max_allocation = config.max_allocation if config else None
        chain_cap = total_amount * MAX_CHAIN_SHARE
        high_risk_cap = total_amount * MAX_HIGH_RISK_SHARE

        selected: List[YieldOpportunity] = []
        chain_totals: Dict[str, Decimal] = {}
        high_risk_total = Decimal("0")
        allocated_fraction = Decimal("0")

        for opp in ranked:
            if len(selected) >= max_positions:
                break

            share = min(
                self.position_share(len(selected), max_allocation),
                Decimal("1") - allocated_fraction,
            )
            if share <= 0:
                break
            amount = total_amount * share

            # Caps must still hold once this position is added
            chain_total = chain_totals.get(opp.chain, Decimal("0"))
            if chain_total + amount > chain_cap:
                continue

            is_high_risk = opp.risk == RiskTier.HIGH
            if is_high_risk and high_risk_total + amount > high_risk_cap:
                continue

            selected.append(replace(
                opp,
                allocation_percent=share,
                allocated_amount=amount,
            ))
            allocated_fraction += share
            chain_totals[opp.chain] = chain_total + amount
            if is_high_risk:
                high_risk_total += amount

        if not selected:
            logger.info("No opportunity fits the diversification caps")
            return self.empty_result()

        result = AllocationResult(
            opportunities=selected,
            total_apy=max(o.apy for o in selected),
            weighted_apy=sum((o.apy * o.allocation_percent for o in selected), Decimal("0")),
            diversification_score=self._diversification_score(len(chain_totals)),
            risk_score=statistics.mean(Decimal(o.risk.rank) for o in selected),
            total_amount=total_amount,
            allocated_amount=sum((o.allocated_amount for o in selected), Decimal("0")),
        )

        logger.info(
            f"Allocated {float(result.allocated_percent) * 100:.2f}% of {total_amount} "
            f"across {len(selected)} positions on {len(chain_totals)} chains, "
            f"weighted APY={float(result.weighted_apy):.2f}%"
        )
        return result

    @staticmethod
    def _diversification_score(chain_count: int) -> Decimal:
        """0-100, full marks from three distinct chains."""
        ratio = Decimal(chain_count) / Decimal(DIVERSIFICATION_TARGET_CHAINS)
        return min(ratio, Decimal("1")) * 100

    @staticmethod
    def empty_result() -> AllocationResult:
        """Zero-valued result with neutral risk."""
        return AllocationResult(risk_score=NEUTRAL_RISK_SCORE)
