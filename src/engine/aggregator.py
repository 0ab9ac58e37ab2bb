"""Combines lending and pool positions into one user-facing position."""

import logging
from decimal import Decimal
from typing import Callable, Mapping, Optional

from src.core.constants.fallback import DEFAULT_BORROW_APR
from src.core.constants.generic import HUNDRED, ZERO
from src.core.models import LendingPosition, PoolPosition, UnifiedUserPosition
from src.engine.apy import ApyBlender
from src.engine.risk import HealthFactorCalculator

logger = logging.getLogger(__name__)

DEPOSIT_ESTIMATE_RATIO = Decimal("0.95")

DepositEstimator = Callable[[Decimal], Decimal]


def estimate_deposited(total_value_usd: Decimal) -> Decimal:
    """
    Estimate the amount originally deposited.

    Placeholder until deposits are tracked in a ledger: assumes 5% of the
    current value is earnings. Pass a different estimator to
    PositionAggregator to swap it out.
    """
    if total_value_usd <= 0:
        return ZERO
    return total_value_usd * DEPOSIT_ESTIMATE_RATIO


class PositionAggregator:
    """
    Builds a UnifiedUserPosition from the lending account and pool balances.

    Protocol details (health factor math, pool split) stay inside; the
    result only carries user-facing numbers.
    """

    def __init__(
        self,
        blender: Optional[ApyBlender] = None,
        deposit_estimator: DepositEstimator = estimate_deposited,
        pool_weighting: str = "fixed",
        default_borrow_apr: Decimal = DEFAULT_BORROW_APR,
    ):
        if pool_weighting not in ("fixed", "balances"):
            raise ValueError(f"Unknown pool weighting: {pool_weighting}")

        self.blender = blender or ApyBlender()
        self.deposit_estimator = deposit_estimator
        self.pool_weighting = pool_weighting
        self.default_borrow_apr = default_borrow_apr

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "PositionAggregator":
        return cls(
            blender=ApyBlender.from_settings(settings),
            pool_weighting=settings.pool_weighting,
            default_borrow_apr=settings.default_borrow_apr,
            **kwargs,
        )

    def aggregate(
        self,
        lending: Optional[LendingPosition],
        pools: Optional[PoolPosition],
        pool_apy_by_symbol: Mapping[str, Decimal],
        lending_apy: Optional[Decimal] = None,
        borrow_apr: Optional[Decimal] = None,
    ) -> UnifiedUserPosition:
        """
        Aggregate a user's position.

        Args:
            lending: Lending account (None if the user has none)
            pools: Pool balances (None if the user has none)
            pool_apy_by_symbol: Current pool APYs keyed by pool name
            lending_apy: Lending supply APY, falls back to the account's own
            borrow_apr: Borrow APR, falls back to the default rate
        """
        lending = lending or LendingPosition()
        pools = pools or PoolPosition()
        borrow_apr = borrow_apr if borrow_apr is not None else self.default_borrow_apr

        total_value = lending.total_collateral_usd + pools.total_value_usd
        deposited = self.deposit_estimator(total_value)
        earnings = total_value - deposited
        earnings_percent = earnings / deposited * HUNDRED if deposited > 0 else ZERO

        borrowed = lending.total_debt_usd
        available = lending.available_borrows_usd
        utilization = HealthFactorCalculator.borrow_utilization(borrowed, available)

        weights = None
        if self.pool_weighting == "balances":
            weights = self.blender.pool_weights_from_balances(pools) or None
        if lending_apy is None:
            lending_apy = lending.supply_apy
        apy = self.blender.blended_apy(lending_apy, pool_apy_by_symbol, weights)

        health_factor = HealthFactorCalculator.health_factor(
            lending.total_collateral_usd, borrowed, lending.liquidation_threshold
        )

        position = UnifiedUserPosition(
            total_value_usd=total_value,
            deposited_usd=deposited,
            earnings_usd=earnings,
            earnings_percent=earnings_percent,
            borrow_capacity_usd=borrowed + available,
            borrowed_usd=borrowed,
            available_to_borrow_usd=available,
            borrow_utilization=utilization,
            borrow_apr=borrow_apr,
            current_apy=apy.display,
            current_apy_exact=apy.net,
            projections=self.blender.project_earnings(deposited, apy.net),
            health_factor=health_factor,
            health_status=HealthFactorCalculator.classify(health_factor).value,
        )

        logger.debug(
            f"Aggregated position: value={total_value:.2f} apy={position.current_apy}% "
            f"utilization={utilization:.1f}% hf={health_factor}"
        )
        return position
