"""Unified APY across the lending market and liquidity pools."""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Mapping, Optional

from src.core.constants.fallback import DEFAULT_LENDING_APY, DEFAULT_POOL_APY, POOL_SUB_WEIGHTS
from src.core.constants.generic import DAYS_PER_YEAR, HUNDRED, MONTHS_PER_YEAR, ONE, ZERO
from src.core.constants.routing import LENDING_WEIGHT, PLATFORM_FEE, POOL_WEIGHT
from src.core.models import EarningsProjection, PoolPosition

logger = logging.getLogger(__name__)

DISPLAY_PRECISION = Decimal("0.1")


@dataclass
class BlendedApy:
    """Gross and net unified APY (percent)."""

    lending_apy: Decimal
    pool_apy: Decimal
    gross: Decimal
    net: Decimal

    @property
    def display(self) -> Decimal:
        """Net APY rounded to one decimal."""
        return ApyBlender.round_display(self.net)


class ApyBlender:
    """
    Blends lending and pool yields into the single APY users see.

    gross = lending_apy * 0.6 + pool_apy * 0.4
    net = gross * (1 - fee)

    Pool APYs are first combined with the 60/30/10 BTC/ETH/ARB
    sub-weighting, or with caller-supplied weights. Full precision is kept
    until `display`.
    """

    def __init__(
        self,
        lending_weight: Decimal = LENDING_WEIGHT,
        pool_weight: Decimal = POOL_WEIGHT,
        platform_fee: Decimal = PLATFORM_FEE,
    ):
        self.lending_weight = lending_weight
        self.pool_weight = pool_weight
        self.platform_fee = platform_fee

    @classmethod
    def from_settings(cls, settings) -> "ApyBlender":
        return cls(
            lending_weight=settings.lending_weight,
            pool_weight=settings.pool_weight,
            platform_fee=settings.platform_fee,
        )

    @staticmethod
    def round_display(value: Decimal) -> Decimal:
        return value.quantize(DISPLAY_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def blend_pool_apys(
        pool_apy_by_symbol: Mapping[str, Decimal],
        weights: Optional[Mapping[str, Decimal]] = None,
    ) -> Decimal:
        """
        Weighted pool APY.

        Pools without a quote use the default pool APY. Weights are
        normalised, so they need not sum to 1.

        Args:
            pool_apy_by_symbol: APY (percent) keyed by pool name
            weights: Weight per pool name (default 60/30/10)

        Returns:
            Blended pool APY (percent)
        """
        if not pool_apy_by_symbol:
            logger.warning(f"No pool APY available, using default {DEFAULT_POOL_APY}%")
            return DEFAULT_POOL_APY

        weights = weights if weights else POOL_SUB_WEIGHTS
        total_weight = sum(weights.values(), ZERO)
        if total_weight <= 0:
            return DEFAULT_POOL_APY

        blended = ZERO
        for pool_name, weight in weights.items():
            apy = pool_apy_by_symbol.get(pool_name)
            if apy is None:
                logger.debug(f"No APY for {pool_name}, using default {DEFAULT_POOL_APY}%")
                apy = DEFAULT_POOL_APY
            blended += apy * weight

        return blended / total_weight

    @staticmethod
    def pool_weights_from_balances(pools: PoolPosition) -> Dict[str, Decimal]:
        """Weights proportional to the user's USD value per pool (empty if none)."""
        total = pools.total_value_usd
        if total <= 0:
            return {}
        return {name: value / total for name, value in pools.value_by_pool().items()}

    def combine(self, lending_apy: Optional[Decimal], pool_apy: Decimal) -> BlendedApy:
        """Apply the protocol split and the platform fee to two APYs."""
        if lending_apy is None:
            lending_apy = DEFAULT_LENDING_APY

        gross = lending_apy * self.lending_weight + pool_apy * self.pool_weight
        net = gross * (ONE - self.platform_fee)
        return BlendedApy(lending_apy=lending_apy, pool_apy=pool_apy, gross=gross, net=net)

    def blended_apy(
        self,
        lending_apy: Optional[Decimal],
        pool_apy_by_symbol: Mapping[str, Decimal],
        allocation_weights: Optional[Mapping[str, Decimal]] = None,
    ) -> BlendedApy:
        """
        Unified APY for a 60/40 lending/pool deposit.

        Args:
            lending_apy: Lending supply APY (percent), default used when None
            pool_apy_by_symbol: Pool APYs (percent) keyed by pool name
            allocation_weights: Sub-weights among pools (default 60/30/10)
        """
        pool_apy = self.blend_pool_apys(pool_apy_by_symbol, allocation_weights)
        result = self.combine(lending_apy, pool_apy)

        logger.debug(
            f"Blended APY: lending={result.lending_apy}% pool={pool_apy:.4f}% "
            f"gross={result.gross:.4f}% net={result.net:.4f}%"
        )
        return result

    @staticmethod
    def project_earnings(deposited_usd: Decimal, net_apy: Decimal) -> EarningsProjection:
        """
        Simple annualised earnings, no compounding.

        yearly = deposited * apy / 100, monthly = yearly / 12, daily = yearly / 365
        """
        if deposited_usd <= 0:
            return EarningsProjection()

        yearly = deposited_usd * net_apy / HUNDRED
        return EarningsProjection(
            daily=yearly / DAYS_PER_YEAR,
            monthly=yearly / MONTHS_PER_YEAR,
            yearly=yearly,
        )
