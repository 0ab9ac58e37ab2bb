"""Simulates the effect of borrowing against a position."""

import logging
from decimal import Decimal
from typing import List, Optional

from src.core.constants.fallback import DEFAULT_BORROW_APR
from src.core.constants.generic import DAYS_PER_YEAR, HUNDRED, MONTHS_PER_YEAR, ZERO
from src.core.constants.routing import (
    DANGER_HEALTH_FACTOR,
    HIGH_BORROW_SHARE,
    SAFE_HEALTH_FACTOR,
    SHORT_TERM_BORROW_SHARE,
)
from src.core.models import (
    BorrowSimulation,
    BorrowWarning,
    EarningsSnapshot,
    LendingPosition,
    UnifiedUserPosition,
    WarningSeverity,
)
from src.engine.risk import HealthFactorCalculator

logger = logging.getLogger(__name__)


class BorrowSimulator:
    """
    Before/after comparison for a proposed borrow.

    Borrowed cash is not redeposited, so the position keeps earning the
    same gross APY and the borrow interest is subtracted from it:

    net_apy = apy - (borrow / total_value) * borrow_apr
    """

    def __init__(self, default_borrow_apr: Decimal = DEFAULT_BORROW_APR):
        self.default_borrow_apr = default_borrow_apr

    @staticmethod
    def _snapshot(
        total_value: Decimal,
        apy: Decimal,
        yearly: Decimal,
        borrowed: Decimal,
        health_factor: Decimal,
    ) -> EarningsSnapshot:
        return EarningsSnapshot(
            total_value_usd=total_value,
            apy=apy,
            daily=yearly / DAYS_PER_YEAR,
            monthly=yearly / MONTHS_PER_YEAR,
            yearly=yearly,
            borrowed_usd=borrowed,
            health_factor=health_factor,
        )

    @staticmethod
    def _warnings(amount: Decimal, total_value: Decimal, health_factor: Decimal) -> List[BorrowWarning]:
        warnings = []

        if health_factor < SAFE_HEALTH_FACTOR:
            severity = (
                WarningSeverity.DANGER
                if health_factor < DANGER_HEALTH_FACTOR
                else WarningSeverity.WARNING
            )
            warnings.append(BorrowWarning(
                code="LOW_HEALTH_FACTOR",
                message=f"Health factor will be {health_factor:.2f}. Consider borrowing less.",
                severity=severity,
            ))

        if amount > total_value * HIGH_BORROW_SHARE:
            warnings.append(BorrowWarning(
                code="HIGH_UTILIZATION",
                message=f"Borrowing more than {HIGH_BORROW_SHARE * HUNDRED:.0f}% of your position value increases risk.",
                severity=WarningSeverity.INFO,
            ))

        return warnings

    def simulate(
        self,
        position: UnifiedUserPosition,
        lending: LendingPosition,
        amount: Decimal,
        borrow_apr: Optional[Decimal] = None,
    ) -> BorrowSimulation:
        """
        Simulate borrowing `amount` USD.

        Args:
            position: Current unified position (value and APY)
            lending: Lending account the borrow is taken against
            amount: Amount to borrow (USD)
            borrow_apr: Borrow APR (percent), default rate when None

        Returns:
            BorrowSimulation; `validation` says whether the borrow is allowed
        """
        borrow_apr = borrow_apr if borrow_apr is not None else self.default_borrow_apr
        total_value = position.total_value_usd
        apy = position.current_apy_exact

        validation = HealthFactorCalculator.validate_borrow(lending, amount)

        hf_before = HealthFactorCalculator.health_factor(
            lending.total_collateral_usd, lending.total_debt_usd, lending.liquidation_threshold
        )
        hf_after = HealthFactorCalculator.health_factor_after_borrow(
            lending.total_collateral_usd,
            lending.total_debt_usd,
            max(amount, ZERO),
            lending.liquidation_threshold,
        )

        yearly_before = total_value * apy / HUNDRED
        borrow_interest = max(amount, ZERO) * borrow_apr / HUNDRED
        yearly_after = yearly_before - borrow_interest
        net_apy = apy - (amount / total_value) * borrow_apr if total_value > 0 else apy

        simulation = BorrowSimulation(
            amount=amount,
            borrow_apr=borrow_apr,
            before=self._snapshot(total_value, apy, yearly_before, lending.total_debt_usd, hf_before),
            after=self._snapshot(
                total_value, net_apy, yearly_after, lending.total_debt_usd + max(amount, ZERO), hf_after
            ),
            validation=validation,
            warnings=self._warnings(amount, total_value, hf_after),
            recommendation=(
                "Good for short-term liquidity needs"
                if amount < total_value * SHORT_TERM_BORROW_SHARE
                else "Consider if you really need this much - higher risk"
            ),
        )

        logger.info(
            f"Simulated borrow of {amount}: hf {hf_before} -> {hf_after:.4f}, "
            f"apy {apy:.2f}% -> {net_apy:.2f}%, {len(simulation.warnings)} warnings"
        )
        return simulation
