"""Health factor math and action validation for lending positions."""

import logging
from decimal import Decimal

from src.core.constants.generic import HUNDRED, INFINITE_HEALTH_FACTOR, ZERO
from src.core.constants.routing import MIN_HEALTH_FACTOR, SAFE_HEALTH_FACTOR
from src.core.models import (
    ActionType,
    HealthStatus,
    LendingPosition,
    ValidationResult,
    ValidationSeverity,
    WithdrawalLimits,
)

logger = logging.getLogger(__name__)


class HealthFactorCalculator:
    """
    Calculator for lending position risk.

    Handles health factor, withdrawal/borrow limits and the two-tier
    validation policy (error below 1.0, warning below 1.5).

    All percentages are in percent units (82.5 means 82.5%). A position
    without debt has an infinite health factor.
    """

    @staticmethod
    def health_factor(
        total_collateral: Decimal,
        total_debt: Decimal,
        liquidation_threshold: Decimal,
    ) -> Decimal:
        """
        Calculate health factor.

        HF = (Collateral * Liquidation Threshold) / Debt

        Args:
            total_collateral: Collateral value (USD)
            total_debt: Debt value (USD)
            liquidation_threshold: Liquidation threshold in percent

        Returns:
            Health factor (< 1.0 means liquidation), infinite without debt
        """
        if total_debt <= 0:
            return INFINITE_HEALTH_FACTOR

        return (total_collateral * liquidation_threshold / HUNDRED) / total_debt

    @staticmethod
    def max_withdrawable(
        total_collateral: Decimal,
        total_debt: Decimal,
        liquidation_threshold: Decimal,
        target_hf: Decimal = SAFE_HEALTH_FACTOR,
    ) -> Decimal:
        """
        Calculate the collateral that can be withdrawn while keeping a target HF.

        min_collateral = (target_HF * Debt) / Liquidation Threshold
        max_withdraw = Collateral - min_collateral

        Args:
            total_collateral: Collateral value (USD)
            total_debt: Debt value (USD)
            liquidation_threshold: Liquidation threshold in percent
            target_hf: Health factor to keep after the withdrawal

        Returns:
            Max withdrawable amount, never negative
        """
        if total_debt <= 0:
            return total_collateral

        if liquidation_threshold <= 0:
            return ZERO

        min_collateral = (target_hf * total_debt) / (liquidation_threshold / HUNDRED)
        return max(ZERO, total_collateral - min_collateral)

    @classmethod
    def withdrawal_limits(
        cls,
        total_collateral: Decimal,
        total_debt: Decimal,
        liquidation_threshold: Decimal,
        safe_hf: Decimal = SAFE_HEALTH_FACTOR,
        min_hf: Decimal = MIN_HEALTH_FACTOR,
    ) -> WithdrawalLimits:
        """Max withdrawable at the safe target (MAX button) and the hard floor."""
        return WithdrawalLimits(
            safe_max=cls.max_withdrawable(total_collateral, total_debt, liquidation_threshold, safe_hf),
            absolute_max=cls.max_withdrawable(total_collateral, total_debt, liquidation_threshold, min_hf),
            safe_target=safe_hf,
            absolute_target=min_hf,
        )

    @staticmethod
    def health_factor_after_withdraw(
        total_collateral: Decimal,
        total_debt: Decimal,
        withdraw_amount: Decimal,
        liquidation_threshold: Decimal,
    ) -> Decimal:
        """
        Health factor once `withdraw_amount` of collateral is removed.

        Returns:
            Infinite without debt, 0 when no collateral remains
        """
        if total_debt <= 0:
            return INFINITE_HEALTH_FACTOR

        remaining = total_collateral - withdraw_amount
        if remaining <= 0:
            return ZERO

        return remaining * (liquidation_threshold / HUNDRED) / total_debt

    @classmethod
    def health_factor_after_borrow(
        cls,
        total_collateral: Decimal,
        total_debt: Decimal,
        borrow_amount: Decimal,
        liquidation_threshold: Decimal,
    ) -> Decimal:
        """Health factor once `borrow_amount` is added to the debt."""
        return cls.health_factor(total_collateral, total_debt + borrow_amount, liquidation_threshold)

    @classmethod
    def health_factor_after_repay(
        cls,
        total_collateral: Decimal,
        total_debt: Decimal,
        repay_amount: Decimal,
        liquidation_threshold: Decimal,
    ) -> Decimal:
        """Health factor once `repay_amount` of debt is paid back."""
        remaining_debt = max(ZERO, total_debt - repay_amount)
        return cls.health_factor(total_collateral, remaining_debt, liquidation_threshold)

    @staticmethod
    def max_borrow(
        total_collateral: Decimal,
        total_debt: Decimal,
        liquidation_threshold: Decimal,
        target_hf: Decimal = SAFE_HEALTH_FACTOR,
    ) -> Decimal:
        """
        Additional debt that keeps the position at a target health factor.

        max_debt = (Collateral * Liquidation Threshold) / target_HF
        max_borrow = max_debt - Debt

        Returns:
            Additional borrow amount, never negative
        """
        if target_hf <= 0:
            return ZERO

        max_debt = (total_collateral * liquidation_threshold / HUNDRED) / target_hf
        return max(ZERO, max_debt - total_debt)

    @staticmethod
    def classify(health_factor: Decimal) -> HealthStatus:
        """
        Map a health factor to its severity band.

        Bands include their lower bound: exactly 1.5 is Good.
        """
        if health_factor.is_infinite() or health_factor > Decimal("2.0"):
            return HealthStatus.SAFE
        if health_factor >= Decimal("1.5"):
            return HealthStatus.GOOD
        if health_factor >= Decimal("1.2"):
            return HealthStatus.CAUTION
        if health_factor >= Decimal("1.0"):
            return HealthStatus.AT_RISK
        return HealthStatus.LIQUIDATION

    @staticmethod
    def borrow_utilization(borrowed: Decimal, available_to_borrow: Decimal) -> Decimal:
        """
        Share of borrow capacity in use, 0-100.

        utilization = borrowed / (borrowed + available) * 100
        """
        capacity = borrowed + available_to_borrow
        if capacity <= 0:
            return ZERO

        utilization = borrowed / capacity * HUNDRED
        return min(HUNDRED, max(ZERO, utilization))

    # ========== VALIDATION ==========

    @classmethod
    def _severity_for(
        cls,
        resulting_hf: Decimal,
        safe_hf: Decimal,
        min_hf: Decimal,
    ) -> ValidationSeverity:
        if resulting_hf < min_hf:
            return ValidationSeverity.ERROR
        if resulting_hf < safe_hf:
            return ValidationSeverity.WARNING
        return ValidationSeverity.OK

    @classmethod
    def _hf_result(
        cls,
        action: ActionType,
        amount: Decimal,
        resulting_hf: Decimal,
        safe_hf: Decimal,
        min_hf: Decimal,
    ) -> ValidationResult:
        severity = cls._severity_for(resulting_hf, safe_hf, min_hf)
        if severity is ValidationSeverity.ERROR:
            message = (
                f"Health factor would drop to {resulting_hf:.2f}, "
                f"below the liquidation floor of {min_hf}"
            )
        elif severity is ValidationSeverity.WARNING:
            message = (
                f"Health factor would drop to {resulting_hf:.2f}. "
                f"Consider staying above {safe_hf}"
            )
        else:
            message = ""

        return ValidationResult(
            action=action,
            amount=amount,
            severity=severity,
            resulting_health_factor=resulting_hf,
            status=cls.classify(resulting_hf),
            message=message,
        )

    @staticmethod
    def _error(action: ActionType, amount: Decimal, message: str, current_hf: Decimal) -> ValidationResult:
        return ValidationResult(
            action=action,
            amount=amount,
            severity=ValidationSeverity.ERROR,
            resulting_health_factor=current_hf,
            status=HealthFactorCalculator.classify(current_hf),
            message=message,
        )

    @classmethod
    def validate_withdraw(
        cls,
        position: LendingPosition,
        amount: Decimal,
        safe_hf: Decimal = SAFE_HEALTH_FACTOR,
        min_hf: Decimal = MIN_HEALTH_FACTOR,
    ) -> ValidationResult:
        """Validate withdrawing `amount` of collateral."""
        current_hf = cls.health_factor(
            position.total_collateral_usd, position.total_debt_usd, position.liquidation_threshold
        )
        if amount <= 0:
            return cls._error(ActionType.WITHDRAW, amount, "Amount must be greater than zero", current_hf)
        if amount > position.total_collateral_usd:
            return cls._error(
                ActionType.WITHDRAW,
                amount,
                f"Cannot withdraw {amount:.2f}. Total collateral is {position.total_collateral_usd:.2f}",
                current_hf,
            )

        resulting_hf = cls.health_factor_after_withdraw(
            position.total_collateral_usd,
            position.total_debt_usd,
            amount,
            position.liquidation_threshold,
        )
        return cls._hf_result(ActionType.WITHDRAW, amount, resulting_hf, safe_hf, min_hf)

    @classmethod
    def validate_borrow(
        cls,
        position: LendingPosition,
        amount: Decimal,
        safe_hf: Decimal = SAFE_HEALTH_FACTOR,
        min_hf: Decimal = MIN_HEALTH_FACTOR,
    ) -> ValidationResult:
        """Validate borrowing `amount` against the position."""
        current_hf = cls.health_factor(
            position.total_collateral_usd, position.total_debt_usd, position.liquidation_threshold
        )
        if amount <= 0:
            return cls._error(ActionType.BORROW, amount, "Amount must be greater than zero", current_hf)
        if amount > position.available_borrows_usd:
            return cls._error(
                ActionType.BORROW,
                amount,
                f"Cannot borrow {amount:.2f}. Max available: {position.available_borrows_usd:.2f}",
                current_hf,
            )

        resulting_hf = cls.health_factor_after_borrow(
            position.total_collateral_usd,
            position.total_debt_usd,
            amount,
            position.liquidation_threshold,
        )
        return cls._hf_result(ActionType.BORROW, amount, resulting_hf, safe_hf, min_hf)

    @classmethod
    def validate_repay(
        cls,
        position: LendingPosition,
        amount: Decimal,
        safe_hf: Decimal = SAFE_HEALTH_FACTOR,
        min_hf: Decimal = MIN_HEALTH_FACTOR,
    ) -> ValidationResult:
        """
        Validate repaying `amount` of debt.

        Repaying never lowers the health factor, so only structurally
        impossible amounts are errors. A position still under the safe
        target after repaying gets a warning.
        """
        current_hf = cls.health_factor(
            position.total_collateral_usd, position.total_debt_usd, position.liquidation_threshold
        )
        if amount <= 0:
            return cls._error(ActionType.REPAY, amount, "Amount must be greater than zero", current_hf)
        if amount > position.total_debt_usd:
            return cls._error(
                ActionType.REPAY,
                amount,
                f"Cannot repay {amount:.2f}. Outstanding debt is {position.total_debt_usd:.2f}",
                current_hf,
            )

        resulting_hf = cls.health_factor_after_repay(
            position.total_collateral_usd,
            position.total_debt_usd,
            amount,
            position.liquidation_threshold,
        )
        severity = ValidationSeverity.WARNING if resulting_hf < safe_hf else ValidationSeverity.OK
        message = (
            f"Health factor will still be {resulting_hf:.2f} after repaying"
            if severity is ValidationSeverity.WARNING
            else ""
        )
        return ValidationResult(
            action=ActionType.REPAY,
            amount=amount,
            severity=severity,
            resulting_health_factor=resulting_hf,
            status=cls.classify(resulting_hf),
            message=message,
        )
