"""Unit tests for health factor math and action validation."""

from decimal import Decimal

import pytest

from src.core.models import HealthStatus, LendingPosition, ValidationSeverity
from src.engine.risk import HealthFactorCalculator

COLLATERAL = Decimal("10000")
DEBT = Decimal("4000")
THRESHOLD = Decimal("82.5")


class TestHealthFactor:
    """Tests for health factor and withdrawal limits."""

    def test_health_factor(self):
        hf = HealthFactorCalculator.health_factor(COLLATERAL, DEBT, THRESHOLD)
        assert hf == Decimal("2.0625")

    @pytest.mark.parametrize("collateral", [Decimal("0"), Decimal("1"), Decimal("123456.78")])
    def test_no_debt_is_infinite(self, collateral):
        hf = HealthFactorCalculator.health_factor(collateral, Decimal("0"), THRESHOLD)

        assert hf.is_infinite()
        assert hf > Decimal("1e30")
        assert HealthFactorCalculator.classify(hf) == HealthStatus.SAFE

    def test_max_withdrawable_safe_target(self):
        result = HealthFactorCalculator.max_withdrawable(COLLATERAL, DEBT, THRESHOLD, Decimal("1.5"))
        assert result == pytest.approx(Decimal("2727.27"), abs=Decimal("0.01"))

    @pytest.mark.parametrize("collateral", [Decimal("0"), Decimal("500"), Decimal("98765.4321")])
    def test_max_withdrawable_without_debt(self, collateral):
        assert HealthFactorCalculator.max_withdrawable(collateral, Decimal("0"), THRESHOLD) == collateral

    def test_max_withdrawable_never_negative(self):
        result = HealthFactorCalculator.max_withdrawable(Decimal("1000"), Decimal("5000"), THRESHOLD)
        assert result == 0

    def test_max_withdrawable_zero_threshold(self):
        assert HealthFactorCalculator.max_withdrawable(COLLATERAL, DEBT, Decimal("0")) == 0

    def test_withdrawal_limits(self):
        limits = HealthFactorCalculator.withdrawal_limits(COLLATERAL, DEBT, THRESHOLD)

        assert limits.safe_max == pytest.approx(Decimal("2727.27"), abs=Decimal("0.01"))
        # 10000 - 4000 / 0.825
        assert limits.absolute_max == pytest.approx(Decimal("5151.52"), abs=Decimal("0.01"))
        assert limits.safe_max < limits.absolute_max

    def test_withdraw_max_lands_on_target(self, rng):
        """Withdrawing the max leaves exactly the target health factor."""
        for _ in range(200):
            collateral = Decimal(f"{rng.uniform(1000, 1_000_000):.2f}")
            debt = Decimal(f"{rng.uniform(1, float(collateral) * 0.5):.2f}")
            threshold = Decimal(f"{rng.uniform(50, 95):.2f}")
            target = Decimal(f"{rng.uniform(1.0, 2.0):.3f}")

            amount = HealthFactorCalculator.max_withdrawable(collateral, debt, threshold, target)
            if amount <= 0:
                continue

            hf = HealthFactorCalculator.health_factor_after_withdraw(collateral, debt, amount, threshold)
            assert hf == pytest.approx(target, rel=Decimal("1e-9"))

    def test_after_withdraw_no_debt(self):
        hf = HealthFactorCalculator.health_factor_after_withdraw(COLLATERAL, Decimal("0"), COLLATERAL, THRESHOLD)
        assert hf.is_infinite()

    def test_after_withdraw_everything(self):
        hf = HealthFactorCalculator.health_factor_after_withdraw(COLLATERAL, DEBT, COLLATERAL, THRESHOLD)
        assert hf == 0

    def test_after_withdraw(self):
        hf = HealthFactorCalculator.health_factor_after_withdraw(COLLATERAL, DEBT, Decimal("3000"), THRESHOLD)
        assert hf == Decimal("1.44375")

    def test_after_borrow_and_repay(self):
        assert HealthFactorCalculator.health_factor_after_borrow(
            COLLATERAL, DEBT, Decimal("1000"), THRESHOLD
        ) == Decimal("1.65")
        assert HealthFactorCalculator.health_factor_after_repay(
            COLLATERAL, DEBT, Decimal("1000"), THRESHOLD
        ) == Decimal("2.75")
        assert HealthFactorCalculator.health_factor_after_repay(
            COLLATERAL, DEBT, DEBT, THRESHOLD
        ).is_infinite()

    def test_max_borrow(self):
        # 8250 / 1.5 - 4000
        assert HealthFactorCalculator.max_borrow(COLLATERAL, DEBT, THRESHOLD) == Decimal("1500")


class TestClassify:
    """Tests for the five severity bands."""

    @pytest.mark.parametrize(
        "hf,expected",
        [
            (Decimal("Infinity"), HealthStatus.SAFE),
            (Decimal("2.5"), HealthStatus.SAFE),
            (Decimal("2.0"), HealthStatus.GOOD),
            (Decimal("1.5"), HealthStatus.GOOD),
            (Decimal("1.4999"), HealthStatus.CAUTION),
            (Decimal("1.2"), HealthStatus.CAUTION),
            (Decimal("1.1999"), HealthStatus.AT_RISK),
            (Decimal("1.0"), HealthStatus.AT_RISK),
            (Decimal("0.9999"), HealthStatus.LIQUIDATION),
            (Decimal("0"), HealthStatus.LIQUIDATION),
        ],
    )
    def test_bands(self, hf, expected):
        assert HealthFactorCalculator.classify(hf) == expected


class TestBorrowUtilization:
    """Tests for borrow utilization."""

    def test_zero_capacity(self):
        assert HealthFactorCalculator.borrow_utilization(Decimal("0"), Decimal("0")) == 0

    def test_utilization(self):
        assert HealthFactorCalculator.borrow_utilization(Decimal("3000"), Decimal("1000")) == Decimal("75")

    def test_clamped(self):
        # Available can go negative when prices move against the account
        assert HealthFactorCalculator.borrow_utilization(Decimal("1000"), Decimal("-500")) == Decimal("100")


class TestValidation:
    """Tests for withdraw / borrow / repay validation."""

    def test_withdraw_ok(self, lending_position):
        result = HealthFactorCalculator.validate_withdraw(lending_position, Decimal("2727.27"))

        assert result.severity == ValidationSeverity.OK
        assert result.is_valid
        assert result.status == HealthStatus.GOOD

    def test_withdraw_warning(self, lending_position):
        result = HealthFactorCalculator.validate_withdraw(lending_position, Decimal("3000"))

        assert result.severity == ValidationSeverity.WARNING
        assert result.is_valid
        assert result.has_warning
        assert result.resulting_health_factor == Decimal("1.44375")

    def test_withdraw_error_below_one(self, lending_position):
        result = HealthFactorCalculator.validate_withdraw(lending_position, Decimal("6000"))

        assert result.severity == ValidationSeverity.ERROR
        assert not result.is_valid
        assert result.status == HealthStatus.LIQUIDATION

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1"), Decimal("10000.01")])
    def test_withdraw_impossible_amounts(self, lending_position, amount):
        result = HealthFactorCalculator.validate_withdraw(lending_position, amount)
        assert result.severity == ValidationSeverity.ERROR

    def test_withdraw_everything_without_debt(self):
        position = LendingPosition(total_collateral_usd=COLLATERAL, liquidation_threshold=THRESHOLD)
        result = HealthFactorCalculator.validate_withdraw(position, COLLATERAL)

        assert result.severity == ValidationSeverity.OK
        assert result.resulting_health_factor.is_infinite()

    def test_borrow_ok(self, lending_position):
        result = HealthFactorCalculator.validate_borrow(lending_position, Decimal("1000"))
        assert result.severity == ValidationSeverity.OK

    def test_borrow_warning(self, lending_position):
        result = HealthFactorCalculator.validate_borrow(lending_position, Decimal("2000"))

        assert result.severity == ValidationSeverity.WARNING
        assert result.resulting_health_factor == Decimal("1.375")

    def test_borrow_above_available(self, lending_position):
        result = HealthFactorCalculator.validate_borrow(lending_position, Decimal("4000.01"))

        assert result.severity == ValidationSeverity.ERROR
        assert "Max available" in result.message

    def test_borrow_error_below_one(self):
        position = LendingPosition(
            total_collateral_usd=COLLATERAL,
            total_debt_usd=DEBT,
            available_borrows_usd=Decimal("10000"),
            liquidation_threshold=THRESHOLD,
        )
        result = HealthFactorCalculator.validate_borrow(position, Decimal("5000"))
        assert result.severity == ValidationSeverity.ERROR

    def test_repay_ok(self, lending_position):
        result = HealthFactorCalculator.validate_repay(lending_position, Decimal("1000"))

        assert result.severity == ValidationSeverity.OK
        assert result.resulting_health_factor == Decimal("2.75")

    def test_repay_more_than_debt(self, lending_position):
        result = HealthFactorCalculator.validate_repay(lending_position, Decimal("4000.01"))
        assert result.severity == ValidationSeverity.ERROR

    def test_repay_still_risky_warns(self):
        position = LendingPosition(
            total_collateral_usd=COLLATERAL,
            total_debt_usd=Decimal("7000"),
            liquidation_threshold=THRESHOLD,
        )
        result = HealthFactorCalculator.validate_repay(position, Decimal("500"))

        assert result.severity == ValidationSeverity.WARNING
        assert result.is_valid
