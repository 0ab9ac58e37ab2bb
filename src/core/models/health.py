"""Health factor classification and validation models."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from src.core.constants.generic import INFINITE_HEALTH_FACTOR


class HealthStatus(Enum):
    """Five-band severity of a health factor."""

    SAFE = "Safe"  # > 2.0 or infinite
    GOOD = "Good"  # [1.5, 2.0)
    CAUTION = "Caution"  # [1.2, 1.5)
    AT_RISK = "At Risk"  # [1.0, 1.2)
    LIQUIDATION = "Liquidation"  # < 1.0


class ValidationSeverity(Enum):
    """Outcome of validating a proposed action amount."""

    OK = "ok"
    WARNING = "warning"  # Advisory, does not block
    ERROR = "error"  # Blocks the action

    @property
    def blocks_action(self) -> bool:
        return self is ValidationSeverity.ERROR


class ActionType(Enum):
    """Position-changing actions that are validated."""

    WITHDRAW = "withdraw"
    BORROW = "borrow"
    REPAY = "repay"


@dataclass
class ValidationResult:
    """Result of validating a withdraw/borrow/repay amount."""

    action: ActionType
    amount: Decimal
    severity: ValidationSeverity
    resulting_health_factor: Decimal = INFINITE_HEALTH_FACTOR
    status: Optional[HealthStatus] = None
    message: str = ""

    @property
    def is_valid(self) -> bool:
        """True unless the action must be blocked."""
        return not self.severity.blocks_action

    @property
    def has_warning(self) -> bool:
        return self.severity is ValidationSeverity.WARNING

    def to_dict(self) -> dict:
        return {
            "action": self.action.value,
            "amount": str(self.amount),
            "severity": self.severity.value,
            "resulting_health_factor": str(self.resulting_health_factor),
            "status": self.status.value if self.status else None,
            "message": self.message,
        }


@dataclass
class WithdrawalLimits:
    """Max withdrawable collateral at the safe and absolute HF targets."""

    safe_max: Decimal  # Keeps HF >= 1.5, default MAX button
    absolute_max: Decimal  # Keeps HF >= 1.0, hard validation ceiling
    safe_target: Decimal = Decimal("1.5")
    absolute_target: Decimal = Decimal("1.0")

    def to_dict(self) -> dict:
        return {
            "safe_max": str(self.safe_max),
            "absolute_max": str(self.absolute_max),
            "safe_target": str(self.safe_target),
            "absolute_target": str(self.absolute_target),
        }
