"""Borrow simulation models."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from src.core.models.health import ValidationResult


class WarningSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"


@dataclass
class BorrowWarning:
    code: str  # e.g. LOW_HEALTH_FACTOR
    message: str
    severity: WarningSeverity


@dataclass
class EarningsSnapshot:
    """Earnings and risk of a position at one point of a simulation."""

    total_value_usd: Decimal
    apy: Decimal  # Percent, net of borrow cost
    daily: Decimal
    monthly: Decimal
    yearly: Decimal
    borrowed_usd: Decimal
    health_factor: Decimal

    def to_dict(self) -> dict:
        return {
            "total_value_usd": str(self.total_value_usd),
            "apy": str(self.apy),
            "daily_earnings": str(self.daily),
            "monthly_earnings": str(self.monthly),
            "yearly_earnings": str(self.yearly),
            "borrowed_usd": str(self.borrowed_usd),
            "health_factor": str(self.health_factor),
        }


@dataclass
class BorrowSimulation:
    """Before/after view of a proposed borrow."""

    amount: Decimal
    borrow_apr: Decimal
    before: EarningsSnapshot
    after: EarningsSnapshot
    validation: ValidationResult
    warnings: List[BorrowWarning] = field(default_factory=list)
    recommendation: Optional[str] = None

    @property
    def earnings_reduction(self) -> Decimal:
        """Yearly earnings given up by borrowing."""
        return self.before.yearly - self.after.yearly

    @property
    def is_allowed(self) -> bool:
        return self.validation.is_valid

    @property
    def headline(self) -> str:
        return (
            f"You'll earn ${self.after.monthly:,.0f}/mo instead of "
            f"${self.before.monthly:,.0f}/mo"
        )

    def to_dict(self) -> dict:
        return {
            "amount": str(self.amount),
            "borrow_apr": str(self.borrow_apr),
            "before": self.before.to_dict(),
            "after": self.after.to_dict(),
            "earnings_reduction": str(self.earnings_reduction),
            "validation": self.validation.to_dict(),
            "warnings": [
                {"code": w.code, "message": w.message, "severity": w.severity.value}
                for w in self.warnings
            ],
            "headline": self.headline,
            "recommendation": self.recommendation,
        }
