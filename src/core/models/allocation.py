"""Allocation result model."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from .opportunity import YieldOpportunity


@dataclass
class AllocationResult:
    """Output of the allocator.

    The geometric split rarely sums to 100%; whatever is not placed is
    reported as `unallocated_amount` / `unallocated_percent` so the caller
    decides what to do with it.
    """

    opportunities: List[YieldOpportunity] = field(default_factory=list)
    total_apy: Decimal = Decimal("0")  # Best APY among selected
    weighted_apy: Decimal = Decimal("0")  # Sum of apy * allocation_percent
    diversification_score: Decimal = Decimal("0")  # 0-100
    risk_score: Decimal = Decimal("2")  # 1 (low) - 3 (high)

    total_amount: Decimal = Decimal("0")
    allocated_amount: Decimal = Decimal("0")

    @property
    def unallocated_amount(self) -> Decimal:
        """Capital left idle by the split."""
        if self.total_amount <= 0:
            return Decimal("0")
        return self.total_amount * self.unallocated_percent

    @property
    def allocated_percent(self) -> Decimal:
        """Sum of allocation fractions (0-1)."""
        return sum(
            (o.allocation_percent or Decimal("0") for o in self.opportunities),
            Decimal("0"),
        )

    @property
    def unallocated_percent(self) -> Decimal:
        if self.total_amount <= 0:
            return Decimal("0")
        return Decimal("1") - self.allocated_percent

    @property
    def is_empty(self) -> bool:
        return not self.opportunities

    @property
    def chains(self) -> List[str]:
        """Distinct chains in selection order."""
        seen: List[str] = []
        for opp in self.opportunities:
            if opp.chain not in seen:
                seen.append(opp.chain)
        return seen

    def to_dict(self) -> dict:
        return {
            "opportunities": [o.to_dict() for o in self.opportunities],
            "total_apy": str(self.total_apy),
            "weighted_apy": str(self.weighted_apy),
            "diversification_score": str(self.diversification_score),
            "risk_score": str(self.risk_score),
            "total_amount": str(self.total_amount),
            "allocated_amount": str(self.allocated_amount),
            "unallocated_amount": str(self.unallocated_amount),
        }
