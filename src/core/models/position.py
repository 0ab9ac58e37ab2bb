"""Lending, pool and unified user position models."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from src.core.constants.generic import INFINITE_HEALTH_FACTOR
from src.core.constants.routing import SAFE_HEALTH_FACTOR


@dataclass
class LendingPosition:
    """User account on the lending market, normalized to USD and percent.

    Health factor is the infinite sentinel when there is no debt.
    """

    total_collateral_usd: Decimal = Decimal("0")
    total_debt_usd: Decimal = Decimal("0")
    available_borrows_usd: Decimal = Decimal("0")
    ltv: Decimal = Decimal("0")  # Percent, e.g. 80
    liquidation_threshold: Decimal = Decimal("0")  # Percent, e.g. 82.5
    health_factor: Decimal = INFINITE_HEALTH_FACTOR
    supply_apy: Optional[Decimal] = None  # Percent

    @property
    def has_debt(self) -> bool:
        return self.total_debt_usd > 0

    @property
    def is_at_risk(self) -> bool:
        """HF below 1.5 (never true without debt)."""
        return self.health_factor.is_finite() and self.health_factor < SAFE_HEALTH_FACTOR

    @property
    def can_borrow(self) -> bool:
        return self.available_borrows_usd > 0

    def to_dict(self) -> dict:
        return {
            "total_collateral_usd": str(self.total_collateral_usd),
            "total_debt_usd": str(self.total_debt_usd),
            "available_borrows_usd": str(self.available_borrows_usd),
            "ltv": str(self.ltv),
            "liquidation_threshold": str(self.liquidation_threshold),
            "health_factor": str(self.health_factor),
            "supply_apy": str(self.supply_apy) if self.supply_apy is not None else None,
        }


@dataclass
class PoolBalance:
    """Share-token balance in a single liquidity pool."""

    pool_name: str  # e.g. "ETH/USD"
    shares: Decimal
    value_usd: Decimal
    pool_address: Optional[str] = None


@dataclass
class PoolPosition:
    """User balances across liquidity pools."""

    balances: List[PoolBalance] = field(default_factory=list)

    @property
    def total_value_usd(self) -> Decimal:
        return sum((b.value_usd for b in self.balances), Decimal("0"))

    def value_by_pool(self) -> Dict[str, Decimal]:
        """USD value keyed by pool name (summed if a pool repeats)."""
        values: Dict[str, Decimal] = {}
        for balance in self.balances:
            values[balance.pool_name] = values.get(balance.pool_name, Decimal("0")) + balance.value_usd
        return values


@dataclass
class EarningsProjection:
    """Simple (non-compounded) earnings projection."""

    daily: Decimal = Decimal("0")
    monthly: Decimal = Decimal("0")
    yearly: Decimal = Decimal("0")


@dataclass
class UnifiedUserPosition:
    """One user-facing position across the lending market and pools."""

    total_value_usd: Decimal = Decimal("0")
    deposited_usd: Decimal = Decimal("0")
    earnings_usd: Decimal = Decimal("0")  # Negative on drawdown
    earnings_percent: Decimal = Decimal("0")

    # Borrow info
    borrow_capacity_usd: Decimal = Decimal("0")  # Borrowed + available
    borrowed_usd: Decimal = Decimal("0")
    available_to_borrow_usd: Decimal = Decimal("0")
    borrow_utilization: Decimal = Decimal("0")  # 0-100
    borrow_apr: Decimal = Decimal("0")

    # APY
    current_apy: Decimal = Decimal("0")  # Rounded to one decimal
    current_apy_exact: Decimal = Decimal("0")
    projections: EarningsProjection = field(default_factory=EarningsProjection)

    # Risk
    health_factor: Decimal = INFINITE_HEALTH_FACTOR
    health_status: Optional[str] = None

    @property
    def has_position(self) -> bool:
        return self.total_value_usd > 0

    @property
    def daily_earnings(self) -> Decimal:
        return self.projections.daily

    @property
    def monthly_earnings(self) -> Decimal:
        return self.projections.monthly

    @property
    def yearly_earnings(self) -> Decimal:
        return self.projections.yearly

    def to_dict(self) -> dict:
        return {
            "total_value_usd": str(self.total_value_usd),
            "deposited_usd": str(self.deposited_usd),
            "earnings_usd": str(self.earnings_usd),
            "earnings_percent": str(self.earnings_percent),
            "borrow_capacity_usd": str(self.borrow_capacity_usd),
            "borrowed_usd": str(self.borrowed_usd),
            "available_to_borrow_usd": str(self.available_to_borrow_usd),
            "borrow_utilization": str(self.borrow_utilization),
            "borrow_apr": str(self.borrow_apr),
            "current_apy": str(self.current_apy),
            "daily_earnings": str(self.projections.daily),
            "monthly_earnings": str(self.projections.monthly),
            "yearly_earnings": str(self.projections.yearly),
            "health_factor": str(self.health_factor),
            "health_status": self.health_status,
            "has_position": self.has_position,
        }
