"""Vault aggregator and liquidity pool market data models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from src.core.constants.assets import STABLECOINS


@dataclass
class ApyBreakdown:
    """APY components reported by the vault aggregator (percent)."""

    vault_apr: Decimal = Decimal("0")
    trading_apr: Decimal = Decimal("0")
    total_apy: Decimal = Decimal("0")


@dataclass
class VaultRecord:
    """Auto-compounding vault with merged APY/TVL stats."""

    id: str
    name: str
    chain: str
    platform_id: str
    token: str

    assets: List[str] = field(default_factory=list)
    risks: List[str] = field(default_factory=list)
    status: str = "active"
    earn_contract_address: Optional[str] = None

    # Stats (percent / USD)
    apy: Decimal = Decimal("0")
    tvl: Decimal = Decimal("0")
    apy_breakdown: Optional[ApyBreakdown] = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def is_stablecoin_only(self) -> bool:
        """Check if every underlying asset is a stablecoin."""
        return bool(self.assets) and all(a.upper() in STABLECOINS for a in self.assets)


@dataclass
class PoolApy:
    """APY figures for one liquidity pool."""

    pool_name: str
    fee_apy: Decimal
    performance_apy: Decimal
    total_apy: Decimal
    tvl_usd: Decimal = Decimal("0")
    last_updated: Optional[datetime] = None
    source: str = "live"  # "live", "snapshot", "fallback"

    def to_dict(self) -> dict:
        return {
            "pool_name": self.pool_name,
            "fee_apy": str(self.fee_apy),
            "performance_apy": str(self.performance_apy),
            "total_apy": str(self.total_apy),
            "tvl_usd": str(self.tvl_usd),
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PoolApy":
        last_updated = data.get("last_updated")
        return cls(
            pool_name=data["pool_name"],
            fee_apy=Decimal(str(data.get("fee_apy", "0"))),
            performance_apy=Decimal(str(data.get("performance_apy", "0"))),
            total_apy=Decimal(str(data.get("total_apy", "0"))),
            tvl_usd=Decimal(str(data.get("tvl_usd", "0"))),
            last_updated=datetime.fromisoformat(last_updated) if last_updated else None,
            source=data.get("source", "live"),
        )
