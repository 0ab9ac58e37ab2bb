"""Yield opportunity and router configuration models."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import FrozenSet, List, Optional


class YieldSource(Enum):
    """Where an opportunity comes from."""

    VAULT_AGGREGATOR = "vault-aggregator"
    POOL_PROTOCOL = "pool-protocol"
    LENDING_PROTOCOL = "lending-protocol"
    SOCIAL_COPY = "social-copy"


class RiskTier(Enum):
    """Risk tier, ordered low < medium < high."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Numeric rank on the 1-3 scale."""
        return {RiskTier.LOW: 1, RiskTier.MEDIUM: 2, RiskTier.HIGH: 3}[self]

    def exceeds(self, other: "RiskTier") -> bool:
        """Check if this tier is riskier than `other`."""
        return self.rank > other.rank


@dataclass
class YieldOpportunity:
    """A candidate place to deposit funds.

    Built fresh from catalog data on every query cycle. The scorer sets
    `score`; the allocator attaches `allocation_percent` and
    `allocated_amount` on the copies it returns.
    """

    id: str
    source: YieldSource
    chain: str
    protocol: str
    name: str
    deposit_token: str

    # Yield info (percent)
    apy: Decimal
    apr: Decimal
    tvl: Decimal  # USD

    # Risk
    risk: RiskTier = RiskTier.MEDIUM
    risk_factors: List[str] = field(default_factory=list)

    # Optional metadata
    tokens: List[str] = field(default_factory=list)
    vault_address: Optional[str] = None
    pool_address: Optional[str] = None

    # Set by the scorer / allocator
    score: Decimal = Decimal("0")
    allocation_percent: Optional[Decimal] = None
    allocated_amount: Optional[Decimal] = None

    def __post_init__(self):
        if self.apy < 0:
            raise ValueError(f"Opportunity {self.id} has negative APY: {self.apy}")
        if self.tvl < 0:
            raise ValueError(f"Opportunity {self.id} has negative TVL: {self.tvl}")

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "source": self.source.value,
            "chain": self.chain,
            "protocol": self.protocol,
            "name": self.name,
            "deposit_token": self.deposit_token,
            "apy": str(self.apy),
            "apr": str(self.apr),
            "tvl": str(self.tvl),
            "risk": self.risk.value,
            "risk_factors": list(self.risk_factors),
            "tokens": list(self.tokens),
            "vault_address": self.vault_address,
            "pool_address": self.pool_address,
            "score": str(self.score),
            "allocation_percent": str(self.allocation_percent) if self.allocation_percent is not None else None,
            "allocated_amount": str(self.allocated_amount) if self.allocated_amount is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "YieldOpportunity":
        """Deserialize from dictionary."""
        apy = Decimal(str(data.get("apy", "0")))
        return cls(
            id=data["id"],
            source=YieldSource(data.get("source", YieldSource.VAULT_AGGREGATOR.value)),
            chain=data["chain"],
            protocol=data.get("protocol", ""),
            name=data.get("name", data["id"]),
            deposit_token=data.get("deposit_token", ""),
            apy=apy,
            apr=Decimal(str(data["apr"])) if data.get("apr") is not None else apy,
            tvl=Decimal(str(data.get("tvl", "0"))),
            risk=RiskTier(data.get("risk", RiskTier.MEDIUM.value)),
            risk_factors=list(data.get("risk_factors", [])),
            tokens=list(data.get("tokens", [])),
            vault_address=data.get("vault_address"),
            pool_address=data.get("pool_address"),
        )


@dataclass
class YieldRouterConfig:
    """Filter and risk policy for the router.

    Filters are conjunctive. `risk_tolerance` only affects scoring.
    """

    risk_tolerance: RiskTier = RiskTier.MEDIUM

    # Filters
    chains: Optional[List[str]] = None
    min_apy: Optional[Decimal] = None
    max_risk: Optional[RiskTier] = None
    min_tvl: Optional[Decimal] = None
    exclude_sources: FrozenSet[YieldSource] = field(default_factory=frozenset)

    # Allocation
    max_allocation: Optional[Decimal] = None  # Max single-position fraction (0-1)

    def to_dict(self) -> dict:
        return {
            "risk_tolerance": self.risk_tolerance.value,
            "chains": list(self.chains) if self.chains else None,
            "min_apy": str(self.min_apy) if self.min_apy is not None else None,
            "max_risk": self.max_risk.value if self.max_risk else None,
            "min_tvl": str(self.min_tvl) if self.min_tvl is not None else None,
            "exclude_sources": sorted(s.value for s in self.exclude_sources),
            "max_allocation": str(self.max_allocation) if self.max_allocation is not None else None,
        }
