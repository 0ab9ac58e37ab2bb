"""Pytest configuration and fixtures."""

from decimal import Decimal
from typing import List, Optional

import numpy as np
import pytest

from config.settings import Settings
from src.core.models import (
    LendingPosition,
    PoolBalance,
    PoolPosition,
    RiskTier,
    YieldOpportunity,
    YieldSource,
)


def make_opportunity(
    opp_id: str = "vault-1",
    apy: str = "10",
    tvl: str = "1000000",
    risk: RiskTier = RiskTier.MEDIUM,
    chain: str = "arbitrum",
    source: YieldSource = YieldSource.VAULT_AGGREGATOR,
    apr: Optional[str] = None,
) -> YieldOpportunity:
    """Create a test opportunity."""
    return YieldOpportunity(
        id=opp_id,
        source=source,
        chain=chain,
        protocol="test-protocol",
        name=opp_id.upper(),
        deposit_token="USDC",
        apy=Decimal(apy),
        apr=Decimal(apr if apr is not None else apy),
        tvl=Decimal(tvl),
        risk=risk,
    )


def random_catalog(rng: np.random.Generator, size: int) -> List[YieldOpportunity]:
    """Random catalog spread over four chains and all risk tiers."""
    chains = ["arbitrum", "base", "optimism", "polygon"]
    tiers = list(RiskTier)
    return [
        make_opportunity(
            opp_id=f"vault-{i}",
            apy=f"{rng.uniform(0, 150):.4f}",
            tvl=f"{rng.uniform(0, 50_000_000):.2f}",
            risk=tiers[int(rng.integers(0, len(tiers)))],
            chain=chains[int(rng.integers(0, len(chains)))],
        )
        for i in range(size)
    ]


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator for property sweeps."""
    return np.random.default_rng(42)


@pytest.fixture
def sample_opportunities() -> List[YieldOpportunity]:
    """Catalog spanning chains and risk tiers."""
    return [
        make_opportunity("arb-stable", apy="8", tvl="25000000", risk=RiskTier.LOW, chain="arbitrum"),
        make_opportunity("arb-eth", apy="18", tvl="4000000", risk=RiskTier.MEDIUM, chain="arbitrum"),
        make_opportunity("base-usdc", apy="12", tvl="9000000", risk=RiskTier.LOW, chain="base"),
        make_opportunity("op-degen", apy="85", tvl="300000", risk=RiskTier.HIGH, chain="optimism"),
        make_opportunity("poly-lp", apy="24", tvl="700000", risk=RiskTier.MEDIUM, chain="polygon"),
        make_opportunity("base-tiny", apy="40", tvl="5000", risk=RiskTier.HIGH, chain="base"),
    ]


@pytest.fixture
def lending_position() -> LendingPosition:
    """Lending account with debt (HF 2.0625)."""
    return LendingPosition(
        total_collateral_usd=Decimal("10000"),
        total_debt_usd=Decimal("4000"),
        available_borrows_usd=Decimal("4000"),
        ltv=Decimal("80"),
        liquidation_threshold=Decimal("82.5"),
        health_factor=Decimal("2.0625"),
        supply_apy=Decimal("4.5"),
    )


@pytest.fixture
def pool_position() -> PoolPosition:
    """Balances across the three blended pools."""
    return PoolPosition(balances=[
        PoolBalance(pool_name="BTC/USD", shares=Decimal("1000"), value_usd=Decimal("3000")),
        PoolBalance(pool_name="ETH/USD", shares=Decimal("500"), value_usd=Decimal("2000")),
        PoolBalance(pool_name="ARB/USD", shares=Decimal("100"), value_usd=Decimal("1000")),
    ])


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with the cache in a temp directory."""
    return Settings(cache_dir=tmp_path / "cache", _env_file=None)


@pytest.fixture
def opportunity_factory():
    """Factory for test opportunities."""
    return make_opportunity


@pytest.fixture
def catalog_factory():
    """Factory for random catalogs: catalog_factory(rng, size)."""
    return random_catalog
