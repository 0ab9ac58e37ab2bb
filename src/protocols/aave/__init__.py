"""Aave v3 (Arbitrum One) configuration."""

from src.protocols.aave.config import (
    AAVE_V3_POOL_ADDRESS,
    AAVE_V3_POOL_DATA_PROVIDER,
    RESERVE_ASSETS,
)
from src.protocols.aave.abis import POOL_ABI, POOL_DATA_PROVIDER_ABI

__all__ = [
    "AAVE_V3_POOL_ADDRESS",
    "AAVE_V3_POOL_DATA_PROVIDER",
    "RESERVE_ASSETS",
    "POOL_ABI",
    "POOL_DATA_PROVIDER_ABI",
]
