"""Core constants module.

Re-exports all constants for convenience.
"""

from src.core.constants.generic import (
    DAYS_PER_YEAR,
    MONTHS_PER_YEAR,
    WAD,
    BASE_CURRENCY_UNIT,
    BPS,
    MAX_UINT256,
    HEALTH_FACTOR_NO_DEBT_THRESHOLD,
    INFINITE_HEALTH_FACTOR,
)

from src.core.constants.chains import SUPPORTED_CHAINS

from src.core.constants.fallback import (
    FALLBACK_DATA_VERSION,
    FALLBACK_POOL_APY,
    POOL_NAMES,
    POOL_SUB_WEIGHTS,
    DEFAULT_POOL_APY,
    DEFAULT_LENDING_APY,
    DEFAULT_BORROW_APR,
)

__all__ = [
    # Generic
    "DAYS_PER_YEAR",
    "MONTHS_PER_YEAR",
    "WAD",
    "BASE_CURRENCY_UNIT",
    "BPS",
    "MAX_UINT256",
    "HEALTH_FACTOR_NO_DEBT_THRESHOLD",
    "INFINITE_HEALTH_FACTOR",
    # Chains
    "SUPPORTED_CHAINS",
    # Fallback data
    "FALLBACK_DATA_VERSION",
    "FALLBACK_POOL_APY",
    "POOL_NAMES",
    "POOL_SUB_WEIGHTS",
    "DEFAULT_POOL_APY",
    "DEFAULT_LENDING_APY",
    "DEFAULT_BORROW_APR",
]
