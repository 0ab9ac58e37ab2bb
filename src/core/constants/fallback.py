"""Fallback market data used when live sources are unavailable.

Each table carries the date it was last refreshed. Bump the version when
the numbers change so cached snapshots can be told apart.
"""

from decimal import Decimal

FALLBACK_DATA_VERSION = "2026-02-01"

# Pool names blended into the unified APY
BTC_POOL = "BTC/USD"
ETH_POOL = "ETH/USD"
ARB_POOL = "ARB/USD"

POOL_NAMES = (BTC_POOL, ETH_POOL, ARB_POOL)

# Fixed sub-weighting among pools inside the 40% pool bucket
POOL_SUB_WEIGHTS = {
    BTC_POOL: Decimal("0.6"),
    ETH_POOL: Decimal("0.3"),
    ARB_POOL: Decimal("0.1"),
}

# Fee APY + annual performance, per pool
FALLBACK_POOL_APY = {
    BTC_POOL: {
        "fee_apy": Decimal("10.77"),
        "performance_apy": Decimal("4.05"),
        "total_apy": Decimal("14.82"),
        "tvl_usd": Decimal("80000000"),
    },
    ETH_POOL: {
        "fee_apy": Decimal("12.14"),
        "performance_apy": Decimal("7.61"),
        "total_apy": Decimal("19.75"),
        "tvl_usd": Decimal("76000000"),
    },
    ARB_POOL: {
        "fee_apy": Decimal("6.0"),
        "performance_apy": Decimal("2.65"),
        "total_apy": Decimal("8.65"),
        "tvl_usd": Decimal("700000"),
    },
}

# Pool ids on the yields API, with symbol aliases for fallback matching
POOL_IDS = {
    BTC_POOL: "5b8c0691-b9ff-4d82-97e4-19a1247e6dbf",
    ETH_POOL: "61b4c35c-97f6-4c05-a5ff-aeb4426adf5b",
    ARB_POOL: "f3fa942f-1867-4028-95ff-4eb76816cd07",
}

POOL_SYMBOLS = {
    BTC_POOL: ("WBTC.B-USDC", "BTC-USDC", "WBTC-USDC"),
    ETH_POOL: ("ETH-USDC", "WETH-USDC"),
    ARB_POOL: ("ARB-USDC",),
}

# Used when no per-pool figure is known at all
DEFAULT_POOL_APY = Decimal("18.0")
DEFAULT_LENDING_APY = Decimal("3.5")
DEFAULT_BORROW_APR = Decimal("5.2")
