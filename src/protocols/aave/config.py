"""Aave v3 protocol-specific configuration and constants."""

# Aave v3 contract addresses (Arbitrum One)
AAVE_V3_POOL_ADDRESS = "0x794a61358D6845594F94dc1DB02A252b5b4814aD"
AAVE_V3_POOL_DATA_PROVIDER = "0x69FA688f1Dc47d4B5d8029D5a35FB7a548310654"

# Reserve assets by symbol
RESERVE_ASSETS = {
    "USDC": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
    "WETH": "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",
    "WBTC": "0x2f2a2543B76A4166549F7aaB2e75Bef0aefC5B0f",
    "ARB": "0x912CE59144191C1204E64559FE8253a0e49E6548",
}

# Positions in the getReserveData output tuple
RESERVE_LIQUIDITY_RATE_INDEX = 5
RESERVE_VARIABLE_BORROW_RATE_INDEX = 6
