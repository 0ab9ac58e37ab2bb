"""Chain slugs used by the vault aggregator."""

ARBITRUM = "arbitrum"
BASE = "base"
OPTIMISM = "optimism"
POLYGON = "polygon"

SUPPORTED_CHAINS = (ARBITRUM, BASE, OPTIMISM, POLYGON)
