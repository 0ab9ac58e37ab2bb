"""Asset classifications used by the risk heuristics."""

STABLECOINS = frozenset({
    "USDC", "USDC.E", "USDT", "DAI", "FRAX", "LUSD", "USDBC", "SUSD", "GHO", "CRVUSD",
})

# Risk tag fragments that add a risk point to a vault
HIGH_RISK_FLAGS = ("IL", "COMPLEXITY", "AUDIT", "CONTRACTS")
