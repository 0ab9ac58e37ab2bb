"""Named router configuration presets."""

from dataclasses import replace
from decimal import Decimal
from typing import Dict

from src.core.models import RiskTier, YieldRouterConfig

STRATEGY_PRESETS: Dict[str, YieldRouterConfig] = {
    "conservative": YieldRouterConfig(
        risk_tolerance=RiskTier.LOW,
        max_risk=RiskTier.LOW,
        min_tvl=Decimal("1000000"),
    ),
    "balanced": YieldRouterConfig(
        risk_tolerance=RiskTier.MEDIUM,
        max_risk=RiskTier.MEDIUM,
        min_tvl=Decimal("500000"),
        min_apy=Decimal("5"),
    ),
    "aggressive": YieldRouterConfig(
        risk_tolerance=RiskTier.HIGH,
        min_apy=Decimal("15"),
        min_tvl=Decimal("100000"),
    ),
}

STRATEGY_NAMES = {
    RiskTier.LOW: "Conservative",
    RiskTier.MEDIUM: "Balanced",
    RiskTier.HIGH: "High Yield",
}


def get_preset(name: str) -> YieldRouterConfig:
    """Return a fresh copy of a named preset.

    Raises:
        ValueError: If the preset does not exist
    """
    key = name.strip().lower()
    if key not in STRATEGY_PRESETS:
        raise ValueError(
            f"Unknown strategy preset: {name}. "
            f"Available presets: {sorted(STRATEGY_PRESETS)}"
        )
    return replace(STRATEGY_PRESETS[key])


def strategy_name(config: YieldRouterConfig) -> str:
    """Display name for the strategy a config represents."""
    return STRATEGY_NAMES[config.risk_tolerance]
