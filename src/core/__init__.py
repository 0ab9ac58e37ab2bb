"""Core module - models and constants."""

from .models import (
    YieldOpportunity,
    YieldRouterConfig,
    YieldSource,
    RiskTier,
    AllocationResult,
    LendingPosition,
    PoolPosition,
    UnifiedUserPosition,
    HealthStatus,
)
from .constants import INFINITE_HEALTH_FACTOR, FALLBACK_POOL_APY

__all__ = [
    "YieldOpportunity",
    "YieldRouterConfig",
    "YieldSource",
    "RiskTier",
    "AllocationResult",
    "LendingPosition",
    "PoolPosition",
    "UnifiedUserPosition",
    "HealthStatus",
    "INFINITE_HEALTH_FACTOR",
    "FALLBACK_POOL_APY",
]
