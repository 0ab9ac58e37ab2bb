"""Core data models for the yield router."""

from .opportunity import YieldOpportunity, YieldRouterConfig, YieldSource, RiskTier
from .allocation import AllocationResult
from .position import (
    LendingPosition,
    PoolBalance,
    PoolPosition,
    EarningsProjection,
    UnifiedUserPosition,
)
from .health import (
    HealthStatus,
    ValidationSeverity,
    ActionType,
    ValidationResult,
    WithdrawalLimits,
)
from .vault import VaultRecord, ApyBreakdown, PoolApy
from .borrow import BorrowSimulation, BorrowWarning, EarningsSnapshot, WarningSeverity

__all__ = [
    "YieldOpportunity",
    "YieldRouterConfig",
    "YieldSource",
    "RiskTier",
    "AllocationResult",
    "LendingPosition",
    "PoolBalance",
    "PoolPosition",
    "EarningsProjection",
    "UnifiedUserPosition",
    "HealthStatus",
    "ValidationSeverity",
    "ActionType",
    "ValidationResult",
    "WithdrawalLimits",
    "VaultRecord",
    "ApyBreakdown",
    "PoolApy",
    "BorrowSimulation",
    "BorrowWarning",
    "EarningsSnapshot",
    "WarningSeverity",
]
