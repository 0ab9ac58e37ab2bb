"""Lending market account data parser.

Normalises raw `getUserAccountData` values from the lending pool:
- USD amounts in base currency units (8 decimals)
- LTV and liquidation threshold in basis points
- Health factor as a WAD (18 decimals), with uint256.max for no debt
- Supply rates as a RAY (27 decimals)
"""

import logging
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence, Union

from src.core.constants.generic import (
    BASE_CURRENCY_UNIT,
    HEALTH_FACTOR_NO_DEBT_THRESHOLD,
    HUNDRED,
    INFINITE_HEALTH_FACTOR,
    RAY,
    WAD,
)
from src.core.models import LendingPosition

logger = logging.getLogger(__name__)

ACCOUNT_DATA_FIELDS = (
    "totalCollateralBase",
    "totalDebtBase",
    "availableBorrowsBase",
    "currentLiquidationThreshold",
    "ltv",
    "healthFactor",
)

AccountData = Union[Sequence[Any], Mapping[str, Any]]


class LendingAccountParser:
    """Parser for lending pool account data."""

    @staticmethod
    def _to_int(value: Any) -> int:
        if value is None:
            return 0
        return int(value)

    @classmethod
    def parse_health_factor(cls, raw: Any) -> Decimal:
        """WAD health factor to Decimal, infinite for accounts without debt."""
        value = cls._to_int(raw)
        if value >= HEALTH_FACTOR_NO_DEBT_THRESHOLD:
            return INFINITE_HEALTH_FACTOR
        return Decimal(value) / Decimal(WAD)

    @classmethod
    def parse_base_to_usd(cls, raw: Any) -> Decimal:
        return Decimal(cls._to_int(raw)) / Decimal(BASE_CURRENCY_UNIT)

    @classmethod
    def parse_percentage(cls, raw: Any) -> Decimal:
        """Basis points to percent (8250 -> 82.5)."""
        return Decimal(cls._to_int(raw)) / HUNDRED

    @classmethod
    def parse_rate(cls, raw: Any) -> Decimal:
        """RAY rate to percent."""
        return Decimal(cls._to_int(raw)) / Decimal(RAY) * HUNDRED

    @classmethod
    def parse_account_data(
        cls,
        data: AccountData,
        liquidity_rate: Optional[Any] = None,
    ) -> LendingPosition:
        """
        Parse account data into a LendingPosition.

        Args:
            data: Either the raw 6-tuple returned by the contract or a
                mapping keyed by the output names
            liquidity_rate: Reserve liquidity rate (RAY), optional

        Raises:
            ValueError: If the data does not have the six account fields
        """
        if isinstance(data, Mapping):
            missing = [name for name in ACCOUNT_DATA_FIELDS if name not in data]
            if missing:
                raise ValueError(f"Account data missing fields: {missing}")
            values = [data[name] for name in ACCOUNT_DATA_FIELDS]
        else:
            values = list(data)
            if len(values) != len(ACCOUNT_DATA_FIELDS):
                raise ValueError(
                    f"Expected {len(ACCOUNT_DATA_FIELDS)} account values, got {len(values)}"
                )

        collateral, debt, available, threshold, ltv, health_factor = values

        position = LendingPosition(
            total_collateral_usd=cls.parse_base_to_usd(collateral),
            total_debt_usd=cls.parse_base_to_usd(debt),
            available_borrows_usd=cls.parse_base_to_usd(available),
            ltv=cls.parse_percentage(ltv),
            liquidation_threshold=cls.parse_percentage(threshold),
            health_factor=cls.parse_health_factor(health_factor),
            supply_apy=cls.parse_rate(liquidity_rate) if liquidity_rate is not None else None,
        )

        logger.debug(
            f"Parsed lending account: collateral={position.total_collateral_usd} "
            f"debt={position.total_debt_usd} hf={position.health_factor}"
        )
        return position
