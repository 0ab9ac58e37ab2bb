"""Vault aggregator response parser.

Converts the aggregator's vault list, APY, TVL and APY breakdown payloads
into VaultRecord and YieldOpportunity models.

APY values come back as fractions (0.12 = 12%) and are converted to
percent here.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from src.core.constants.assets import HIGH_RISK_FLAGS
from src.core.constants.generic import HUNDRED
from src.core.models import ApyBreakdown, RiskTier, VaultRecord, YieldOpportunity, YieldSource

logger = logging.getLogger(__name__)

# Vault APR is assumed to be 80% of APY when no breakdown is published
DEFAULT_APR_RATIO = Decimal("0.8")


class VaultParser:
    """Parser for vault aggregator API responses."""

    @staticmethod
    def parse_decimal(value: Any) -> Decimal:
        """Safely parse a value to Decimal (0 for missing or malformed)."""
        if value is None:
            return Decimal("0")
        if isinstance(value, Decimal):
            return value
        try:
            parsed = Decimal(str(value))
        except (InvalidOperation, ValueError):
            logger.warning(f"Could not parse number: {value!r}")
            return Decimal("0")
        return parsed if parsed.is_finite() else Decimal("0")

    @classmethod
    def parse_vault(cls, data: Dict[str, Any], chain: str) -> VaultRecord:
        """Parse one vault entry from /vaults/{chain}."""
        return VaultRecord(
            id=data["id"],
            name=data.get("name", data["id"]),
            chain=chain,
            platform_id=data.get("platformId", ""),
            token=data.get("token", ""),
            assets=list(data.get("assets") or []),
            risks=list(data.get("risks") or []),
            status=data.get("status", "active"),
            earn_contract_address=data.get("earnContractAddress"),
        )

    @classmethod
    def parse_vaults(cls, payload: List[Dict[str, Any]], chain: str) -> List[VaultRecord]:
        """Parse a chain's vault list, keeping active vaults only."""
        vaults = []
        for item in payload or []:
            try:
                vault = cls.parse_vault(item, chain)
            except KeyError:
                logger.warning(f"Skipping vault without id on {chain}")
                continue
            if vault.is_active:
                vaults.append(vault)
        return vaults

    @classmethod
    def parse_apys(cls, payload: Mapping[str, Any]) -> Dict[str, Decimal]:
        """Parse /apy into percent APY keyed by vault id."""
        return {vault_id: cls.parse_decimal(value) * HUNDRED for vault_id, value in (payload or {}).items()}

    @classmethod
    def parse_tvls(cls, payload: Mapping[str, Any]) -> Dict[str, Decimal]:
        """Parse /tvl into USD TVL keyed by vault id.

        The endpoint groups vaults by chain id; flat payloads are accepted too.
        """
        tvls: Dict[str, Decimal] = {}
        for key, value in (payload or {}).items():
            if isinstance(value, dict):
                for vault_id, tvl in value.items():
                    tvls[vault_id] = cls.parse_decimal(tvl)
            else:
                tvls[key] = cls.parse_decimal(value)
        return tvls

    @classmethod
    def parse_apy_breakdown(cls, payload: Mapping[str, Any]) -> Dict[str, ApyBreakdown]:
        """Parse /apy/breakdown into percent components keyed by vault id."""
        breakdowns = {}
        for vault_id, data in (payload or {}).items():
            if not isinstance(data, dict):
                continue
            breakdowns[vault_id] = ApyBreakdown(
                vault_apr=cls.parse_decimal(data.get("vaultApr")) * HUNDRED,
                trading_apr=cls.parse_decimal(data.get("tradingApr")) * HUNDRED,
                total_apy=cls.parse_decimal(data.get("totalApy")) * HUNDRED,
            )
        return breakdowns

    @staticmethod
    def merge_stats(
        vaults: List[VaultRecord],
        apys: Mapping[str, Decimal],
        tvls: Mapping[str, Decimal],
        breakdowns: Mapping[str, ApyBreakdown],
    ) -> List[VaultRecord]:
        """Attach APY, TVL and breakdown to each vault (0 when unknown)."""
        for vault in vaults:
            vault.apy = max(Decimal("0"), apys.get(vault.id, Decimal("0")))
            vault.tvl = max(Decimal("0"), tvls.get(vault.id, Decimal("0")))
            vault.apy_breakdown = breakdowns.get(vault.id)
        return vaults

    @staticmethod
    def risk_tier(vault: VaultRecord) -> RiskTier:
        """
        Heuristic risk tier from APY, TVL, risk tags and assets.

        Points:
        - APY > 50%: +2, APY > 20%: +1
        - TVL < $100k: +2, TVL < $1M: +1
        - +1 per risk tag mentioning IL, COMPLEXITY, AUDIT or CONTRACTS
        - Stablecoin-only vault: -2

        <= 1 is low, <= 3 is medium, otherwise high.
        """
        points = 0

        if vault.apy > 50:
            points += 2
        elif vault.apy > 20:
            points += 1

        if vault.tvl < 100_000:
            points += 2
        elif vault.tvl < 1_000_000:
            points += 1

        for risk in vault.risks:
            if any(flag in risk.upper() for flag in HIGH_RISK_FLAGS):
                points += 1

        if vault.is_stablecoin_only:
            points -= 2

        if points <= 1:
            return RiskTier.LOW
        if points <= 3:
            return RiskTier.MEDIUM
        return RiskTier.HIGH

    @classmethod
    def to_opportunity(cls, vault: VaultRecord) -> YieldOpportunity:
        """Map a vault with stats to a YieldOpportunity."""
        apr: Optional[Decimal] = None
        if vault.apy_breakdown and vault.apy_breakdown.vault_apr:
            apr = vault.apy_breakdown.vault_apr
        if not apr:
            apr = vault.apy * DEFAULT_APR_RATIO

        return YieldOpportunity(
            id=vault.id,
            source=YieldSource.VAULT_AGGREGATOR,
            chain=vault.chain,
            protocol=vault.platform_id,
            name=vault.name,
            deposit_token=vault.token,
            apy=vault.apy,
            apr=apr,
            tvl=vault.tvl,
            risk=cls.risk_tier(vault),
            risk_factors=list(vault.risks),
            tokens=list(vault.assets),
            vault_address=vault.earn_contract_address,
        )
