"""Data pipeline orchestration for the yield router.

Fetches the opportunity catalog and pool APYs through fallback chains:
live API first, then the last-known-good snapshot, then (for pool APYs)
the static fallback table.
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Dict, List, Optional

from config.settings import Settings, get_settings
from src.core.constants.fallback import FALLBACK_POOL_APY, POOL_NAMES
from src.core.models import LendingPosition, PoolApy, YieldOpportunity
from src.data.cache.disk_cache import CacheKeys, DiskCache
from src.data.fallback import (
    AllSourcesFailedError,
    FallbackChain,
    FetchResult,
    LiveSource,
    SnapshotSource,
    StaticSource,
)
from src.data.parsers.vault_parser import VaultParser
from src.data.sources.lending_reader import LendingAccountReader
from src.data.sources.pool_apy import PoolApyClient
from src.data.sources.vault_api import VaultAggregatorClient

logger = logging.getLogger(__name__)


def fallback_pool_apys() -> Dict[str, PoolApy]:
    """Pool APYs from the static fallback table."""
    return {
        pool_name: PoolApy(
            pool_name=pool_name,
            fee_apy=row["fee_apy"],
            performance_apy=row["performance_apy"],
            total_apy=row["total_apy"],
            tvl_usd=row["tvl_usd"],
            source="fallback",
        )
        for pool_name, row in FALLBACK_POOL_APY.items()
    }


def _load_opportunities(records: List[dict]) -> List[YieldOpportunity]:
    return [YieldOpportunity.from_dict(r) for r in records]


def _load_pool_apys(records: List[dict]) -> Dict[str, PoolApy]:
    pools = [PoolApy.from_dict(r) for r in records]
    return {p.pool_name: replace(p, source="snapshot") for p in pools}


class YieldDataPipeline:
    """Orchestrates catalog and pool APY fetching with fallbacks.

    Results are kept in memory until `force_refresh` is requested. The
    clients keep their own short-lived TTL caches per endpoint.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        vault_client: Optional[VaultAggregatorClient] = None,
        pool_client: Optional[PoolApyClient] = None,
        disk_cache: Optional[DiskCache] = None,
        lending_reader: Optional[LendingAccountReader] = None,
    ):
        """Initialize the data pipeline.

        Args:
            settings: Application settings
            vault_client: Vault aggregator client (created if None)
            pool_client: Pool APY client (created if None)
            disk_cache: Snapshot store (created if None)
            lending_reader: On-chain lending reader (created if None)
        """
        self.settings = settings or get_settings()
        self.vault_client = vault_client or VaultAggregatorClient(self.settings)
        self.pool_client = pool_client or PoolApyClient(self.settings)
        self.disk_cache = disk_cache or DiskCache(self.settings)
        self.lending_reader = lending_reader or LendingAccountReader(self.settings)

        self._opportunities_cache: Dict[tuple, FetchResult] = {}
        self._pool_apys_cache: Optional[FetchResult] = None

    # ========== OPPORTUNITIES ==========

    async def _fetch_live_opportunities(self, chains: List[str]) -> List[YieldOpportunity]:
        vaults = await self.vault_client.get_vaults_with_stats(chains)
        opportunities = [VaultParser.to_opportunity(v) for v in vaults]
        if opportunities:
            self.disk_cache.save_snapshot(
                CacheKeys.opportunities(), [o.to_dict() for o in opportunities]
            )
        return opportunities

    async def get_opportunities(
        self,
        chains: Optional[List[str]] = None,
        force_refresh: bool = False,
    ) -> FetchResult:
        """Get the opportunity catalog.

        Args:
            chains: Chain slugs (default: settings.supported_chains)
            force_refresh: Skip the in-memory result and refetch

        Returns:
            FetchResult whose data is a list of YieldOpportunity; empty
            when neither the API nor a snapshot is available
        """
        chains = list(chains or self.settings.supported_chains)
        key = tuple(chains)

        if not force_refresh and key in self._opportunities_cache:
            logger.debug(f"Memory cache hit for opportunities on {chains}")
            return self._opportunities_cache[key]

        chain = FallbackChain(
            [
                LiveSource("vault-api", lambda: self._fetch_live_opportunities(chains)),
                SnapshotSource(self.disk_cache, CacheKeys.opportunities(), _load_opportunities),
            ],
            timeout_seconds=self.settings.request_timeout_seconds,
        )

        try:
            result = await chain.fetch()
        except AllSourcesFailedError as e:
            logger.error(f"No opportunity catalog available: {e}")
            return FetchResult(data=[], source="none", is_fallback=True, errors=e.errors)

        if result.source.startswith("snapshot"):
            # Snapshots cover every chain; keep the requested ones
            result.data = [o for o in result.data if o.chain in chains]

        logger.info(f"Loaded {len(result.data)} opportunities from {result.source}")
        self._opportunities_cache[key] = result
        return result

    # ========== POOL APY ==========

    async def _fetch_live_pool_apys(self) -> Dict[str, PoolApy]:
        pool_apys = await self.pool_client.get_pool_apys(POOL_NAMES)
        if pool_apys:
            self.disk_cache.save_snapshot(
                CacheKeys.pool_apys(), [p.to_dict() for p in pool_apys.values()]
            )
        return pool_apys

    async def get_pool_apys(self, force_refresh: bool = False) -> FetchResult:
        """Get APY for every blended pool.

        Pools missing from the live or snapshot answer are filled in from
        the fallback table, so every pool name is always present.
        """
        if not force_refresh and self._pool_apys_cache is not None:
            logger.debug("Memory cache hit for pool APYs")
            return self._pool_apys_cache

        chain = FallbackChain(
            [
                LiveSource("pool-api", self._fetch_live_pool_apys),
                SnapshotSource(self.disk_cache, CacheKeys.pool_apys(), _load_pool_apys),
                StaticSource("fallback-table", fallback_pool_apys()),
            ],
            timeout_seconds=self.settings.request_timeout_seconds,
        )
        result = await chain.fetch()

        fallback = fallback_pool_apys()
        missing = [name for name in POOL_NAMES if name not in result.data]
        if missing:
            logger.warning(f"Using fallback APY for pools: {missing}")
            result.data = {**result.data, **{name: fallback[name] for name in missing}}

        self._pool_apys_cache = result
        return result

    async def get_pool_apy_by_symbol(self, force_refresh: bool = False) -> Dict[str, Decimal]:
        """Total APY (percent) keyed by pool name, ready for ApyBlender."""
        result = await self.get_pool_apys(force_refresh=force_refresh)
        return {name: pool.total_apy for name, pool in result.data.items()}

    # ========== LENDING ==========

    async def get_lending_position(self, user: str, supply_asset: str = "USDC") -> LendingPosition:
        """Live lending account of `user`. Errors propagate: there is no fallback for user state."""
        return await self.lending_reader.get_lending_position(user, supply_asset)

    async def get_borrow_apr(self, asset: str = "USDC") -> FetchResult:
        """Variable borrow APR (percent), or the configured default rate."""
        chain = FallbackChain(
            [
                LiveSource("lending-rpc", lambda: self.lending_reader.get_borrow_apr(asset)),
                StaticSource("default-rate", self.settings.default_borrow_apr),
            ],
            timeout_seconds=self.settings.request_timeout_seconds,
        )
        return await chain.fetch()

    def clear_cache(self) -> None:
        """Clear in-memory results."""
        self._opportunities_cache.clear()
        self._pool_apys_cache = None

    async def close(self) -> None:
        await self.vault_client.close()
        await self.pool_client.close()
        await self.lending_reader.close()
        self.disk_cache.close()
