"""Liquidity pool APY client backed by a public yields API."""

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

import aiohttp
from aiolimiter import AsyncLimiter

from config.settings import Settings, get_settings
from src.core.constants.api import POOL_API_RATE_LIMIT, POOL_API_RATE_WINDOW
from src.core.constants.fallback import POOL_IDS, POOL_NAMES, POOL_SYMBOLS
from src.core.models import PoolApy
from src.data.cache.memory_cache import TTLCache
from src.data.parsers.vault_parser import VaultParser

logger = logging.getLogger(__name__)


class PoolApyClient:
    """
    Fetches APY for the pools blended into the unified APY.

    Each pool is matched by its known pool id first, then by symbol alias
    (highest TVL wins). Pools that cannot be matched are left out.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        cache: Optional[TTLCache] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.settings = settings or get_settings()
        self.cache = cache or TTLCache(self.settings.cache_ttl_seconds)
        self._session = session
        self._rate_limiter = AsyncLimiter(POOL_API_RATE_LIMIT, POOL_API_RATE_WINDOW)

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout_seconds)
            )
        return self._session

    async def close(self) -> None:
        """Close the session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _fetch_pools(self) -> List[Dict[str, Any]]:
        session = await self._get_session()
        url = self.settings.pool_apy_api_url

        try:
            async with self._rate_limiter:
                async with session.get(url) as resp:
                    resp.raise_for_status()
                    payload = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Pool APY request failed for {url}: {e}")
            raise

        pools = payload.get("data", []) if isinstance(payload, dict) else payload
        logger.info(f"Fetched {len(pools)} pools from yields API")
        return pools

    async def get_pools(self) -> List[Dict[str, Any]]:
        """Raw pool list, cached."""
        return await self.cache.get_or_fetch("pools", self._fetch_pools)

    @staticmethod
    def parse_pool(pool_name: str, data: Dict[str, Any]) -> PoolApy:
        """Map a yields API entry to PoolApy (percent values)."""
        total = VaultParser.parse_decimal(data.get("apy"))
        fee = VaultParser.parse_decimal(data.get("apyBase"))
        reward = data.get("apyReward")
        performance = VaultParser.parse_decimal(reward) if reward is not None else max(Decimal("0"), total - fee)

        return PoolApy(
            pool_name=pool_name,
            fee_apy=fee,
            performance_apy=performance,
            total_apy=total,
            tvl_usd=VaultParser.parse_decimal(data.get("tvlUsd")),
            last_updated=datetime.now(timezone.utc),
            source="live",
        )

    @staticmethod
    def match_pool(pool_name: str, pools: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Find a pool entry by id, else by symbol alias with the highest TVL."""
        pool_id = POOL_IDS.get(pool_name)
        if pool_id:
            for pool in pools:
                if pool.get("pool") == pool_id:
                    return pool

        aliases = {s.upper() for s in POOL_SYMBOLS.get(pool_name, ())}
        candidates = [p for p in pools if str(p.get("symbol", "")).upper() in aliases]
        if not candidates:
            return None
        return max(candidates, key=lambda p: VaultParser.parse_decimal(p.get("tvlUsd")))

    async def get_pool_apys(self, pool_names: Iterable[str] = POOL_NAMES) -> Dict[str, PoolApy]:
        """PoolApy per pool name for every pool that could be matched."""
        pools = await self.get_pools()

        result = {}
        for pool_name in pool_names:
            match = self.match_pool(pool_name, pools)
            if match is None:
                logger.warning(f"No live APY found for pool {pool_name}")
                continue
            result[pool_name] = self.parse_pool(pool_name, match)

        return result
