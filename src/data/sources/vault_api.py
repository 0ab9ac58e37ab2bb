"""Vault aggregator REST client."""

import asyncio
import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Dict, List, Optional

import aiohttp
from aiolimiter import AsyncLimiter

from config.settings import Settings, get_settings
from src.core.constants.api import VAULT_API_RATE_LIMIT, VAULT_API_RATE_WINDOW
from src.core.models import ApyBreakdown, VaultRecord
from src.data.cache.memory_cache import TTLCache
from src.data.parsers.vault_parser import VaultParser

logger = logging.getLogger(__name__)


class VaultAggregatorClient:
    """
    Client for the vault aggregator API.

    Endpoints:
    - /vaults/{chain}: vault metadata (active vaults are kept)
    - /apy: APY per vault id (fraction)
    - /apy/breakdown: APY components per vault id (fraction)
    - /tvl: TVL per vault id (USD)

    Every response goes through the TTL cache. Fetch errors are logged and
    raised so the caller can fall back.
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
        self._rate_limiter = AsyncLimiter(VAULT_API_RATE_LIMIT, VAULT_API_RATE_WINDOW)

    async def __aenter__(self) -> "VaultAggregatorClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

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

    async def _get_json(self, path: str) -> Any:
        """GET a path under the API base URL with rate limiting."""
        url = f"{self.settings.vault_api_url.rstrip('/')}/{path.lstrip('/')}"
        session = await self._get_session()

        try:
            async with self._rate_limiter:
                async with session.get(url) as resp:
                    resp.raise_for_status()
                    return await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Vault API request failed for {url}: {e}")
            raise

    # ========== ENDPOINTS ==========

    async def get_vaults(self, chain: str) -> List[VaultRecord]:
        """Active vaults on a chain."""
        async def fetch() -> List[VaultRecord]:
            payload = await self._get_json(f"vaults/{chain}")
            vaults = VaultParser.parse_vaults(payload, chain)
            logger.info(f"Fetched {len(vaults)} active vaults on {chain}")
            return vaults

        return await self.cache.get_or_fetch(("vaults", chain), fetch)

    async def get_apys(self) -> Dict[str, Decimal]:
        """APY (percent) per vault id."""
        async def fetch() -> Dict[str, Decimal]:
            return VaultParser.parse_apys(await self._get_json("apy"))

        return await self.cache.get_or_fetch("apys", fetch)

    async def get_tvls(self) -> Dict[str, Decimal]:
        """TVL (USD) per vault id."""
        async def fetch() -> Dict[str, Decimal]:
            return VaultParser.parse_tvls(await self._get_json("tvl"))

        return await self.cache.get_or_fetch("tvls", fetch)

    async def get_apy_breakdown(self) -> Dict[str, ApyBreakdown]:
        """APY components (percent) per vault id."""
        async def fetch() -> Dict[str, ApyBreakdown]:
            return VaultParser.parse_apy_breakdown(await self._get_json("apy/breakdown"))

        return await self.cache.get_or_fetch("apy-breakdown", fetch)

    async def get_vaults_with_stats(self, chains: Optional[List[str]] = None) -> List[VaultRecord]:
        """
        Active vaults on `chains` with APY, TVL and breakdown attached.

        Args:
            chains: Chain slugs (default: settings.supported_chains)
        """
        chains = chains or self.settings.supported_chains

        vaults_by_chain, apys, tvls, breakdowns = await asyncio.gather(
            asyncio.gather(*(self.get_vaults(chain) for chain in chains)),
            self.get_apys(),
            self.get_tvls(),
            self.get_apy_breakdown(),
        )

        vaults = [vault for chain_vaults in vaults_by_chain for vault in chain_vaults]
        # Cached vault lists are shared, merge stats into copies
        vaults = [replace(vault) for vault in vaults]
        return VaultParser.merge_stats(vaults, apys, tvls, breakdowns)
