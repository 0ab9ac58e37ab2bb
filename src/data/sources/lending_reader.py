"""On-chain reader for lending market accounts and reserve rates."""

import logging
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import Web3Exception

from config.settings import Settings, get_settings
from src.core.models import LendingPosition
from src.data.cache.memory_cache import TTLCache
from src.data.parsers.lending_parser import LendingAccountParser
from src.protocols.aave.abis import POOL_ABI, POOL_DATA_PROVIDER_ABI
from src.protocols.aave.config import (
    AAVE_V3_POOL_ADDRESS,
    AAVE_V3_POOL_DATA_PROVIDER,
    RESERVE_ASSETS,
    RESERVE_LIQUIDITY_RATE_INDEX,
    RESERVE_VARIABLE_BORROW_RATE_INDEX,
)

logger = logging.getLogger(__name__)


class LendingAccountReader:
    """
    Reads a user's lending account and reserve rates over JSON-RPC.

    Account data is never cached (it changes with every block the user
    acts in); reserve rates go through the TTL cache.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        web3: Optional[AsyncWeb3] = None,
        cache: Optional[TTLCache] = None,
    ):
        self.settings = settings or get_settings()
        self._web3 = web3
        self.cache = cache or TTLCache(self.settings.cache_ttl_seconds)

    async def _get_web3(self) -> AsyncWeb3:
        """Get or create Web3 instance."""
        if self._web3 is None:
            rpc_url = self.settings.arbitrum_rpc_url
            if not rpc_url:
                raise ValueError(
                    "Arbitrum RPC URL not configured. Set ARB_ALCHEMY_API_KEY or ARBITRUM_RPC_ENDPOINT in .env"
                )
            self._web3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        return self._web3

    @staticmethod
    def _asset_address(asset: str) -> str:
        """Resolve a reserve symbol (USDC, WETH...) or pass an address through."""
        if asset.startswith("0x"):
            return asset
        try:
            return RESERVE_ASSETS[asset.upper()]
        except KeyError:
            raise ValueError(f"Unknown reserve asset: {asset}. Known: {sorted(RESERVE_ASSETS)}")

    async def get_account_data(self, user: str) -> List[Any]:
        """Raw getUserAccountData output for `user`."""
        web3 = await self._get_web3()
        pool = web3.eth.contract(address=web3.to_checksum_address(AAVE_V3_POOL_ADDRESS), abi=POOL_ABI)

        try:
            data = await pool.functions.getUserAccountData(web3.to_checksum_address(user)).call()
        except Web3Exception as e:
            logger.error(f"getUserAccountData failed for {user}: {e}")
            raise

        logger.debug(f"Fetched account data for {user}")
        return list(data)

    async def get_reserve_rates(self, asset: str = "USDC") -> Tuple[int, int]:
        """
        Raw (liquidityRate, variableBorrowRate) of a reserve, in RAY.

        Args:
            asset: Reserve symbol or token address
        """
        address = self._asset_address(asset)

        async def fetch() -> Tuple[int, int]:
            web3 = await self._get_web3()
            provider = web3.eth.contract(
                address=web3.to_checksum_address(AAVE_V3_POOL_DATA_PROVIDER),
                abi=POOL_DATA_PROVIDER_ABI,
            )
            try:
                reserve = await provider.functions.getReserveData(web3.to_checksum_address(address)).call()
            except Web3Exception as e:
                logger.error(f"getReserveData failed for {asset}: {e}")
                raise

            logger.info(f"Fetched reserve rates for {asset}")
            return (
                int(reserve[RESERVE_LIQUIDITY_RATE_INDEX]),
                int(reserve[RESERVE_VARIABLE_BORROW_RATE_INDEX]),
            )

        return await self.cache.get_or_fetch(("reserve", address.lower()), fetch)

    async def get_supply_apy(self, asset: str = "USDC") -> Decimal:
        """Supply APY of a reserve (percent)."""
        liquidity_rate, _ = await self.get_reserve_rates(asset)
        return LendingAccountParser.parse_rate(liquidity_rate)

    async def get_borrow_apr(self, asset: str = "USDC") -> Decimal:
        """Variable borrow APR of a reserve (percent)."""
        _, borrow_rate = await self.get_reserve_rates(asset)
        return LendingAccountParser.parse_rate(borrow_rate)

    async def get_lending_position(self, user: str, supply_asset: str = "USDC") -> LendingPosition:
        """
        Lending account of `user` with the supply APY of `supply_asset`.

        A failed rate lookup leaves `supply_apy` unset rather than failing
        the whole read.
        """
        data = await self.get_account_data(user)

        try:
            liquidity_rate, _ = await self.get_reserve_rates(supply_asset)
        except Web3Exception as e:
            logger.warning(f"No supply rate for {supply_asset}, using default: {e}")
            liquidity_rate = None

        return LendingAccountParser.parse_account_data(data, liquidity_rate=liquidity_rate)

    async def close(self) -> None:
        """Disconnect the provider and drop it."""
        if self._web3 is None:
            return
        await self._web3.provider.disconnect()
        self._web3 = None
