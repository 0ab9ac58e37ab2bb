"""Integration tests for the yield data pipeline."""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import aiohttp

from src.core.models import LendingPosition, PoolApy, VaultRecord
from src.data.cache.disk_cache import CacheKeys, DiskCache
from src.data.pipeline import YieldDataPipeline


def make_vault(vault_id, chain, apy="12", tvl="2000000"):
    return VaultRecord(
        id=vault_id,
        name=vault_id,
        chain=chain,
        platform_id="test",
        token="USDC",
        assets=["USDC"],
        apy=Decimal(apy),
        tvl=Decimal(tvl),
    )


class TestYieldDataPipeline:
    """Integration tests for YieldDataPipeline."""

    @pytest.fixture
    def disk_cache(self, settings):
        cache = DiskCache(settings)
        yield cache
        cache.close()

    @pytest.fixture
    def vault_client(self):
        client = MagicMock()
        client.get_vaults_with_stats = AsyncMock(return_value=[
            make_vault("arb-1", "arbitrum"),
            make_vault("base-1", "base", apy="30", tvl="400000"),
        ])
        client.close = AsyncMock()
        return client

    @pytest.fixture
    def pool_client(self):
        client = MagicMock()
        client.get_pool_apys = AsyncMock(return_value={
            "BTC/USD": PoolApy("BTC/USD", Decimal("11"), Decimal("4"), Decimal("15")),
            "ETH/USD": PoolApy("ETH/USD", Decimal("12"), Decimal("8"), Decimal("20")),
            "ARB/USD": PoolApy("ARB/USD", Decimal("6"), Decimal("3"), Decimal("9")),
        })
        client.close = AsyncMock()
        return client

    @pytest.fixture
    def lending_reader(self):
        reader = MagicMock()
        reader.get_borrow_apr = AsyncMock(return_value=Decimal("6.1"))
        reader.get_lending_position = AsyncMock(return_value=LendingPosition(total_collateral_usd=Decimal("100")))
        reader.close = AsyncMock()
        return reader

    @pytest.fixture
    def pipeline(self, settings, vault_client, pool_client, disk_cache, lending_reader):
        return YieldDataPipeline(
            settings,
            vault_client=vault_client,
            pool_client=pool_client,
            disk_cache=disk_cache,
            lending_reader=lending_reader,
        )

    @pytest.mark.asyncio
    async def test_live_opportunities(self, pipeline, vault_client):
        result = await pipeline.get_opportunities(["arbitrum", "base"])

        assert result.source == "vault-api"
        assert not result.is_fallback
        assert [o.id for o in result.data] == ["arb-1", "base-1"]
        vault_client.get_vaults_with_stats.assert_awaited_once_with(["arbitrum", "base"])

    @pytest.mark.asyncio
    async def test_live_fetch_saves_snapshot(self, pipeline, disk_cache):
        await pipeline.get_opportunities(["arbitrum", "base"])

        records = disk_cache.load_snapshot(CacheKeys.opportunities())
        assert [r["id"] for r in records] == ["arb-1", "base-1"]

    @pytest.mark.asyncio
    async def test_memory_cache_and_force_refresh(self, pipeline, vault_client):
        await pipeline.get_opportunities(["arbitrum"])
        await pipeline.get_opportunities(["arbitrum"])
        assert vault_client.get_vaults_with_stats.await_count == 1

        await pipeline.get_opportunities(["arbitrum"], force_refresh=True)
        assert vault_client.get_vaults_with_stats.await_count == 2

    @pytest.mark.asyncio
    async def test_falls_back_to_snapshot(self, pipeline, vault_client):
        await pipeline.get_opportunities(["arbitrum", "base"])

        vault_client.get_vaults_with_stats.side_effect = aiohttp.ClientError("down")
        result = await pipeline.get_opportunities(["base"], force_refresh=True)

        assert result.is_fallback
        assert result.source.startswith("snapshot")
        assert [o.id for o in result.data] == ["base-1"]
        assert "vault-api: down" in result.errors

    @pytest.mark.asyncio
    async def test_no_catalog_available(self, pipeline, vault_client):
        vault_client.get_vaults_with_stats.side_effect = aiohttp.ClientError("down")
        result = await pipeline.get_opportunities(["arbitrum"])

        assert result.data == []
        assert result.source == "none"
        assert len(result.errors) == 2

    @pytest.mark.asyncio
    async def test_live_pool_apys(self, pipeline):
        apys = await pipeline.get_pool_apy_by_symbol()
        assert apys == {"BTC/USD": Decimal("15"), "ETH/USD": Decimal("20"), "ARB/USD": Decimal("9")}

    @pytest.mark.asyncio
    async def test_missing_pool_filled_from_table(self, pipeline, pool_client):
        pool_client.get_pool_apys.return_value = {
            "ETH/USD": PoolApy("ETH/USD", Decimal("12"), Decimal("8"), Decimal("20")),
        }
        result = await pipeline.get_pool_apys()

        assert result.source == "pool-api"
        assert result.data["ETH/USD"].source == "live"
        assert result.data["BTC/USD"].source == "fallback"
        assert result.data["BTC/USD"].total_apy == Decimal("14.82")

    @pytest.mark.asyncio
    async def test_pool_apys_from_snapshot(self, pipeline, pool_client):
        await pipeline.get_pool_apys()

        pool_client.get_pool_apys.side_effect = aiohttp.ClientError("down")
        result = await pipeline.get_pool_apys(force_refresh=True)

        assert result.is_fallback
        assert result.data["ETH/USD"].source == "snapshot"
        assert result.data["ETH/USD"].total_apy == Decimal("20")

    @pytest.mark.asyncio
    async def test_pool_apys_from_fallback_table(self, pipeline, pool_client):
        pool_client.get_pool_apys.side_effect = aiohttp.ClientError("down")
        result = await pipeline.get_pool_apys()

        assert result.source == "fallback-table"
        assert result.data["ETH/USD"].total_apy == Decimal("19.75")
        assert result.data["ARB/USD"].total_apy == Decimal("8.65")

    @pytest.mark.asyncio
    async def test_clear_cache_and_close(self, pipeline, vault_client, pool_client):
        await pipeline.get_opportunities(["arbitrum"])
        pipeline.clear_cache()
        await pipeline.get_opportunities(["arbitrum"])
        assert vault_client.get_vaults_with_stats.await_count == 2

        await pipeline.close()
        vault_client.close.assert_awaited_once()
        pool_client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_live_borrow_apr(self, pipeline):
        result = await pipeline.get_borrow_apr()

        assert result.source == "lending-rpc"
        assert result.data == Decimal("6.1")

    @pytest.mark.asyncio
    async def test_zero_borrow_apr_is_kept(self, pipeline, lending_reader):
        lending_reader.get_borrow_apr.return_value = Decimal("0")
        result = await pipeline.get_borrow_apr()

        assert result.source == "lending-rpc"
        assert result.data == Decimal("0")

    @pytest.mark.asyncio
    async def test_borrow_apr_default(self, pipeline, lending_reader, settings):
        lending_reader.get_borrow_apr.side_effect = ValueError("Arbitrum RPC URL not configured")
        result = await pipeline.get_borrow_apr()

        assert result.source == "default-rate"
        assert result.data == settings.default_borrow_apr

    @pytest.mark.asyncio
    async def test_lending_position_errors_propagate(self, pipeline, lending_reader):
        lending_reader.get_lending_position.side_effect = ValueError("bad address")

        with pytest.raises(ValueError):
            await pipeline.get_lending_position("0xabc")
