"""Data layer for the yield router."""

from .pipeline import YieldDataPipeline, fallback_pool_apys
from .cache.disk_cache import DiskCache, CacheKeys
from .cache.memory_cache import TTLCache
from .fallback import (
    AllSourcesFailedError,
    DataSource,
    FallbackChain,
    FetchResult,
    LiveSource,
    SnapshotSource,
    StaticSource,
)
from .sources.vault_api import VaultAggregatorClient
from .sources.pool_apy import PoolApyClient
from .sources.lending_reader import LendingAccountReader
from .parsers import LendingAccountParser, VaultParser

__all__ = [
    "YieldDataPipeline",
    "fallback_pool_apys",
    "DiskCache",
    "CacheKeys",
    "TTLCache",
    "AllSourcesFailedError",
    "DataSource",
    "FallbackChain",
    "FetchResult",
    "LiveSource",
    "SnapshotSource",
    "StaticSource",
    "VaultAggregatorClient",
    "PoolApyClient",
    "LendingAccountReader",
    "LendingAccountParser",
    "VaultParser",
]
