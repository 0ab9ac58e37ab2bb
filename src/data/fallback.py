"""Ordered fallback between live, snapshot and static data sources."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sized
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from src.data.cache.disk_cache import DiskCache

logger = logging.getLogger(__name__)


def is_empty(data: Any) -> bool:
    """None or an empty container. Scalars such as a zero rate are real data."""
    if data is None:
        return True
    return isinstance(data, Sized) and len(data) == 0


class AllSourcesFailedError(Exception):
    """Raised when no source in a FallbackChain produced data."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("All data sources failed: " + "; ".join(errors))


class DataSource(ABC):
    """A source of one kind of market data."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable source name for logs."""
        pass

    @abstractmethod
    async def fetch(self) -> Any:
        """
        Fetch the data.

        Returns:
            The data, or an empty value when the source has nothing

        Raises:
            Exception: Any failure; the chain moves on to the next source
        """
        pass


@dataclass
class FetchResult:
    """Data returned by a FallbackChain and where it came from."""

    data: Any
    source: str
    is_fallback: bool = False  # True when the first source did not answer
    errors: List[str] = field(default_factory=list)


class LiveSource(DataSource):
    """Wraps a coroutine function, typically a client method."""

    def __init__(self, name: str, fetcher: Callable[[], Awaitable[Any]]):
        self._name = name
        self._fetcher = fetcher

    @property
    def name(self) -> str:
        return self._name

    async def fetch(self) -> Any:
        return await self._fetcher()


class StaticSource(DataSource):
    """Serves a fixed value (versioned fallback tables)."""

    def __init__(self, name: str, data: Any):
        self._name = name
        self._data = data

    @property
    def name(self) -> str:
        return self._name

    async def fetch(self) -> Any:
        return self._data


class SnapshotSource(DataSource):
    """Serves the last-known-good snapshot stored in the disk cache."""

    def __init__(
        self,
        disk_cache: DiskCache,
        key: str,
        loader: Callable[[List[dict]], Any],
    ):
        self.disk_cache = disk_cache
        self.key = key
        self.loader = loader

    @property
    def name(self) -> str:
        return f"snapshot:{self.key}"

    async def fetch(self) -> Any:
        records = self.disk_cache.load_snapshot(self.key)
        if not records:
            return None
        return self.loader(records)


class FallbackChain:
    """
    Tries sources in order until one returns data that is not `is_empty`.

    Each source runs under its own timeout. Failures and empty results
    are logged and recorded on the FetchResult.
    """

    def __init__(self, sources: Sequence[DataSource], timeout_seconds: Optional[float] = None):
        if not sources:
            raise ValueError("FallbackChain needs at least one source")
        self.sources = list(sources)
        self.timeout_seconds = timeout_seconds

    async def _fetch_one(self, source: DataSource) -> Any:
        if self.timeout_seconds is None:
            return await source.fetch()
        return await asyncio.wait_for(source.fetch(), timeout=self.timeout_seconds)

    async def fetch(self) -> FetchResult:
        """
        Fetch from the first source that answers.

        Raises:
            AllSourcesFailedError: If every source failed or was empty
        """
        errors: List[str] = []

        for index, source in enumerate(self.sources):
            try:
                data = await self._fetch_one(source)
            except asyncio.TimeoutError:
                errors.append(f"{source.name}: timed out after {self.timeout_seconds}s")
                logger.warning(f"Source {source.name} timed out, trying next")
                continue
            except Exception as e:
                errors.append(f"{source.name}: {e}")
                logger.warning(f"Source {source.name} failed: {e}")
                continue

            if is_empty(data):
                errors.append(f"{source.name}: empty")
                logger.warning(f"Source {source.name} returned no data, trying next")
                continue

            if index > 0:
                logger.info(f"Using fallback source {source.name}")
            return FetchResult(data=data, source=source.name, is_fallback=index > 0, errors=errors)

        logger.error(f"All {len(self.sources)} sources failed")
        raise AllSourcesFailedError(errors)
