"""SQLite-backed store of last-known-good catalog snapshots."""

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

import diskcache

from config.settings import Settings, get_settings
from src.core.constants.fallback import FALLBACK_DATA_VERSION

logger = logging.getLogger(__name__)


class DiskCache:
    """
    Persistent cache built on diskcache.

    Snapshots are stored without expiry so they can be served when every
    live source is down; regular entries use the configured TTL.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        namespace: str = "yield-router",
    ):
        self.settings = settings or get_settings()
        self.namespace = namespace
        self._cache: Optional[diskcache.Cache] = None

    def _get_cache(self) -> diskcache.Cache:
        """Get or create the cache instance."""
        if self._cache is None:
            cache_dir = self.settings.ensure_cache_dir() / self.namespace
            cache_dir.mkdir(parents=True, exist_ok=True)
            self._cache = diskcache.Cache(str(cache_dir))
        return self._cache

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self._get_cache().get(key, default=default)
        except Exception as e:
            logger.warning(f"Cache get error for key {key}: {e}")
            return default

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Store a value.

        Args:
            key: Cache key
            value: Picklable value
            ttl: Seconds to keep it, settings TTL when None

        Returns:
            True if successful
        """
        if ttl is None:
            ttl = self.settings.cache_ttl_seconds

        try:
            self._get_cache().set(key, value, expire=ttl)
            return True
        except Exception as e:
            logger.warning(f"Cache set error for key {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        try:
            return self._get_cache().delete(key)
        except Exception as e:
            logger.warning(f"Cache delete error for key {key}: {e}")
            return False

    def clear(self) -> int:
        """Clear the namespace and return the number of items removed."""
        try:
            cache = self._get_cache()
            count = len(cache)
            cache.clear()
            return count
        except Exception as e:
            logger.warning(f"Cache clear error: {e}")
            return 0

    # ========== SNAPSHOTS ==========

    def save_snapshot(self, key: str, records: List[dict]) -> bool:
        """
        Store serialized records as the last-known-good snapshot for `key`.

        Empty record lists are not stored so a bad fetch never replaces a
        good snapshot.
        """
        if not records:
            logger.debug(f"Not saving empty snapshot for {key}")
            return False

        snapshot = {
            "version": FALLBACK_DATA_VERSION,
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "records": records,
        }
        try:
            self._get_cache().set(key, snapshot, expire=None)
            logger.debug(f"Saved snapshot {key} with {len(records)} records")
            return True
        except Exception as e:
            logger.warning(f"Snapshot save error for key {key}: {e}")
            return False

    def load_snapshot(self, key: str) -> Optional[List[dict]]:
        """Records of the last snapshot for `key`, or None."""
        snapshot = self.get(key)
        if not snapshot:
            return None

        if snapshot.get("version") != FALLBACK_DATA_VERSION:
            logger.info(
                f"Snapshot {key} has data version {snapshot.get('version')}, "
                f"expected {FALLBACK_DATA_VERSION}; ignoring"
            )
            return None

        logger.debug(f"Loaded snapshot {key} saved at {snapshot.get('saved_at')}")
        return snapshot.get("records")

    def stats(self) -> dict:
        try:
            cache = self._get_cache()
            return {
                "size": len(cache),
                "volume": cache.volume(),
                "directory": str(cache.directory),
            }
        except Exception as e:
            logger.warning(f"Cache stats error: {e}")
            return {}

    def close(self):
        """Close the cache connection."""
        if self._cache:
            self._cache.close()
            self._cache = None


class CacheKeys:
    """Standard cache key patterns."""

    @staticmethod
    def opportunities() -> str:
        return "snapshot:opportunities"

    @staticmethod
    def pool_apys() -> str:
        return "snapshot:pool-apys"
