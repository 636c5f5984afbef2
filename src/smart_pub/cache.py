"""Persistent TTL cache for registry responses.

The cache is a flat in-memory map of key to CacheEntry. Every mutation
writes the full snapshot back to the StateStore, and the snapshot is
loaded and swept of expired entries when the cache is created. There is no
size bound or LRU eviction.
"""

import logging
import sqlite3
import time
from typing import Any, Callable, Optional

from smart_pub.config import Settings
from smart_pub.models import CacheEntry
from smart_pub.storage import StateStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "smartPubCache"


class TTLCache:
    """Key-value cache with per-entry expiry.

    Attributes:
        store: Durable storage the snapshot is persisted to.
        settings: Settings providing the default TTL and the enabled flag.
    """

    def __init__(
        self,
        store: StateStore,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache and restore the persisted snapshot.

        Args:
            store: Durable key-value storage.
            settings: Settings to read ``cache_expiration`` and
                ``enable_cache`` from. Defaults to Settings().
            clock: Returns the current time in epoch seconds.
        """
        self.store = store
        self.settings = settings or Settings()
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._load()

    @property
    def enabled(self) -> bool:
        return self.settings.enable_cache

    def get(self, key: str) -> Any:
        """Return the cached value, or None if absent or expired.

        Expired entries are removed and the removal is persisted.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            self._save()
            return None

        return entry.data

    def set(self, key: str, data: Any, ttl_seconds: Optional[int] = None) -> None:
        """Store a value.

        Args:
            key: Cache key.
            data: JSON-serializable value.
            ttl_seconds: Lifetime in seconds. None or 0 uses the configured
                ``cache_expiration``.
        """
        ttl = ttl_seconds or self.settings.cache_expiration
        now = self._clock()
        self._entries[key] = CacheEntry(data=data, timestamp=now, expires_at=now + ttl)
        self._save()

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)
        self._save()

    def clear(self) -> None:
        self._entries.clear()
        self._save()

    def info(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with the storage path and the number of entries
            (expired entries not yet evicted are included).
        """
        return {
            "path": str(self.store.db_path),
            "count": len(self._entries),
        }

    def __len__(self) -> int:
        return len(self._entries)

    def _load(self) -> None:
        try:
            stored = self.store.get(STORAGE_KEY, {})
            self._entries = {
                key: CacheEntry(**raw) for key, raw in stored.items()
            }
            self._sweep()
        except (ValueError, TypeError, AttributeError, sqlite3.Error) as e:
            logger.error("Failed to load cache from storage: %s", e)
            self._entries = {}

    def _sweep(self) -> None:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]

        if expired:
            logger.debug("Dropped %d expired cache entries on load", len(expired))
            self._save()

    def _save(self) -> None:
        snapshot = {
            key: {
                "data": entry.data,
                "timestamp": entry.timestamp,
                "expires_at": entry.expires_at,
            }
            for key, entry in self._entries.items()
        }
        try:
            self.store.update(STORAGE_KEY, snapshot)
        except (TypeError, ValueError, sqlite3.Error) as e:
            logger.error("Failed to save cache to storage: %s", e)
