"""Time-bounded cache for fetched entities and relationship batches."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from influence_map.config import settings

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cached value with its absolute expiry (clock seconds)."""

    value: Any
    expires_at: float


class EntityCache:
    """Soft key/value cache owned by one explorer session.

    Reading an entry at or after its expiry evicts it and reports a miss.
    """

    def __init__(
        self,
        default_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = settings.cache_ttl_seconds if default_ttl is None else default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            logger.debug(f"Cache entry expired: {key}")
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store a value, replacing any existing entry."""
        ttl = self.default_ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
