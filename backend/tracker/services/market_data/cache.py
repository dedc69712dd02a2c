# backend/tracker/services/market_data/cache.py
"""
In-memory cache for fetched series.

The server stores nothing persistently; this cache is the only state it
keeps. Entries expire after a TTL so closes for the current day are
eventually refreshed, and the entry count is bounded so a long-running
process cannot grow without limit.
"""

import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable


class TTLSeriesCache:
    """
    Thread-safe bounded LRU cache with per-entry expiry.

    Evicts least-recently-used entries when capacity is reached.
    Uses OrderedDict for O(1) access and eviction.
    """

    def __init__(
            self,
            maxsize: int = 512,
            ttl_seconds: float = 3600,
            clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the cache.

        Args:
            maxsize: Maximum number of entries to store
            ttl_seconds: Seconds an entry stays valid (0 disables caching)
            clock: Time source, injectable for tests
        """
        self._maxsize = maxsize
        self._ttl = ttl_seconds
        self._clock = clock
        self._cache: OrderedDict[Hashable, tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Any | None:
        """Get a live item, moving it to end (most recently used)."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._cache[key]
                return None
            self._cache.move_to_end(key)
            return value

    def set(self, key: Hashable, value: Any) -> None:
        """Set item in cache, evicting oldest if at capacity."""
        if self._ttl <= 0 or self._maxsize <= 0:
            return
        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            elif len(self._cache) >= self._maxsize:
                self._cache.popitem(last=False)  # Remove oldest
            self._cache[key] = (self._clock() + self._ttl, value)

    def clear(self) -> None:
        """Clear all entries from the cache."""
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None
