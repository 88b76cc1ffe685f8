"""
Inference result cache.

In-memory TTL cache with LRU eviction, keyed by route id + normalized message.
"""
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from .models import InferenceResult


logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cached result with absolute expiry."""

    result: InferenceResult
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class CacheStats:
    """Counters for cache activity."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0


class InferenceCache:
    """
    TTL cache with LRU eviction for inference results.

    Entries live in an OrderedDict: a successful get() moves the entry to the
    end, set() on a full cache drops the entry at the front. An entry is
    dropped by whichever comes first, TTL expiry or LRU eviction.

    Not locked: all access is expected from a single event loop.
    """

    DEFAULT_TTL_SECONDS: float = 20 * 60
    DEFAULT_MAX_SIZE: int = 50

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            ttl_seconds: Lifetime of an entry
            max_size: Maximum number of entries
            clock: Time source in seconds (injectable for tests)
        """
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")

        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self.stats = CacheStats()

    def get(self, key: str) -> Optional[InferenceResult]:
        """
        Look up a result.

        Expired entries are removed and reported as a miss.
        A hit moves the entry to the most-recently-used position.

        Args:
            key: Cache key

        Returns:
            Cached InferenceResult or None
        """
        entry = self._entries.get(key)
        if entry is None:
            self.stats.misses += 1
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            self.stats.expirations += 1
            self.stats.misses += 1
            logger.debug(f"Cache entry expired: {key}")
            return None

        self._entries.move_to_end(key)
        self.stats.hits += 1
        return entry.result

    def set(self, key: str, result: InferenceResult) -> None:
        """
        Store a result with expiry now + ttl.

        Evicts the least recently used entry when the cache is full.

        Args:
            key: Cache key
            result: InferenceResult to store
        """
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            evicted_key, _ = self._entries.popitem(last=False)
            self.stats.evictions += 1
            logger.debug(f"Cache full, evicted: {evicted_key}")

        self._entries[key] = CacheEntry(
            result=result,
            expires_at=self._clock() + self.ttl_seconds,
        )

    def clear(self) -> None:
        """Drop all entries (stats are kept)."""
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and not entry.is_expired(self._clock())

    def __len__(self) -> int:
        return len(self._entries)
