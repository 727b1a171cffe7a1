"""
Query Cache - Thread-safe TTL cache of query results.

Entries are keyed by a canonical query signature and expire lazily when
looked up; there is no background sweeper.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from kgquery.config.errors import InvalidArgumentError
from kgquery.domains.graph import GraphQuery, GraphQueryResult

from .models import CacheStatistics

logger = logging.getLogger(__name__)

__all__ = ["QueryCacheService"]


@dataclass(slots=True)
class _CacheEntry:
    result: GraphQueryResult
    stored_at: float


class QueryCacheService:
    """
    In-memory query result cache with TTL and hit/miss accounting.

    Features:
    - Order-independent query signatures
    - Lazy expiry on lookup
    - Optional size bound (oldest entries evicted first)
    - Safe for concurrent use from threads and tasks

    Example:
        >>> cache = QueryCacheService(cache_duration_seconds=300)
        >>> cache.set(query, result)
        >>> found, cached = cache.try_get(query)
        >>> cached.from_cache
        True
    """

    def __init__(
        self,
        cache_duration_seconds: float,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize cache.

        Args:
            cache_duration_seconds: Entry time-to-live, must be positive
            max_entries: Optional upper bound on stored entries
            clock: Monotonic time source in seconds

        Raises:
            InvalidArgumentError: If the duration or bound is not positive
        """
        if cache_duration_seconds is None or cache_duration_seconds <= 0:
            raise InvalidArgumentError(
                "cache_duration_seconds",
                "Cache duration must be greater than zero",
            )
        if max_entries is not None and max_entries <= 0:
            raise InvalidArgumentError("max_entries", "max_entries must be greater than zero")

        self._ttl = float(cache_duration_seconds)
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def try_get(self, query: GraphQuery) -> tuple[bool, GraphQueryResult | None]:
        """
        Look up a cached result.

        Returns:
            ``(True, result)`` with ``result.from_cache`` set on a live hit,
            ``(False, None)`` when absent or expired
        """
        if query is None:
            raise InvalidArgumentError("query")
        key = self.generate_key(query)

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() - entry.stored_at >= self._ttl:
                del self._entries[key]
                logger.debug("Cache entry expired: %s", key[:16])
                entry = None

            if entry is None:
                self._misses += 1
                logger.debug("Cache miss: %s", key[:16])
                return False, None

            self._hits += 1
            cached = entry.result

        logger.debug("Cache hit: %s", key[:16])
        return True, cached.model_copy(update={"from_cache": True}, deep=True)

    def set(self, query: GraphQuery, result: GraphQueryResult) -> None:
        """Store a result under the query's signature."""
        if query is None:
            raise InvalidArgumentError("query")
        if result is None:
            raise InvalidArgumentError("result")
        key = self.generate_key(query)
        # Stored entries never alias caller objects
        stored = result.model_copy(deep=True)

        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = _CacheEntry(result=stored, stored_at=self._clock())
            if self._max_entries is not None:
                while len(self._entries) > self._max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug("Evicted oldest cache entry: %s", evicted[:16])

        logger.debug("Cached result: %s (TTL: %.1fs)", key[:16], self._ttl)

    def clear(self) -> None:
        """Remove all entries. Counters are kept."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Cleared %d cache entries", count)

    def invalidate_expired(self) -> int:
        """Drop every expired entry now. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if now - e.stored_at >= self._ttl]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Invalidated %d expired cache entries", len(expired))
        return len(expired)

    def get_cache_statistics(self) -> CacheStatistics:
        """Get hit/miss counters and the current entry count."""
        with self._lock:
            hits, misses, size = self._hits, self._misses, len(self._entries)
        total = hits + misses
        return CacheStatistics(
            hits=hits,
            misses=misses,
            total_requests=total,
            hit_rate=hits / total if total else 0.0,
            size=size,
        )

    @staticmethod
    def generate_key(query: GraphQuery) -> str:
        """
        Canonical signature of a query.

        Covers entity type, property filters (key order irrelevant at every
        nesting level), page size and skip. Timeout and cancellation token
        do not affect the result set and are left out.
        """
        payload = {
            "entity_type": query.entity_type,
            "filters": query.property_filters,
            "page_size": query.page_size,
            "skip": query.skip,
        }
        canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
        return hashlib.sha256(canonical.encode()).hexdigest()
