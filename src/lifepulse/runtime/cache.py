"""In-process analysis result cache.

Memoizes complete analysis results keyed by a fingerprint of the uploaded
file set. Entries expire after a TTL and the cache holds at most ``capacity``
entries, evicting the oldest-inserted entry first (FIFO, not LRU).

The cache lives in memory only and is safe to share between threads: every
read and write goes through a single lock, and entries are never mutated
after insertion.

Example:
    >>> from lifepulse.runtime.cache import CacheManager
    >>>
    >>> cache = CacheManager(capacity=50, default_ttl_seconds=3600)
    >>> key = cache.build_key(records, "complete")
    >>> cached = cache.get(key)
    >>>
    >>> if cached is None:
    ...     result = run_analysis()
    ...     cache.set(key, result)
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lifepulse.analysis.normalizer import RecordInput, coerce_record
from lifepulse.errors import InvalidRecordError

# Module logger
logger = logging.getLogger(__name__)


DEFAULT_CAPACITY = 100
DEFAULT_TTL_SECONDS = 24 * 60 * 60


# =============================================================================
# Data Structures
# =============================================================================


class CacheEntry(BaseModel):
    """One cached value.

    Attributes:
        key: Cache key.
        data: Cached payload, returned verbatim on a hit.
        created_at: Clock time at insertion (seconds).
        expires_at: ``created_at + ttl``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str
    data: Any
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class CacheStats(BaseModel):
    """Snapshot of cache occupancy and effectiveness."""

    size: int = 0
    capacity: int = DEFAULT_CAPACITY
    oldest_entry_age_seconds: float | None = None
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    hit_rate: float = Field(default=0.0, ge=0.0, le=1.0)


# =============================================================================
# Fingerprinting
# =============================================================================


def _file_identity(record: RecordInput) -> str:
    """Return the ``name_size_lastModifiedMs`` identity string of a record."""
    try:
        rec = coerce_record(record)
    except InvalidRecordError:
        # Unparseable records still need a stable identity
        raw: Mapping[str, Any] = record if isinstance(record, Mapping) else {}
        modified = raw.get("lastModified", raw.get("lastModifiedAt", raw.get("last_modified_at", "")))
        return f"{raw.get('name', '')}_{raw.get('size', '')}_{modified}"
    return f"{rec.name}_{rec.size}_{rec.last_modified_ms}"


def fingerprint_file_set(records: Iterable[RecordInput], analysis_kind: str) -> str:
    """Create a deterministic cache key for a set of uploaded files.

    Each file is hashed from its name, size and last-modified time. The
    per-file hashes are sorted, joined and hashed again, so the same file
    set in any order yields the same key.

    Args:
        records: Uploaded records or equivalent mappings.
        analysis_kind: Analysis variant; prefixes the key.

    Returns:
        ``"{analysis_kind}_{sha256 hex}"``.

    Example:
        >>> key = fingerprint_file_set(records, "complete")
        >>> key.startswith("complete_")
        True
    """
    file_hashes = sorted(
        hashlib.sha256(_file_identity(record).encode("utf-8")).hexdigest()
        for record in records
    )
    combined = hashlib.sha256("_".join(file_hashes).encode("utf-8")).hexdigest()
    return f"{analysis_kind}_{combined}"


# =============================================================================
# Cache Manager
# =============================================================================


class CacheManager:
    """Thread-safe TTL cache with FIFO eviction.

    Attributes:
        capacity: Maximum number of entries.
        default_ttl_seconds: TTL used when ``set`` receives none.

    Example:
        >>> cache = CacheManager(capacity=2)
        >>> cache.set("a", 1)
        >>> cache.set("b", 2)
        >>> cache.set("c", 3)   # evicts "a"
        >>> cache.get("a") is None
        True
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache.

        Args:
            capacity: Maximum number of entries (at least 1).
            default_ttl_seconds: Default time-to-live for new entries.
            clock: Returns the current time in seconds. Injectable for tests.
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def build_key(self, records: Iterable[RecordInput], analysis_kind: str) -> str:
        """Fingerprint a file set. See fingerprint_file_set."""
        return fingerprint_file_set(records, analysis_kind)

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss.

        Expired entries are deleted when read.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                self._logger.debug(f"Cache entry expired: {key[:24]}")
                return None

            self._hits += 1
            return entry.data

    def set(self, key: str, data: Any, ttl: float | None = None) -> None:
        """Store a value.

        Inserting a new key into a full cache first evicts the entry with
        the smallest ``created_at``. Overwriting an existing key never evicts.

        Args:
            key: Cache key.
            data: Value to store; returned as-is on later hits.
            ttl: Time-to-live in seconds. Defaults to ``default_ttl_seconds``.
        """
        ttl_seconds = self.default_ttl_seconds if ttl is None else ttl
        with self._lock:
            now = self._clock()
            if key not in self._entries and len(self._entries) >= self.capacity:
                self._evict_oldest()

            self._entries[key] = CacheEntry(
                key=key,
                data=data,
                created_at=now,
                expires_at=now + ttl_seconds,
            )

    def _evict_oldest(self) -> None:
        # Caller holds the lock
        oldest = min(self._entries.values(), key=lambda e: e.created_at)
        del self._entries[oldest.key]
        self._evictions += 1
        self._logger.debug(f"Evicted cache entry: {oldest.key[:24]}")

    def invalidate(self, key: str) -> bool:
        """Delete one entry.

        Returns:
            True if the entry existed.
        """
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Delete all entries.

        Returns:
            Number of entries deleted.
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        if count:
            self._logger.info(f"Cleared {count} cache entries")
        return count

    def clear_pattern(self, pattern: str) -> int:
        """Delete every entry whose key contains ``pattern``.

        Returns:
            Number of entries deleted.
        """
        with self._lock:
            matching = [key for key in self._entries if pattern in key]
            for key in matching:
                del self._entries[key]
        return len(matching)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def stats(self) -> CacheStats:
        """Return cache statistics.

        ``hit_rate`` is ``hits / (hits + misses)``, 0.0 before any lookup.
        """
        with self._lock:
            now = self._clock()
            lookups = self._hits + self._misses
            oldest_age = None
            if self._entries:
                oldest_age = now - min(e.created_at for e in self._entries.values())
            return CacheStats(
                size=len(self._entries),
                capacity=self.capacity,
                oldest_entry_age_seconds=oldest_age,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                hit_rate=self._hits / lookups if lookups else 0.0,
            )
