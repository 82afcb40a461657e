"""HeroZero Cache Tier - Common Contract of the Memory and Persistent Tiers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Optional

from herozero_core.cache.record import CacheRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class TierStats:
    """Cache tier statistics.

    Attributes:
        reads: Lookups
        writes: Stores
        deletes: Explicit deletes
        expired: Entries removed by sweeps or found stale by pops
        errors: Swallowed I/O errors
        last_error: Last error message
        last_error_at: When the last error happened
    """

    reads: int = 0
    writes: int = 0
    deletes: int = 0
    expired: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    def record_error(self, error: str) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = error
        self.last_error_at = datetime.now()


class CacheTier(ABC):
    """Abstract cache tier keyed by (collection, key).

    Implementations:
    - MemoryCache: process-local dictionary, volatile
    - FileCache: on-disk, durable across restarts
    - NullCache: always misses, used when persistence is unavailable

    Absence is never an error: every lookup returns None on miss, and the
    persistent implementations swallow their own I/O failures.
    """

    name = "tier"

    def __init__(self, clock: Optional[Clock] = None):
        """Initialize tier.

        Args:
            clock: Time source returning epoch seconds
        """
        self._clock: Clock = clock or time.time
        self._stats = TierStats()

    def now(self) -> float:
        """Current time according to the tier clock."""
        return self._clock()

    @abstractmethod
    def put(self, collection: str, key: str, value: Any) -> bool:
        """Store ``value`` stamped with the current time, overwriting.

        Returns:
            True if stored
        """
        pass

    @abstractmethod
    def get_record(self, collection: str, key: str) -> Optional[CacheRecord]:
        """Get the raw record regardless of age.

        Returns:
            CacheRecord or None
        """
        pass

    @abstractmethod
    def delete(self, collection: str, key: str) -> bool:
        """Delete one entry.

        Returns:
            True if deleted
        """
        pass

    @abstractmethod
    def clear(self, collection: str) -> int:
        """Delete every entry of a collection.

        Returns:
            Number cleared
        """
        pass

    @abstractmethod
    def keys(self, collection: str) -> List[str]:
        """Get all keys of a collection, fresh or not."""
        pass

    @abstractmethod
    def pop(self, collection: str, max_age: Optional[float] = None) -> Optional[Any]:
        """Atomically remove and return one fresh value.

        Two concurrent callers never receive the same entry.

        Args:
            collection: Collection name
            max_age: Maximum age in seconds

        Returns:
            Value or None if no fresh entry exists
        """
        pass

    def get(self, collection: str, key: str, max_age: Optional[float] = None) -> Optional[Any]:
        """Get a value if it is fresh.

        Stale entries are reported as a miss but left in place for
        ``sweep_expired``.

        Args:
            collection: Collection name
            key: Cache key
            max_age: Maximum age in seconds, None for any age

        Returns:
            Value or None
        """
        record = self.get_record(collection, key)
        if record is None:
            return None
        if not record.is_fresh(max_age, self.now()):
            logger.debug(f"{self.name}: stale {collection}/{key}")
            return None
        return record.value

    def sweep_expired(self, collection: str, max_age: float) -> int:
        """Remove entries older than ``max_age``.

        Args:
            collection: Collection name
            max_age: Maximum age in seconds

        Returns:
            Number removed
        """
        removed = 0
        now = self.now()
        for key in self.keys(collection):
            record = self.get_record(collection, key)
            if record is not None and not record.is_fresh(max_age, now):
                if self.delete(collection, key):
                    removed += 1
        self._stats.expired += removed
        if removed:
            logger.debug(f"{self.name}: swept {removed} expired from {collection}")
        return removed

    def push(self, collection: str, value: Any) -> Optional[str]:
        """Store ``value`` under a fresh unique key.

        Returns:
            Generated key or None if not stored
        """
        key = uuid.uuid4().hex
        return key if self.put(collection, key, value) else None

    def size(self, collection: str, max_age: Optional[float] = None) -> int:
        """Count entries, optionally only fresh ones.

        Args:
            collection: Collection name
            max_age: Count only entries at most this old

        Returns:
            Entry count
        """
        keys = self.keys(collection)
        if max_age is None:
            return len(keys)
        now = self.now()
        count = 0
        for key in keys:
            record = self.get_record(collection, key)
            if record is not None and record.is_fresh(max_age, now):
                count += 1
        return count

    def get_stats(self) -> TierStats:
        """Get tier statistics."""
        return self._stats

    def health_check(self) -> bool:
        """Round-trip a probe value through the tier.

        Returns:
            True if healthy
        """
        try:
            self.put("_probe", "__health_check__", "ok")
            result = self.get("_probe", "__health_check__")
            self.delete("_probe", "__health_check__")
            return result == "ok"
        except Exception as e:
            logger.error(f"{self.name}: health check failed: {e}")
            return False


__all__ = ["CacheTier", "TierStats", "Clock"]
