"""HeroZero Caching Service - Memory and Persistent Tiers Together.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from herozero_core.cache.null import NullCache
from herozero_core.cache.memory import MemoryCache
from herozero_core.cache.strategy import ReadStrategy, read_through
from herozero_core.cache.tier import CacheTier
from herozero_core.metrics.collector import UsageMonitor

logger = logging.getLogger(__name__)

ITEMS = "items"
LEADERBOARD = "leaderboard"
PAIRS = "pairs"
SESSION_VOTES = "session_votes"


@dataclass(frozen=True)
class CachePolicy:
    """Freshness rules of one collection.

    Attributes:
        collection: Collection name
        memory_max_age: Freshness in the memory tier
        persistent_max_age: Freshness in the persistent tier
    """

    collection: str
    memory_max_age: Optional[float]
    persistent_max_age: Optional[float]


class CachingService:
    """Owns the memory and persistent tiers.

    One instance is shared by the pair selector, the vote recorder and the
    leaderboard builder. Tests build a fresh one per case.

    Read order for a key: memory, then persistent (promoting hits into
    memory). Callers append their own slower strategies (entity store,
    materialization) via ``strategies()``.

    Example:
        caches = CachingService(MemoryCache(), probe_persistent_cache(path))
        item = caches.read(item_policy, "42")
        caches.write_through("items", "42", item)
    """

    def __init__(
        self,
        memory: Optional[CacheTier] = None,
        persistent: Optional[CacheTier] = None,
        monitor: Optional[UsageMonitor] = None,
    ):
        """Initialize caching service.

        Args:
            memory: Fast volatile tier
            persistent: Durable tier (NullCache when absent)
            monitor: Usage monitor for hit/miss counters
        """
        self.memory = memory or MemoryCache()
        self.persistent = persistent or NullCache()
        self.monitor = monitor or UsageMonitor()

    @property
    def pair_buffer(self) -> CacheTier:
        """Tier holding prefetched pairs.

        The persistent tier when one is available, so buffered pairs
        survive restarts; the memory tier otherwise.
        """
        if isinstance(self.persistent, NullCache):
            return self.memory
        return self.persistent

    def _tier_reader(self, tier: CacheTier, collection: str, max_age: Optional[float]):
        def read(key: str) -> Optional[Any]:
            value = tier.get(collection, key, max_age)
            self.monitor.record_cache(tier.name, hit=value is not None)
            return value
        return read

    def _tier_writer(self, tier: CacheTier, collection: str):
        def write(key: str, value: Any) -> bool:
            return tier.put(collection, key, value)
        return write

    def strategies(self, policy: CachePolicy) -> List[ReadStrategy]:
        """Get the cache part of a tiered read, fastest first.

        Args:
            policy: Collection freshness rules

        Returns:
            Memory and persistent read strategies
        """
        return [
            ReadStrategy(
                name=self.memory.name,
                read=self._tier_reader(self.memory, policy.collection, policy.memory_max_age),
                write_back=self._tier_writer(self.memory, policy.collection),
            ),
            ReadStrategy(
                name=self.persistent.name,
                read=self._tier_reader(self.persistent, policy.collection, policy.persistent_max_age),
                write_back=self._tier_writer(self.persistent, policy.collection),
            ),
        ]

    def read(self, policy: CachePolicy, key: str) -> Optional[Any]:
        """Read from the cache tiers only.

        Args:
            policy: Collection freshness rules
            key: Cache key

        Returns:
            Fresh value or None
        """
        return read_through(key, self.strategies(policy)).value

    def read_stale(self, collection: str, key: str) -> Optional[Any]:
        """Read ignoring age, memory first.

        Used to serve stale data when a rebuild fails.
        """
        value = self.memory.get(collection, key)
        if value is None:
            value = self.persistent.get(collection, key)
        return value

    def write_through(self, collection: str, key: str, value: Any) -> None:
        """Store a value in both tiers."""
        self.memory.put(collection, key, value)
        self.persistent.put(collection, key, value)

    def invalidate(self, collection: str, key: str) -> None:
        """Delete a key from both tiers."""
        self.memory.delete(collection, key)
        self.persistent.delete(collection, key)
        logger.debug(f"Invalidated {collection}/{key}")

    def clear(self, collection: str) -> int:
        """Clear a collection in both tiers.

        Returns:
            Entries removed
        """
        return self.memory.clear(collection) + self.persistent.clear(collection)

    def sweep(
        self,
        collection: str,
        memory_max_age: Optional[float],
        persistent_max_age: Optional[float],
    ) -> int:
        """Sweep expired entries of one collection from both tiers.

        Args:
            collection: Collection name
            memory_max_age: Age limit in memory, None to skip memory
            persistent_max_age: Age limit on disk, None to skip disk

        Returns:
            Entries removed
        """
        removed = 0
        if memory_max_age is not None:
            removed += self.memory.sweep_expired(collection, memory_max_age)
        if persistent_max_age is not None:
            removed += self.persistent.sweep_expired(collection, persistent_max_age)
        return removed

    def __repr__(self) -> str:
        return f"CachingService(memory={self.memory!r}, persistent={self.persistent!r})"


__all__ = [
    "CachingService",
    "CachePolicy",
    "ITEMS",
    "LEADERBOARD",
    "PAIRS",
    "SESSION_VOTES",
]
