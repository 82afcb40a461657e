"""HeroZero Memory Cache - Process-Local Cache Tier.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Any, Callable, Dict, List, Optional

from herozero_core.cache.record import CacheRecord
from herozero_core.cache.tier import CacheTier, Clock
from herozero_core.eviction.lru import LRUPolicy
from herozero_core.eviction.policy import EvictionPolicy

logger = logging.getLogger(__name__)


class MemoryCache(CacheTier):
    """In-memory cache tier.

    The fastest tier, lost on restart. Collections are plain dictionaries
    guarded by one RLock, so the prefetcher thread and callers can share it.
    When ``max_entries`` is set, each collection is bounded by its own
    eviction policy (LRU by default).

    Example:
        memory = MemoryCache(max_entries=1000)
        memory.put("items", "42", item)
        item = memory.get("items", "42", max_age=1800)
    """

    name = "memory"

    def __init__(
        self,
        max_entries: Optional[int] = None,
        policy_factory: Optional[Callable[[int], EvictionPolicy]] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize memory cache.

        Args:
            max_entries: Per-collection bound, None for unbounded
            policy_factory: Builds an eviction policy for a collection
            clock: Time source
            rng: Random source for ``pop``
        """
        super().__init__(clock)
        self.max_entries = max_entries
        self._policy_factory = policy_factory or LRUPolicy
        self._collections: Dict[str, Dict[str, CacheRecord]] = {}
        self._policies: Dict[str, EvictionPolicy] = {}
        self._rng = rng or random.Random()
        self._lock = threading.RLock()

    def _collection(self, collection: str) -> Dict[str, CacheRecord]:
        entries = self._collections.get(collection)
        if entries is None:
            entries = self._collections[collection] = {}
            if self.max_entries:
                self._policies[collection] = self._policy_factory(self.max_entries)
        return entries

    def put(self, collection: str, key: str, value: Any) -> bool:
        with self._lock:
            entries = self._collection(collection)
            policy = self._policies.get(collection)

            if policy is not None and key not in entries and policy.is_full():
                victim = policy.choose_eviction()
                if victim is not None:
                    entries.pop(victim, None)
                    policy.on_delete(victim)
                    logger.debug(f"memory: evicted {collection}/{victim}")

            entries[key] = CacheRecord(key=key, value=value, cached_at=self.now())
            if policy is not None:
                policy.on_insert(key)
            self._stats.writes += 1
            return True

    def get_record(self, collection: str, key: str) -> Optional[CacheRecord]:
        with self._lock:
            self._stats.reads += 1
            record = self._collections.get(collection, {}).get(key)
            if record is not None:
                policy = self._policies.get(collection)
                if policy is not None:
                    policy.on_access(key)
            return record

    def delete(self, collection: str, key: str) -> bool:
        with self._lock:
            entries = self._collections.get(collection)
            if not entries or key not in entries:
                return False
            del entries[key]
            policy = self._policies.get(collection)
            if policy is not None:
                policy.on_delete(key)
            self._stats.deletes += 1
            return True

    def clear(self, collection: str) -> int:
        with self._lock:
            entries = self._collections.pop(collection, {})
            policy = self._policies.pop(collection, None)
            if policy is not None:
                policy.clear()
            return len(entries)

    def keys(self, collection: str) -> List[str]:
        with self._lock:
            return list(self._collections.get(collection, {}).keys())

    def pop(self, collection: str, max_age: Optional[float] = None) -> Optional[Any]:
        with self._lock:
            now = self.now()
            entries = self._collections.get(collection, {})
            fresh = [k for k, r in entries.items() if r.is_fresh(max_age, now)]
            if not fresh:
                return None
            key = self._rng.choice(fresh)
            record = entries[key]
            self.delete(collection, key)
            return record.value

    def sweep_expired(self, collection: str, max_age: float) -> int:
        with self._lock:
            return super().sweep_expired(collection, max_age)

    def size(self, collection: str, max_age: Optional[float] = None) -> int:
        with self._lock:
            return super().size(collection, max_age)

    def __repr__(self) -> str:
        counts = {name: len(entries) for name, entries in self._collections.items()}
        return f"MemoryCache(collections={counts})"


__all__ = ["MemoryCache"]
