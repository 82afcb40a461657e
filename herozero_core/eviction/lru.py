"""HeroZero LRU Policy - Least Recently Used Eviction.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Optional

from herozero_core.eviction.policy import EvictionPolicy


class LRUPolicy(EvictionPolicy):
    """Least Recently Used eviction policy.

    Uses an OrderedDict for O(1) operations; the first key is the
    least recently used one.

    Example:
        policy = LRUPolicy(max_size=1000)
        policy.on_insert("item:1")
        policy.on_access("item:1")
        evict_key = policy.choose_eviction()
    """

    def __init__(self, max_size: int = 10000):
        super().__init__(max_size)
        self._order: "OrderedDict[str, None]" = OrderedDict()
        self._lock = threading.RLock()

    def on_access(self, key: str) -> None:
        with self._lock:
            self._stats.accesses += 1
            if key in self._order:
                self._order.move_to_end(key)

    def on_insert(self, key: str) -> None:
        with self._lock:
            self._order[key] = None
            self._order.move_to_end(key)

    def on_delete(self, key: str) -> None:
        with self._lock:
            self._order.pop(key, None)

    def choose_eviction(self) -> Optional[str]:
        with self._lock:
            if not self._order:
                return None
            self._stats.evictions += 1
            return next(iter(self._order))

    def clear(self) -> None:
        with self._lock:
            self._order.clear()

    def size(self) -> int:
        return len(self._order)

    def __contains__(self, key: str) -> bool:
        return key in self._order

    def __repr__(self) -> str:
        return f"LRUPolicy(size={len(self._order)}, max={self.max_size})"


__all__ = ["LRUPolicy"]
