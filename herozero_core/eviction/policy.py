"""HeroZero Eviction Policy - Bounding the Memory Tier.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class EvictionStats:
    """Eviction policy statistics.

    Attributes:
        evictions: Keys chosen for eviction
        accesses: Accesses tracked
        current_size: Keys currently tracked
        max_size: Capacity
    """

    evictions: int = 0
    accesses: int = 0
    current_size: int = 0
    max_size: int = 0


class EvictionPolicy(ABC):
    """Decides which key leaves a full memory collection.

    The memory tier calls ``on_insert``/``on_access``/``on_delete`` and,
    once a collection holds ``max_size`` keys, removes ``choose_eviction()``
    before inserting a new key.
    """

    def __init__(self, max_size: int = 10000):
        """Initialize policy.

        Args:
            max_size: Maximum keys per collection
        """
        self.max_size = max_size
        self._stats = EvictionStats(max_size=max_size)

    @abstractmethod
    def on_access(self, key: str) -> None:
        """Record key access."""
        pass

    @abstractmethod
    def on_insert(self, key: str) -> None:
        """Record key insertion."""
        pass

    @abstractmethod
    def on_delete(self, key: str) -> None:
        """Record key deletion."""
        pass

    @abstractmethod
    def choose_eviction(self) -> Optional[str]:
        """Choose key to evict.

        Returns:
            Key to evict or None
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Forget all tracked keys."""
        pass

    @abstractmethod
    def size(self) -> int:
        """Get number of tracked keys."""
        pass

    def is_full(self) -> bool:
        """Check if capacity is reached."""
        return self.size() >= self.max_size

    def get_stats(self) -> EvictionStats:
        """Get eviction statistics."""
        self._stats.current_size = self.size()
        return self._stats

    def __len__(self) -> int:
        return self.size()


__all__ = ["EvictionPolicy", "EvictionStats"]
