"""HeroZero Entity Store - Authoritative Store Contract.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Row = Tuple[str, Record]


def make_path(collection: str, key: str) -> str:
    """Build an atomic-write path from collection and key."""
    return f"{collection}/{key}"


def split_path(path: str) -> Tuple[str, str]:
    """Split an atomic-write path into collection and key.

    Raises:
        ValueError: If the path has no collection part
    """
    collection, sep, key = path.partition("/")
    if not sep or not collection or not key:
        raise ValueError(f"Invalid store path: {path!r}")
    return collection, key


class EntityStore(ABC):
    """Abstract authoritative key-value store.

    Implementations:
    - InMemoryEntityStore: process-local, for development and tests
    - RedisEntityStore: Redis with one sorted set per indexed field

    Records are plain JSON-compatible dictionaries. Every method may raise
    ``StoreError`` on I/O failure; absence is reported as None or an empty
    list, never as an error.
    """

    @abstractmethod
    def get(self, collection: str, key: str) -> Optional[Record]:
        """Point read.

        Args:
            collection: Collection name
            key: Record key

        Returns:
            Record or None
        """
        pass

    @abstractmethod
    def range_query(
        self,
        collection: str,
        order_field: str,
        gte: Optional[float] = None,
        lte: Optional[float] = None,
        limit: Optional[int] = None,
        descending: bool = False,
    ) -> List[Row]:
        """Bounded query ordered by a numeric field.

        Records without a numeric ``order_field`` are never returned.

        Args:
            collection: Collection name
            order_field: Numeric field to order and filter by
            gte: Inclusive lower bound
            lte: Inclusive upper bound
            limit: Maximum rows
            descending: Highest values first

        Returns:
            (key, record) rows in order
        """
        pass

    @abstractmethod
    def scan(self, collection: str, limit: Optional[int] = None) -> List[Row]:
        """Unordered bounded scan.

        Args:
            collection: Collection name
            limit: Maximum rows, None for all

        Returns:
            (key, record) rows
        """
        pass

    @abstractmethod
    def count(self, collection: str) -> int:
        """Count records in a collection."""
        pass

    @abstractmethod
    def atomic_write(self, updates: Dict[str, Record]) -> None:
        """Write several records as one indivisible update.

        Args:
            updates: Mapping of "collection/key" path to full record

        Raises:
            StoreError: If the write failed; nothing was applied
        """
        pass

    def close(self) -> None:
        """Release connections."""

    def health_check(self) -> bool:
        """Check the store answers a count query."""
        try:
            self.count("items")
            return True
        except Exception as e:
            logger.error(f"Entity store health check failed: {e}")
            return False


__all__ = ["EntityStore", "Record", "Row", "make_path", "split_path"]
