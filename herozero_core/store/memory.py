"""HeroZero Memory Store - In-Process Entity Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Dict, List, Optional

from herozero_core.store.entity import EntityStore, Record, Row, split_path

logger = logging.getLogger(__name__)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class InMemoryEntityStore(EntityStore):
    """In-memory entity store.

    Reference implementation of the store contract for development and
    tests. Records are deep-copied on the way in and out so callers never
    share state with the store. ``atomic_write`` validates every path before
    applying anything, under one lock.

    Example:
        store = InMemoryEntityStore()
        store.atomic_write({"items/1": {"rating": 1500}})
        rows = store.range_query("items", "rating", limit=10, descending=True)
    """

    def __init__(self, data: Optional[Dict[str, Dict[str, Record]]] = None):
        """Initialize memory store.

        Args:
            data: Optional initial collections
        """
        self._data: Dict[str, Dict[str, Record]] = copy.deepcopy(data) if data else {}
        self._lock = threading.RLock()

    def get(self, collection: str, key: str) -> Optional[Record]:
        with self._lock:
            record = self._data.get(collection, {}).get(key)
            return copy.deepcopy(record) if record is not None else None

    def range_query(
        self,
        collection: str,
        order_field: str,
        gte: Optional[float] = None,
        lte: Optional[float] = None,
        limit: Optional[int] = None,
        descending: bool = False,
    ) -> List[Row]:
        with self._lock:
            rows = [
                (key, record)
                for key, record in self._data.get(collection, {}).items()
                if _is_number(record.get(order_field))
                and (gte is None or record[order_field] >= gte)
                and (lte is None or record[order_field] <= lte)
            ]
            rows.sort(key=lambda row: (row[1][order_field], row[0]), reverse=descending)
            if limit is not None:
                rows = rows[:limit]
            return [(key, copy.deepcopy(record)) for key, record in rows]

    def scan(self, collection: str, limit: Optional[int] = None) -> List[Row]:
        with self._lock:
            rows = list(self._data.get(collection, {}).items())
            if limit is not None:
                rows = rows[:limit]
            return [(key, copy.deepcopy(record)) for key, record in rows]

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._data.get(collection, {}))

    def atomic_write(self, updates: Dict[str, Record]) -> None:
        staged = [(split_path(path), copy.deepcopy(record)) for path, record in updates.items()]
        with self._lock:
            for (collection, key), record in staged:
                self._data.setdefault(collection, {})[key] = record
        logger.debug(f"Applied atomic write of {len(staged)} records")

    def __repr__(self) -> str:
        counts = {name: len(records) for name, records in self._data.items()}
        return f"InMemoryEntityStore(collections={counts})"


__all__ = ["InMemoryEntityStore"]
