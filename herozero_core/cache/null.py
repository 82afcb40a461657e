"""HeroZero Null Cache - Persistence Disabled.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Any, List, Optional

from herozero_core.cache.record import CacheRecord
from herozero_core.cache.tier import CacheTier


class NullCache(CacheTier):
    """Cache tier that stores nothing.

    Selected when local persistence is disabled or unusable. Writes are
    accepted and dropped; every lookup misses.
    """

    name = "null"

    def put(self, collection: str, key: str, value: Any) -> bool:
        return False

    def get_record(self, collection: str, key: str) -> Optional[CacheRecord]:
        return None

    def delete(self, collection: str, key: str) -> bool:
        return False

    def clear(self, collection: str) -> int:
        return 0

    def keys(self, collection: str) -> List[str]:
        return []

    def pop(self, collection: str, max_age: Optional[float] = None) -> Optional[Any]:
        return None

    def health_check(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "NullCache()"


__all__ = ["NullCache"]
