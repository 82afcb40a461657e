"""HeroZero Cache Record - Timestamped Cache Envelope.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class CacheRecord:
    """A cached value with the time it was cached.

    Used unchanged by the memory and the persistent tier. Freshness is
    decided by the reader: ``now - cached_at <= max_age`` (inclusive).

    Attributes:
        key: Cache key
        value: Cached value
        cached_at: Epoch seconds when stored
    """

    key: str
    value: Any
    cached_at: float

    def age(self, now: float) -> float:
        """Get record age in seconds."""
        return now - self.cached_at

    def is_fresh(self, max_age: Optional[float], now: float) -> bool:
        """Check freshness.

        Args:
            max_age: Maximum age in seconds, None for any age
            now: Current time

        Returns:
            True if the record may be served
        """
        if max_age is None:
            return True
        return self.age(now) <= max_age

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"key": self.key, "value": self.value, "cached_at": self.cached_at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheRecord":
        """Create from dictionary."""
        return cls(key=data["key"], value=data["value"], cached_at=float(data["cached_at"]))

    def __repr__(self) -> str:
        return f"CacheRecord(key={self.key!r}, cached_at={self.cached_at:.3f})"


__all__ = ["CacheRecord"]
