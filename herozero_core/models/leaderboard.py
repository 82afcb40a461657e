"""HeroZero Leaderboard Snapshot.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from herozero_core.models.item import Item


@dataclass(frozen=True)
class LeaderboardEntry:
    """Projection of an item on the leaderboard.

    Attributes:
        item: Item snapshot
        rank: Global rank (1 = highest rating)
    """

    item: Item
    rank: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = self.item.to_record()
        data["rank"] = self.rank
        return data


@dataclass(frozen=True)
class LeaderboardSnapshot:
    """Top and bottom views of the rating table.

    Built whole and replaced whole; never patched.

    Attributes:
        top_items: Highest rated first
        bottom_items: Lowest rated first, ranked from the bottom
        total_count: Items in the pool when built
        built_at: Build timestamp
        limit: Requested size of each view
    """

    top_items: Tuple[LeaderboardEntry, ...] = ()
    bottom_items: Tuple[LeaderboardEntry, ...] = ()
    total_count: int = 0
    built_at: Optional[float] = None
    limit: int = 0

    @classmethod
    def empty(cls) -> "LeaderboardSnapshot":
        """Snapshot used when nothing was ever built."""
        return cls()

    @classmethod
    def build(
        cls,
        top: List[Item],
        bottom: List[Item],
        total_count: int,
        built_at: float,
        limit: int,
    ) -> "LeaderboardSnapshot":
        """Assemble a snapshot from ordered query results.

        Args:
            top: Items ordered by rating descending
            bottom: Items ordered by rating ascending
            total_count: Pool size
            built_at: Build timestamp
            limit: View size

        Returns:
            LeaderboardSnapshot
        """
        return cls(
            top_items=tuple(
                LeaderboardEntry(item=item, rank=index + 1)
                for index, item in enumerate(top)
            ),
            bottom_items=tuple(
                LeaderboardEntry(item=item, rank=total_count - index)
                for index, item in enumerate(bottom)
            ),
            total_count=total_count,
            built_at=built_at,
            limit=limit,
        )

    @property
    def is_empty(self) -> bool:
        """Check if the snapshot was never built."""
        return self.built_at is None

    def truncated(self, limit: int) -> "LeaderboardSnapshot":
        """Get a view with at most ``limit`` entries per side."""
        if limit >= self.limit:
            return self
        return LeaderboardSnapshot(
            top_items=self.top_items[:limit],
            bottom_items=self.bottom_items[:limit],
            total_count=self.total_count,
            built_at=self.built_at,
            limit=limit,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "top_items": [entry.to_dict() for entry in self.top_items],
            "bottom_items": [entry.to_dict() for entry in self.bottom_items],
            "total_count": self.total_count,
            "built_at": self.built_at,
            "limit": self.limit,
        }


__all__ = ["LeaderboardEntry", "LeaderboardSnapshot"]
