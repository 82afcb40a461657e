"""HeroZero Leaderboard Builder - Short-TTL Ranking Snapshots.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from herozero_core.cache.service import ITEMS, LEADERBOARD, CachePolicy, CachingService
from herozero_core.models.item import Item
from herozero_core.models.leaderboard import LeaderboardSnapshot
from herozero_core.store.entity import EntityStore

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "current"
LAST_GOOD_KEY = "last_good"


class LeaderboardBuilder:
    """Builds and caches the top/bottom leaderboard.

    The current snapshot lives under ``SNAPSHOT_KEY`` in both tiers for
    ``max_age`` seconds; votes delete it. A copy of the last successful
    build is kept under ``LAST_GOOD_KEY`` and on the builder itself, and is
    served regardless of age when a rebuild fails.
    """

    def __init__(
        self,
        store: EntityStore,
        caches: CachingService,
        max_age: float = 300.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize builder.

        Args:
            store: Entity store
            caches: Memory and persistent tiers
            max_age: Snapshot TTL in both tiers
            clock: Time source
        """
        self.store = store
        self.caches = caches
        self.policy = CachePolicy(LEADERBOARD, max_age, max_age)
        self._clock = clock or time.time
        self._last_good: Optional[LeaderboardSnapshot] = None

    def build(self, limit: int = 10) -> LeaderboardSnapshot:
        """Query the store and cache a new snapshot.

        Raises:
            StoreError: If any query failed
            ValueError: If a stored record has unconvertible fields
        """
        total_count = self.store.count(ITEMS)
        top_rows = self.store.range_query(ITEMS, "rating", limit=limit, descending=True)
        bottom_rows = self.store.range_query(ITEMS, "rating", limit=limit)

        snapshot = LeaderboardSnapshot.build(
            top=[Item.from_record(key, record) for key, record in top_rows],
            bottom=[Item.from_record(key, record) for key, record in bottom_rows],
            total_count=total_count,
            built_at=self._clock(),
            limit=limit,
        )

        self.caches.write_through(LEADERBOARD, SNAPSHOT_KEY, snapshot)
        self.caches.write_through(LEADERBOARD, LAST_GOOD_KEY, snapshot)
        self._last_good = snapshot
        logger.info(f"Built leaderboard of {total_count} items (limit {limit})")
        return snapshot

    def sweep_expired(self) -> int:
        """Delete an expired current snapshot from both tiers.

        The last good copy is kept.

        Returns:
            Entries removed
        """
        removed = 0
        max_age = self.policy.memory_max_age
        for tier in (self.caches.memory, self.caches.persistent):
            record = tier.get_record(LEADERBOARD, SNAPSHOT_KEY)
            if record is not None and not record.is_fresh(max_age, tier.now()):
                if tier.delete(LEADERBOARD, SNAPSHOT_KEY):
                    removed += 1
        return removed

    def _stale(self) -> Optional[LeaderboardSnapshot]:
        if self._last_good is not None:
            return self._last_good
        return (
            self.caches.read_stale(LEADERBOARD, LAST_GOOD_KEY)
            or self.caches.read_stale(LEADERBOARD, SNAPSHOT_KEY)
        )

    def get_leaderboard(self, limit: int = 10, force_refresh: bool = False) -> LeaderboardSnapshot:
        """Get the leaderboard, rebuilding it when the cached one expired.

        Any rebuild failure serves the last good snapshot instead.

        Args:
            limit: Entries per side
            force_refresh: Skip the cache tiers

        Returns:
            LeaderboardSnapshot, empty only if none was ever built
        """
        if not force_refresh:
            cached = self.caches.read(self.policy, SNAPSHOT_KEY)
            if cached is not None and cached.limit >= limit:
                return cached.truncated(limit)

        try:
            return self.build(limit)
        except Exception as e:
            self.caches.monitor.record_fallback("stale_leaderboard")
            stale = self._stale()
            if stale is None:
                logger.error(f"Leaderboard build failed and nothing to serve: {e}")
                return LeaderboardSnapshot.empty()
            logger.warning(f"Leaderboard build failed, serving snapshot from {stale.built_at}: {e}")
            return stale.truncated(limit)

    def __repr__(self) -> str:
        built_at = self._last_good.built_at if self._last_good else None
        return f"LeaderboardBuilder(last_built={built_at})"


__all__ = ["LeaderboardBuilder", "SNAPSHOT_KEY", "LAST_GOOD_KEY"]
