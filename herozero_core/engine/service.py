"""HeroZero Service - Engine Facade.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from concurrent.futures import Future
from typing import Callable, Optional, Tuple

from herozero_core.cache.file import probe_persistent_cache
from herozero_core.cache.memory import MemoryCache
from herozero_core.cache.service import ITEMS, PAIRS, SESSION_VOTES, CachePolicy, CachingService
from herozero_core.config import HeroZeroConfig
from herozero_core.engine.items import ItemRepository
from herozero_core.engine.leaderboard import LeaderboardBuilder
from herozero_core.engine.pairs import PairSelector
from herozero_core.engine.prefetch import Prefetcher
from herozero_core.engine.votes import VoteRecorder
from herozero_core.metadata.provider import (
    MetadataProvider,
    OpenSeaMetadataProvider,
    StaticMetadataProvider,
)
from herozero_core.metrics.collector import UsageMetrics, UsageMonitor
from herozero_core.models.item import Item
from herozero_core.models.leaderboard import LeaderboardSnapshot
from herozero_core.models.vote import VoteOutcome
from herozero_core.store.entity import EntityStore
from herozero_core.store.guarded import GuardedEntityStore
from herozero_core.store.memory import InMemoryEntityStore
from herozero_core.store.redis import RedisEntityStore

logger = logging.getLogger(__name__)


def build_entity_store(config: HeroZeroConfig) -> EntityStore:
    """Create the configured entity store backend.

    Raises:
        ValueError: If ``store_backend`` is unknown
    """
    if config.store_backend == "memory":
        return InMemoryEntityStore()
    if config.store_backend == "redis":
        return RedisEntityStore(config.redis)
    raise ValueError(f"Unknown store backend: {config.store_backend!r}")


def build_metadata_provider(config: HeroZeroConfig) -> MetadataProvider:
    """Create the metadata provider; OpenSea needs an API key."""
    if config.metadata.api_key:
        return OpenSeaMetadataProvider(config.metadata)
    logger.info("No metadata API key configured, using generated metadata")
    return StaticMetadataProvider(name_prefix=config.metadata.name_prefix)


class HeroZeroService:
    """Rating, pairing and caching engine.

    Wires the entity store, both cache tiers, the metadata provider and the
    engine components together, and runs the background prefetcher and
    expiry sweeper.

    Example:
        with HeroZeroService.from_config(HeroZeroConfig.from_env()) as service:
            first, second = service.select_pair(voter_session_id=session)
            outcome = service.record_vote(first.id, second.id, session)
            board = service.get_leaderboard()
    """

    def __init__(
        self,
        store: EntityStore,
        caches: Optional[CachingService] = None,
        metadata: Optional[MetadataProvider] = None,
        config: Optional[HeroZeroConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize service.

        Args:
            store: Entity store (wrapped by the caller if timeouts are wanted)
            caches: Memory and persistent tiers
            metadata: Metadata provider
            config: Engine configuration
            rng: Random source
            clock: Time source
        """
        self.config = config or HeroZeroConfig()
        self.store = store
        self.caches = caches or CachingService()
        self.monitor: UsageMonitor = self.caches.monitor
        self.metadata = metadata or StaticMetadataProvider()
        self._rng = rng or random.Random()
        self._clock = clock or time.time

        self.items = ItemRepository(
            store,
            self.caches,
            self.metadata,
            policy=CachePolicy(ITEMS, self.config.item_memory_max_age, self.config.item_persistent_max_age),
            initial_rating=self.config.initial_rating,
            rng=self._rng,
            clock=self._clock,
        )
        self.selector = PairSelector(
            store,
            self.caches,
            self.items,
            monitor=self.monitor,
            pair_max_age=self.config.pair_max_age,
            session_vote_max_age=self.config.session_vote_max_age,
            range_limit=self.config.range_limit,
            scan_limit=self.config.scan_limit,
            max_item_id=self.config.max_item_id,
            max_pair_attempts=self.config.max_pair_attempts,
            rng=self._rng,
            clock=self._clock,
        )
        self.prefetcher = Prefetcher(self.selector, target_count=self.config.prefetch_target)
        self.recorder = VoteRecorder(
            store,
            self.caches,
            self.items,
            selector=self.selector,
            k_factor=self.config.k_factor,
            clock=self._clock,
        )
        self.leaderboard = LeaderboardBuilder(
            store,
            self.caches,
            max_age=self.config.leaderboard_max_age,
            clock=self._clock,
        )

        self.selector.on_buffer_consumed = self.ensure_buffered
        self.recorder.on_vote_recorded = lambda outcome: self.ensure_buffered()

        self._sweeper_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @classmethod
    def from_config(
        cls,
        config: Optional[HeroZeroConfig] = None,
        store: Optional[EntityStore] = None,
        metadata: Optional[MetadataProvider] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "HeroZeroService":
        """Build a service with every tier set up from configuration.

        The store is wrapped in a ``GuardedEntityStore`` and the persistent
        tier is probed, falling back to no persistence.

        Args:
            config: Engine configuration
            store: Store backend overriding ``config.store_backend``
            metadata: Provider overriding the configured one
            rng: Random source
            clock: Time source

        Returns:
            HeroZeroService (not started)
        """
        config = config or HeroZeroConfig()
        monitor = UsageMonitor()
        guarded = GuardedEntityStore(
            store or build_entity_store(config),
            timeout=config.store_timeout,
            monitor=monitor,
        )
        caches = CachingService(
            memory=MemoryCache(max_entries=config.memory_max_entries, clock=clock, rng=rng),
            persistent=probe_persistent_cache(config.cache_dir, clock=clock, rng=rng),
            monitor=monitor,
        )
        return cls(
            guarded,
            caches,
            metadata or build_metadata_provider(config),
            config=config,
            rng=rng,
            clock=clock,
        )

    # Lifecycle

    def start(self) -> None:
        """Start the expiry sweeper and warm the pair buffer."""
        if self._sweeper_thread is not None:
            return

        self._stop_event.clear()
        self._sweeper_thread = threading.Thread(
            target=self._sweep_loop,
            daemon=True,
            name="HeroZero-sweeper",
        )
        self._sweeper_thread.start()
        self.ensure_buffered()
        logger.info("HeroZero service started")

    def stop(self) -> None:
        """Stop background work and release connections."""
        self._stop_event.set()
        if self._sweeper_thread:
            self._sweeper_thread.join(timeout=5.0)
            self._sweeper_thread = None
        self.prefetcher.shutdown(wait=True)
        self.store.close()
        self.metadata.close()
        logger.info("HeroZero service stopped")

    def _sweep_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.sweep_expired()
            except Exception as e:
                logger.error(f"Sweep error: {e}")

            self._stop_event.wait(self.config.sweep_interval)

    # Operations

    def select_pair(
        self,
        prefer_prefetched: bool = True,
        voter_session_id: Optional[str] = None,
    ) -> Tuple[Item, Item]:
        """Select two items to vote on. See ``PairSelector.select_pair``."""
        return self.selector.select_pair(prefer_prefetched, voter_session_id)

    def record_vote(
        self,
        winner_id: str,
        loser_id: str,
        voter_session_id: Optional[str] = None,
        elevated: bool = False,
    ) -> VoteOutcome:
        """Record a vote. See ``VoteRecorder.record_vote``."""
        return self.recorder.record_vote(winner_id, loser_id, voter_session_id, elevated)

    def get_leaderboard(self, limit: int = 10, force_refresh: bool = False) -> LeaderboardSnapshot:
        """Get the leaderboard. See ``LeaderboardBuilder.get_leaderboard``."""
        return self.leaderboard.get_leaderboard(limit, force_refresh)

    def ensure_buffered(self, target_count: Optional[int] = None) -> Optional[Future]:
        """Top up the pair buffer in the background."""
        return self.prefetcher.ensure_buffered(target_count)

    def sweep_expired(self) -> int:
        """Remove expired entries from both cache tiers.

        Returns:
            Entries removed
        """
        config = self.config
        removed = self.caches.sweep(ITEMS, config.item_memory_max_age, config.item_sweep_age)
        removed += self.caches.sweep(PAIRS, config.pair_max_age, config.pair_max_age)
        removed += self.caches.sweep(SESSION_VOTES, config.session_vote_max_age, None)
        removed += self.leaderboard.sweep_expired()
        if removed:
            logger.info(f"Swept {removed} expired cache entries")
        return removed

    def get_usage(self) -> UsageMetrics:
        """Get store usage and cache effectiveness counters."""
        return self.monitor.get_metrics()

    def __enter__(self) -> "HeroZeroService":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.stop()

    def __repr__(self) -> str:
        return f"HeroZeroService(store={self.store!r}, caches={self.caches!r})"


__all__ = ["HeroZeroService", "build_entity_store", "build_metadata_provider"]
