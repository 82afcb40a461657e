"""HeroZero Pair Selector - Random Voting Pairs With Fallbacks.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, Dict, List, Optional, Tuple

from herozero_core.cache.service import ITEMS, PAIRS, SESSION_VOTES, CachingService
from herozero_core.engine.items import ItemRepository
from herozero_core.errors import HeroZeroError, PairUnavailableError, StoreError
from herozero_core.metrics.collector import UsageMonitor
from herozero_core.models.item import Item
from herozero_core.models.pair import VotePair, pair_key
from herozero_core.store.entity import EntityStore

logger = logging.getLogger(__name__)

# Malformed records fail conversion with TypeError or ValueError
SAMPLE_ERRORS = (StoreError, TypeError, ValueError)


def session_vote_key(voter_session_id: str, first_id: str, second_id: str) -> str:
    """Key under which a session's vote on a pair is remembered."""
    return f"{voter_session_id}:{pair_key(first_id, second_id)}"


class PairSelector:
    """Produces pairs of items to vote on.

    Selection order:
    1. A fresh prefetched pair from the pair buffer (no network)
    2. Items around a random point of the ``random_key`` index
    3. An unordered scan of the first items
    4. Two newly created items with random ids
    Extra pairs produced by steps 2-4 go into the pair buffer.

    Store failures and malformed records in steps 2 and 3 count as empty
    results. Only when step 4 fails too is ``PairUnavailableError`` raised.
    """

    def __init__(
        self,
        store: EntityStore,
        caches: CachingService,
        items: ItemRepository,
        monitor: Optional[UsageMonitor] = None,
        pair_max_age: float = 3600.0,
        session_vote_max_age: float = 86400.0,
        range_limit: int = 10,
        scan_limit: int = 20,
        max_item_id: int = 10000,
        max_pair_attempts: int = 10,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.store = store
        self.caches = caches
        self.items = items
        self.monitor = monitor or caches.monitor
        self.pair_max_age = pair_max_age
        self.session_vote_max_age = session_vote_max_age
        self.range_limit = range_limit
        self.scan_limit = scan_limit
        self.max_item_id = max_item_id
        self.max_pair_attempts = max(1, max_pair_attempts)
        self._rng = rng or random.Random()
        self._clock = clock or time.time
        self.on_buffer_consumed: Optional[Callable[[], object]] = None

    # Pair buffer

    def buffered_count(self) -> int:
        """Count fresh pairs waiting in the buffer."""
        return self.caches.pair_buffer.size(PAIRS, self.pair_max_age)

    def buffer(self, pair: VotePair) -> bool:
        """Add a pair to the buffer."""
        return self.caches.pair_buffer.push(PAIRS, pair) is not None

    def pop_buffered(self) -> Optional[VotePair]:
        """Claim one fresh buffered pair, or None."""
        pair = self.caches.pair_buffer.pop(PAIRS, self.pair_max_age)
        self.monitor.record_cache("pair_buffer", hit=pair is not None)
        if pair is not None and self.on_buffer_consumed is not None:
            try:
                self.on_buffer_consumed()
            except Exception as e:
                logger.error(f"Buffer refill hook failed: {e}")
        return pair

    # Sessions

    def has_voted(self, voter_session_id: str, first_id: str, second_id: str) -> bool:
        """Check if a session already voted on a pair in this process."""
        key = session_vote_key(voter_session_id, first_id, second_id)
        return self.caches.memory.get(SESSION_VOTES, key, self.session_vote_max_age) is not None

    def remember_vote(self, voter_session_id: str, first_id: str, second_id: str) -> None:
        """Remember that a session voted on a pair."""
        key = session_vote_key(voter_session_id, first_id, second_id)
        self.caches.memory.put(SESSION_VOTES, key, True)

    # Sampling

    def _random_sample(self) -> List[Item]:
        point = self._rng.random()
        rows = []
        try:
            rows.extend(self.store.range_query(
                ITEMS, "random_key", gte=point, limit=self.range_limit,
            ))
            rows.extend(self.store.range_query(
                ITEMS, "random_key", lte=point, limit=self.range_limit, descending=True,
            ))
            seen: Dict[str, Tuple[str, dict]] = {}
            for key, record in rows:
                seen.setdefault(key, (key, record))
            return self.items.remember_rows(list(seen.values()))
        except SAMPLE_ERRORS as e:
            logger.warning(f"Random sample failed, falling back to scan: {e}")
            self.monitor.record_fallback("random_sample")
            return []

    def _scan_sample(self) -> List[Item]:
        try:
            rows = self.store.scan(ITEMS, limit=self.scan_limit)
            return self.items.remember_rows(rows)
        except SAMPLE_ERRORS as e:
            logger.warning(f"Item scan failed, falling back to new items: {e}")
            self.monitor.record_fallback("scan")
            return []

    def _create_sample(self) -> List[Item]:
        if self.max_item_id < 2:
            raise PairUnavailableError(f"Cannot draw two distinct ids from 1..{self.max_item_id}")
        first_id, second_id = self._rng.sample(range(1, self.max_item_id + 1), 2)
        try:
            return [
                self.items.get_or_create(str(first_id)),
                self.items.get_or_create(str(second_id)),
            ]
        except HeroZeroError as e:
            raise PairUnavailableError(f"Could not create items for a pair: {e}") from e

    def sample_items(self) -> List[Item]:
        """Gather at least two distinct items, trying each source in turn.

        Raises:
            PairUnavailableError: If no source produced two items
        """
        items = self._random_sample()
        if len(items) >= 2:
            return items

        items = self._scan_sample()
        if len(items) >= 2:
            return items

        self.monitor.record_fallback("create_items")
        logger.warning("Store returned fewer than two items, creating new ones")
        return self._create_sample()

    def produce_pairs(self) -> List[VotePair]:
        """Build as many pairs as the sampled items allow.

        Returns:
            At least one pair

        Raises:
            PairUnavailableError: If no pair could be built
        """
        items = self.sample_items()
        self._rng.shuffle(items)
        now = self._clock()
        pairs = []
        for index in range(0, len(items) - 1, 2):
            first = self.items.hydrate(items[index])
            second = self.items.hydrate(items[index + 1])
            pairs.append(VotePair(first=first, second=second, created_at=now))
        if not pairs:
            raise PairUnavailableError("No pair could be assembled")
        return pairs

    def _next_pair(self, prefer_prefetched: bool) -> VotePair:
        if prefer_prefetched:
            pair = self.pop_buffered()
            if pair is not None:
                logger.debug(f"Serving buffered {pair!r}")
                return pair

        pairs = self.produce_pairs()
        for extra in pairs[1:]:
            self.buffer(extra)
        return pairs[0]

    def select_pair(
        self,
        prefer_prefetched: bool = True,
        voter_session_id: Optional[str] = None,
    ) -> Tuple[Item, Item]:
        """Select two items to vote on.

        With a ``voter_session_id``, pairs the session already voted on are
        skipped up to ``max_pair_attempts`` times; the last attempt is
        served regardless.

        Args:
            prefer_prefetched: Try the pair buffer first
            voter_session_id: Voter session

        Returns:
            Two distinct items

        Raises:
            PairUnavailableError: If every source failed
        """
        attempts = self.max_pair_attempts if voter_session_id else 1
        for attempt in range(attempts):
            pair = self._next_pair(prefer_prefetched)
            if voter_session_id is None or attempt == attempts - 1:
                return pair.items
            if not self.has_voted(voter_session_id, pair.first.id, pair.second.id):
                return pair.items
            logger.debug(f"Session {voter_session_id} already voted on {pair!r}, retrying")
        raise PairUnavailableError("No pair could be selected")

    def __repr__(self) -> str:
        return f"PairSelector(buffered={self.buffered_count()})"


__all__ = ["PairSelector", "session_vote_key"]
