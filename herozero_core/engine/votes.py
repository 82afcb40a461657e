"""HeroZero Vote Recorder - Elo Updates as One Atomic Write.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable, Dict, Optional

from herozero_core.cache.service import ITEMS, LEADERBOARD, CachingService
from herozero_core.engine.items import ItemRepository
from herozero_core.engine.leaderboard import SNAPSHOT_KEY
from herozero_core.engine.pairs import PairSelector
from herozero_core.errors import IntegrityViolation
from herozero_core.models.item import Item
from herozero_core.models.vote import ItemWithDelta, VoteOutcome
from herozero_core.rating.elo import DEFAULT_K_FACTOR, apply_match_result
from herozero_core.store.entity import EntityStore, make_path

logger = logging.getLogger(__name__)

VOTE_SESSIONS = "vote-sessions"


class VoteRecorder:
    """Records one pairwise vote.

    Both items are updated in a single atomic store write. Caches are only
    touched after that write succeeds; a failed write leaves every tier as
    it was and propagates to the caller.

    There is no compare-and-swap: two concurrent votes on the same item
    both read the same rating, and the later write wins.

    Example:
        outcome = recorder.record_vote("12", "98", session_id)
        print(outcome.winner.delta)
    """

    def __init__(
        self,
        store: EntityStore,
        caches: CachingService,
        items: ItemRepository,
        selector: Optional[PairSelector] = None,
        k_factor: int = DEFAULT_K_FACTOR,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize vote recorder.

        Args:
            store: Entity store
            caches: Memory and persistent tiers
            items: Item repository
            selector: Pair selector, remembers session votes
            k_factor: Elo K-factor
            clock: Time source
        """
        self.store = store
        self.caches = caches
        self.items = items
        self.selector = selector
        self.k_factor = k_factor
        self._clock = clock or time.time
        self.on_vote_recorded: Optional[Callable[[VoteOutcome], Any]] = None

    def _resolve(self, item_id: str) -> Item:
        item = self.items.resolve(item_id)
        if item is None:
            logger.info(f"Item {item_id} not found, creating with defaults")
            return self.items.new_item(item_id)
        return item

    def _audit_record(
        self,
        winner: ItemWithDelta,
        loser: ItemWithDelta,
        voter_session_id: Optional[str],
        now: float,
    ) -> Dict[str, Any]:
        return {
            "first_id": winner.item.id,
            "second_id": loser.item.id,
            "winner_id": winner.item.id,
            "timestamp": now,
            "voter_session_id": voter_session_id,
            "rating_changes": {
                "winner_delta": winner.delta,
                "loser_delta": loser.delta,
            },
        }

    def record_vote(
        self,
        winner_id: str,
        loser_id: str,
        voter_session_id: Optional[str] = None,
        elevated: bool = False,
    ) -> VoteOutcome:
        """Record a vote for ``winner_id`` over ``loser_id``.

        Args:
            winner_id: Winning item
            loser_id: Losing item
            voter_session_id: Opaque voter session
            elevated: Also write an audit record

        Returns:
            VoteOutcome with new ratings and deltas

        Raises:
            ValueError: If both ids are the same
            IntegrityViolation: If an updated item breaks the counter invariant
            StoreError: If reading or writing the store failed
        """
        winner_id, loser_id = str(winner_id), str(loser_id)
        if winner_id == loser_id:
            raise ValueError(f"An item cannot win against itself: {winner_id}")

        winner = self._resolve(winner_id)
        loser = self._resolve(loser_id)

        result = apply_match_result(winner.rating, loser.rating, self.k_factor)
        now = self._clock()
        updated_winner = winner.after_vote(True, result.new_winner_rating, now)
        updated_loser = loser.after_vote(False, result.new_loser_rating, now)

        for item in (updated_winner, updated_loser):
            if not item.is_consistent():
                raise IntegrityViolation(
                    f"Item {item.id} has total_votes={item.total_votes} "
                    f"but wins={item.wins} losses={item.losses}"
                )

        outcome_winner = ItemWithDelta(item=updated_winner, delta=result.winner_delta)
        outcome_loser = ItemWithDelta(item=updated_loser, delta=result.loser_delta)

        updates = {
            make_path(ITEMS, updated_winner.id): updated_winner.to_record(),
            make_path(ITEMS, updated_loser.id): updated_loser.to_record(),
        }
        audit_key = None
        if elevated:
            audit_key = uuid.uuid4().hex
            updates[make_path(VOTE_SESSIONS, audit_key)] = self._audit_record(
                outcome_winner, outcome_loser, voter_session_id, now,
            )

        self.store.atomic_write(updates)

        self.items.remember(updated_winner)
        self.items.remember(updated_loser)
        self.caches.invalidate(LEADERBOARD, SNAPSHOT_KEY)
        if voter_session_id and self.selector is not None:
            self.selector.remember_vote(voter_session_id, winner_id, loser_id)

        logger.info(
            f"Vote {winner_id} > {loser_id}: "
            f"{winner.rating}->{updated_winner.rating}, {loser.rating}->{updated_loser.rating}"
        )

        outcome = VoteOutcome(winner=outcome_winner, loser=outcome_loser, audit_key=audit_key)
        if self.on_vote_recorded is not None:
            try:
                self.on_vote_recorded(outcome)
            except Exception as e:
                logger.error(f"Vote hook failed: {e}")
        return outcome

    def __repr__(self) -> str:
        return f"VoteRecorder(k_factor={self.k_factor})"


__all__ = ["VoteRecorder", "VOTE_SESSIONS"]
