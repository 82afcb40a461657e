"""Tests for vote recording.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from herozero_core.cache.memory import MemoryCache
from herozero_core.cache.null import NullCache
from herozero_core.cache.service import CachingService
from herozero_core.engine.leaderboard import LAST_GOOD_KEY, SNAPSHOT_KEY
from herozero_core.errors import IntegrityViolation, StoreError
from herozero_core.metadata.provider import StaticMetadataProvider
from herozero_core.metrics.collector import UsageMonitor
from herozero_core.store.memory import InMemoryEntityStore

from conftest import UnreachableStore, seed_items


class RejectingStore(InMemoryEntityStore):
    """Store that accepts reads and rejects writes."""

    def atomic_write(self, updates):
        raise StoreError("permission denied")


class TestVoteRecorder:
    """Tests for VoteRecorder."""

    def test_even_vote(self, make_service, store, rng):
        """Test a 1500 vs 1500 vote end to end."""
        seed_items(store, 2, rng)
        service = make_service(store)

        outcome = service.record_vote("1", "2", "session_1")

        assert outcome.winner.new_rating == 1516
        assert outcome.loser.new_rating == 1484
        assert outcome.winner.delta == 16
        assert outcome.loser.delta == -16

        winner = store.get("items", "1")
        loser = store.get("items", "2")
        assert (winner["rating"], winner["wins"], winner["losses"], winner["total_votes"]) == (1516, 1, 0, 1)
        assert (loser["rating"], loser["wins"], loser["losses"], loser["total_votes"]) == (1484, 0, 1, 1)

    def test_counters_stay_consistent(self, make_service, store, rng):
        """Test total_votes == wins + losses after many votes."""
        seed_items(store, 3, rng)
        service = make_service(store)

        for winner, loser in [("1", "2"), ("2", "3"), ("3", "1"), ("1", "3"), ("2", "1")]:
            service.record_vote(winner, loser)

        for key in ("1", "2", "3"):
            record = store.get("items", key)
            assert record["total_votes"] == record["wins"] + record["losses"]
        assert sum(store.get("items", key)["total_votes"] for key in ("1", "2", "3")) == 10

    def test_rating_only_changes_in_pairs(self, make_service, store, rng):
        """Test ratings outside the voted pair are untouched."""
        seed_items(store, 3, rng)
        service = make_service(store)

        service.record_vote("1", "2")

        assert store.get("items", "3")["rating"] == 1500
        assert store.get("items", "3")["total_votes"] == 0

    def test_unknown_items_created(self, make_service, store):
        """Test votes on unseen ids start from defaults."""
        service = make_service(store)

        outcome = service.record_vote("77", "88")

        assert outcome.winner.new_rating == 1516
        record = store.get("items", "77")
        assert record["display_name"] == "MetaHero #77"
        assert 0.0 <= record["random_key"] < 1.0

    def test_unknown_items_saved_without_placeholder_names(self, make_service, store):
        """Test items created while metadata is down keep no stand-in name."""
        service = make_service(store)
        service.items.metadata = StaticMetadataProvider(strict=True)

        service.record_vote("77", "88")

        record = store.get("items", "77")
        assert record["display_name"] is None
        assert record["total_votes"] == 1

    def test_caches_updated_after_write(self, make_service, store, caches, rng):
        """Test both tiers hold the new ratings."""
        seed_items(store, 2, rng)
        service = make_service(store)
        service.items.resolve("1")

        service.record_vote("1", "2")

        assert caches.memory.get("items", "1").rating == 1516
        assert caches.persistent.get("items", "2").rating == 1484

    def test_leaderboard_invalidated(self, make_service, store, caches, rng):
        """Test votes drop the current snapshot and keep the last good one."""
        seed_items(store, 2, rng)
        service = make_service(store)
        service.get_leaderboard()

        service.record_vote("1", "2")

        assert caches.read_stale("leaderboard", SNAPSHOT_KEY) is None
        assert caches.read_stale("leaderboard", LAST_GOOD_KEY) is not None

    def test_write_failure_leaves_caches(self, make_service, caches, rng):
        """Test a rejected write propagates and touches no tier."""
        store = RejectingStore()
        InMemoryEntityStore.atomic_write(store, {
            "items/1": {"id": "1", "rating": 1500, "random_key": 0.1},
            "items/2": {"id": "2", "rating": 1500, "random_key": 0.2},
        })
        service = make_service(store)
        service.items.resolve("1")
        caches.write_through("leaderboard", SNAPSHOT_KEY, "snapshot")

        with pytest.raises(StoreError):
            service.record_vote("1", "2", "session_1")

        assert caches.memory.get("items", "1").rating == 1500
        assert caches.read_stale("leaderboard", SNAPSHOT_KEY) == "snapshot"
        assert not service.selector.has_voted("session_1", "1", "2")

    def test_read_failure_propagates(self, make_service):
        """Test store read errors are not mistaken for absence."""
        service = make_service(UnreachableStore())

        with pytest.raises(StoreError):
            service.record_vote("1", "2")

    def test_ordinary_vote_writes_no_audit(self, make_service, store, rng):
        """Test ordinary callers never write session records."""
        seed_items(store, 2, rng)
        service = make_service(store)

        outcome = service.record_vote("1", "2", "session_1")

        assert outcome.audit_key is None
        assert store.count("vote-sessions") == 0

    def test_elevated_vote_writes_audit(self, make_service, store, rng, clock):
        """Test elevated callers get one audit record."""
        seed_items(store, 2, rng)
        service = make_service(store)

        outcome = service.record_vote("1", "2", "session_1", elevated=True)

        audit = store.get("vote-sessions", outcome.audit_key)
        assert store.count("vote-sessions") == 1
        assert audit["winner_id"] == "1"
        assert audit["voter_session_id"] == "session_1"
        assert audit["timestamp"] == clock()
        assert audit["rating_changes"] == {"winner_delta": 16, "loser_delta": -16}

    def test_self_vote_rejected(self, make_service, store):
        """Test an item cannot beat itself."""
        service = make_service(store)

        with pytest.raises(ValueError):
            service.record_vote("1", "1")

    def test_integrity_violation(self, make_service, store):
        """Test corrupt counters abort the vote before writing."""
        store.atomic_write({
            "items/1": {"id": "1", "rating": 1500, "wins": 1, "losses": 1, "total_votes": 5},
            "items/2": {"id": "2", "rating": 1500},
        })
        service = make_service(store)

        with pytest.raises(IntegrityViolation):
            service.record_vote("1", "2")

        assert store.get("items", "1")["rating"] == 1500
        assert store.get("items", "2").get("total_votes") is None

    def test_session_remembered(self, make_service, store, rng):
        """Test the voted pair is remembered for the session."""
        seed_items(store, 2, rng)
        service = make_service(store)

        service.record_vote("1", "2", "session_1")

        assert service.selector.has_voted("session_1", "2", "1")

    def test_vote_triggers_prefetch(self, make_service, store, rng, monkeypatch):
        """Test a completed vote tops up the pair buffer."""
        seed_items(store, 2, rng)
        service = make_service(store)
        calls = []
        monkeypatch.setattr(service.prefetcher, "ensure_buffered", lambda target=None: calls.append(target))

        service.record_vote("1", "2")

        assert calls == [None]

    def test_concurrent_votes_last_write_wins(self, make_service, store, rng, clock):
        """Test two processes voting from the same snapshot lose an update.

        There is no compare-and-swap: both read rating 1500 for item 1, and
        the later write overwrites the earlier one.
        """
        seed_items(store, 3, rng)
        first = make_service(store)
        second = make_service(
            store,
            service_caches=CachingService(MemoryCache(clock=clock), NullCache(), UsageMonitor()),
        )
        first.items.resolve("1")
        second.items.resolve("1")

        first.record_vote("1", "2")
        second.record_vote("1", "3")

        record = store.get("items", "1")
        assert record["rating"] == 1516
        assert record["wins"] == 1
        assert record["total_votes"] == 1
