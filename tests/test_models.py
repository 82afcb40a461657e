"""Tests for domain models.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import random
import re

import pytest

from herozero_core.models.item import Item, ItemMetadata
from herozero_core.models.leaderboard import LeaderboardSnapshot
from herozero_core.models.pair import VotePair, pair_key
from herozero_core.models.vote import ItemWithDelta, VoteOutcome, new_session_id


class TestItem:
    """Tests for Item."""

    def test_create_defaults(self):
        """Test new items start unrated with a random key."""
        item = Item.create("5", metadata=ItemMetadata(display_name="Five"), rng=random.Random(1), now=100.0)

        assert item.rating == 1500
        assert (item.wins, item.losses, item.total_votes) == (0, 0, 0)
        assert 0.0 <= item.random_key < 1.0
        assert item.created_at == item.last_updated == 100.0
        assert item.has_metadata

    def test_record_round_trip(self):
        """Test conversion to and from store records."""
        item = Item.create("5", rng=random.Random(1), now=100.0).after_vote(True, 1516, 200.0)

        assert Item.from_record("5", item.to_record()) == item

    def test_legacy_record(self):
        """Test sparse records get default counters."""
        item = Item.from_record("9", {"rating": 1450, "wins": 2, "losses": 1})

        assert item.id == "9"
        assert item.total_votes == 3
        assert item.random_key is None
        assert not item.has_metadata
        assert item.is_consistent()

    def test_null_fields(self):
        """Test null counters and rating read as defaults."""
        item = Item.from_record("c", {"id": "c", "rating": 1700, "wins": None})

        assert (item.rating, item.wins, item.losses, item.total_votes) == (1700, 0, 0, 0)

        item = Item.from_record("d", {"id": None, "rating": None, "wins": 2, "losses": None,
                                      "total_votes": None, "created_at": None})

        assert item.id == "d"
        assert item.rating == 1500
        assert item.total_votes == 2
        assert item.created_at == 0.0
        assert item.is_consistent()

    def test_unconvertible_counter(self):
        """Test counters that are not numbers still raise."""
        with pytest.raises(ValueError):
            Item.from_record("c", {"wins": "many"})

    def test_after_vote(self):
        """Test counters move together."""
        item = Item(id="1").after_vote(False, 1484, 10.0)

        assert (item.rating, item.wins, item.losses, item.total_votes) == (1484, 0, 1, 1)
        assert item.is_consistent()

    def test_inconsistent(self):
        """Test the counter check."""
        assert not Item(id="1", wins=1, losses=0, total_votes=2).is_consistent()
        assert not Item(id="1", wins=-1, losses=1, total_votes=0).is_consistent()

    def test_with_metadata(self):
        """Test metadata fills descriptive fields only."""
        item = Item(id="1", rating=1600).with_metadata(ItemMetadata(display_name="One", traits=[{"v": 1}]))

        assert item.display_name == "One"
        assert item.traits == [{"v": 1}]
        assert item.rating == 1600


class TestVotePair:
    """Tests for VotePair."""

    def test_key_is_unordered(self):
        """Test both orders share a key."""
        assert pair_key("1", "2") == pair_key("2", "1")
        assert VotePair(Item(id="2"), Item(id="1")).key == pair_key("1", "2")

    def test_items(self):
        """Test items are returned in order."""
        first, second = VotePair(Item(id="a"), Item(id="b")).items

        assert (first.id, second.id) == ("a", "b")


class TestLeaderboardSnapshot:
    """Tests for LeaderboardSnapshot."""

    def test_ranks(self):
        """Test top ranks count down from 1 and bottom ranks from the total."""
        top = [Item(id="a", rating=1600), Item(id="b", rating=1550)]
        bottom = [Item(id="z", rating=1400), Item(id="y", rating=1450)]

        snapshot = LeaderboardSnapshot.build(top, bottom, total_count=50, built_at=1.0, limit=2)

        assert [e.rank for e in snapshot.top_items] == [1, 2]
        assert [e.rank for e in snapshot.bottom_items] == [50, 49]

    def test_truncated(self):
        """Test views are cut to the requested size."""
        items = [Item(id=str(i)) for i in range(5)]
        snapshot = LeaderboardSnapshot.build(items, items, total_count=5, built_at=1.0, limit=5)

        small = snapshot.truncated(2)

        assert len(small.top_items) == 2
        assert small.limit == 2
        assert small.built_at == 1.0
        assert snapshot.truncated(10) is snapshot

    def test_empty(self):
        """Test the never-built snapshot."""
        empty = LeaderboardSnapshot.empty()

        assert empty.is_empty
        assert empty.total_count == 0
        assert empty.to_dict()["top_items"] == []


class TestVoteOutcome:
    """Tests for vote results and sessions."""

    def test_to_dict(self):
        """Test display form."""
        outcome = VoteOutcome(
            winner=ItemWithDelta(Item(id="1", rating=1516), 16),
            loser=ItemWithDelta(Item(id="2", rating=1484), -16),
        )

        assert outcome.to_dict() == {
            "winner": {"id": "1", "new_rating": 1516, "delta": 16},
            "loser": {"id": "2", "new_rating": 1484, "delta": -16},
        }

    def test_session_id_format(self):
        """Test session ids carry a millisecond timestamp and a random suffix."""
        session = new_session_id(random.Random(3), now=1700000000.5)

        assert re.fullmatch(r"session_1700000000500_[0-9a-z]{9}", session)
        assert new_session_id(random.Random(3), now=1.0) != new_session_id(random.Random(4), now=1.0)
