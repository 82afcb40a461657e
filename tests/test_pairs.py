"""Tests for pair selection.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from herozero_core.errors import PairUnavailableError, StoreError
from herozero_core.metadata.provider import StaticMetadataProvider
from herozero_core.models.item import Item, ItemMetadata
from herozero_core.models.pair import VotePair
from herozero_core.store.memory import InMemoryEntityStore

from conftest import UnreachableStore, seed_items


class NoRangeStore(InMemoryEntityStore):
    """Store whose indexed queries fail."""

    def range_query(self, *args, **kwargs):
        raise StoreError("index unavailable")


class TestPairSelector:
    """Tests for PairSelector."""

    def test_buffered_pair_needs_no_store(self, make_service, clock):
        """Test a buffered pair is served without touching the store."""
        store = UnreachableStore()
        service = make_service(store)
        pair = VotePair(Item(id="1"), Item(id="2"), created_at=clock())
        service.selector.buffer(pair)

        first, second = service.select_pair()

        assert {first.id, second.id} == {"1", "2"}
        assert store.calls == 0
        assert service.selector.buffered_count() == 0

    def test_stale_buffered_pair_ignored(self, make_service, store, rng, clock):
        """Test pairs older than the pair TTL are not served."""
        seed_items(store, 10, rng)
        service = make_service(store)
        service.selector.buffer(VotePair(Item(id="old1"), Item(id="old2"), created_at=clock()))
        clock.advance(3601)

        first, second = service.select_pair()

        assert "old1" not in (first.id, second.id)

    def test_random_sample(self, make_service, store, rng):
        """Test a pair comes from the store and extras are buffered."""
        seed_items(store, 30, rng)
        service = make_service(store)

        first, second = service.select_pair(prefer_prefetched=False)

        assert first.id != second.id
        assert store.get("items", first.id) is not None
        assert service.selector.buffered_count() >= 4

    def test_sampled_items_cached(self, make_service, store, caches, rng):
        """Test items read from the store land in both tiers."""
        seed_items(store, 10, rng)
        service = make_service(store)

        first, second = service.select_pair(prefer_prefetched=False)

        for item in (first, second):
            assert caches.memory.get("items", item.id) is not None
            assert caches.persistent.get("items", item.id) is not None

    def test_falls_back_to_scan(self, make_service, caches, rng):
        """Test a failing index query falls back to a scan."""
        store = NoRangeStore()
        seed_items(store, 5, rng)
        service = make_service(store)

        first, second = service.select_pair(prefer_prefetched=False)

        assert first.id != second.id
        assert caches.monitor.get_metrics().fallbacks["random_sample"] == 1

    def test_legacy_items_found_by_scan(self, make_service, store, rng):
        """Test items without random keys are still paired."""
        seed_items(store, 4, rng, random_key=None)
        service = make_service(store)

        first, second = service.select_pair(prefer_prefetched=False)

        assert {first.id, second.id} <= {"1", "2", "3", "4"}

    def test_empty_store_creates_items(self, make_service, store):
        """Test an empty pool is seeded with new items."""
        service = make_service(store)

        first, second = service.select_pair()

        assert first.id != second.id
        assert first.rating == second.rating == 1500
        assert first.total_votes == 0
        assert first.display_name == f"MetaHero #{first.id}"
        assert store.count("items") == 2
        assert 1 <= int(first.id) <= 10000

    def test_unreachable_store_still_pairs(self, make_service, caches):
        """Test the full fallback chain with a dead store."""
        service = make_service(UnreachableStore())

        first, second = service.select_pair()

        assert first.id != second.id
        assert first.rating == 1500
        # Items that could not be persisted are not cached.
        assert caches.memory.get("items", first.id) is None
        fallbacks = caches.monitor.get_metrics().fallbacks
        assert fallbacks["random_sample"] == 1
        assert fallbacks["scan"] == 1
        assert fallbacks["create_items"] == 1

    def test_pair_unavailable(self, make_service):
        """Test the error when even item creation cannot produce a pair."""
        service = make_service(UnreachableStore(), max_item_id=1)

        with pytest.raises(PairUnavailableError):
            service.select_pair()

    def test_malformed_records_fall_back_to_new_items(self, make_service, store, caches):
        """Test records that cannot be converted count as an empty sample."""
        store.atomic_write({
            f"items/x{i}": {"id": f"x{i}", "rating": 1500, "wins": "many", "random_key": i / 4}
            for i in range(4)
        })
        service = make_service(store)

        first, second = service.select_pair()

        assert first.id != second.id
        assert not {first.id, second.id} & {"x0", "x1", "x2", "x3"}
        fallbacks = caches.monitor.get_metrics().fallbacks
        assert fallbacks["random_sample"] == 1
        assert fallbacks["scan"] == 1
        assert fallbacks["create_items"] == 1

    def test_null_counters_sampled(self, make_service, store):
        """Test records with null counters are paired with zero counts."""
        store.atomic_write({
            f"items/{i}": {"id": str(i), "rating": None, "wins": None, "losses": None, "random_key": i / 4}
            for i in range(1, 4)
        })
        service = make_service(store)

        first, second = service.select_pair(prefer_prefetched=False)

        assert {first.id, second.id} <= {"1", "2", "3"}
        assert first.rating == 1500
        assert first.total_votes == 0

    def test_placeholder_names_not_persisted(self, make_service, store):
        """Test new items made while metadata is down get it on a later read."""
        provider = StaticMetadataProvider(strict=True)
        service = make_service(store)
        service.items.metadata = provider

        first, second = service.select_pair()

        assert first.display_name == f"MetaHero #{first.id}"
        assert store.get("items", first.id)["display_name"] is None
        assert provider.calls == 2

        provider.entries[first.id] = ItemMetadata(display_name="Captain Byte")
        item = service.items.get_or_create(first.id)

        assert item.display_name == "Captain Byte"
        assert provider.calls == 3

    def test_metadata_hydrated(self, make_service, store, rng):
        """Test items without metadata are hydrated before serving."""
        seed_items(store, 2, rng, display_name=None)
        service = make_service(store)

        first, second = service.select_pair(prefer_prefetched=False)

        assert first.display_name == f"MetaHero #{first.id}"
        assert second.has_metadata
        assert store.get("items", first.id)["display_name"] is None

    def test_session_skips_voted_pair(self, make_service, store, rng, monkeypatch):
        """Test a session's voted pair is retried up to the attempt limit."""
        seed_items(store, 2, rng)
        service = make_service(store, max_pair_attempts=3)
        service.selector.remember_vote("session_1", "2", "1")

        calls = []
        produce = service.selector.produce_pairs

        def counting_produce():
            calls.append(1)
            return produce()

        monkeypatch.setattr(service.selector, "produce_pairs", counting_produce)

        first, second = service.select_pair(prefer_prefetched=False, voter_session_id="session_1")

        assert {first.id, second.id} == {"1", "2"}
        assert len(calls) == 3

    def test_fresh_session_single_attempt(self, make_service, store, rng, monkeypatch):
        """Test an unvoted pair is served on the first attempt."""
        seed_items(store, 2, rng)
        service = make_service(store, max_pair_attempts=3)

        calls = []
        produce = service.selector.produce_pairs

        def counting_produce():
            calls.append(1)
            return produce()

        monkeypatch.setattr(service.selector, "produce_pairs", counting_produce)

        service.select_pair(prefer_prefetched=False, voter_session_id="session_2")

        assert len(calls) == 1

    def test_has_voted_is_order_independent(self, make_service, store):
        """Test session memory ignores pair order."""
        service = make_service(store)
        service.selector.remember_vote("s", "1", "2")

        assert service.selector.has_voted("s", "2", "1")
        assert not service.selector.has_voted("other", "1", "2")

    def test_buffer_consumption_triggers_refill(self, make_service, store, clock):
        """Test popping a buffered pair calls the refill hook."""
        service = make_service(store)
        triggered = []
        service.selector.on_buffer_consumed = lambda: triggered.append(1)
        service.selector.buffer(VotePair(Item(id="1"), Item(id="2"), created_at=clock()))

        service.select_pair()

        assert triggered == [1]
