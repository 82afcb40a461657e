"""Tests for the engine facade.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import fakeredis
import pytest

from herozero_core.cache.file import FileCache
from herozero_core.cache.null import NullCache
from herozero_core.config import HeroZeroConfig
from herozero_core.engine.service import HeroZeroService, build_entity_store, build_metadata_provider
from herozero_core.errors import StoreError
from herozero_core.metadata.provider import MetadataConfig, OpenSeaMetadataProvider, StaticMetadataProvider
from herozero_core.models.item import Item
from herozero_core.models.pair import VotePair
from herozero_core.store.guarded import GuardedEntityStore
from herozero_core.store.memory import InMemoryEntityStore
from herozero_core.store.redis import RedisEntityStore

from conftest import UnreachableStore, seed_items


def make_config(tmp_path, **overrides):
    overrides.setdefault("prefetch_target", 0)
    overrides.setdefault("cache_dir", str(tmp_path / "cache"))
    return HeroZeroConfig(**overrides)


class TestBuilders:
    """Tests for the configuration builders."""

    def test_memory_backend(self):
        """Test the in-memory backend."""
        assert isinstance(build_entity_store(HeroZeroConfig(store_backend="memory")), InMemoryEntityStore)

    def test_redis_backend(self):
        """Test the redis backend connects lazily."""
        store = build_entity_store(HeroZeroConfig(store_backend="redis"))

        assert isinstance(store, RedisEntityStore)

    def test_unknown_backend(self):
        """Test unknown backends are rejected."""
        with pytest.raises(ValueError):
            build_entity_store(HeroZeroConfig(store_backend="sqlite"))

    def test_metadata_without_key(self):
        """Test generated metadata is used without an API key."""
        assert isinstance(build_metadata_provider(HeroZeroConfig()), StaticMetadataProvider)

    def test_metadata_with_key(self):
        """Test OpenSea is used when an API key is configured."""
        config = HeroZeroConfig(metadata=MetadataConfig(api_key="secret"))

        provider = build_metadata_provider(config)

        assert isinstance(provider, OpenSeaMetadataProvider)
        provider.close()


class TestHeroZeroService:
    """Tests for HeroZeroService."""

    def test_from_config_wiring(self, tmp_path):
        """Test tiers and store wrapping."""
        service = HeroZeroService.from_config(make_config(tmp_path))

        assert isinstance(service.store, GuardedEntityStore)
        assert isinstance(service.caches.persistent, FileCache)
        assert service.caches.pair_buffer is service.caches.persistent
        service.stop()

    def test_no_cache_dir(self, tmp_path):
        """Test the engine runs without persistence."""
        service = HeroZeroService.from_config(make_config(tmp_path, cache_dir=None))

        assert isinstance(service.caches.persistent, NullCache)
        assert service.caches.pair_buffer is service.caches.memory

        first, second = service.select_pair()
        service.record_vote(first.id, second.id)
        assert service.get_leaderboard().total_count == 2
        service.stop()

    def test_full_flow(self, tmp_path, rng, clock):
        """Test pair, vote and leaderboard through the facade."""
        store = InMemoryEntityStore()
        seed_items(store, 10, rng)
        service = HeroZeroService.from_config(make_config(tmp_path), store=store, rng=rng, clock=clock)

        first, second = service.select_pair(voter_session_id="session_1")
        outcome = service.record_vote(first.id, second.id, "session_1")
        board = service.get_leaderboard(limit=3)

        assert outcome.winner.item.id == first.id
        assert board.top_items[0].item.id == first.id
        assert board.top_items[0].item.rating == 1516
        assert board.bottom_items[0].item.id == second.id
        assert board.total_count == 10

        usage = service.get_usage()
        assert usage.store_writes == 1
        assert usage.store_queries >= 3
        service.stop()

    def test_redis_flow(self, tmp_path, rng, clock):
        """Test the facade over the redis store."""
        store = RedisEntityStore(client=fakeredis.FakeRedis())
        seed_items(store, 4, rng)
        service = HeroZeroService.from_config(make_config(tmp_path), store=store, rng=rng, clock=clock)

        first, second = service.select_pair(prefer_prefetched=False)
        service.record_vote(second.id, first.id)

        assert store.get("items", second.id)["rating"] == 1516
        assert service.get_leaderboard().top_items[0].item.id == second.id
        service.stop()

    def test_unreachable_store(self, tmp_path, rng, clock):
        """Test degraded behaviour when the store is down."""
        service = HeroZeroService.from_config(
            make_config(tmp_path), store=UnreachableStore(), rng=rng, clock=clock,
        )

        first, second = service.select_pair()
        assert first.id != second.id
        assert service.get_leaderboard().is_empty

        with pytest.raises(StoreError):
            service.record_vote(first.id, second.id)
        assert service.get_usage().store_errors > 0
        service.stop()

    def test_context_manager(self, tmp_path, rng):
        """Test start and stop of background work."""
        store = InMemoryEntityStore()
        seed_items(store, 20, rng)
        config = make_config(tmp_path, prefetch_target=3)

        with HeroZeroService.from_config(config, store=store, rng=rng) as service:
            thread = service._sweeper_thread
            assert thread.is_alive()
            service.prefetcher.wait(timeout=5)
            assert service.selector.buffered_count() >= 3

        assert not thread.is_alive()
        assert service.ensure_buffered() is None

    def test_sweep_expired(self, make_service, store, clock):
        """Test every collection is swept with its own age."""
        service = make_service(store)
        service.caches.write_through("items", "1", Item(id="1"))
        service.selector.buffer(VotePair(Item(id="1"), Item(id="2"), created_at=clock()))
        service.selector.remember_vote("s", "1", "2")

        assert service.sweep_expired() == 0

        clock.advance(3601)
        # items: memory copy after 30 minutes; pairs after an hour
        assert service.sweep_expired() == 2
        assert service.caches.persistent.get("items", "1") is not None
        assert service.selector.has_voted("s", "1", "2")

        clock.advance(86400)
        assert service.sweep_expired() == 2
        assert service.caches.persistent.get("items", "1") is None

    def test_repr(self, make_service, store):
        """Test repr."""
        assert "HeroZeroService" in repr(make_service(store))
