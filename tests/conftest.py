"""Shared fixtures.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import random

import pytest

from herozero_core.cache.file import FileCache
from herozero_core.cache.memory import MemoryCache
from herozero_core.cache.service import CachingService
from herozero_core.config import HeroZeroConfig
from herozero_core.engine.service import HeroZeroService
from herozero_core.errors import StoreError
from herozero_core.metadata.provider import StaticMetadataProvider
from herozero_core.metrics.collector import UsageMonitor
from herozero_core.models.item import Item, ItemMetadata
from herozero_core.store.entity import EntityStore, make_path
from herozero_core.store.memory import InMemoryEntityStore


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class UnreachableStore(EntityStore):
    """Store whose every call fails like a dead network."""

    def __init__(self):
        self.calls = 0

    def _fail(self):
        self.calls += 1
        raise StoreError("store unreachable")

    def get(self, collection, key):
        self._fail()

    def range_query(self, collection, order_field, gte=None, lte=None, limit=None, descending=False):
        self._fail()

    def scan(self, collection, limit=None):
        self._fail()

    def count(self, collection):
        self._fail()

    def atomic_write(self, updates):
        self._fail()


def seed_items(store, count, rng, now=1_700_000_000.0, start_id=1, **fields):
    """Write ``count`` items with metadata into ``store``."""
    items = []
    updates = {}
    for item_id in range(start_id, start_id + count):
        item = Item.create(
            str(item_id),
            metadata=ItemMetadata(display_name=f"Hero #{item_id}"),
            rng=rng,
            now=now,
        )
        record = item.to_record()
        record.update(fields)
        updates[make_path("items", item.id)] = record
        items.append(item)
    store.atomic_write(updates)
    return items


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def store():
    return InMemoryEntityStore()


@pytest.fixture
def caches(clock, rng, tmp_path):
    return CachingService(
        memory=MemoryCache(clock=clock, rng=rng),
        persistent=FileCache(str(tmp_path / "cache"), clock=clock, rng=rng),
        monitor=UsageMonitor(),
    )


@pytest.fixture
def make_service(caches, clock, rng):
    """Factory for services sharing the test clock and random source."""
    created = []

    def factory(store, service_caches=None, **overrides):
        overrides.setdefault("prefetch_target", 0)
        overrides.setdefault("cache_dir", None)
        service = HeroZeroService(
            store,
            service_caches or caches,
            StaticMetadataProvider(),
            config=HeroZeroConfig(**overrides),
            rng=rng,
            clock=clock,
        )
        created.append(service)
        return service

    yield factory

    for service in created:
        service.prefetcher.shutdown(wait=True)
