"""Tests for the prefetcher.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import threading

from herozero_core.engine.prefetch import Prefetcher
from herozero_core.errors import StoreError
from herozero_core.models.item import Item
from herozero_core.models.pair import VotePair

from conftest import seed_items


class StubSelector:
    """Selector double with a controllable buffer."""

    def __init__(self, buffered=0, pairs=None, error=None, gate=None):
        self.buffered = buffered
        self.pairs = pairs or []
        self.error = error
        self.gate = gate
        self.received = []

    def buffered_count(self):
        return self.buffered

    def produce_pairs(self):
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return list(self.pairs)

    def buffer(self, pair):
        self.received.append(pair)
        return True


def make_pairs(count):
    return [VotePair(Item(id=str(2 * i)), Item(id=str(2 * i + 1))) for i in range(count)]


class TestPrefetcher:
    """Tests for Prefetcher."""

    def test_fills_buffer(self):
        """Test every produced pair is buffered."""
        selector = StubSelector(pairs=make_pairs(3))
        prefetcher = Prefetcher(selector, target_count=5)

        future = prefetcher.ensure_buffered()

        assert future.result(timeout=5) == 3
        assert len(selector.received) == 3
        assert prefetcher.get_stats().pairs_buffered == 3
        prefetcher.shutdown()

    def test_noop_when_full(self):
        """Test nothing is produced when the buffer is at target."""
        selector = StubSelector(buffered=5, pairs=make_pairs(3))
        prefetcher = Prefetcher(selector, target_count=5)

        assert prefetcher.ensure_buffered().result(timeout=5) == 0
        assert selector.received == []
        prefetcher.shutdown()

    def test_target_override(self):
        """Test a per-call target."""
        selector = StubSelector(buffered=2, pairs=make_pairs(1))
        prefetcher = Prefetcher(selector, target_count=5)

        assert prefetcher.ensure_buffered(target_count=2).result(timeout=5) == 0
        prefetcher.shutdown()

    def test_single_run_in_flight(self):
        """Test a call made during a run is skipped."""
        gate = threading.Event()
        selector = StubSelector(pairs=make_pairs(1), gate=gate)
        prefetcher = Prefetcher(selector, target_count=5)

        first = prefetcher.ensure_buffered()
        second = prefetcher.ensure_buffered()
        gate.set()

        assert first is not None
        assert second is None
        assert first.result(timeout=5) == 1
        assert prefetcher.get_stats().skipped == 1

        assert prefetcher.ensure_buffered() is not None
        prefetcher.shutdown()

    def test_errors_swallowed(self):
        """Test failures are logged, never raised."""
        selector = StubSelector(error=StoreError("down"))
        prefetcher = Prefetcher(selector, target_count=5)

        assert prefetcher.ensure_buffered().result(timeout=5) == 0
        assert prefetcher.get_stats().failures == 1
        prefetcher.shutdown()

    def test_after_shutdown(self):
        """Test calls after shutdown are ignored."""
        prefetcher = Prefetcher(StubSelector(), target_count=5)
        prefetcher.shutdown()

        assert prefetcher.ensure_buffered() is None

    def test_with_real_selector(self, make_service, store, rng):
        """Test prefetched pairs are served later without new queries."""
        seed_items(store, 30, rng)
        service = make_service(store, prefetch_target=5)

        added = service.ensure_buffered().result(timeout=5)
        service.prefetcher.wait(timeout=5)

        assert added >= 5
        assert service.selector.buffered_count() == added

        hits_before = service.monitor.get_metrics().cache_hits.get("pair_buffer", 0)
        service.select_pair()
        assert service.monitor.get_metrics().cache_hits["pair_buffer"] == hits_before + 1
