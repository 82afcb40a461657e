"""HeroZero Prefetcher - Background Pair Buffering.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from herozero_core.engine.pairs import PairSelector

logger = logging.getLogger(__name__)


@dataclass
class PrefetchStats:
    """Prefetch statistics.

    Attributes:
        runs: Runs started
        skipped: Calls skipped because a run was in flight
        pairs_buffered: Pairs added to the buffer
        failures: Runs that failed
    """

    runs: int = 0
    skipped: int = 0
    pairs_buffered: int = 0
    failures: int = 0


class Prefetcher:
    """Keeps the pair buffer topped up in the background.

    ``ensure_buffered`` is fire-and-forget: it never raises and never
    blocks on the network. At most one run is in flight at a time; calls
    made while one runs are skipped.

    Example:
        prefetcher = Prefetcher(selector, target_count=5)
        prefetcher.ensure_buffered()
        prefetcher.shutdown()
    """

    def __init__(self, selector: PairSelector, target_count: int = 5):
        """Initialize prefetcher.

        Args:
            selector: Pair selector used to produce and buffer pairs
            target_count: Fresh buffered pairs to aim for
        """
        self.selector = selector
        self.target_count = target_count
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="herozero-prefetch")
        self._lock = threading.Lock()
        self._inflight: Optional[Future] = None
        self._stats = PrefetchStats()

    def ensure_buffered(self, target_count: Optional[int] = None) -> Optional[Future]:
        """Start a background run if the buffer is short.

        Args:
            target_count: Override of the buffer target

        Returns:
            Future resolving to pairs buffered, or None if skipped
        """
        target = self.target_count if target_count is None else target_count
        with self._lock:
            if self._inflight is not None and not self._inflight.done():
                self._stats.skipped += 1
                return None
            try:
                self._inflight = self._executor.submit(self._run, target)
            except RuntimeError as e:
                logger.debug(f"Prefetch not scheduled: {e}")
                return None
            self._stats.runs += 1
            return self._inflight

    def _run(self, target: int) -> int:
        try:
            buffered = self.selector.buffered_count()
            if buffered >= target:
                logger.debug(f"Pair buffer full ({buffered}/{target})")
                return 0

            added = 0
            for pair in self.selector.produce_pairs():
                if self.selector.buffer(pair):
                    added += 1

            with self._lock:
                self._stats.pairs_buffered += added
            logger.info(f"Prefetched {added} pairs (buffer had {buffered})")
            return added

        except Exception as e:
            with self._lock:
                self._stats.failures += 1
            logger.error(f"Prefetch failed: {e}")
            return 0

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the in-flight run, if any, finishes."""
        inflight = self._inflight
        if inflight is not None:
            inflight.result(timeout=timeout)

    def get_stats(self) -> PrefetchStats:
        """Get prefetch statistics."""
        return self._stats

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting runs."""
        self._executor.shutdown(wait=wait)

    def __repr__(self) -> str:
        return f"Prefetcher(target={self.target_count}, runs={self._stats.runs})"


__all__ = ["Prefetcher", "PrefetchStats"]
