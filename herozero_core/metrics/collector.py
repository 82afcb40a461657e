"""HeroZero Usage Monitor - Store Usage and Cache Effectiveness.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Tracks how hard the engine leans on the remote store (reads, range
queries, writes, estimated bandwidth) and how much the cache tiers absorb.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Any, Callable, DefaultDict, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)

# Rough per-operation overhead in bytes, on top of the payload size.
BASE_BANDWIDTH = {
    "read": 1024,
    "write": 512,
    "query": 2048,
}


def estimate_bandwidth(operation: str, payload: Any = None) -> int:
    """Estimate bytes transferred for a store operation.

    Args:
        operation: "read", "write" or "query"
        payload: Data sent or received

    Returns:
        Estimated bytes
    """
    size = BASE_BANDWIDTH.get(operation, 1024)
    if payload is not None:
        try:
            size += len(json.dumps(payload, default=str).encode("utf-8"))
        except (TypeError, ValueError):
            pass
    return size


@dataclass
class UsageMetrics:
    """Point-in-time usage snapshot.

    Attributes:
        store_reads: Point reads against the entity store
        store_queries: Range queries, scans and counts
        store_writes: Atomic writes
        store_errors: Failed or timed-out store calls
        bandwidth_bytes: Estimated bytes transferred
        cache_hits: Hits per tier name
        cache_misses: Misses per tier name
        fallbacks: Fallback paths taken, by name
        latency_avg_ms: Average store latency
        latency_p99_ms: P99 store latency
        started_at: When counting started
    """

    store_reads: int = 0
    store_queries: int = 0
    store_writes: int = 0
    store_errors: int = 0
    bandwidth_bytes: int = 0
    cache_hits: Dict[str, int] = field(default_factory=dict)
    cache_misses: Dict[str, int] = field(default_factory=dict)
    fallbacks: Dict[str, int] = field(default_factory=dict)
    latency_avg_ms: float = 0.0
    latency_p99_ms: float = 0.0
    started_at: float = 0.0

    def hit_rate(self, tier: Optional[str] = None) -> float:
        """Calculate hit rate for one tier or across all tiers."""
        if tier is None:
            hits = sum(self.cache_hits.values())
            misses = sum(self.cache_misses.values())
        else:
            hits = self.cache_hits.get(tier, 0)
            misses = self.cache_misses.get(tier, 0)
        total = hits + misses
        return hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "store_reads": self.store_reads,
            "store_queries": self.store_queries,
            "store_writes": self.store_writes,
            "store_errors": self.store_errors,
            "bandwidth_bytes": self.bandwidth_bytes,
            "cache_hits": dict(self.cache_hits),
            "cache_misses": dict(self.cache_misses),
            "fallbacks": dict(self.fallbacks),
            "hit_rate": self.hit_rate(),
            "latency_avg_ms": self.latency_avg_ms,
            "latency_p99_ms": self.latency_p99_ms,
            "started_at": self.started_at,
        }


class UsageMonitor:
    """Collects engine usage counters.

    Thread-safe; the prefetcher records from its worker thread.

    Example:
        monitor = UsageMonitor()
        monitor.record_read({"id": "7"})
        monitor.record_cache("memory", hit=True)
        print(monitor.get_metrics().hit_rate())
    """

    def __init__(self, latency_samples: int = 10000):
        """Initialize monitor.

        Args:
            latency_samples: Latency samples kept for avg/p99
        """
        self._lock = threading.RLock()
        self._latencies: Deque[float] = deque(maxlen=latency_samples)
        self._exporters: List[Callable[[UsageMetrics], None]] = []
        self._reset_counters()

    def _reset_counters(self) -> None:
        self._reads = 0
        self._queries = 0
        self._writes = 0
        self._errors = 0
        self._bandwidth = 0
        self._hits: DefaultDict[str, int] = defaultdict(int)
        self._misses: DefaultDict[str, int] = defaultdict(int)
        self._fallbacks: DefaultDict[str, int] = defaultdict(int)
        self._started_at = time.time()

    def record_read(self, payload: Any = None) -> None:
        """Record a point read."""
        with self._lock:
            self._reads += 1
            self._bandwidth += estimate_bandwidth("read", payload)

    def record_query(self, payload: Any = None) -> None:
        """Record a range query, scan or count."""
        with self._lock:
            self._queries += 1
            self._bandwidth += estimate_bandwidth("query", payload)

    def record_write(self, payload: Any = None) -> None:
        """Record an atomic write."""
        with self._lock:
            self._writes += 1
            self._bandwidth += estimate_bandwidth("write", payload)

    def record_error(self) -> None:
        """Record a failed store call."""
        with self._lock:
            self._errors += 1

    def record_cache(self, tier: str, hit: bool) -> None:
        """Record a cache lookup.

        Args:
            tier: Tier name ("memory", "persistent", ...)
            hit: Whether the lookup hit
        """
        with self._lock:
            if hit:
                self._hits[tier] += 1
            else:
                self._misses[tier] += 1

    def record_fallback(self, name: str) -> None:
        """Record that a fallback path was taken."""
        with self._lock:
            self._fallbacks[name] += 1

    def record_latency(self, ms: float) -> None:
        """Record store latency in milliseconds."""
        with self._lock:
            self._latencies.append(ms)

    def timer(self) -> "Timer":
        """Get a context manager that records elapsed time."""
        return Timer(self)

    def _latency_avg(self) -> float:
        if not self._latencies:
            return 0.0
        return sum(self._latencies) / len(self._latencies)

    def _latency_p99(self) -> float:
        if not self._latencies:
            return 0.0
        ordered = sorted(self._latencies)
        idx = int(len(ordered) * 0.99)
        return ordered[min(idx, len(ordered) - 1)]

    def get_metrics(self) -> UsageMetrics:
        """Get current metrics.

        Returns:
            UsageMetrics snapshot
        """
        with self._lock:
            return UsageMetrics(
                store_reads=self._reads,
                store_queries=self._queries,
                store_writes=self._writes,
                store_errors=self._errors,
                bandwidth_bytes=self._bandwidth,
                cache_hits=dict(self._hits),
                cache_misses=dict(self._misses),
                fallbacks=dict(self._fallbacks),
                latency_avg_ms=self._latency_avg(),
                latency_p99_ms=self._latency_p99(),
                started_at=self._started_at,
            )

    def reset(self) -> None:
        """Reset all counters."""
        with self._lock:
            self._reset_counters()
            self._latencies.clear()

    def add_exporter(self, exporter: Callable[[UsageMetrics], None]) -> None:
        """Add a callback that receives metrics on ``export()``."""
        self._exporters.append(exporter)

    def export(self) -> None:
        """Push metrics to all exporters."""
        metrics = self.get_metrics()
        for exporter in self._exporters:
            try:
                exporter(metrics)
            except Exception as e:
                logger.error(f"Exporter error: {e}")

    def to_prometheus(self) -> str:
        """Export metrics in Prometheus text format."""
        metrics = self.get_metrics()
        lines = [
            "# HELP herozero_store_reads_total Entity store point reads",
            "# TYPE herozero_store_reads_total counter",
            f"herozero_store_reads_total {metrics.store_reads}",
            "# HELP herozero_store_queries_total Entity store queries",
            "# TYPE herozero_store_queries_total counter",
            f"herozero_store_queries_total {metrics.store_queries}",
            "# HELP herozero_store_writes_total Entity store atomic writes",
            "# TYPE herozero_store_writes_total counter",
            f"herozero_store_writes_total {metrics.store_writes}",
            "# HELP herozero_store_errors_total Failed entity store calls",
            "# TYPE herozero_store_errors_total counter",
            f"herozero_store_errors_total {metrics.store_errors}",
            "# HELP herozero_bandwidth_bytes_total Estimated bytes transferred",
            "# TYPE herozero_bandwidth_bytes_total counter",
            f"herozero_bandwidth_bytes_total {metrics.bandwidth_bytes}",
            "# HELP herozero_cache_hits_total Cache hits by tier",
            "# TYPE herozero_cache_hits_total counter",
        ]
        for tier, count in sorted(metrics.cache_hits.items()):
            lines.append(f'herozero_cache_hits_total{{tier="{tier}"}} {count}')
        lines.extend([
            "# HELP herozero_cache_misses_total Cache misses by tier",
            "# TYPE herozero_cache_misses_total counter",
        ])
        for tier, count in sorted(metrics.cache_misses.items()):
            lines.append(f'herozero_cache_misses_total{{tier="{tier}"}} {count}')
        lines.extend([
            "# HELP herozero_store_latency_p99_ms P99 store latency",
            "# TYPE herozero_store_latency_p99_ms gauge",
            f"herozero_store_latency_p99_ms {metrics.latency_p99_ms:.2f}",
        ])
        return "\n".join(lines)

    def __repr__(self) -> str:
        metrics = self.get_metrics()
        return (
            f"UsageMonitor(reads={metrics.store_reads}, queries={metrics.store_queries}, "
            f"writes={metrics.store_writes})"
        )


class Timer:
    """Context manager for timing store calls."""

    def __init__(self, monitor: UsageMonitor):
        self._monitor = monitor
        self._start: float = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._monitor.record_latency((time.perf_counter() - self._start) * 1000)


__all__ = [
    "UsageMonitor",
    "UsageMetrics",
    "Timer",
    "estimate_bandwidth",
]
