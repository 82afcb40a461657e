"""Metrics module - Store usage and cache effectiveness."""

from herozero_core.metrics.collector import (
    UsageMonitor,
    UsageMetrics,
    Timer,
)

__all__ = [
    "UsageMonitor",
    "UsageMetrics",
    "Timer",
]
