"""Cache module - Memory and persistent cache tiers.

This module provides the tier contract, its implementations and the
service that reads through them in order.
"""

from herozero_core.cache.record import CacheRecord
from herozero_core.cache.tier import CacheTier, TierStats
from herozero_core.cache.memory import MemoryCache
from herozero_core.cache.null import NullCache
from herozero_core.cache.file import FileCache, probe_persistent_cache
from herozero_core.cache.strategy import ReadStrategy, ReadResult, read_through
from herozero_core.cache.service import (
    CachingService,
    CachePolicy,
    ITEMS,
    LEADERBOARD,
    PAIRS,
    SESSION_VOTES,
)

__all__ = [
    "CacheRecord",
    "CacheTier",
    "TierStats",
    "MemoryCache",
    "NullCache",
    "FileCache",
    "probe_persistent_cache",
    "ReadStrategy",
    "ReadResult",
    "read_through",
    "CachingService",
    "CachePolicy",
    "ITEMS",
    "LEADERBOARD",
    "PAIRS",
    "SESSION_VOTES",
]
