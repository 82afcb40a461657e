"""Eviction module - Memory tier eviction policies."""

from herozero_core.eviction.policy import EvictionPolicy, EvictionStats
from herozero_core.eviction.lru import LRUPolicy

__all__ = [
    "EvictionPolicy",
    "EvictionStats",
    "LRUPolicy",
]
