"""Store module - Authoritative entity stores.

This module provides the entity store contract and its backends:
- In-memory store
- Redis store
- Timeout and usage guard
"""

from herozero_core.store.entity import EntityStore, Record, Row, make_path, split_path
from herozero_core.store.memory import InMemoryEntityStore
from herozero_core.store.redis import RedisEntityStore, RedisConfig
from herozero_core.store.guarded import GuardedEntityStore
from herozero_core.store.migrate import backfill_random_keys

__all__ = [
    "EntityStore",
    "Record",
    "Row",
    "make_path",
    "split_path",
    "InMemoryEntityStore",
    "RedisEntityStore",
    "RedisConfig",
    "GuardedEntityStore",
    "backfill_random_keys",
]
