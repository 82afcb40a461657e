"""HeroZero - Pairwise Voting Rating Engine.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

The rating, pairing and caching engine behind the "Hero or Zero" game:
- Elo rating updates for pairwise votes
- Random pair selection with layered fallbacks
- Background prefetching of voting pairs
- Votes recorded as one atomic multi-record write
- Short-TTL leaderboard that serves stale data on failure
- Memory and persistent cache tiers in front of a remote entity store
- Store usage monitoring

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                        HeroZero Engine                          │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │    Pair     │  │    Vote     │  │ Leaderboard │   ENGINE    │
    │  │  Selector   │  │  Recorder   │  │   Builder   │   LAYER     │
    │  └──────┬──────┘  └──────┬──────┘  └──────┬──────┘             │
    │         │  Prefetcher    │    Elo         │                     │
    │  ┌──────┴────────────────┴────────────────┴──────┐             │
    │  │              Caching Service                   │             │
    │  │   ┌────────┐  ┌────────────┐  ┌──────┐        │   CACHE     │
    │  │   │ Memory │  │ Persistent │  │ Null │        │   LAYER     │
    │  │   └────────┘  └────────────┘  └──────┘        │             │
    │  └──────────────────────┬────────────────────────┘             │
    │                         │                                       │
    │  ┌──────────────────────┴────────────────────────┐             │
    │  │         Entity Store (timeout guarded)         │             │
    │  │   ┌────────┐  ┌────────┐                      │   STORE     │
    │  │   │ Memory │  │ Redis  │                      │   LAYER     │
    │  │   └────────┘  └────────┘                      │             │
    │  └───────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from herozero_core import HeroZeroConfig, HeroZeroService, new_session_id

    config = HeroZeroConfig.from_env()
    with HeroZeroService.from_config(config) as service:
        session = new_session_id()
        first, second = service.select_pair(voter_session_id=session)
        outcome = service.record_vote(first.id, second.id, session)
        print(outcome.winner.delta, outcome.loser.delta)

        board = service.get_leaderboard(limit=10)
        print(service.get_usage().to_dict())
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from herozero_core.errors import (
    HeroZeroError,
    StoreError,
    StoreTimeoutError,
    IntegrityViolation,
    PairUnavailableError,
    MetadataError,
)
from herozero_core.config import HeroZeroConfig
from herozero_core.rating.elo import (
    INITIAL_RATING,
    DEFAULT_K_FACTOR,
    MatchResult,
    expected_score,
    apply_match_result,
)
from herozero_core.models import (
    Item,
    ItemMetadata,
    VotePair,
    LeaderboardEntry,
    LeaderboardSnapshot,
    ItemWithDelta,
    VoteOutcome,
    new_session_id,
)
from herozero_core.cache import (
    CacheTier,
    MemoryCache,
    FileCache,
    NullCache,
    CachingService,
    probe_persistent_cache,
)
from herozero_core.store import (
    EntityStore,
    InMemoryEntityStore,
    RedisEntityStore,
    RedisConfig,
    GuardedEntityStore,
    backfill_random_keys,
)
from herozero_core.metadata import (
    MetadataConfig,
    MetadataProvider,
    OpenSeaMetadataProvider,
    StaticMetadataProvider,
)
from herozero_core.metrics.collector import UsageMonitor, UsageMetrics
from herozero_core.engine import (
    HeroZeroService,
    PairSelector,
    Prefetcher,
    VoteRecorder,
    LeaderboardBuilder,
)

__all__ = [
    # Errors
    "HeroZeroError",
    "StoreError",
    "StoreTimeoutError",
    "IntegrityViolation",
    "PairUnavailableError",
    "MetadataError",
    # Config
    "HeroZeroConfig",
    # Rating
    "INITIAL_RATING",
    "DEFAULT_K_FACTOR",
    "MatchResult",
    "expected_score",
    "apply_match_result",
    # Models
    "Item",
    "ItemMetadata",
    "VotePair",
    "LeaderboardEntry",
    "LeaderboardSnapshot",
    "ItemWithDelta",
    "VoteOutcome",
    "new_session_id",
    # Cache
    "CacheTier",
    "MemoryCache",
    "FileCache",
    "NullCache",
    "CachingService",
    "probe_persistent_cache",
    # Store
    "EntityStore",
    "InMemoryEntityStore",
    "RedisEntityStore",
    "RedisConfig",
    "GuardedEntityStore",
    "backfill_random_keys",
    # Metadata
    "MetadataConfig",
    "MetadataProvider",
    "OpenSeaMetadataProvider",
    "StaticMetadataProvider",
    # Metrics
    "UsageMonitor",
    "UsageMetrics",
    # Engine
    "HeroZeroService",
    "PairSelector",
    "Prefetcher",
    "VoteRecorder",
    "LeaderboardBuilder",
]
