"""Engine module - Pair selection, prefetching, votes and leaderboard."""

from herozero_core.engine.items import ItemRepository
from herozero_core.engine.pairs import PairSelector, session_vote_key
from herozero_core.engine.prefetch import Prefetcher, PrefetchStats
from herozero_core.engine.leaderboard import LeaderboardBuilder, SNAPSHOT_KEY, LAST_GOOD_KEY
from herozero_core.engine.votes import VoteRecorder, VOTE_SESSIONS
from herozero_core.engine.service import (
    HeroZeroService,
    build_entity_store,
    build_metadata_provider,
)

__all__ = [
    "ItemRepository",
    "PairSelector",
    "session_vote_key",
    "Prefetcher",
    "PrefetchStats",
    "LeaderboardBuilder",
    "SNAPSHOT_KEY",
    "LAST_GOOD_KEY",
    "VoteRecorder",
    "VOTE_SESSIONS",
    "HeroZeroService",
    "build_entity_store",
    "build_metadata_provider",
]
