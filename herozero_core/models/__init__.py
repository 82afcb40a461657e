"""Models module - Items, pairs, leaderboard snapshots and vote outcomes."""

from herozero_core.models.item import Item, ItemMetadata
from herozero_core.models.pair import VotePair, pair_key
from herozero_core.models.leaderboard import LeaderboardEntry, LeaderboardSnapshot
from herozero_core.models.vote import ItemWithDelta, VoteOutcome, new_session_id

__all__ = [
    "Item",
    "ItemMetadata",
    "VotePair",
    "pair_key",
    "LeaderboardEntry",
    "LeaderboardSnapshot",
    "ItemWithDelta",
    "VoteOutcome",
    "new_session_id",
]
