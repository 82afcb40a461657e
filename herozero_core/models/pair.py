"""HeroZero Pair - Buffered Voting Pair.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Tuple

from herozero_core.models.item import Item


def pair_key(first_id: str, second_id: str) -> str:
    """Order-independent key for a pair of item ids."""
    low, high = sorted((str(first_id), str(second_id)))
    return f"{low}|{high}"


@dataclass(frozen=True)
class VotePair:
    """Two item snapshots ready to be shown for a vote.

    Attributes:
        first: Left item
        second: Right item
        created_at: When the pair was assembled
    """

    first: Item
    second: Item
    created_at: float = field(default_factory=time.time)

    @property
    def items(self) -> Tuple[Item, Item]:
        """Get both items as a tuple."""
        return (self.first, self.second)

    @property
    def key(self) -> str:
        """Order-independent pair key."""
        return pair_key(self.first.id, self.second.id)

    def __repr__(self) -> str:
        return f"VotePair({self.first.id!r}, {self.second.id!r})"


__all__ = ["VotePair", "pair_key"]
