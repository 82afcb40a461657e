"""HeroZero Vote - Vote Outcomes and Sessions.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from herozero_core.models.item import Item


@dataclass(frozen=True)
class ItemWithDelta:
    """Updated item plus its rating change."""

    item: Item
    delta: int

    @property
    def new_rating(self) -> int:
        """Rating after the vote."""
        return self.item.rating


@dataclass(frozen=True)
class VoteOutcome:
    """Result of a recorded vote.

    Attributes:
        winner: Updated winner and its delta
        loser: Updated loser and its delta
        audit_key: Key of the audit record (elevated callers only)
    """

    winner: ItemWithDelta
    loser: ItemWithDelta
    audit_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for display."""
        return {
            "winner": {"id": self.winner.item.id, "new_rating": self.winner.new_rating, "delta": self.winner.delta},
            "loser": {"id": self.loser.item.id, "new_rating": self.loser.new_rating, "delta": self.loser.delta},
        }


def new_session_id(rng: Optional[random.Random] = None, now: Optional[float] = None) -> str:
    """Generate an opaque voter session id.

    Format: ``session_<epoch ms>_<9 random base36 chars>``.
    """
    rng = rng or random.Random()
    now = time.time() if now is None else now
    alphabet = string.digits + string.ascii_lowercase
    suffix = "".join(rng.choice(alphabet) for _ in range(9))
    return f"session_{int(now * 1000)}_{suffix}"


__all__ = ["ItemWithDelta", "VoteOutcome", "new_session_id"]
