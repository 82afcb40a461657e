"""HeroZero Item - Rated Collectible Record.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from herozero_core.rating.elo import INITIAL_RATING


def _present(value: Any, default: Any) -> Any:
    return default if value is None else value


@dataclass(frozen=True)
class ItemMetadata:
    """Descriptive metadata from the external provider.

    Attributes:
        display_name: Human readable name
        image_ref: Image URL
        external_ref: Link to the item on the external marketplace
        traits: Provider traits
        description: Free-text description
        placeholder: True when the provider failed and this is a stand-in
    """

    display_name: Optional[str] = None
    image_ref: Optional[str] = None
    external_ref: Optional[str] = None
    traits: List[Dict[str, Any]] = field(default_factory=list)
    description: str = ""
    placeholder: bool = False


@dataclass(frozen=True)
class Item:
    """One collectible in the voting pool.

    Items are immutable snapshots; every change produces a new instance.
    ``total_votes`` must equal ``wins + losses`` (see ``is_consistent``).

    Attributes:
        id: Stable external key
        rating: Elo rating
        wins: Votes won
        losses: Votes lost
        total_votes: wins + losses
        display_name: Name from the metadata provider
        image_ref: Image URL
        external_ref: External marketplace URL
        traits: Provider traits
        description: Provider description
        random_key: Uniform value in [0, 1) used for random sampling
        last_updated: Timestamp of the last mutation
        created_at: Creation timestamp
    """

    id: str
    rating: int = INITIAL_RATING
    wins: int = 0
    losses: int = 0
    total_votes: int = 0
    display_name: Optional[str] = None
    image_ref: Optional[str] = None
    external_ref: Optional[str] = None
    traits: List[Dict[str, Any]] = field(default_factory=list)
    description: str = ""
    random_key: Optional[float] = None
    last_updated: float = field(default_factory=time.time)
    created_at: float = field(default_factory=time.time)

    @classmethod
    def create(
        cls,
        item_id: str,
        metadata: Optional[ItemMetadata] = None,
        rng: Optional[random.Random] = None,
        now: Optional[float] = None,
        rating: int = INITIAL_RATING,
    ) -> "Item":
        """Create a brand-new item with default stats.

        Args:
            item_id: External id
            metadata: Provider metadata
            rng: Random source for ``random_key``
            now: Creation timestamp
            rating: Initial rating

        Returns:
            New Item
        """
        now = time.time() if now is None else now
        metadata = metadata or ItemMetadata()
        return cls(
            id=str(item_id),
            rating=rating,
            display_name=metadata.display_name,
            image_ref=metadata.image_ref,
            external_ref=metadata.external_ref,
            traits=list(metadata.traits),
            description=metadata.description,
            random_key=(rng or random).random(),
            last_updated=now,
            created_at=now,
        )

    @property
    def has_metadata(self) -> bool:
        """Check if descriptive metadata is populated."""
        return self.display_name is not None

    def is_consistent(self) -> bool:
        """Check the vote counter invariant."""
        return (
            self.wins >= 0
            and self.losses >= 0
            and self.total_votes == self.wins + self.losses
        )

    def with_metadata(self, metadata: ItemMetadata) -> "Item":
        """Fill in descriptive metadata.

        Args:
            metadata: Provider metadata

        Returns:
            New Item
        """
        return replace(
            self,
            display_name=metadata.display_name,
            image_ref=metadata.image_ref,
            external_ref=metadata.external_ref,
            traits=list(metadata.traits),
            description=metadata.description,
        )

    def after_vote(self, won: bool, new_rating: int, now: float) -> "Item":
        """Apply one vote outcome.

        Args:
            won: Whether this item won
            new_rating: Rating computed by the Elo engine
            now: Update timestamp

        Returns:
            New Item
        """
        return replace(
            self,
            rating=new_rating,
            wins=self.wins + (1 if won else 0),
            losses=self.losses + (0 if won else 1),
            total_votes=self.total_votes + 1,
            last_updated=now,
        )

    def to_record(self) -> Dict[str, Any]:
        """Convert to an entity store record."""
        return {
            "id": self.id,
            "rating": self.rating,
            "wins": self.wins,
            "losses": self.losses,
            "total_votes": self.total_votes,
            "display_name": self.display_name,
            "image_ref": self.image_ref,
            "external_ref": self.external_ref,
            "traits": list(self.traits),
            "description": self.description,
            "random_key": self.random_key,
            "last_updated": self.last_updated,
            "created_at": self.created_at,
        }

    @classmethod
    def from_record(cls, key: str, data: Dict[str, Any]) -> "Item":
        """Create from an entity store record.

        Missing or null counters default to zero; a missing ``random_key`` stays
        missing until backfilled.

        Args:
            key: Store key
            data: Record

        Returns:
            Item instance
        """
        wins = int(data.get("wins") or 0)
        losses = int(data.get("losses") or 0)
        return cls(
            id=str(data.get("id") or key),
            rating=int(_present(data.get("rating"), INITIAL_RATING)),
            wins=wins,
            losses=losses,
            total_votes=int(_present(data.get("total_votes"), wins + losses)),
            display_name=data.get("display_name"),
            image_ref=data.get("image_ref"),
            external_ref=data.get("external_ref"),
            traits=list(data.get("traits") or []),
            description=data.get("description") or "",
            random_key=data.get("random_key"),
            last_updated=data.get("last_updated") or 0.0,
            created_at=data.get("created_at") or 0.0,
        )

    def __repr__(self) -> str:
        return f"Item(id={self.id!r}, rating={self.rating}, w={self.wins}, l={self.losses})"


__all__ = ["Item", "ItemMetadata"]
