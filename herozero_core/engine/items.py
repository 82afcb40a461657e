"""HeroZero Item Repository - Tiered Item Reads and Lazy Creation.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, List, Optional

from herozero_core.cache.service import ITEMS, CachePolicy, CachingService
from herozero_core.cache.strategy import ReadStrategy, read_through
from herozero_core.errors import StoreError
from herozero_core.metadata.provider import MetadataProvider, StaticMetadataProvider
from herozero_core.models.item import Item, ItemMetadata
from herozero_core.rating.elo import INITIAL_RATING
from herozero_core.store.entity import EntityStore, Row, make_path

logger = logging.getLogger(__name__)

STORE_SOURCE = "store"


class ItemRepository:
    """Reads items through memory, persistent cache and entity store.

    Items are created lazily: the first reference to an unknown id builds a
    default item (rating 1500, no votes) with metadata from the provider.

    Example:
        items = ItemRepository(store, caches, provider)
        item = items.resolve("42")
        item = items.get_or_create("42")
    """

    def __init__(
        self,
        store: EntityStore,
        caches: CachingService,
        metadata: Optional[MetadataProvider] = None,
        policy: Optional[CachePolicy] = None,
        initial_rating: int = INITIAL_RATING,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize repository.

        Args:
            store: Entity store
            caches: Memory and persistent tiers
            metadata: Metadata provider
            policy: Item freshness rules
            initial_rating: Rating of newly created items
            rng: Random source for random keys
            clock: Time source
        """
        self.store = store
        self.caches = caches
        self.metadata = metadata or StaticMetadataProvider()
        self.policy = policy or CachePolicy(ITEMS, 30 * 60.0, 60 * 60.0)
        self.initial_rating = initial_rating
        self._rng = rng or random.Random()
        self._clock = clock or time.time

    def _load(self, key: str) -> Optional[Item]:
        record = self.store.get(ITEMS, key)
        return Item.from_record(key, record) if record is not None else None

    def resolve(self, item_id: str, tolerate_store_errors: bool = False) -> Optional[Item]:
        """Read an item memory first, then persistent, then the store.

        A store hit is written through both cache tiers.

        Args:
            item_id: Item id
            tolerate_store_errors: Treat StoreError as a miss

        Returns:
            Item or None if no tier has it

        Raises:
            StoreError: If the store fails and errors are not tolerated
        """
        strategies: List[ReadStrategy] = self.caches.strategies(self.policy)
        strategies.append(ReadStrategy(
            name=STORE_SOURCE,
            read=self._load,
            catch=(StoreError,) if tolerate_store_errors else (),
        ))
        result = read_through(str(item_id), strategies)
        if result.source == STORE_SOURCE:
            logger.debug(f"Item {item_id} loaded from store")
        return result.value

    def remember(self, item: Item) -> None:
        """Write an item through both cache tiers."""
        self.caches.write_through(ITEMS, item.id, item)

    def remember_rows(self, rows: List[Row]) -> List[Item]:
        """Convert store rows to items and cache them.

        Returns:
            Items in row order
        """
        items = []
        for key, record in rows:
            item = Item.from_record(key, record)
            self.remember(item)
            items.append(item)
        return items

    def new_item(self, item_id: str, metadata: Optional[ItemMetadata] = None) -> Item:
        """Build a default item with provider metadata, without persisting it.

        Placeholder metadata is left off, so the stored record keeps no
        descriptive fields and ``hydrate`` asks the provider again later.

        Args:
            item_id: Item id
            metadata: Already fetched metadata, fetched here when omitted

        Returns:
            Item
        """
        if metadata is None:
            metadata = self.metadata.safe_fetch(str(item_id))
        return Item.create(
            str(item_id),
            metadata=None if metadata.placeholder else metadata,
            rng=self._rng,
            now=self._clock(),
            rating=self.initial_rating,
        )

    def get_or_create(self, item_id: str) -> Item:
        """Get an item, creating and persisting it when absent.

        Persisting is best-effort: when the store write fails the new item
        is still returned but not cached, so the next read retries the store.

        Args:
            item_id: Item id

        Returns:
            Item
        """
        item = self.resolve(item_id, tolerate_store_errors=True)
        if item is not None:
            return self.hydrate(item)

        metadata = self.metadata.safe_fetch(str(item_id))
        item = self.new_item(item_id, metadata)
        try:
            self.store.atomic_write({make_path(ITEMS, item.id): item.to_record()})
        except StoreError as e:
            logger.warning(f"Could not persist new item {item.id}: {e}")
            return item.with_metadata(metadata)

        self.remember(item)
        logger.info(f"Created item {item.id}")
        # Placeholder names are for display only
        return item.with_metadata(metadata) if metadata.placeholder else item

    def hydrate(self, item: Item) -> Item:
        """Fill in missing metadata from the provider.

        Hydrated items are cached but not written to the store; the next
        vote on the item persists the metadata with it. Placeholder
        metadata is never cached, so a later read retries the provider.
        """
        if item.has_metadata:
            return item
        metadata = self.metadata.safe_fetch(item.id)
        hydrated = item.with_metadata(metadata)
        if not metadata.placeholder:
            self.remember(hydrated)
        return hydrated

    def __repr__(self) -> str:
        return f"ItemRepository(store={self.store!r})"


__all__ = ["ItemRepository"]
