"""HeroZero Migrations - One-Off Data Maintenance.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from herozero_core.store.entity import EntityStore, make_path

logger = logging.getLogger(__name__)


def backfill_random_keys(
    store: EntityStore,
    rng: Optional[random.Random] = None,
    collection: str = "items",
) -> int:
    """Give every item without a ``random_key`` a fresh one.

    Items created before random sampling existed are invisible to the
    random_key range queries until backfilled. Existing keys are never
    touched. All updates go out in one atomic write.

    Args:
        store: Entity store
        rng: Random source
        collection: Item collection

    Returns:
        Number of records updated
    """
    rng = rng or random.Random()
    updates = {}

    for key, record in store.scan(collection):
        if record.get("random_key") is not None:
            continue
        record["random_key"] = rng.random()
        updates[make_path(collection, key)] = record

    if not updates:
        logger.info(f"All {collection} already have random keys")
        return 0

    store.atomic_write(updates)
    logger.info(f"Backfilled random keys for {len(updates)} {collection}")
    return len(updates)


__all__ = ["backfill_random_keys"]
