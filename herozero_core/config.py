"""HeroZero Config - Engine Configuration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from herozero_core.metadata.provider import MetadataConfig
from herozero_core.rating.elo import DEFAULT_K_FACTOR, INITIAL_RATING
from herozero_core.store.redis import RedisConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "HEROZERO_"

MINUTE = 60.0
HOUR = 60 * MINUTE
DAY = 24 * HOUR


@dataclass
class HeroZeroConfig:
    """Engine configuration.

    All ages are in seconds.

    Attributes:
        k_factor: Elo K-factor
        initial_rating: Rating given to newly materialized items
        item_memory_max_age: Item freshness in the memory tier
        item_persistent_max_age: Item freshness in the persistent tier
        item_sweep_age: Age after which items are swept from disk
        leaderboard_max_age: Leaderboard snapshot TTL (both tiers)
        pair_max_age: Buffered pair TTL
        session_vote_max_age: How long a session remembers voted pairs
        memory_max_entries: Per-collection bound of the memory tier
        sweep_interval: Seconds between background expiry sweeps
        prefetch_target: Buffered pairs the prefetcher aims for
        range_limit: Items fetched by each random_key range query
        scan_limit: Items fetched by the unordered fallback scan
        max_item_id: Upper bound for generated external ids
        max_pair_attempts: Selections tried to avoid an already voted pair
        store_timeout: Timeout for entity store reads
        store_backend: "memory" or "redis"
        cache_dir: Persistent cache directory (None disables it)
        redis: Redis connection settings
        metadata: Metadata provider settings
    """

    k_factor: int = DEFAULT_K_FACTOR
    initial_rating: int = INITIAL_RATING
    item_memory_max_age: float = 30 * MINUTE
    item_persistent_max_age: float = HOUR
    item_sweep_age: float = DAY
    leaderboard_max_age: float = 5 * MINUTE
    pair_max_age: float = HOUR
    session_vote_max_age: float = DAY
    memory_max_entries: Optional[int] = 10000
    sweep_interval: float = 5 * MINUTE
    prefetch_target: int = 5
    range_limit: int = 10
    scan_limit: int = 20
    max_item_id: int = 10000
    max_pair_attempts: int = 10
    store_timeout: float = 10.0
    store_backend: str = "memory"
    cache_dir: Optional[str] = "~/.cache/herozero"
    redis: RedisConfig = field(default_factory=RedisConfig)
    metadata: MetadataConfig = field(default_factory=MetadataConfig)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "HeroZeroConfig":
        """Build configuration from HEROZERO_* environment variables.

        Args:
            dotenv_path: Optional .env file loaded first (never overrides)

        Returns:
            HeroZeroConfig instance
        """
        load_dotenv(dotenv_path, override=False)

        config = cls(
            k_factor=_get_int("K_FACTOR", DEFAULT_K_FACTOR),
            item_memory_max_age=_get_float("ITEM_MEMORY_MAX_AGE", 30 * MINUTE),
            item_persistent_max_age=_get_float("ITEM_PERSISTENT_MAX_AGE", HOUR),
            leaderboard_max_age=_get_float("LEADERBOARD_MAX_AGE", 5 * MINUTE),
            pair_max_age=_get_float("PAIR_MAX_AGE", HOUR),
            sweep_interval=_get_float("SWEEP_INTERVAL", 5 * MINUTE),
            prefetch_target=_get_int("PREFETCH_TARGET", 5),
            max_item_id=_get_int("MAX_ITEM_ID", 10000),
            store_timeout=_get_float("STORE_TIMEOUT", 10.0),
            store_backend=_get_str("STORE_BACKEND", "memory").lower(),
            cache_dir=_get_str("CACHE_DIR", "~/.cache/herozero") or None,
            redis=RedisConfig(
                host=_get_str("REDIS_HOST", "localhost"),
                port=_get_int("REDIS_PORT", 6379),
                db=_get_int("REDIS_DB", 0),
                password=_get_str("REDIS_PASSWORD", "") or None,
                prefix=_get_str("REDIS_PREFIX", "hz:"),
            ),
            metadata=MetadataConfig(
                base_url=_get_str("METADATA_BASE_URL", MetadataConfig.base_url),
                contract=_get_str("METADATA_CONTRACT", MetadataConfig.contract),
                api_key=_get_str("METADATA_API_KEY", "") or None,
            ),
        )
        config.redis.socket_timeout = config.store_timeout
        logger.debug(f"Loaded config: backend={config.store_backend}, cache_dir={config.cache_dir}")
        return config


def _get_str(name: str, default: str) -> str:
    return os.getenv(ENV_PREFIX + name, default)


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(ENV_PREFIX + name)
    try:
        return int(raw) if raw is not None else default
    except ValueError:
        logger.warning(f"Ignoring non-integer {ENV_PREFIX}{name}={raw!r}")
        return default


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(ENV_PREFIX + name)
    try:
        return float(raw) if raw is not None else default
    except ValueError:
        logger.warning(f"Ignoring non-numeric {ENV_PREFIX}{name}={raw!r}")
        return default


__all__ = ["HeroZeroConfig", "MINUTE", "HOUR", "DAY"]
