"""HeroZero Redis Store - Redis Entity Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import redis

from herozero_core.errors import StoreError
from herozero_core.protocol.serializer import Serializer, get_serializer
from herozero_core.store.entity import EntityStore, Record, Row, split_path

logger = logging.getLogger(__name__)


def _default_indexes() -> Dict[str, List[str]]:
    return {"items": ["random_key", "rating"]}


@dataclass
class RedisConfig:
    """Redis-specific configuration.

    Attributes:
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout, also bounds writes
        socket_connect_timeout: Connection timeout
        ssl: Enable SSL
        ssl_ca_certs: CA certificates path
        max_connections: Connection pool size
        prefix: Key prefix
        indexed_fields: Numeric fields indexed per collection
    """

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 10.0
    socket_connect_timeout: float = 5.0
    ssl: bool = False
    ssl_ca_certs: Optional[str] = None
    max_connections: int = 10
    prefix: str = "hz:"
    indexed_fields: Dict[str, List[str]] = field(default_factory=_default_indexes)


class RedisEntityStore(EntityStore):
    """Redis entity store.

    Layout under ``prefix``:
    - ``data:<collection>:<key>``: record as JSON
    - ``idx:<collection>:_keys``: sorted set of all keys (score 0)
    - ``idx:<collection>:<field>``: sorted set scored by a numeric field

    Range queries walk the field index; ``atomic_write`` updates records
    and indexes in one MULTI/EXEC pipeline. Every redis failure surfaces
    as ``StoreError``.

    Example:
        store = RedisEntityStore(RedisConfig(host="redis.local"))
        store.atomic_write({"items/7": item.to_record()})
        top = store.range_query("items", "rating", limit=10, descending=True)
    """

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        client: Optional[Any] = None,
        serializer: Optional[Serializer] = None,
    ):
        """Initialize Redis store.

        Args:
            config: Redis configuration
            client: Pre-built client (skips pool creation)
            serializer: Record serializer (JSON by default)
        """
        self.config: RedisConfig = config or RedisConfig()
        self.serializer = serializer or get_serializer("json")
        self._client: Optional[Any] = client
        self._pool: Optional[redis.ConnectionPool] = None

    def _ensure_connected(self) -> Any:
        """Ensure Redis connection exists.

        Returns:
            Redis client
        """
        if self._client is not None:
            return self._client

        try:
            pool_kwargs: Dict[str, Any] = dict(
                host=self.config.host,
                port=self.config.port,
                db=self.config.db,
                password=self.config.password,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_connect_timeout,
                max_connections=self.config.max_connections,
            )
            if self.config.ssl:
                pool_kwargs["connection_class"] = redis.SSLConnection
                pool_kwargs["ssl_ca_certs"] = self.config.ssl_ca_certs

            self._pool = redis.ConnectionPool(**pool_kwargs)
            client = redis.Redis(connection_pool=self._pool)

            client.ping()
            logger.info(f"Connected to Redis at {self.config.host}:{self.config.port}")
            self._client = client
            return client

        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise StoreError(f"Redis connection failed: {e}") from e

    def _data_key(self, collection: str, key: str) -> str:
        return f"{self.config.prefix}data:{collection}:{key}"

    def _index_key(self, collection: str, name: str) -> str:
        return f"{self.config.prefix}idx:{collection}:{name}"

    def _indexes(self, collection: str) -> List[str]:
        return self.config.indexed_fields.get(collection, [])

    @staticmethod
    def _text(value: Any) -> str:
        return value.decode("utf-8") if isinstance(value, bytes) else value

    def _decode(self, raw: Any) -> Record:
        try:
            return self.serializer.deserialize(raw)
        except (TypeError, ValueError) as e:
            raise StoreError(f"Corrupt record in Redis: {e}") from e

    def _rows(self, client: Any, collection: str, members: List[Any]) -> List[Row]:
        if not members:
            return []
        keys = [self._text(m) for m in members]
        raws = client.mget([self._data_key(collection, k) for k in keys])
        return [(k, self._decode(raw)) for k, raw in zip(keys, raws) if raw is not None]

    def get(self, collection: str, key: str) -> Optional[Record]:
        try:
            raw = self._ensure_connected().get(self._data_key(collection, key))
        except redis.RedisError as e:
            raise StoreError(f"Redis get failed for {collection}/{key}: {e}") from e
        return self._decode(raw) if raw is not None else None

    def range_query(
        self,
        collection: str,
        order_field: str,
        gte: Optional[float] = None,
        lte: Optional[float] = None,
        limit: Optional[int] = None,
        descending: bool = False,
    ) -> List[Row]:
        if order_field not in self._indexes(collection):
            raise ValueError(f"Field {order_field!r} is not indexed for {collection}")

        low = gte if gte is not None else "-inf"
        high = lte if lte is not None else "+inf"
        paging: Dict[str, Any] = {"start": 0, "num": limit} if limit is not None else {}

        try:
            client = self._ensure_connected()
            index = self._index_key(collection, order_field)
            if descending:
                members = client.zrevrangebyscore(index, high, low, **paging)
            else:
                members = client.zrangebyscore(index, low, high, **paging)
            return self._rows(client, collection, members)
        except redis.RedisError as e:
            raise StoreError(f"Redis range query failed on {collection}.{order_field}: {e}") from e

    def scan(self, collection: str, limit: Optional[int] = None) -> List[Row]:
        end = -1 if limit is None else limit - 1
        if end < -1:
            return []
        try:
            client = self._ensure_connected()
            members = client.zrange(self._index_key(collection, "_keys"), 0, end)
            return self._rows(client, collection, members)
        except redis.RedisError as e:
            raise StoreError(f"Redis scan failed on {collection}: {e}") from e

    def count(self, collection: str) -> int:
        try:
            return int(self._ensure_connected().zcard(self._index_key(collection, "_keys")))
        except redis.RedisError as e:
            raise StoreError(f"Redis count failed on {collection}: {e}") from e

    def atomic_write(self, updates: Dict[str, Record]) -> None:
        staged = []
        for path, record in updates.items():
            collection, key = split_path(path)
            try:
                staged.append((collection, key, record, self.serializer.serialize(record)))
            except (TypeError, ValueError) as e:
                raise StoreError(f"Record {path} is not JSON serializable: {e}") from e

        try:
            pipe = self._ensure_connected().pipeline(transaction=True)
            for collection, key, record, payload in staged:
                pipe.set(self._data_key(collection, key), payload)
                pipe.zadd(self._index_key(collection, "_keys"), {key: 0})
                for name in self._indexes(collection):
                    value = record.get(name)
                    index = self._index_key(collection, name)
                    if isinstance(value, (int, float)) and not isinstance(value, bool):
                        pipe.zadd(index, {key: float(value)})
                    else:
                        pipe.zrem(index, key)
            pipe.execute()
        except redis.RedisError as e:
            logger.error(f"Redis atomic write of {len(staged)} records failed: {e}")
            raise StoreError(f"Redis atomic write failed: {e}") from e

    def close(self) -> None:
        """Close connection pool."""
        if self._pool is not None:
            self._pool.disconnect()
            self._pool = None
        self._client = None

    def __repr__(self) -> str:
        return f"RedisEntityStore(host={self.config.host}:{self.config.port}, prefix={self.config.prefix!r})"


__all__ = ["RedisEntityStore", "RedisConfig"]
