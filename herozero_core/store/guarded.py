"""HeroZero Guarded Store - Timeouts and Usage Accounting.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import concurrent.futures
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional

from herozero_core.errors import StoreError, StoreTimeoutError
from herozero_core.metrics.collector import UsageMonitor
from herozero_core.store.entity import EntityStore, Record, Row

logger = logging.getLogger(__name__)


class GuardedEntityStore(EntityStore):
    """Wraps an entity store with read timeouts and usage accounting.

    Reads run on a small worker pool and are abandoned after ``timeout``
    seconds with ``StoreTimeoutError``. Any other failure of the inner store
    is normalized to ``StoreError``. Writes run on the calling thread and
    are bounded by the backend's own socket timeout.

    Every call is counted on the ``UsageMonitor``.
    """

    def __init__(
        self,
        inner: EntityStore,
        timeout: float = 10.0,
        monitor: Optional[UsageMonitor] = None,
        max_workers: int = 4,
    ):
        """Initialize guarded store.

        Args:
            inner: Store to wrap
            timeout: Seconds before a read is abandoned
            monitor: Usage monitor
            max_workers: Read worker threads
        """
        self.inner = inner
        self.timeout = timeout
        self.monitor = monitor or UsageMonitor()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="herozero-store",
        )

    def _call(self, operation: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        future = self._executor.submit(fn, *args, **kwargs)
        try:
            with self.monitor.timer():
                return future.result(timeout=self.timeout)
        except concurrent.futures.TimeoutError as e:
            future.cancel()
            self.monitor.record_error()
            logger.warning(f"Store {operation} timed out after {self.timeout}s")
            raise StoreTimeoutError(f"{operation} timed out after {self.timeout}s") from e
        except StoreError:
            self.monitor.record_error()
            raise
        except ValueError:
            raise
        except Exception as e:
            self.monitor.record_error()
            logger.error(f"Store {operation} failed: {e}")
            raise StoreError(f"{operation} failed: {e}") from e

    def get(self, collection: str, key: str) -> Optional[Record]:
        record = self._call("get", self.inner.get, collection, key)
        self.monitor.record_read(record)
        return record

    def range_query(
        self,
        collection: str,
        order_field: str,
        gte: Optional[float] = None,
        lte: Optional[float] = None,
        limit: Optional[int] = None,
        descending: bool = False,
    ) -> List[Row]:
        rows = self._call(
            "range_query",
            self.inner.range_query,
            collection,
            order_field,
            gte=gte,
            lte=lte,
            limit=limit,
            descending=descending,
        )
        self.monitor.record_query([record for _, record in rows])
        return rows

    def scan(self, collection: str, limit: Optional[int] = None) -> List[Row]:
        rows = self._call("scan", self.inner.scan, collection, limit)
        self.monitor.record_query([record for _, record in rows])
        return rows

    def count(self, collection: str) -> int:
        result = self._call("count", self.inner.count, collection)
        self.monitor.record_query()
        return result

    def atomic_write(self, updates: Dict[str, Record]) -> None:
        try:
            with self.monitor.timer():
                self.inner.atomic_write(updates)
        except StoreError:
            self.monitor.record_error()
            raise
        self.monitor.record_write(updates)

    def close(self) -> None:
        self._executor.shutdown(wait=False)
        self.inner.close()

    def __repr__(self) -> str:
        return f"GuardedEntityStore(inner={self.inner!r}, timeout={self.timeout})"


__all__ = ["GuardedEntityStore"]
