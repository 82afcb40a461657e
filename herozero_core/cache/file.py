"""HeroZero File Cache - Durable Local Cache Tier.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import hashlib
import logging
import os
import random
import re
import shutil
import threading
import uuid
from pathlib import Path
from typing import Any, Iterator, List, Optional

from herozero_core.cache.null import NullCache
from herozero_core.cache.record import CacheRecord
from herozero_core.cache.tier import CacheTier, Clock
from herozero_core.protocol.serializer import Serializer, get_serializer

logger = logging.getLogger(__name__)

_COLLECTION_RE = re.compile(r"^[A-Za-z0-9_\-]+$")
_TEMP_MARK = ".tmp-"
_CLAIM_MARK = ".claim-"


class FileCache(CacheTier):
    """File-based persistent cache tier.

    Each collection is a directory sharded by the first byte of the key
    hash. Records are written to a temp file and renamed into place, so
    readers never see partial files. ``pop`` claims an entry by renaming
    it; ``os.rename`` succeeds for exactly one claimant, which keeps the
    pair buffer free of double-serving even across processes.

    Every I/O failure is logged and reported as a miss or a no-op; callers
    never see an exception from this tier.

    Example:
        cache = FileCache("~/.cache/herozero")
        cache.push("pairs", pair)
        pair = cache.pop("pairs", max_age=3600)
    """

    name = "persistent"

    def __init__(
        self,
        base_path: str,
        serializer: Optional[Serializer] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize file cache.

        Args:
            base_path: Root directory for all collections
            serializer: Record serializer (pickle by default)
            clock: Time source
            rng: Random source for ``pop``
        """
        super().__init__(clock)
        self.base_path = Path(os.path.expanduser(base_path))
        self.serializer = serializer or get_serializer("pickle")
        self._rng = rng or random.Random()
        self._lock = threading.RLock()

        self.base_path.mkdir(parents=True, exist_ok=True)

    def _collection_dir(self, collection: str) -> Path:
        if not _COLLECTION_RE.match(collection):
            raise ValueError(f"Invalid collection name: {collection!r}")
        return self.base_path / collection

    def _get_path(self, collection: str, key: str) -> Path:
        digest = hashlib.sha256(key.encode()).hexdigest()
        return self._collection_dir(collection) / digest[:2] / digest

    def _entry_files(self, collection: str) -> Iterator[Path]:
        directory = self._collection_dir(collection)
        if not directory.is_dir():
            return
        for shard_dir in directory.iterdir():
            if not shard_dir.is_dir():
                continue
            for file_path in shard_dir.iterdir():
                if file_path.is_file() and _TEMP_MARK not in file_path.name and _CLAIM_MARK not in file_path.name:
                    yield file_path

    def _read(self, path: Path) -> CacheRecord:
        with open(path, "rb") as f:
            return CacheRecord.from_dict(self.serializer.deserialize(f.read()))

    def _fail(self, action: str, target: str, error: Exception) -> None:
        logger.error(f"File cache {action} failed for {target}: {error}")
        self._stats.record_error(str(error))

    def put(self, collection: str, key: str, value: Any) -> bool:
        try:
            path = self._get_path(collection, key)
        except ValueError as e:
            self._fail("put", collection, e)
            return False
        temp_path = path.with_name(f"{path.name}{_TEMP_MARK}{uuid.uuid4().hex}")

        try:
            record = CacheRecord(key=key, value=value, cached_at=self.now())
            data = self.serializer.serialize(record.to_dict())
            with self._lock:
                path.parent.mkdir(parents=True, exist_ok=True)
                with open(temp_path, "wb") as f:
                    f.write(data)
                os.replace(temp_path, path)
                self._stats.writes += 1
            return True

        except Exception as e:
            self._fail("put", f"{collection}/{key}", e)
            try:
                temp_path.unlink()
            except OSError:
                pass
            return False

    def get_record(self, collection: str, key: str) -> Optional[CacheRecord]:
        try:
            path = self._get_path(collection, key)
            with self._lock:
                self._stats.reads += 1
                if not path.exists():
                    return None
                return self._read(path)

        except Exception as e:
            self._fail("get", f"{collection}/{key}", e)
            return None

    def delete(self, collection: str, key: str) -> bool:
        try:
            path = self._get_path(collection, key)
            with self._lock:
                if not path.exists():
                    return False
                path.unlink()
                self._stats.deletes += 1
                return True

        except FileNotFoundError:
            return False
        except Exception as e:
            self._fail("delete", f"{collection}/{key}", e)
            return False

    def clear(self, collection: str) -> int:
        try:
            with self._lock:
                count = sum(1 for _ in self._entry_files(collection))
                directory = self._collection_dir(collection)
                if directory.is_dir():
                    shutil.rmtree(directory)
                return count

        except Exception as e:
            self._fail("clear", collection, e)
            return 0

    def keys(self, collection: str) -> List[str]:
        # Filenames are hashes, so every file has to be opened to recover its key.
        keys = []
        try:
            for file_path in self._entry_files(collection):
                try:
                    keys.append(self._read(file_path).key)
                except FileNotFoundError:
                    continue
                except Exception as e:
                    self._fail("read", str(file_path), e)
        except Exception as e:
            self._fail("keys", collection, e)
        return keys

    def pop(self, collection: str, max_age: Optional[float] = None) -> Optional[Any]:
        try:
            candidates = list(self._entry_files(collection))
        except Exception as e:
            self._fail("pop", collection, e)
            return None

        self._rng.shuffle(candidates)
        now = self.now()

        for path in candidates:
            claim = path.with_name(f"{path.name}{_CLAIM_MARK}{uuid.uuid4().hex}")
            try:
                with self._lock:
                    os.rename(path, claim)
            except FileNotFoundError:
                # Another consumer claimed it first.
                continue
            except OSError as e:
                self._fail("claim", str(path), e)
                continue

            try:
                record = self._read(claim)
            except Exception as e:
                self._fail("read", str(claim), e)
                continue
            finally:
                try:
                    claim.unlink()
                except OSError:
                    pass

            if record.is_fresh(max_age, now):
                self._stats.deletes += 1
                return record.value

            self._stats.expired += 1
            logger.debug(f"Dropped stale {collection} entry {record.key}")

        return None

    def size(self, collection: str, max_age: Optional[float] = None) -> int:
        if max_age is not None:
            return super().size(collection, max_age)
        try:
            return sum(1 for _ in self._entry_files(collection))
        except Exception as e:
            self._fail("size", collection, e)
            return 0

    def disk_usage(self) -> int:
        """Get total bytes used under ``base_path``."""
        total = 0
        for root, _dirs, files in os.walk(self.base_path):
            for name in files:
                try:
                    total += os.path.getsize(os.path.join(root, name))
                except OSError:
                    pass
        return total

    def __repr__(self) -> str:
        return f"FileCache(path={self.base_path})"


def probe_persistent_cache(
    base_path: Optional[str],
    clock: Optional[Clock] = None,
    rng: Optional[random.Random] = None,
) -> CacheTier:
    """Pick the persistent tier for this environment.

    Returns a FileCache when ``base_path`` is usable, otherwise a NullCache
    so the engine keeps working without local persistence.

    Args:
        base_path: Cache directory, None to disable persistence
        clock: Time source
        rng: Random source

    Returns:
        CacheTier
    """
    if not base_path:
        logger.info("Persistent cache disabled")
        return NullCache(clock=clock)

    try:
        cache = FileCache(base_path, clock=clock, rng=rng)
    except Exception as e:
        logger.warning(f"Persistent cache unavailable at {base_path}: {e}")
        return NullCache(clock=clock)

    if not cache.health_check():
        logger.warning(f"Persistent cache at {base_path} failed health check, disabling")
        return NullCache(clock=clock)

    logger.info(f"Persistent cache at {cache.base_path}")
    return cache


__all__ = ["FileCache", "probe_persistent_cache"]
