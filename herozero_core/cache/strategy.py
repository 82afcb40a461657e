"""HeroZero Read Strategies - Ordered Fallback Reads.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A tiered read is a list of strategies tried fastest first. The first one
that finds a value wins, and every faster strategy that missed gets the
value written back to it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple, Type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadStrategy:
    """One step of a tiered read.

    Attributes:
        name: Source name, reported in ReadResult
        read: Returns the value for a key or None
        write_back: Stores a value found by a slower strategy
        catch: Exceptions treated as a miss instead of propagating
    """

    name: str
    read: Callable[[str], Optional[Any]]
    write_back: Optional[Callable[[str, Any], Any]] = None
    catch: Tuple[Type[BaseException], ...] = ()


@dataclass(frozen=True)
class ReadResult:
    """Outcome of ``read_through``."""

    value: Any = None
    source: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.source is not None


def read_through(key: str, strategies: Sequence[ReadStrategy]) -> ReadResult:
    """Try strategies in order and populate the faster ones on a hit.

    Args:
        key: Key to read
        strategies: Strategies, fastest first

    Returns:
        ReadResult; ``found`` is False when every strategy missed
    """
    for index, strategy in enumerate(strategies):
        try:
            value = strategy.read(key)
        except strategy.catch as e:
            logger.warning(f"Read strategy {strategy.name} failed for {key}: {e}")
            continue

        if value is None:
            continue

        for faster in strategies[:index]:
            if faster.write_back is not None:
                faster.write_back(key, value)
        return ReadResult(value=value, source=strategy.name)

    return ReadResult()


__all__ = ["ReadStrategy", "ReadResult", "read_through"]
