"""HeroZero Errors - Exception Taxonomy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations


class HeroZeroError(Exception):
    """Base class for all engine errors."""


class StoreError(HeroZeroError):
    """Entity store I/O failed (network, backend or serialization).

    Transient by nature. Read paths catch it at their fallback boundary;
    the vote write path lets it propagate.
    """


class StoreTimeoutError(StoreError):
    """Entity store call did not finish within the configured timeout."""


class IntegrityViolation(HeroZeroError):
    """A data invariant failed before a write.

    Indicates a logic bug. Never caught inside the engine.
    """


class PairUnavailableError(HeroZeroError):
    """No voting pair could be produced by any selection strategy."""


class MetadataError(HeroZeroError):
    """The metadata provider could not describe an item."""


__all__ = [
    "HeroZeroError",
    "StoreError",
    "StoreTimeoutError",
    "IntegrityViolation",
    "PairUnavailableError",
    "MetadataError",
]
