"""Rating module - Elo rating engine."""

from herozero_core.rating.elo import (
    DEFAULT_K_FACTOR,
    INITIAL_RATING,
    MatchResult,
    apply_match_result,
    expected_score,
)

__all__ = [
    "DEFAULT_K_FACTOR",
    "INITIAL_RATING",
    "MatchResult",
    "apply_match_result",
    "expected_score",
]
