"""HeroZero Elo - Pairwise Rating Updates.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Pure functions, no I/O and no shared state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

INITIAL_RATING = 1500
DEFAULT_K_FACTOR = 32


@dataclass(frozen=True)
class MatchResult:
    """Outcome of one pairwise comparison.

    Attributes:
        new_winner_rating: Winner rating after the match
        new_loser_rating: Loser rating after the match
        winner_delta: Signed change of the winner rating
        loser_delta: Signed change of the loser rating
    """

    new_winner_rating: int
    new_loser_rating: int
    winner_delta: int
    loser_delta: int


def expected_score(rating_a: float, rating_b: float) -> float:
    """Logistic expectation that A beats B.

    Args:
        rating_a: Rating of A
        rating_b: Rating of B

    Returns:
        Expected score of A in (0, 1)
    """
    return 1 / (1 + 10 ** ((rating_b - rating_a) / 400))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves going toward +infinity."""
    return math.floor(value + 0.5)


def apply_match_result(
    winner_rating: int,
    loser_rating: int,
    k_factor: int = DEFAULT_K_FACTOR,
) -> MatchResult:
    """Apply a win for ``winner_rating`` over ``loser_rating``.

    The winner scores 1, the loser 0. New ratings are rounded half up
    to integers and deltas are computed from the rounded values.

    Args:
        winner_rating: Current winner rating
        loser_rating: Current loser rating
        k_factor: Maximum rating change per match

    Returns:
        MatchResult
    """
    expected_winner = expected_score(winner_rating, loser_rating)
    expected_loser = expected_score(loser_rating, winner_rating)

    new_winner = round_half_up(winner_rating + k_factor * (1 - expected_winner))
    new_loser = round_half_up(loser_rating + k_factor * (0 - expected_loser))

    return MatchResult(
        new_winner_rating=new_winner,
        new_loser_rating=new_loser,
        winner_delta=new_winner - winner_rating,
        loser_delta=new_loser - loser_rating,
    )


__all__ = [
    "INITIAL_RATING",
    "DEFAULT_K_FACTOR",
    "MatchResult",
    "expected_score",
    "round_half_up",
    "apply_match_result",
]
