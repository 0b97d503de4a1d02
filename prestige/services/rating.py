"""ELO rating arithmetic for company comparisons.

Everything here is pure: no I/O and no randomness, so the same inputs always
produce the same deltas. Rounding is half-up (``floor(x + 0.5)``) rather than
Python's round-half-to-even, so ``16.5`` becomes ``17`` and ``-0.5`` becomes
``0``.
"""
from __future__ import annotations

import math
from collections.abc import Mapping

K_FACTOR = 32


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def expected_score(winner_rating: int, loser_rating: int) -> float:
    """Probability the ELO model assigned to the winner beating the loser."""

    return 1.0 / (1.0 + 10.0 ** ((loser_rating - winner_rating) / 400.0))


def compute_delta(winner_rating: int, loser_rating: int, *, k_factor: int = K_FACTOR) -> int:
    """Points the winner gains, and the loser gives up, for a single win."""

    return round_half_up(k_factor * (1.0 - expected_score(winner_rating, loser_rating)))


def compute_group_deltas(
    winner_id: int,
    ratings: Mapping[int, int],
    *,
    k_factor: int = K_FACTOR,
) -> dict[int, int]:
    """Return the signed rating change for every company in a comparison.

    The winner is scored independently against each other company using the
    ratings before the vote. Companies that were not chosen are never scored
    against each other, so the winner's gain is the sum of what the others
    lose.
    """

    if winner_id not in ratings:
        raise KeyError(winner_id)

    winner_rating = ratings[winner_id]
    changes: dict[int, int] = {}
    total_gain = 0
    for company_id, rating in ratings.items():
        if company_id == winner_id:
            continue
        delta = compute_delta(winner_rating, rating, k_factor=k_factor)
        changes[company_id] = -delta
        total_gain += delta
    changes[winner_id] = total_gain
    return changes


def winner_win_percentage(win_percentage: int, votes: int) -> int:
    return round_half_up((win_percentage * votes + 100) / (votes + 1))


def loser_win_percentage(win_percentage: int, votes: int) -> int:
    # A loss is not counted in the denominator; with no wins the rate is zero.
    if votes == 0:
        return 0
    return win_percentage


__all__ = [
    "K_FACTOR",
    "compute_delta",
    "compute_group_deltas",
    "expected_score",
    "loser_win_percentage",
    "round_half_up",
    "winner_win_percentage",
]
