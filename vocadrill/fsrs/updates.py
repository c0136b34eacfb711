"""
Memory Updates

Difficulty and stability transitions applied on every FSRS review.

Key principles:
- Spaced, effortful success produces the largest stability gains
- A lapse collapses stability as a function of D, prior S and R
- Difficulty drifts with the rating but regresses towards a baseline

All functions are total: they clamp or floor instead of raising.
"""

from __future__ import annotations

import math
from typing import Sequence

from vocadrill.fsrs.constants import (
    D_BASELINE,
    D_MAX,
    D_MIN,
    Rating,
    W_DIFFICULTY_BLEND,
    W_DIFFICULTY_DELTA,
    W_EASY_MULTIPLIER,
    W_FAILURE_DIFFICULTY_DECAY,
    W_FAILURE_RETRIEVABILITY_GAIN,
    W_FAILURE_SCALE,
    W_FAILURE_STABILITY_GAIN,
    W_HARD_MULTIPLIER,
    W_INITIAL_STABILITY,
    W_SUCCESS_RETRIEVABILITY_GAIN,
    W_SUCCESS_SCALE,
    W_SUCCESS_STABILITY_DECAY,
)
from vocadrill.fsrs.memory_state import clamp, floor_stability


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def _pow(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan


def initial_stability(rating: Rating, w: Sequence[float]) -> float:
    """
    Stability after the first review of a never-reviewed card.

    The first four weights are per-rating seed stabilities
    (w[0] for Again ... w[3] for Easy).
    """
    return floor_stability(w[W_INITIAL_STABILITY[rating]])


def update_difficulty(difficulty: float, rating: Rating, w: Sequence[float]) -> float:
    """
    Update difficulty based on the rating.

    Formula:
        D_upd = D - w[5] * (G - 3)
        D_new = clip(w[6] * 5 + (1 - w[6]) * D_upd, min=1, max=10)

    Ratings above "good" lower difficulty, below raise it. Blending with
    the baseline keeps difficulty from drifting after many extreme ratings.

    Args:
        difficulty: Current difficulty
        rating: User rating (1-4)
        w: Weight vector

    Returns:
        New difficulty value (clipped to [1, 10])
    """
    updated = difficulty - w[W_DIFFICULTY_DELTA] * (int(rating) - 3)
    blend = w[W_DIFFICULTY_BLEND]
    blended = blend * D_BASELINE + (1.0 - blend) * updated
    if math.isnan(blended):
        return D_BASELINE
    return clamp(blended, D_MIN, D_MAX)


def update_stability_on_success(
    difficulty: float,
    stability: float,
    retrievability: float,
    rating: Rating,
    w: Sequence[float]
) -> float:
    """
    Update stability after successful retrieval (Hard/Good/Easy).

    Formula:
        S_new = S * (1 + e^w[7] * (11 - D) * S^-w[8] * (e^(w[9] * (1 - R)) - 1) * m)

    Where m is w[14] for Hard, w[15] for Easy and 1 for Good.

    Growth is larger when difficulty is low, when current stability is
    low and when recall was unlikely (low R).

    The result is capped at S_MAX (36500 days), so very large stabilities
    stop growing.

    Args:
        difficulty: Difficulty after this review's update
        stability: Current stability (S)
        retrievability: Retrievability at the moment of review (R)
        rating: User rating (HARD, GOOD or EASY)
        w: Weight vector

    Returns:
        New stability value (floored at 0.01, capped at S_MAX)
    """
    if rating == Rating.HARD:
        multiplier = w[W_HARD_MULTIPLIER]
    elif rating == Rating.EASY:
        multiplier = w[W_EASY_MULTIPLIER]
    else:
        multiplier = 1.0

    growth = (
        _exp(w[W_SUCCESS_SCALE])
        * (11.0 - difficulty)
        * _pow(max(stability, 1e-6), -w[W_SUCCESS_STABILITY_DECAY])
        * (_exp(w[W_SUCCESS_RETRIEVABILITY_GAIN] * (1.0 - retrievability)) - 1.0)
    )
    new_stability = stability * (1.0 + growth * multiplier)

    return floor_stability(new_stability)


def update_stability_on_failure(
    difficulty: float,
    stability: float,
    retrievability: float,
    w: Sequence[float]
) -> float:
    """
    Update stability after failed retrieval (Again).

    Formula:
        S_new = w[10] * D^-w[11] * ((S + 1)^w[12] - 1) * e^(w[13] * (1 - R))

    Args:
        difficulty: Difficulty after this review's update
        stability: Current stability
        retrievability: Retrievability at the moment of the lapse
        w: Weight vector

    Returns:
        New stability value (floored at 0.01)
    """
    new_stability = (
        w[W_FAILURE_SCALE]
        * _pow(max(difficulty, D_MIN), -w[W_FAILURE_DIFFICULTY_DECAY])
        * (_pow(stability + 1.0, w[W_FAILURE_STABILITY_GAIN]) - 1.0)
        * _exp(w[W_FAILURE_RETRIEVABILITY_GAIN] * (1.0 - retrievability))
    )

    return floor_stability(new_stability)
