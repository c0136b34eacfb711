"""
Memory State - FSRS Card State and Retrievability

Defines the memory state of a card and the forgetting curve.

Key concepts:
- Stability (S): Days until recall probability decays to 90%
- Difficulty (D): How hard the card is to learn (1-10 scale)
- Retrievability (R): Probability of successful recall at time t
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from vocadrill.fsrs.constants import (
    CardLifecycle,
    D_BASELINE,
    D_MAX,
    D_MIN,
    DECAY,
    FACTOR,
    RETENTION_MAX,
    RETENTION_MIN,
    S_MAX,
    S_MIN,
)
from vocadrill.timeutils import ensure_utc


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def floor_stability(stability: Optional[float]) -> float:
    """
    Bring a stability value into [S_MIN, S_MAX].

    Missing, NaN and non-positive values become S_MIN.
    """
    if stability is None or math.isnan(stability) or stability <= 0:
        return S_MIN
    return clamp(stability, S_MIN, S_MAX)


def normalize_difficulty(difficulty: Optional[float]) -> float:
    """
    Bring a difficulty value into [D_MIN, D_MAX].

    Missing, NaN and non-positive values become the baseline (5).
    """
    if difficulty is None or math.isnan(difficulty) or difficulty <= 0:
        return D_BASELINE
    return clamp(difficulty, D_MIN, D_MAX)


@dataclass(frozen=True)
class MemoryState:
    """
    Memory state for a single card on the FSRS track.

    Values are normalized on construction, so every instance has
    S in [0.01, 36500] and D in [1, 10].
    """
    stability: float = S_MIN
    difficulty: float = D_BASELINE
    last_reviewed_at: Optional[datetime] = None
    state: CardLifecycle = CardLifecycle.NEW

    def __post_init__(self):
        object.__setattr__(self, "stability", floor_stability(self.stability))
        object.__setattr__(self, "difficulty", normalize_difficulty(self.difficulty))
        if self.last_reviewed_at is not None:
            object.__setattr__(self, "last_reviewed_at", ensure_utc(self.last_reviewed_at))
        object.__setattr__(self, "state", CardLifecycle(self.state))

    @property
    def is_new(self) -> bool:
        return self.last_reviewed_at is None


def initialize_new_card(
    initial_stability: float = S_MIN,
    initial_difficulty: float = D_BASELINE
) -> MemoryState:
    """
    Initialize state for a card that has never been reviewed.

    Args:
        initial_stability: Starting stability (default: 0.01 days)
        initial_difficulty: Starting difficulty (default: 5.0, middle of 1-10 scale)

    Returns:
        New MemoryState with no review timestamp
    """
    return MemoryState(
        stability=initial_stability,
        difficulty=initial_difficulty,
        last_reviewed_at=None,
        state=CardLifecycle.NEW,
    )


def calculate_retrievability(elapsed_days: float, stability: float) -> float:
    """
    Calculate retrievability with the FSRS power forgetting curve.

    Formula: R = (1 + (19/81) * t / S) ^ (-0.5)

    Interpretation:
    - Immediately after review: R = 1.0
    - At t = S: R = 0.9 (definition of stability)
    - As time passes: R decays smoothly towards 0

    Args:
        elapsed_days: Time since last review in days (negative treated as 0)
        stability: Current stability in days

    Returns:
        Retrievability in [0, 1]; 0 when stability is not positive
    """
    if not stability > 0:
        return 0.0
    elapsed_days = max(0.0, elapsed_days)
    base = 1.0 + FACTOR * (elapsed_days / stability)
    if math.isinf(base):
        return 0.0
    return base ** DECAY


def interval_for_retention(target_retention: float, stability: float) -> float:
    """
    Days until retrievability decays to the target retention.

    Inverse of the forgetting curve:
        t = (S / (19/81)) * (r^-2 - 1)

    The target is clamped to [0.01, 0.99] first so r = 0 and r = 1
    cannot produce singular intervals.

    Args:
        target_retention: Desired recall probability at the next review
        stability: Stability in days

    Returns:
        Interval in (fractional) days
    """
    retention = clamp(target_retention, RETENTION_MIN, RETENTION_MAX)
    return (stability / FACTOR) * (retention ** -2 - 1.0)
