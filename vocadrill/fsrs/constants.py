"""
FSRS Constants and Parameters

All fixed values for the FSRS track in one place.
The tunable weight vector itself lives in parameters.py.
"""

from __future__ import annotations

from enum import Enum, IntEnum


# ---- Ratings ----

class Rating(IntEnum):
    """User feedback on a retrieval attempt."""
    AGAIN = 1   # Retrieval failed
    HARD = 2    # Retrieved with high effort
    GOOD = 3    # Retrieved normally
    EASY = 4    # Retrieved fluently

    @classmethod
    def from_label(cls, label: object) -> "Rating":
        """
        Map a boundary label ("again" | "hard" | "good" | "easy") or a
        1-4 integer to a Rating.

        Unrecognized values fall back to GOOD.
        """
        if isinstance(label, Rating):
            return label
        if isinstance(label, str):
            return RATING_LABELS.get(label.strip().lower(), cls.GOOD)
        if isinstance(label, int) and not isinstance(label, bool):
            try:
                return cls(label)
            except ValueError:
                return cls.GOOD
        return cls.GOOD

    @property
    def label(self) -> str:
        return self.name.lower()


RATING_LABELS = {
    "again": Rating.AGAIN,
    "hard": Rating.HARD,
    "good": Rating.GOOD,
    "easy": Rating.EASY,
}


def is_correct(label: object) -> bool:
    """Leitner outcome for a rating: only "again" counts as incorrect."""
    return Rating.from_label(label) != Rating.AGAIN


# ---- Card lifecycle ----

class CardLifecycle(str, Enum):
    """Lifecycle of a card on the FSRS track."""
    NEW = "new"         # Never reviewed
    REVIEW = "review"   # Last rating was hard/good/easy
    LAPSED = "lapsed"   # Last rating was again


# ---- Forgetting curve ----

FACTOR = 19.0 / 81.0   # R(S, S) = 0.9
DECAY = -0.5


# ---- Bounds ----

S_MIN = 0.01       # Minimum stability (days)
S_MAX = 36500.0    # Maximum stability (days)
D_MIN = 1.0        # Minimum difficulty
D_MAX = 10.0       # Maximum difficulty
D_BASELINE = 5.0   # Difficulty regression target, also the new-card default

RETENTION_MIN = 0.01
RETENTION_MAX = 0.99
DEFAULT_DESIRED_RETENTION = 0.9

MIN_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = 36500


# ---- Weight vector ----

N_WEIGHTS = 17

DEFAULT_WEIGHTS = (
    0.4872, 1.4003, 3.7145, 13.8206, 5.1618, 1.2298, 0.8975, 0.031, 1.6474,
    0.1367, 1.0461, 2.1072, 0.0793, 0.3246, 1.587, 0.2272, 2.8755,
)

# Index map into w (0-indexed)
W_INITIAL_STABILITY = {
    Rating.AGAIN: 0,
    Rating.HARD: 1,
    Rating.GOOD: 2,
    Rating.EASY: 3,
}
W_DIFFICULTY_DELTA = 5
W_DIFFICULTY_BLEND = 6
W_SUCCESS_SCALE = 7
W_SUCCESS_STABILITY_DECAY = 8
W_SUCCESS_RETRIEVABILITY_GAIN = 9
W_FAILURE_SCALE = 10
W_FAILURE_DIFFICULTY_DECAY = 11
W_FAILURE_STABILITY_GAIN = 12
W_FAILURE_RETRIEVABILITY_GAIN = 13
W_HARD_MULTIPLIER = 14
W_EASY_MULTIPLIER = 15


# ---- Log-replay evaluation ----

REPLAY_RETENTION = 0.9
LOSS_EPSILON = 1e-8
