"""
Leitner Constants

Fixed box intervals and the default session-selection policy.
"""

from __future__ import annotations

from typing import Final


MIN_BOX: Final[int] = 1
MAX_BOX: Final[int] = 3
BOXES: Final[tuple[int, ...]] = (1, 2, 3)

# Days until the next review after landing in a box
BOX_INTERVAL_DAYS: Final[dict[int, int]] = {
    1: 1,  # daily
    2: 3,  # every 3 days
    3: 5,  # every 5 days
}


# ---- Session selection ----

SESSION_SIZE: Final[int] = 100

# Fibonacci-like weights favouring box 1
DEFAULT_WEIGHTS: Final[dict[int, float]] = {1: 13, 2: 8, 3: 5}

# Soft capacities; a box above its capacity gets extra session slots
DEFAULT_CAPACITIES: Final[dict[int, int]] = {1: 200, 2: 120, 3: 80}

# Capacity boost: one extra slot per OVERFLOW_PER_SLOT entries above capacity,
# at most max(MIN_BOOST_CAP, ceil(session_size * BOOST_SESSION_FRACTION))
OVERFLOW_PER_SLOT: Final[int] = 10
MIN_BOOST_CAP: Final[int] = 3
BOOST_SESSION_FRACTION: Final[float] = 0.25
