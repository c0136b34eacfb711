"""
Constants for deck analytics.
"""

from __future__ import annotations

from typing import Final


RATING_ORDER: Final[list[str]] = ["again", "hard", "good", "easy"]

RETENTION_WINDOW_DAYS: Final[int] = 7   # Today plus the 6 days before
FORECAST_DAYS: Final[int] = 7

DIFFICULTY_LOW_MAX: Final[float] = 4.0
DIFFICULTY_HIGH_MIN: Final[float] = 7.0

REVIEW_EVENT_COLUMNS: Final[list[str]] = ["vocab_id", "rating", "timestamp", "day_utc"]
FSRS_ENTRY_COLUMNS: Final[list[str]] = ["vocab_id", "stability", "difficulty", "due_at"]
LEITNER_ENTRY_COLUMNS: Final[list[str]] = ["vocab_id", "box", "due_at"]
