"""
Leitner Box Engine

Three boxes with fixed review intervals. A correct answer promotes the
card one box (up to 3); an incorrect one demotes it one box (down to 1).
The next due date is measured from the moment of the answer, so a late
review restarts the box's clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from vocadrill.leitner.constants import BOX_INTERVAL_DAYS, MAX_BOX, MIN_BOX
from vocadrill.timeutils import add_days, ensure_utc, utc_now


def clamp_box(box: object) -> int:
    """Coerce a stored box value into 1..3 (unparseable values become 1)."""
    try:
        value = int(box)
    except (TypeError, ValueError):
        return MIN_BOX
    return max(MIN_BOX, min(MAX_BOX, value))


@dataclass(frozen=True)
class LeitnerEntry:
    """Position of one card on the Leitner track."""
    deck: str
    vocab_id: str
    box: int
    due_at: datetime

    def __post_init__(self):
        object.__setattr__(self, "box", clamp_box(self.box))
        object.__setattr__(self, "due_at", ensure_utc(self.due_at))

    def is_due(self, now: datetime) -> bool:
        return self.due_at <= ensure_utc(now)


def new_entry(deck: str, vocab_id: str, now: Optional[datetime] = None) -> LeitnerEntry:
    """A card entering the track: box 1, due immediately."""
    if now is None:
        now = utc_now()
    return LeitnerEntry(deck=deck, vocab_id=vocab_id, box=MIN_BOX, due_at=now)


def next_box(box: int, is_correct: bool) -> int:
    if is_correct:
        return min(MAX_BOX, box + 1)
    return max(MIN_BOX, box - 1)


def update_box_on_quiz(
    entry: Optional[LeitnerEntry],
    is_correct: bool,
    now: Optional[datetime] = None,
    deck: Optional[str] = None,
    vocab_id: Optional[str] = None
) -> LeitnerEntry:
    """
    Move a card between boxes after a quiz answer.

    Args:
        entry: Current entry, or None if the card has no entry yet
        is_correct: Whether the answer was correct
        now: Answer time (defaults to current UTC time)
        deck: Deck id, required when entry is None
        vocab_id: Card id, required when entry is None

    Returns:
        New entry with the updated box and due date

    Raises:
        ValueError: If entry is None and deck or vocab_id is missing
    """
    if now is None:
        now = utc_now()

    if entry is None:
        if not deck or not vocab_id:
            raise ValueError("deck and vocab_id are required to create a Leitner entry")
        entry = new_entry(deck, vocab_id, now)

    box = next_box(entry.box, is_correct)
    return LeitnerEntry(
        deck=entry.deck,
        vocab_id=entry.vocab_id,
        box=box,
        due_at=add_days(now, BOX_INTERVAL_DAYS[box]),
    )
