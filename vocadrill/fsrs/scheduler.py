"""
Scheduler - FSRS Algorithm Logic

Pure FSRS scheduling (no database calls).

Main workflow:
1. Load card state (caller's responsibility)
2. Calculate retrievability at the moment of review
3. Update difficulty, then stability
4. Size the next interval for the desired retention
5. Return the new state, interval and due date

This module handles ONLY the algorithm logic.
Database I/O is handled by the database module.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from vocadrill.fsrs import memory_state, updates
from vocadrill.fsrs.constants import (
    CardLifecycle,
    MAX_INTERVAL_DAYS,
    MIN_INTERVAL_DAYS,
    Rating,
)
from vocadrill.fsrs.memory_state import MemoryState
from vocadrill.fsrs.parameters import FsrsParameters
from vocadrill.timeutils import add_days, days_between, ensure_utc, utc_now


@dataclass(frozen=True)
class ScheduleResult:
    """Outcome of one scheduling step."""
    next_interval_days: int
    next_due_at: datetime
    new_state: MemoryState
    retrievability: float  # R before the update


def next_lifecycle(rating: Rating) -> CardLifecycle:
    """Any state goes to lapsed on "again" and to review otherwise."""
    return CardLifecycle.LAPSED if rating == Rating.AGAIN else CardLifecycle.REVIEW


def next_interval_days(desired_retention: float, stability: float) -> int:
    """Whole-day interval for the retention target, at least one day."""
    days = memory_state.interval_for_retention(desired_retention, stability)
    if math.isnan(days):
        return MIN_INTERVAL_DAYS
    days = min(days, float(MAX_INTERVAL_DAYS))
    return max(MIN_INTERVAL_DAYS, int(round(days)))


def schedule(
    state: MemoryState,
    rating: Rating,
    desired_retention: float,
    params: FsrsParameters,
    now: Optional[datetime] = None
) -> ScheduleResult:
    """
    Apply a review to a card's memory state.

    Args:
        state: Current memory state (new or reviewed)
        rating: User rating (AGAIN, HARD, GOOD, EASY)
        desired_retention: Target recall probability for the next review
        params: Weight vector to use
        now: Review time (defaults to current UTC time)

    Returns:
        ScheduleResult with the new state stamped at `now`
    """
    if now is None:
        now = utc_now()
    now = ensure_utc(now)
    rating = Rating.from_label(rating)

    elapsed = days_between(state.last_reviewed_at, now)
    prior_stability = memory_state.floor_stability(state.stability)
    retrievability = memory_state.calculate_retrievability(elapsed, prior_stability)

    new_difficulty = updates.update_difficulty(state.difficulty, rating, params.w)
    if state.last_reviewed_at is None:
        # First review: R is 1, so the growth formulas would leave S unchanged
        new_stability = updates.initial_stability(rating, params.w)
    elif rating == Rating.AGAIN:
        new_stability = updates.update_stability_on_failure(
            new_difficulty, prior_stability, retrievability, params.w
        )
    else:
        new_stability = updates.update_stability_on_success(
            new_difficulty, prior_stability, retrievability, rating, params.w
        )

    interval = next_interval_days(desired_retention, new_stability)

    new_state = MemoryState(
        stability=new_stability,
        difficulty=new_difficulty,
        last_reviewed_at=now,
        state=next_lifecycle(rating),
    )

    return ScheduleResult(
        next_interval_days=interval,
        next_due_at=add_days(now, interval),
        new_state=new_state,
        retrievability=retrievability,
    )
