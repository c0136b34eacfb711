"""
Parameter Evaluator - log-replay loss

Replays a user's review history through the scheduler and scores how well
a weight vector predicts recall. The score is the mean binary cross-entropy
between predicted retrievability and the observed outcome (again = 0,
anything else = 1). Lower is better.

The evaluation is pure: nothing is read from or written to the database.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, Sequence

from vocadrill.fsrs import memory_state
from vocadrill.fsrs.constants import (
    D_BASELINE,
    LOSS_EPSILON,
    REPLAY_RETENTION,
    Rating,
    S_MIN,
)
from vocadrill.fsrs.memory_state import MemoryState
from vocadrill.fsrs.parameters import FsrsParameters
from vocadrill.fsrs.scheduler import schedule
from vocadrill.timeutils import days_between


@dataclass(frozen=True)
class ReviewLog:
    """One historical review of a card."""
    card_id: str  # deck:vocabId or any unique id
    review_timestamp: datetime
    user_rating: Rating


@dataclass(frozen=True)
class EvaluationResult:
    parameters: FsrsParameters
    loss: float
    review_count: int
    card_count: int


def bce_loss(observed: float, predicted: float) -> float:
    """
    Binary cross-entropy for a single prediction.

    The prediction is clamped to [1e-8, 1 - 1e-8] to avoid log(0).
    """
    p = min(1.0 - LOSS_EPSILON, max(LOSS_EPSILON, predicted))
    return -(observed * math.log(p) + (1.0 - observed) * math.log(1.0 - p))


def group_logs_by_card(logs: Iterable[ReviewLog]) -> dict[str, list[ReviewLog]]:
    """
    Group logs per card, each group sorted by timestamp ascending.

    The order matters: every replay step measures elapsed time from the
    previous step's review.
    """
    by_card: dict[str, list[ReviewLog]] = defaultdict(list)
    for log in logs:
        by_card[log.card_id].append(log)
    for card_logs in by_card.values():
        card_logs.sort(key=lambda log: log.review_timestamp)
    return dict(by_card)


def _replay(
    by_card: dict[str, list[ReviewLog]],
    params: FsrsParameters,
    initial_difficulty: float,
    initial_stability: float
) -> tuple[float, int]:
    total_loss = 0.0
    count = 0

    for card_logs in by_card.values():
        state = MemoryState(
            stability=initial_stability,
            difficulty=initial_difficulty,
            last_reviewed_at=None,
        )
        for log in card_logs:
            elapsed = days_between(state.last_reviewed_at, log.review_timestamp)
            predicted = memory_state.calculate_retrievability(
                elapsed, max(S_MIN, state.stability)
            )
            observed = 0.0 if log.user_rating == Rating.AGAIN else 1.0
            total_loss += bce_loss(observed, predicted)
            count += 1

            # Advance with the historical rating at the historical time.
            # A card's first review seeds S from w[0..3], as in schedule().
            result = schedule(
                state,
                log.user_rating,
                REPLAY_RETENTION,
                params,
                now=log.review_timestamp,
            )
            state = replace(result.new_state, last_reviewed_at=log.review_timestamp)

    return total_loss, count


def simulate_loss(
    logs: Iterable[ReviewLog],
    params: FsrsParameters,
    initial_difficulty: float = D_BASELINE,
    initial_stability: float = S_MIN
) -> float:
    """
    Mean cross-entropy of predicted retrievability over a review history.

    Args:
        logs: Review logs in any order, possibly for many cards
        params: Candidate weight vector
        initial_difficulty: Difficulty every card starts from
        initial_stability: Stability every card starts from

    Returns:
        Mean loss per review, or 0.0 when there are no logs
    """
    total_loss, count = _replay(
        group_logs_by_card(logs), params, initial_difficulty, initial_stability
    )
    return total_loss / count if count > 0 else 0.0


def evaluate_parameters(
    logs: Iterable[ReviewLog],
    params: FsrsParameters
) -> EvaluationResult:
    """Score a weight vector and report how much history backed the score."""
    by_card = group_logs_by_card(logs)
    total_loss, count = _replay(by_card, params, D_BASELINE, S_MIN)
    return EvaluationResult(
        parameters=params,
        loss=total_loss / count if count > 0 else 0.0,
        review_count=count,
        card_count=len(by_card),
    )


def select_best_parameters(
    logs: Iterable[ReviewLog],
    candidates: Sequence[FsrsParameters]
) -> EvaluationResult:
    """
    Evaluate candidate vectors and return the one with the lowest loss.

    Ties keep the earlier candidate. This compares given vectors only;
    it does not search the parameter space.

    Raises:
        ValueError: If no candidates are given
    """
    if not candidates:
        raise ValueError("select_best_parameters needs at least one candidate")

    logs = list(logs)
    best = None
    for params in candidates:
        result = evaluate_parameters(logs, params)
        if best is None or result.loss < best.loss:
            best = result
    return best
