"""
FSRS - Free Spaced Repetition Scheduler

Continuous memory model for the review track.

This package implements:
- Power-law forgetting curve: R = (1 + 19/81 * t/S)^-0.5
- Difficulty and stability updates driven by a 17-weight vector
- Interval sizing for a target retention
- Log-replay scoring of candidate weight vectors

Quick start:
    from vocadrill import fsrs

    # Process a review (algorithm only, no DB calls)
    result = fsrs.schedule(state, fsrs.Rating.GOOD, 0.9, fsrs.DEFAULT_PARAMETERS)

    # Score a weight vector against history
    loss = fsrs.simulate_loss(logs, fsrs.DEFAULT_PARAMETERS)

Database access lives in vocadrill.fsrs.database.
"""

# Core scheduler API (algorithm logic)
from vocadrill.fsrs.scheduler import ScheduleResult, next_interval_days, schedule

# Constants and parameters
from vocadrill.fsrs.constants import (
    CardLifecycle,
    DEFAULT_DESIRED_RETENTION,
    DEFAULT_WEIGHTS,
    D_MAX,
    D_MIN,
    Rating,
    S_MIN,
    is_correct,
)
from vocadrill.fsrs.parameters import DEFAULT_PARAMETERS, FsrsParameters

# Memory state (for advanced usage)
from vocadrill.fsrs.memory_state import (
    MemoryState,
    calculate_retrievability,
    initialize_new_card,
    interval_for_retention,
)
from vocadrill.fsrs.updates import (
    update_difficulty,
    update_stability_on_failure,
    update_stability_on_success,
)

# Parameter evaluation
from vocadrill.fsrs.optimizer import (
    EvaluationResult,
    ReviewLog,
    evaluate_parameters,
    select_best_parameters,
    simulate_loss,
)


__all__ = [
    # Core algorithm
    "schedule",
    "next_interval_days",
    "ScheduleResult",

    # Constants and parameters
    "CardLifecycle",
    "DEFAULT_DESIRED_RETENTION",
    "DEFAULT_WEIGHTS",
    "D_MAX",
    "D_MIN",
    "Rating",
    "S_MIN",
    "is_correct",
    "DEFAULT_PARAMETERS",
    "FsrsParameters",

    # Memory state
    "MemoryState",
    "calculate_retrievability",
    "initialize_new_card",
    "interval_for_retention",
    "update_difficulty",
    "update_stability_on_failure",
    "update_stability_on_success",

    # Evaluation
    "EvaluationResult",
    "ReviewLog",
    "evaluate_parameters",
    "select_best_parameters",
    "simulate_loss",
]
