"""
Types for deck dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True)
class RatingDistribution:
    again: int = 0
    hard: int = 0
    good: int = 0
    easy: int = 0

    @property
    def total(self) -> int:
        return self.again + self.hard + self.good + self.easy

    @property
    def accuracy(self) -> float:
        """Share of answers that were not "again" (0 with no answers)."""
        if self.total == 0:
            return 0.0
        return (self.hard + self.good + self.easy) / self.total


@dataclass(frozen=True)
class DifficultyBuckets:
    low: int = 0    # D <= 4
    mid: int = 0
    high: int = 0   # D >= 7


@dataclass(frozen=True)
class DeckDashboardData:
    """
    Precomputed metrics and series for one deck of one user.
    """
    deck: str
    due_now: int
    today_mix: RatingDistribution
    retention_7d: float
    forecast_7d: pd.Series
    median_stability: float
    difficulty_mix: DifficultyBuckets
    box_counts: dict[int, int]
