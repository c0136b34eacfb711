"""
Metric computations for deck dashboards.

Every function takes the reference time explicitly; "today" is the UTC day
containing `now`.
"""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from vocadrill.analytics.constants import (
    DIFFICULTY_HIGH_MIN,
    DIFFICULTY_LOW_MAX,
    FORECAST_DAYS,
    RATING_ORDER,
    RETENTION_WINDOW_DAYS,
)
from vocadrill.analytics.types import DifficultyBuckets, RatingDistribution
from vocadrill.leitner.constants import BOXES


def _timestamp(now: datetime) -> pd.Timestamp:
    ts = pd.Timestamp(now)
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")


def _today(now: datetime) -> pd.Timestamp:
    return _timestamp(now).floor("D")


def compute_rating_distribution(events_df: pd.DataFrame, now: datetime) -> RatingDistribution:
    """
    Count today's answers per rating label.
    """
    if events_df.empty:
        return RatingDistribution()

    today = events_df[events_df["timestamp"] >= _today(now)]
    counts = today["rating"].value_counts()
    return RatingDistribution(**{label: int(counts.get(label, 0)) for label in RATING_ORDER})


def compute_seven_day_retention(events_df: pd.DataFrame, now: datetime) -> float:
    """
    Share of non-"again" answers since the start of the day six days ago.

    Returns 0.0 when there were no answers in the window.
    """
    if events_df.empty:
        return 0.0

    start = _today(now) - pd.Timedelta(days=RETENTION_WINDOW_DAYS - 1)
    window = events_df[events_df["timestamp"] >= start]
    if window.empty:
        return 0.0
    return float((window["rating"] != "again").mean())


def compute_due_count(entries_df: pd.DataFrame, now: datetime) -> int:
    if entries_df.empty:
        return 0
    return int((entries_df["due_at"] <= _timestamp(now)).sum())


def compute_forecast(entries_df: pd.DataFrame, now: datetime) -> pd.Series:
    """
    Number of cards falling due on each of the next 7 UTC days.

    Backlog from before today is not counted.
    """
    day_index = pd.date_range(start=_today(now), periods=FORECAST_DAYS, freq="D")
    if entries_df.empty:
        return pd.Series(0, index=day_index, dtype="int64")

    due_days = entries_df["due_at"].dt.floor("D")
    counts = due_days[due_days >= day_index[0]].value_counts()
    return counts.reindex(day_index, fill_value=0).astype("int64")


def compute_median_stability(entries_df: pd.DataFrame, now: datetime) -> float:
    """
    Median stability of the cards that are due now (0.0 if none are).
    """
    if entries_df.empty:
        return 0.0
    due = entries_df[entries_df["due_at"] <= _timestamp(now)]
    if due.empty:
        return 0.0
    return float(due["stability"].median())


def compute_difficulty_buckets(entries_df: pd.DataFrame, now: datetime) -> DifficultyBuckets:
    """
    Bucket the difficulty of the cards that are due now.
    """
    if entries_df.empty:
        return DifficultyBuckets()

    difficulty = entries_df.loc[entries_df["due_at"] <= _timestamp(now), "difficulty"]
    low = int((difficulty <= DIFFICULTY_LOW_MAX).sum())
    high = int((difficulty >= DIFFICULTY_HIGH_MIN).sum())
    return DifficultyBuckets(low=low, mid=len(difficulty) - low - high, high=high)


def compute_box_counts(leitner_df: pd.DataFrame) -> dict[int, int]:
    if leitner_df.empty:
        return {box: 0 for box in BOXES}
    counts = leitner_df["box"].value_counts()
    return {box: int(counts.get(box, 0)) for box in BOXES}
