"""
Service layer to assemble the dashboard of one deck.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from vocadrill.analytics.constants import RETENTION_WINDOW_DAYS
from vocadrill.analytics.metrics import (
    compute_box_counts,
    compute_difficulty_buckets,
    compute_due_count,
    compute_forecast,
    compute_median_stability,
    compute_rating_distribution,
    compute_seven_day_retention,
)
from vocadrill.analytics.queries import (
    load_fsrs_entries_df,
    load_leitner_entries_df,
    load_review_events_df,
)
from vocadrill.analytics.types import DeckDashboardData
from vocadrill.timeutils import ensure_utc, utc_now


def build_deck_dashboard(
    user_id: str,
    deck: str,
    now: Optional[datetime] = None
) -> DeckDashboardData:
    """
    Build all KPI values and series needed by the study page for a deck.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    window_start = now.replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(
        days=RETENTION_WINDOW_DAYS - 1
    )

    events_df = load_review_events_df(user_id=user_id, deck=deck, since=window_start)
    fsrs_df = load_fsrs_entries_df(user_id, deck)
    leitner_df = load_leitner_entries_df(user_id, deck)

    return DeckDashboardData(
        deck=deck,
        due_now=compute_due_count(leitner_df, now),
        today_mix=compute_rating_distribution(events_df, now),
        retention_7d=compute_seven_day_retention(events_df, now),
        forecast_7d=compute_forecast(fsrs_df, now),
        median_stability=compute_median_stability(fsrs_df, now),
        difficulty_mix=compute_difficulty_buckets(fsrs_df, now),
        box_counts=compute_box_counts(leitner_df),
    )
