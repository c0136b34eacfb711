"""
Data-loading helpers for analytics.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import pandas as pd

from vocadrill import log_repo
from vocadrill.analytics.constants import (
    FSRS_ENTRY_COLUMNS,
    LEITNER_ENTRY_COLUMNS,
    REVIEW_EVENT_COLUMNS,
)
from vocadrill.fsrs import database as fsrs_db
from vocadrill.leitner import database as leitner_db


def load_review_events_df(
    user_id: str,
    deck: str,
    since: Optional[datetime] = None
) -> pd.DataFrame:
    """
    Load review events for a user and deck into a dataframe.
    """
    rows = log_repo.get_review_events(user_id=user_id, deck=deck, since=since)
    if not rows:
        return pd.DataFrame(columns=REVIEW_EVENT_COLUMNS)

    df = pd.DataFrame(rows)
    df = df[["vocab_id", "rating", "timestamp"]].copy()
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True, errors="coerce")
    df = df.dropna(subset=["vocab_id", "timestamp"])
    df["day_utc"] = df["timestamp"].dt.floor("D")
    df = df.sort_values("timestamp").reset_index(drop=True)
    return df


def load_fsrs_entries_df(user_id: str, deck: str) -> pd.DataFrame:
    """
    Load current FSRS memory states of a deck.
    """
    entries = fsrs_db.get_fsrs_map_for_deck(user_id, deck)
    if not entries:
        return pd.DataFrame(columns=FSRS_ENTRY_COLUMNS)

    rows = []
    for doc in entries.values():
        state = doc.state.to_state()
        rows.append({
            "vocab_id": doc.vocab_id,
            "stability": state.stability,
            "difficulty": state.difficulty,
            "due_at": doc.due_at,
        })

    df = pd.DataFrame(rows)
    df["due_at"] = pd.to_datetime(df["due_at"], utc=True, errors="coerce")
    return df.dropna(subset=["due_at"]).reset_index(drop=True)


def load_leitner_entries_df(user_id: str, deck: str) -> pd.DataFrame:
    entries = leitner_db.get_leitner_map_for_deck(user_id, deck)
    if not entries:
        return pd.DataFrame(columns=LEITNER_ENTRY_COLUMNS)

    df = pd.DataFrame(
        [{"vocab_id": doc.vocab_id, "box": doc.box, "due_at": doc.due_at} for doc in entries.values()]
    )
    df["due_at"] = pd.to_datetime(df["due_at"], utc=True, errors="coerce")
    return df.dropna(subset=["due_at"]).reset_index(drop=True)
