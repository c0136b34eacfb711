import datetime as dt

import pandas as pd
import pytest

from vocadrill.analytics import metrics, service
from vocadrill.analytics.types import DifficultyBuckets, RatingDistribution


def events(now, rows):
    """rows: (days_ago, rating)"""
    df = pd.DataFrame(
        [{"vocab_id": f"v{i}", "rating": r, "timestamp": now - dt.timedelta(days=d)} for i, (d, r) in enumerate(rows)]
    )
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    df["day_utc"] = df["timestamp"].dt.floor("D")
    return df


def fsrs_entries(now, rows):
    """rows: (due_in_days, stability, difficulty)"""
    df = pd.DataFrame(
        [
            {"vocab_id": f"v{i}", "stability": s, "difficulty": d, "due_at": now + dt.timedelta(days=due)}
            for i, (due, s, d) in enumerate(rows)
        ]
    )
    df["due_at"] = pd.to_datetime(df["due_at"], utc=True)
    return df


def test_rating_distribution_counts_today_only(now):
    df = events(now, [(0, "good"), (0, "again"), (0, "good"), (1, "easy"), (0.1, "hard")])
    dist = metrics.compute_rating_distribution(df, now)
    assert dist == RatingDistribution(again=1, hard=1, good=2, easy=0)
    assert dist.total == 4
    assert dist.accuracy == pytest.approx(0.75)


def test_empty_distribution_has_zero_accuracy(now):
    dist = metrics.compute_rating_distribution(pd.DataFrame(), now)
    assert dist.total == 0
    assert dist.accuracy == 0.0


def test_seven_day_retention_window(now):
    # 6 days ago is inside the window, 7 days ago is not
    df = events(now, [(0, "good"), (2, "again"), (6, "easy"), (7, "again"), (30, "again")])
    assert metrics.compute_seven_day_retention(df, now) == pytest.approx(2 / 3)


def test_retention_without_answers_is_zero(now):
    assert metrics.compute_seven_day_retention(events(now, [(20, "good")]), now) == 0.0


def test_forecast_skips_backlog_from_earlier_days(now):
    # -0.25 is earlier today and still counts; -3 is backlog
    df = fsrs_entries(now, [(-3, 1, 5), (-0.25, 1, 5), (0, 1, 5), (1, 1, 5), (1.2, 1, 5), (6, 1, 5), (9, 1, 5)])
    forecast = metrics.compute_forecast(df, now)
    assert list(forecast) == [2, 2, 0, 0, 0, 0, 1]
    assert forecast.index[0] == pd.Timestamp("2024-01-01", tz="UTC")


def test_forecast_for_empty_deck_is_all_zero(now):
    assert list(metrics.compute_forecast(pd.DataFrame(), now)) == [0] * 7


def test_median_stability_of_due_cards(now):
    df = fsrs_entries(now, [(-1, 2.0, 5), (-2, 4.0, 5), (-3, 9.0, 5), (5, 100.0, 5)])
    assert metrics.compute_median_stability(df, now) == pytest.approx(4.0)
    assert metrics.compute_median_stability(fsrs_entries(now, [(3, 2.0, 5)]), now) == 0.0


def test_difficulty_buckets_cover_due_cards_only(now):
    df = fsrs_entries(now, [(0, 1, 1.0), (-1, 1, 4.0), (0, 1, 5.5), (0, 1, 7.0), (-2, 1, 9.9), (1, 1, 9.0)])
    assert metrics.compute_difficulty_buckets(df, now) == DifficultyBuckets(low=2, mid=1, high=2)


def test_box_counts_and_due_count(now):
    df = pd.DataFrame({"vocab_id": ["a", "b", "c"], "box": [1, 1, 3]})
    df["due_at"] = pd.to_datetime([now - dt.timedelta(days=1), now, now + dt.timedelta(days=1)], utc=True)
    assert metrics.compute_box_counts(df) == {1: 2, 2: 0, 3: 1}
    assert metrics.compute_due_count(df, now) == 2


def test_build_deck_dashboard(monkeypatch, now):
    monkeypatch.setattr(service, "load_review_events_df", lambda **kw: events(now, [(0, "good"), (1, "again")]))
    monkeypatch.setattr(service, "load_fsrs_entries_df", lambda uid, deck: fsrs_entries(now, [(-1, 3.0, 8.0), (0.25, 50.0, 2.0)]))
    monkeypatch.setattr(
        service,
        "load_leitner_entries_df",
        lambda uid, deck: pd.DataFrame(
            {"vocab_id": ["a"], "box": [2], "due_at": pd.to_datetime([now], utc=True)}
        ),
    )

    dashboard = service.build_deck_dashboard("u1", "jlpt", now=now)

    assert dashboard.deck == "jlpt"
    assert dashboard.due_now == 1
    assert dashboard.today_mix.good == 1
    assert dashboard.retention_7d == pytest.approx(0.5)
    assert dashboard.forecast_7d.iloc[0] == 1
    assert dashboard.median_stability == pytest.approx(3.0)
    assert dashboard.difficulty_mix == DifficultyBuckets(low=0, mid=0, high=1)
    assert dashboard.box_counts == {1: 0, 2: 1, 3: 0}
