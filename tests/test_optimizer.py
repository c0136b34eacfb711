import datetime as dt
import math

import pytest

from vocadrill.fsrs.constants import DEFAULT_WEIGHTS, Rating
from vocadrill.fsrs.optimizer import (
    ReviewLog,
    bce_loss,
    evaluate_parameters,
    group_logs_by_card,
    select_best_parameters,
    simulate_loss,
)
from vocadrill.fsrs.parameters import FsrsParameters

START = dt.datetime(2024, 1, 1, 9, 0, tzinfo=dt.timezone.utc)
GAPS = [0, 1, 4, 12, 30]


def history(card_id, rating):
    return [
        ReviewLog(card_id, START + dt.timedelta(days=sum(GAPS[: i + 1])), rating)
        for i in range(len(GAPS))
    ]


def test_bce_is_clamped():
    assert bce_loss(1.0, 1.0) == pytest.approx(0.0, abs=1e-7)
    assert bce_loss(0.0, 1.0) == pytest.approx(-math.log(1e-8), rel=1e-6)
    assert bce_loss(1.0, 0.0) < float("inf")


def test_no_logs_means_zero_loss(params):
    assert simulate_loss([], params) == 0.0


def test_all_good_history_scores_better_than_all_again(params):
    good = simulate_loss(history("d:1", Rating.GOOD), params)
    again = simulate_loss(history("d:1", Rating.AGAIN), params)
    assert good < again


def test_log_order_does_not_matter(params):
    logs = history("d:1", Rating.GOOD) + history("d:2", Rating.HARD) + history("d:3", Rating.AGAIN)
    assert simulate_loss(list(reversed(logs)), params) == pytest.approx(simulate_loss(logs, params))


def test_group_logs_sorts_each_card_ascending():
    logs = list(reversed(history("d:1", Rating.GOOD)))
    grouped = group_logs_by_card(logs)
    stamps = [log.review_timestamp for log in grouped["d:1"]]
    assert stamps == sorted(stamps)


def test_cards_are_replayed_independently(params):
    a = history("d:a", Rating.GOOD)
    b = history("d:b", Rating.AGAIN)
    combined = simulate_loss(a + b, params)
    expected = (simulate_loss(a, params) + simulate_loss(b, params)) / 2
    assert combined == pytest.approx(expected)


def test_evaluate_reports_counts(params):
    logs = history("d:1", Rating.GOOD) + history("d:2", Rating.EASY)
    result = evaluate_parameters(logs, params)
    assert result.review_count == 2 * len(GAPS)
    assert result.card_count == 2
    assert result.loss == pytest.approx(simulate_loss(logs, params))
    assert result.parameters is params


def test_select_best_returns_lowest_loss(params):
    weights = list(DEFAULT_WEIGHTS)
    weights[2] = 0.01
    weak = FsrsParameters(tuple(weights))
    logs = history("d:1", Rating.GOOD) + history("d:2", Rating.GOOD)

    best = select_best_parameters(logs, [weak, params])

    losses = [simulate_loss(logs, weak), simulate_loss(logs, params)]
    assert best.loss == pytest.approx(min(losses))


def test_select_best_keeps_first_on_tie(params):
    twin = FsrsParameters(tuple(DEFAULT_WEIGHTS))
    best = select_best_parameters(history("d:1", Rating.GOOD), [params, twin])
    assert best.parameters is params


def test_select_best_needs_candidates():
    with pytest.raises(ValueError):
        select_best_parameters([], [])


def test_replay_seeds_stability_on_first_review(params):
    # After a first "good" the card holds S = w[2], so recall one day later is likely
    logs = [
        ReviewLog("d:1", START, Rating.GOOD),
        ReviewLog("d:1", START + dt.timedelta(days=1), Rating.GOOD),
    ]
    day_one_recall = (1 + 19 / 81 / DEFAULT_WEIGHTS[2]) ** -0.5
    assert simulate_loss(logs, params) == pytest.approx(-math.log(day_one_recall) / 2, rel=1e-3)
