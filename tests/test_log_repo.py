import datetime as dt

import pytest

from vocadrill import log_repo
from vocadrill.fsrs.constants import Rating
from vocadrill.fsrs.optimizer import ReviewLog


def test_record_event_stores_label(collection, now):
    doc = log_repo.record_review_event("u1", "jlpt", "v1", "EASY", now=now, collection=collection)

    stored = collection.insert_one.call_args.args[0]
    assert stored == {"uid": "u1", "deck": "jlpt", "vocabId": "v1", "rating": "easy", "createdAt": now}
    assert doc.rating == "easy"


def test_record_event_unknown_rating_becomes_good(collection, now):
    log_repo.record_review_event("u1", "jlpt", "v1", "meh", now=now, collection=collection)
    assert collection.insert_one.call_args.args[0]["rating"] == "good"


def test_get_review_events_filters_and_normalizes(collection, now):
    since = now - dt.timedelta(days=6)
    collection.find.return_value.sort.return_value = [
        {"deck": "jlpt", "vocabId": "v1", "rating": "good", "createdAt": now.replace(tzinfo=None)},
        {"deck": "jlpt", "vocabId": "v2", "rating": "again"},
    ]

    events = log_repo.get_review_events("u1", deck="jlpt", since=since, collection=collection)

    assert collection.find.call_args.args[0] == {"uid": "u1", "deck": "jlpt", "createdAt": {"$gte": since}}
    assert events == [{"deck": "jlpt", "vocab_id": "v1", "rating": "good", "timestamp": now}]


def test_parse_export_shape():
    log = log_repo.parse_review_log(
        {"cardId": "jlpt:v1", "reviewTimestamp": "2024-01-01T12:00:00.000Z", "userRating": 1}
    )
    assert log == ReviewLog(
        "jlpt:v1", dt.datetime(2024, 1, 1, 12, tzinfo=dt.timezone.utc), Rating.AGAIN
    )


def test_parse_event_shape(now):
    log = log_repo.parse_review_log({"deck": "jlpt", "vocabId": "v1", "rating": "hard", "createdAt": now})
    assert log.card_id == "jlpt:v1"
    assert log.user_rating == Rating.HARD
    assert log.review_timestamp == now


@pytest.mark.parametrize(
    "row",
    [
        {"vocabId": "v1", "rating": "good", "createdAt": "2024-01-01T00:00:00Z"},
        {"deck": "jlpt", "rating": "good", "createdAt": "2024-01-01T00:00:00Z"},
        {"cardId": "jlpt:v1", "userRating": 3},
        {"cardId": "jlpt:v1", "reviewTimestamp": "not a date", "userRating": 3},
    ],
)
def test_rows_without_card_or_timestamp_are_dropped(row):
    assert log_repo.parse_review_log(row) is None


def test_unknown_ratings_default_to_good():
    logs = log_repo.parse_review_logs([
        {"cardId": "a", "reviewTimestamp": "2024-01-01T00:00:00Z", "userRating": 7},
        {"cardId": "b", "reviewTimestamp": "2024-01-01T00:00:00Z", "userRating": "whatever"},
        {"cardId": "c"},
    ])
    assert [log.user_rating for log in logs] == [Rating.GOOD, Rating.GOOD]


def test_export_review_logs(collection, now):
    collection.find.return_value.sort.return_value = [
        {"deck": "jlpt", "vocabId": "v1", "rating": "again", "createdAt": now},
        {"deck": "jlpt", "rating": "good", "createdAt": now},
    ]
    logs = log_repo.export_review_logs("u1", collection=collection)
    assert [log.card_id for log in logs] == ["jlpt:v1"]


def test_review_log_to_dict(now):
    log = ReviewLog("jlpt:v1", now, Rating.EASY)
    assert log_repo.review_log_to_dict(log) == {
        "cardId": "jlpt:v1",
        "reviewTimestamp": "2024-01-01T12:00:00.000Z",
        "userRating": 4,
    }
