import datetime as dt

import pytest

from vocadrill.timeutils import add_days, days_between, parse_iso, to_iso

UTC = dt.timezone.utc


def test_to_iso_matches_javascript_shape():
    value = dt.datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=UTC)
    assert to_iso(value) == "2024-05-06T07:08:09.123Z"


def test_to_iso_converts_offsets_to_utc():
    plus_two = dt.timezone(dt.timedelta(hours=2))
    assert to_iso(dt.datetime(2024, 1, 1, 1, 0, tzinfo=plus_two)) == "2023-12-31T23:00:00.000Z"


@pytest.mark.parametrize(
    "text",
    ["2024-01-01T12:00:00.000Z", "2024-01-01T12:00:00Z", "2024-01-01T13:00:00+01:00", "2024-01-01T12:00:00"],
)
def test_parse_iso_variants(text):
    assert parse_iso(text) == dt.datetime(2024, 1, 1, 12, tzinfo=UTC)


@pytest.mark.parametrize("value", [None, "", "   ", "yesterday", 42])
def test_parse_iso_rejects_garbage(value):
    assert parse_iso(value) is None


def test_iso_strings_sort_chronologically():
    base = dt.datetime(2024, 1, 1, tzinfo=UTC)
    stamps = [base + dt.timedelta(hours=h, milliseconds=ms) for h, ms in [(0, 5), (0, 50), (1, 0), (30, 0)]]
    assert sorted(to_iso(s) for s in stamps) == [to_iso(s) for s in stamps]


def test_days_between():
    start = dt.datetime(2024, 1, 1, tzinfo=UTC)
    assert days_between(start, start + dt.timedelta(hours=36)) == pytest.approx(1.5)
    assert days_between(start, start - dt.timedelta(days=2)) == 0.0
    assert days_between(None, start) == 0.0


def test_add_days_accepts_naive():
    assert add_days(dt.datetime(2024, 2, 28), 2) == dt.datetime(2024, 3, 1, tzinfo=UTC)
