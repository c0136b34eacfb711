import datetime as dt

import pytest

from vocadrill.leitner.boxes import LeitnerEntry, clamp_box, new_entry, next_box, update_box_on_quiz


def test_box_one_correct_moves_to_box_two_due_in_three_days(now):
    entry = LeitnerEntry("jlpt", "v1", 1, now)
    updated = update_box_on_quiz(entry, True, now=now)
    assert updated.box == 2
    assert updated.due_at == now + dt.timedelta(days=3)


@pytest.mark.parametrize(
    "box, correct, expected_box, expected_days",
    [
        (1, True, 2, 3),
        (2, True, 3, 5),
        (3, True, 3, 5),
        (3, False, 2, 3),
        (2, False, 1, 1),
        (1, False, 1, 1),
    ],
)
def test_box_transitions(now, box, correct, expected_box, expected_days):
    entry = LeitnerEntry("jlpt", "v1", box, now - dt.timedelta(days=30))
    updated = update_box_on_quiz(entry, correct, now=now)
    assert updated.box == expected_box
    assert updated.due_at == now + dt.timedelta(days=expected_days)


def test_due_date_counts_from_the_answer_not_the_old_due_date(now):
    late = LeitnerEntry("jlpt", "v1", 2, now - dt.timedelta(days=10))
    assert update_box_on_quiz(late, True, now=now).due_at == now + dt.timedelta(days=5)


def test_missing_entry_starts_in_box_one(now):
    correct = update_box_on_quiz(None, True, now=now, deck="jlpt", vocab_id="v9")
    wrong = update_box_on_quiz(None, False, now=now, deck="jlpt", vocab_id="v9")
    assert (correct.box, correct.due_at) == (2, now + dt.timedelta(days=3))
    assert (wrong.box, wrong.due_at) == (1, now + dt.timedelta(days=1))
    assert correct.deck == "jlpt" and correct.vocab_id == "v9"


def test_missing_entry_needs_identity(now):
    with pytest.raises(ValueError):
        update_box_on_quiz(None, True, now=now)


def test_new_entry_is_due_immediately(now):
    entry = new_entry("jlpt", "v1", now)
    assert entry.box == 1
    assert entry.is_due(now)
    assert not entry.is_due(now - dt.timedelta(seconds=1))


@pytest.mark.parametrize("raw, expected", [(0, 1), (-5, 1), (4, 3), ("2", 2), (None, 1), ("x", 1)])
def test_clamp_box(raw, expected):
    assert clamp_box(raw) == expected


def test_entries_clamp_out_of_range_boxes(now):
    assert LeitnerEntry("d", "v", 9, now).box == 3


@pytest.mark.parametrize("box", [1, 2, 3])
def test_next_box_stays_in_range(box):
    for correct in (True, False):
        assert 1 <= next_box(box, correct) <= 3
