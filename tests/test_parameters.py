import pytest

from vocadrill.fsrs.constants import DEFAULT_WEIGHTS, Rating, is_correct
from vocadrill.fsrs.parameters import DEFAULT_PARAMETERS, FsrsParameters


def test_default_vector_has_seventeen_weights():
    assert len(DEFAULT_PARAMETERS.w) == 17
    assert DEFAULT_PARAMETERS.w == DEFAULT_WEIGHTS


def test_parameters_are_immutable():
    with pytest.raises(AttributeError):
        DEFAULT_PARAMETERS.w = (0.0,) * 17


@pytest.mark.parametrize("raw", [[1.0] * 16, [1.0] * 18, [1.0] * 16 + [float("inf")]])
def test_invalid_vectors_are_rejected(raw):
    with pytest.raises(ValueError):
        FsrsParameters(tuple(raw))


@pytest.mark.parametrize(
    "raw",
    [None, "0.4,1.4", [], [1.0] * 5, ["x"] * 17, [None] * 17, [float("nan")] * 17],
)
def test_coerce_falls_back_to_defaults(raw):
    assert FsrsParameters.coerce(raw) is DEFAULT_PARAMETERS


def test_coerce_accepts_numeric_strings():
    raw = [str(x) for x in DEFAULT_WEIGHTS]
    assert FsrsParameters.coerce(raw) == DEFAULT_PARAMETERS


def test_to_list_round_trips():
    assert FsrsParameters(tuple(DEFAULT_PARAMETERS.to_list())) == DEFAULT_PARAMETERS


@pytest.mark.parametrize(
    "label, expected",
    [
        ("again", Rating.AGAIN),
        ("HARD", Rating.HARD),
        (" good ", Rating.GOOD),
        ("easy", Rating.EASY),
        ("meh", Rating.GOOD),
        (2, Rating.HARD),
        (9, Rating.GOOD),
        (None, Rating.GOOD),
        (Rating.EASY, Rating.EASY),
    ],
)
def test_rating_from_label(label, expected):
    assert Rating.from_label(label) == expected


def test_is_correct_only_rejects_again():
    assert is_correct("again") is False
    assert all(is_correct(label) for label in ("hard", "good", "easy", "unknown"))
