import datetime as dt
from unittest.mock import MagicMock

import pytest

from vocadrill.fsrs.parameters import DEFAULT_PARAMETERS


@pytest.fixture
def now():
    return dt.datetime(2024, 1, 1, 12, 0, 0, tzinfo=dt.timezone.utc)


@pytest.fixture
def params():
    return DEFAULT_PARAMETERS


@pytest.fixture
def collection():
    """A pymongo collection double; configure return values per test."""
    coll = MagicMock()
    coll.find_one.return_value = None
    return coll
