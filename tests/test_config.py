import logging

import pytest

from vocadrill import config


def test_missing_mongo_uri_raises(monkeypatch):
    monkeypatch.delenv("MONGO_URI", raising=False)
    with pytest.raises(ValueError, match="MONGO_URI"):
        config.get_mongo_uri()


def test_test_mode_prefixes_db_name(monkeypatch):
    monkeypatch.delenv("MONGO_DB_NAME", raising=False)
    monkeypatch.setenv("TEST_MODE", "true")
    assert config.get_db_name() == "test_voca_drill"
    monkeypatch.setenv("TEST_MODE", "false")
    assert config.get_db_name() == "voca_drill"


@pytest.mark.parametrize("raw, expected", [("0.85", 0.85), ("1.5", 0.99), ("0", 0.01), ("abc", 0.9), ("nan", 0.9)])
def test_desired_retention(monkeypatch, raw, expected):
    monkeypatch.setenv("DESIRED_RETENTION", raw)
    assert config.get_desired_retention() == pytest.approx(expected)


@pytest.mark.parametrize("raw, expected", [("debug", logging.DEBUG), ("30", 30), ("bogus", logging.INFO)])
def test_log_level(monkeypatch, raw, expected):
    monkeypatch.setenv("LOG_LEVEL", raw)
    assert config.get_log_level() == expected
