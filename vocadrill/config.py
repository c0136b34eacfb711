"""
Environment-backed configuration.

Values are read at call time so tests and scripts can override them
through the environment (or a local .env file).
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

# Load environment
load_dotenv()

DEFAULT_DB_NAME = "voca_drill"
DEFAULT_USER_ID = "demo"


def get_mongo_uri() -> str:
    """
    Get the MongoDB connection string.

    Raises:
        ValueError: If MONGO_URI is not set
    """
    mongo_uri = os.getenv("MONGO_URI")
    if not mongo_uri:
        raise ValueError(
            "MONGO_URI environment variable not set. "
            "Please set it to a MongoDB connection string "
            "(e.g., mongodb://localhost:27017)"
        )
    return mongo_uri


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_db_name() -> str:
    """
    Get the database name, switching to the test database in TEST_MODE.
    """
    name = os.getenv("MONGO_DB_NAME", DEFAULT_DB_NAME)
    if is_test_mode():
        return f"test_{name}"
    return name


def get_default_user_id() -> str:
    """Get default user id for scoping review data."""
    return os.getenv("DEFAULT_USER_ID", DEFAULT_USER_ID)


def get_desired_retention() -> float:
    """
    Target recall probability used to size FSRS intervals.

    Falls back to 0.9 when unset or unparseable; clamped to [0.01, 0.99].
    """
    raw = os.getenv("DESIRED_RETENTION", "0.9")
    try:
        value = float(raw)
    except ValueError:
        return 0.9
    if value != value:  # NaN
        return 0.9
    return max(0.01, min(0.99, value))


def get_log_level() -> int:
    """Resolve LOG_LEVEL (name or number) to a logging level."""
    raw = os.getenv("LOG_LEVEL", "INFO").strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else logging.INFO
