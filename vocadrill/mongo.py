"""
MongoDB connection management.

One client per process, reused across requests; collections are looked up
lazily by name.
"""

from __future__ import annotations

from typing import Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from vocadrill.config import get_db_name, get_mongo_uri

# Collection names
FSRS_COLLECTION = "fsrs_entries"
LEITNER_COLLECTION = "leitner_entries"
PARAMS_COLLECTION = "fsrs_params"
REVIEWS_COLLECTION = "reviews"

# Attempts for optimistic read-modify-write before giving up
MAX_UPDATE_ATTEMPTS = 3

# Global connection pool (reused across requests)
_client: Optional[MongoClient] = None


class ConcurrentUpdateError(RuntimeError):
    """Another writer kept changing the same entry during an update."""


def get_client() -> MongoClient:
    """
    Get the shared MongoClient, creating it on first use.

    Raises:
        ValueError: If MONGO_URI is not configured
    """
    global _client

    if _client is not None:
        return _client

    _client = MongoClient(
        get_mongo_uri(),
        maxPoolSize=10,  # Connection pool size
        minPoolSize=1,   # Keep at least 1 connection alive
        maxIdleTimeMS=60000  # Keep connections alive for 60 seconds
    )
    return _client


def get_database() -> Database:
    return get_client()[get_db_name()]


def get_collection(name: str) -> Collection:
    return get_database()[name]


def close_client() -> None:
    """Close the shared client (next call to get_client reconnects)."""
    global _client
    if _client is not None:
        _client.close()
        _client = None


def entry_key(deck: str, vocab_id: str) -> str:
    """Composite key used for both scheduling tracks."""
    return f"{deck}:{vocab_id}"


def revision_filter(revision: int) -> dict:
    """Match a stored revision; 0 also matches documents written without one."""
    if revision:
        return {"revision": revision}
    return {"revision": {"$in": [0, None]}}
