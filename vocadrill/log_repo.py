"""
MongoDB repository for review logs.

Tracks every answer in an append-only `reviews` collection.
Statistics and parameter evaluation read from here; nothing is ever updated.

Two row shapes are understood when ingesting history:
- stored events: {deck, vocabId, rating: "good", createdAt}
- exported logs: {cardId: "deck:vocabId", reviewTimestamp, userRating: 3}
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from pymongo import ASCENDING
from pymongo.collection import Collection

from vocadrill.fsrs.constants import RATING_LABELS, Rating
from vocadrill.fsrs.optimizer import ReviewLog
from vocadrill.logging_config import get_logger
from vocadrill.mongo import REVIEWS_COLLECTION, entry_key, get_collection
from vocadrill.schemas import ReviewEventDocument
from vocadrill.timeutils import ensure_utc, parse_iso, to_iso, utc_now

logger = get_logger(__name__)


def _reviews(collection: Optional[Collection]) -> Collection:
    return collection if collection is not None else get_collection(REVIEWS_COLLECTION)


def init_db(collection: Optional[Collection] = None) -> None:
    """Create indexes for the reviews collection."""
    _reviews(collection).create_index(
        [("uid", ASCENDING), ("deck", ASCENDING), ("createdAt", ASCENDING)]
    )


# ---- Writes ----

def record_review_event(
    user_id: str,
    deck: str,
    vocab_id: str,
    rating: object,
    now: Optional[datetime] = None,
    collection: Optional[Collection] = None
) -> ReviewEventDocument:
    """
    Append one answer to the review log.

    The rating is stored as its label; unknown labels are recorded as "good".
    """
    grade = Rating.from_label(rating)
    if isinstance(rating, str) and rating.strip().lower() not in RATING_LABELS:
        logger.debug("Unknown rating %r for %s:%s, recorded as %s", rating, deck, vocab_id, grade.label)

    document = ReviewEventDocument(
        uid=user_id,
        deck=deck,
        vocab_id=vocab_id,
        rating=grade.label,
        created_at=ensure_utc(now) if now is not None else utc_now(),
    )
    _reviews(collection).insert_one(document.to_mongo())
    return document


# ---- Reads ----

def get_review_events(
    user_id: str,
    deck: Optional[str] = None,
    since: Optional[datetime] = None,
    collection: Optional[Collection] = None
) -> list[dict]:
    """
    Get review events of a user, oldest first.

    Args:
        user_id: User identifier for scoping review data
        deck: Restrict to one deck (all decks if None)
        since: Only events at or after this time

    Returns:
        List of event dicts with keys deck, vocab_id, rating, timestamp
    """
    query: dict[str, Any] = {"uid": user_id}
    if deck is not None:
        query["deck"] = deck
    if since is not None:
        query["createdAt"] = {"$gte": ensure_utc(since)}

    rows = _reviews(collection).find(query).sort("createdAt", ASCENDING)

    result = []
    for row in rows:
        timestamp = parse_iso(row.get("createdAt"))
        if timestamp is None or not row.get("vocabId"):
            continue
        result.append({
            "deck": row.get("deck"),
            "vocab_id": row["vocabId"],
            "rating": str(row.get("rating", "")),
            "timestamp": timestamp,
        })
    return result


# ---- Replay ingestion ----

def parse_review_log(row: Mapping[str, Any]) -> Optional[ReviewLog]:
    """
    Convert a stored event or an exported log row into a ReviewLog.

    Returns:
        The log, or None if the row has no card id or no parseable timestamp
    """
    card_id = row.get("cardId")
    if not card_id:
        deck, vocab_id = row.get("deck"), row.get("vocabId")
        card_id = entry_key(deck, vocab_id) if deck and vocab_id else None

    timestamp = parse_iso(row.get("reviewTimestamp", row.get("createdAt")))

    if not card_id or timestamp is None:
        logger.debug("Dropping review row without card id or timestamp: %r", row)
        return None

    rating = row.get("userRating", row.get("rating"))
    return ReviewLog(
        card_id=str(card_id),
        review_timestamp=timestamp,
        user_rating=Rating.from_label(rating),
    )


def parse_review_logs(rows: Iterable[Mapping[str, Any]]) -> list[ReviewLog]:
    logs = []
    for row in rows:
        log = parse_review_log(row)
        if log is not None:
            logs.append(log)
    return logs


def export_review_logs(
    user_id: str,
    deck: Optional[str] = None,
    collection: Optional[Collection] = None
) -> list[ReviewLog]:
    """
    Load a user's review history in replay form.
    """
    query: dict[str, Any] = {"uid": user_id}
    if deck is not None:
        query["deck"] = deck
    rows = _reviews(collection).find(query).sort("createdAt", ASCENDING)
    logs = parse_review_logs(rows)
    logger.info("Exported %d review logs for %s", len(logs), user_id)
    return logs


def review_log_to_dict(log: ReviewLog) -> dict:
    """Export shape: {cardId, reviewTimestamp, userRating}."""
    return {
        "cardId": log.card_id,
        "reviewTimestamp": to_iso(log.review_timestamp),
        "userRating": int(log.user_rating),
    }
