"""
Database - FSRS Database I/O Operations

Handles all database operations for FSRS entries and per-user parameters.
Uses pymongo with one document per (user, deck, card).

This module handles ONLY database I/O.
Algorithm logic is handled by the scheduler module.

Updates are optimistic: every entry carries a `revision` counter, writes
filter on the revision that was read, and a lost race is retried.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from pydantic import ValidationError
from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from vocadrill import config
from vocadrill.fsrs.constants import Rating
from vocadrill.fsrs.memory_state import initialize_new_card
from vocadrill.fsrs.parameters import DEFAULT_PARAMETERS, FsrsParameters
from vocadrill.fsrs.scheduler import schedule
from vocadrill.logging_config import get_logger
from vocadrill.mongo import (
    ConcurrentUpdateError,
    FSRS_COLLECTION,
    MAX_UPDATE_ATTEMPTS,
    PARAMS_COLLECTION,
    entry_key,
    get_collection,
    revision_filter,
)
from vocadrill.schemas import FsrsEntryDocument, MemoryStateDocument, ParametersDocument
from vocadrill.timeutils import ensure_utc, to_iso, utc_now

logger = get_logger(__name__)


def _entries(collection: Optional[Collection]) -> Collection:
    return collection if collection is not None else get_collection(FSRS_COLLECTION)


def _params(collection: Optional[Collection]) -> Collection:
    return collection if collection is not None else get_collection(PARAMS_COLLECTION)


def init_db(
    collection: Optional[Collection] = None,
    params_collection: Optional[Collection] = None
) -> None:
    """
    Create indexes for the FSRS collections.

    Safe to call multiple times.
    """
    entries = _entries(collection)
    entries.create_index([("uid", ASCENDING), ("key", ASCENDING)], unique=True)
    entries.create_index([("uid", ASCENDING), ("deck", ASCENDING), ("dueAt", ASCENDING)])
    _params(params_collection).create_index([("uid", ASCENDING)], unique=True)


def _parse_documents(rows: Iterable[dict]) -> list[FsrsEntryDocument]:
    documents = []
    for row in rows:
        try:
            documents.append(FsrsEntryDocument.model_validate(row))
        except ValidationError as exc:
            logger.debug("Skipping malformed FSRS entry %s: %s", row.get("key"), exc)
    return documents


def new_fsrs_document(
    user_id: str,
    deck: str,
    vocab_id: str,
    now: Optional[datetime] = None
) -> FsrsEntryDocument:
    """Default entry for a card that has never been reviewed (due now)."""
    now = ensure_utc(now) if now is not None else utc_now()
    return FsrsEntryDocument(
        uid=user_id,
        key=entry_key(deck, vocab_id),
        deck=deck,
        vocab_id=vocab_id,
        state=MemoryStateDocument.from_state(initialize_new_card()),
        next_interval_days=0,
        due_at=to_iso(now),
        created_at=now,
        updated_at=now,
        revision=0,
    )


# ---- Reads ----

def get_fsrs_map_for_deck(
    user_id: str,
    deck: str,
    collection: Optional[Collection] = None
) -> dict[str, FsrsEntryDocument]:
    """
    Load all FSRS entries of a deck, keyed by vocab id.
    """
    rows = _entries(collection).find({"uid": user_id, "deck": deck})
    return {doc.vocab_id: doc for doc in _parse_documents(rows)}


def load_fsrs_entry(
    user_id: str,
    deck: str,
    vocab_id: str,
    collection: Optional[Collection] = None
) -> Optional[FsrsEntryDocument]:
    """
    Load one FSRS entry.

    Returns:
        The entry, or None if the card has no (readable) entry yet
    """
    row = _entries(collection).find_one({"uid": user_id, "key": entry_key(deck, vocab_id)})
    if row is None:
        return None
    documents = _parse_documents([row])
    return documents[0] if documents else None


def get_due_vocab_ids_for_deck(
    user_id: str,
    deck: str,
    max_count: int = 50,
    now: Optional[datetime] = None,
    collection: Optional[Collection] = None
) -> list[str]:
    """
    Vocab ids whose dueAt has passed, most overdue first.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    rows = (
        _entries(collection)
        .find({"uid": user_id, "deck": deck, "dueAt": {"$lte": to_iso(now)}})
        .sort("dueAt", ASCENDING)
        .limit(max_count)
    )
    return [row["vocabId"] for row in rows if isinstance(row.get("vocabId"), str)]


def get_upcoming_vocab_ids_for_deck(
    user_id: str,
    deck: str,
    max_count: int = 50,
    collection: Optional[Collection] = None
) -> list[str]:
    """
    Vocab ids of the deck in dueAt order, due or not.
    """
    rows = (
        _entries(collection)
        .find({"uid": user_id, "deck": deck})
        .sort("dueAt", ASCENDING)
        .limit(max_count)
    )
    return [row["vocabId"] for row in rows if isinstance(row.get("vocabId"), str)]


def count_overdue_for_deck(
    user_id: str,
    deck: str,
    now: Optional[datetime] = None,
    collection: Optional[Collection] = None
) -> int:
    now = ensure_utc(now) if now is not None else utc_now()
    return _entries(collection).count_documents(
        {"uid": user_id, "deck": deck, "dueAt": {"$lt": to_iso(now)}}
    )


def load_due_entries_for_deck(
    user_id: str,
    deck: str,
    max_count: int = 50,
    now: Optional[datetime] = None,
    collection: Optional[Collection] = None
) -> list[FsrsEntryDocument]:
    """
    Load due FSRS entries (dueAt <= now), most overdue first.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    rows = (
        _entries(collection)
        .find({"uid": user_id, "deck": deck, "dueAt": {"$lte": to_iso(now)}})
        .sort("dueAt", ASCENDING)
        .limit(max_count)
    )
    return _parse_documents(rows)


# ---- Writes ----

def ensure_fsrs_entries(
    user_id: str,
    deck: str,
    vocab_ids: Iterable[str],
    now: Optional[datetime] = None,
    collection: Optional[Collection] = None
) -> int:
    """
    Seed default entries for cards that have none yet.

    Existing entries are left untouched.

    Returns:
        Number of entries created
    """
    entries = _entries(collection)
    created = 0
    for vocab_id in vocab_ids:
        document = new_fsrs_document(user_id, deck, vocab_id, now)
        result = entries.update_one(
            {"uid": user_id, "key": document.key},
            {"$setOnInsert": document.to_mongo()},
            upsert=True,
        )
        if result.upserted_id is not None:
            created += 1

    if created:
        logger.info("Seeded %d FSRS entries for %s/%s", created, user_id, deck)
    return created


def update_fsrs_on_answer(
    user_id: str,
    deck: str,
    vocab_id: str,
    rating: object,
    desired_retention: Optional[float] = None,
    params: Optional[FsrsParameters] = None,
    now: Optional[datetime] = None,
    collection: Optional[Collection] = None,
    params_collection: Optional[Collection] = None
) -> FsrsEntryDocument:
    """
    Apply one answer to a card and persist the new FSRS entry.

    Args:
        user_id: User identifier for scoping review data
        deck: Deck id
        vocab_id: Card id
        rating: "again" | "hard" | "good" | "easy" (unknown labels count as "good")
        desired_retention: Target retention (defaults to DESIRED_RETENTION)
        params: Weight vector (defaults to the user's stored vector)
        now: Review time (defaults to current UTC time)

    Returns:
        The persisted entry

    Raises:
        ConcurrentUpdateError: If the entry kept changing underneath us
    """
    entries = _entries(collection)
    grade = Rating.from_label(rating)
    now = ensure_utc(now) if now is not None else utc_now()
    if desired_retention is None:
        desired_retention = config.get_desired_retention()
    if params is None:
        params = get_fsrs_parameters_for_user(user_id, params_collection)
    key = entry_key(deck, vocab_id)

    for attempt in range(1, MAX_UPDATE_ATTEMPTS + 1):
        row = entries.find_one({"uid": user_id, "key": key})
        documents = _parse_documents([row]) if row is not None else []
        previous = documents[0] if documents else None
        state = previous.state.to_state() if previous else initialize_new_card()
        result = schedule(state, grade, desired_retention, params, now=now)

        document = FsrsEntryDocument(
            uid=user_id,
            key=key,
            deck=deck,
            vocab_id=vocab_id,
            state=MemoryStateDocument.from_state(result.new_state),
            next_interval_days=result.next_interval_days,
            due_at=to_iso(result.next_due_at),
            created_at=(previous.created_at if previous and previous.created_at else now),
            updated_at=now,
            revision=(previous.revision + 1) if previous else 1,
        )

        if row is not None and previous is None:
            # Unreadable row: rebuild it from a new-card state
            logger.warning("Overwriting unreadable FSRS entry %s for %s", key, user_id)
            entries.replace_one({"uid": user_id, "key": key}, document.to_mongo(), upsert=True)
            return document

        if previous is None:
            try:
                entries.insert_one(document.to_mongo())
                return document
            except DuplicateKeyError:
                logger.warning("FSRS entry %s created concurrently (attempt %d)", key, attempt)
                continue

        replaced = entries.replace_one(
            {"uid": user_id, "key": key, **revision_filter(previous.revision)},
            document.to_mongo(),
        )
        if replaced.matched_count == 1:
            return document
        logger.warning("FSRS entry %s changed during update (attempt %d)", key, attempt)

    raise ConcurrentUpdateError(
        f"FSRS entry {key} for {user_id} changed {MAX_UPDATE_ATTEMPTS} times during update"
    )


# ---- Parameters ----

def get_fsrs_parameters_for_user(
    user_id: str,
    collection: Optional[Collection] = None
) -> FsrsParameters:
    """
    Load a user's weight vector.

    Absent or malformed records fall back to the default vector.
    """
    row = _params(collection).find_one({"uid": user_id})
    if row is None:
        return DEFAULT_PARAMETERS
    try:
        document = ParametersDocument.model_validate(row)
    except ValidationError:
        logger.debug("Malformed FSRS parameters for %s, using defaults", user_id)
        return DEFAULT_PARAMETERS
    return FsrsParameters.coerce(document.w)


def set_fsrs_parameters_for_user(
    user_id: str,
    params: FsrsParameters,
    now: Optional[datetime] = None,
    collection: Optional[Collection] = None
) -> None:
    now = ensure_utc(now) if now is not None else utc_now()
    _params(collection).update_one(
        {"uid": user_id},
        {"$set": {"w": params.to_list(), "updatedAt": now}},
        upsert=True,
    )
