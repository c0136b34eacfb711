"""
Database - Leitner Database I/O Operations

Handles all database operations for Leitner entries.
Box logic lives in boxes.py, session selection in session.py.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Mapping, Optional

from pydantic import ValidationError
from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from vocadrill.leitner.boxes import LeitnerEntry, new_entry, update_box_on_quiz
from vocadrill.leitner.constants import BOXES, SESSION_SIZE
from vocadrill.leitner.session import group_by_box, select_session
from vocadrill.logging_config import get_logger
from vocadrill.mongo import (
    ConcurrentUpdateError,
    LEITNER_COLLECTION,
    MAX_UPDATE_ATTEMPTS,
    entry_key,
    get_collection,
    revision_filter,
)
from vocadrill.schemas import LeitnerEntryDocument
from vocadrill.timeutils import ensure_utc, to_iso, utc_now

logger = get_logger(__name__)


def _entries(collection: Optional[Collection]) -> Collection:
    return collection if collection is not None else get_collection(LEITNER_COLLECTION)


def init_db(collection: Optional[Collection] = None) -> None:
    """
    Create indexes for the Leitner collection.

    Safe to call multiple times.
    """
    entries = _entries(collection)
    entries.create_index([("uid", ASCENDING), ("key", ASCENDING)], unique=True)
    entries.create_index([("uid", ASCENDING), ("deck", ASCENDING), ("dueAt", ASCENDING)])
    entries.create_index([("uid", ASCENDING), ("deck", ASCENDING), ("box", ASCENDING)])


def _parse_documents(rows: Iterable[dict]) -> list[LeitnerEntryDocument]:
    documents = []
    for row in rows:
        try:
            documents.append(LeitnerEntryDocument.model_validate(row))
        except ValidationError as exc:
            logger.debug("Skipping malformed Leitner entry %s: %s", row.get("key"), exc)
    return documents


def _to_document(
    user_id: str,
    entry: LeitnerEntry,
    created_at: datetime,
    updated_at: datetime,
    revision: int
) -> LeitnerEntryDocument:
    return LeitnerEntryDocument(
        uid=user_id,
        key=entry_key(entry.deck, entry.vocab_id),
        deck=entry.deck,
        vocab_id=entry.vocab_id,
        box=entry.box,
        due_at=to_iso(entry.due_at),
        created_at=created_at,
        updated_at=updated_at,
        revision=revision,
    )


# ---- Reads ----

def get_leitner_map_for_deck(
    user_id: str,
    deck: str,
    collection: Optional[Collection] = None
) -> dict[str, LeitnerEntryDocument]:
    """
    Load all Leitner entries of a deck, keyed by vocab id.
    """
    rows = _entries(collection).find({"uid": user_id, "deck": deck})
    return {doc.vocab_id: doc for doc in _parse_documents(rows)}


def load_leitner_entry(
    user_id: str,
    deck: str,
    vocab_id: str,
    collection: Optional[Collection] = None
) -> Optional[LeitnerEntryDocument]:
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
    rows = (
        _entries(collection)
        .find({"uid": user_id, "deck": deck})
        .sort("dueAt", ASCENDING)
        .limit(max_count)
    )
    return [row["vocabId"] for row in rows if isinstance(row.get("vocabId"), str)]


def count_due_for_deck(
    user_id: str,
    deck: str,
    now: Optional[datetime] = None,
    collection: Optional[Collection] = None
) -> int:
    now = ensure_utc(now) if now is not None else utc_now()
    return _entries(collection).count_documents(
        {"uid": user_id, "deck": deck, "dueAt": {"$lte": to_iso(now)}}
    )


def get_box_ids(
    user_id: str,
    deck: str,
    box: int,
    max_count: int = 30,
    collection: Optional[Collection] = None
) -> list[str]:
    """
    Vocab ids in one box, earliest due first.
    """
    rows = (
        _entries(collection)
        .find({"uid": user_id, "deck": deck, "box": box})
        .sort("dueAt", ASCENDING)
        .limit(max_count)
    )
    return [row["vocabId"] for row in rows if isinstance(row.get("vocabId"), str)]


def get_entries_by_box(
    user_id: str,
    deck: str,
    collection: Optional[Collection] = None
) -> dict[int, list[LeitnerEntry]]:
    """
    All entries of a deck grouped by box (every box present, maybe empty).
    """
    documents = get_leitner_map_for_deck(user_id, deck, collection).values()
    return group_by_box([doc.to_entry() for doc in documents])


def select_vocab_ids_by_frequency(
    user_id: str,
    deck: str,
    session_size: int = SESSION_SIZE,
    weights: Optional[Mapping[int, float]] = None,
    capacities: Optional[Mapping[int, int]] = None,
    prefer_due: bool = True,
    now: Optional[datetime] = None,
    collection: Optional[Collection] = None
) -> list[str]:
    """
    Plan a study session for a deck with weighted box quotas.

    See session.select_session for the allocation rules.
    """
    entries_by_box = get_entries_by_box(user_id, deck, collection)
    session = select_session(
        entries_by_box,
        session_size=session_size,
        weights=weights,
        capacities=capacities,
        prefer_due=prefer_due,
        now=now,
    )
    logger.debug(
        "Planned %d/%d cards for %s/%s (box sizes %s)",
        len(session),
        session_size,
        user_id,
        deck,
        {box: len(entries_by_box[box]) for box in BOXES},
    )
    return session


# ---- Writes ----

def ensure_leitner_entries(
    user_id: str,
    deck: str,
    vocab_ids: Iterable[str],
    now: Optional[datetime] = None,
    collection: Optional[Collection] = None
) -> int:
    """
    Seed box-1 entries (due now) for cards that have none yet.

    Returns:
        Number of entries created
    """
    entries = _entries(collection)
    now = ensure_utc(now) if now is not None else utc_now()
    created = 0
    for vocab_id in vocab_ids:
        document = _to_document(user_id, new_entry(deck, vocab_id, now), now, now, 0)
        result = entries.update_one(
            {"uid": user_id, "key": document.key},
            {"$setOnInsert": document.to_mongo()},
            upsert=True,
        )
        if result.upserted_id is not None:
            created += 1

    if created:
        logger.info("Seeded %d Leitner entries for %s/%s", created, user_id, deck)
    return created


def update_leitner_on_quiz(
    user_id: str,
    deck: str,
    vocab_id: str,
    is_correct: bool,
    now: Optional[datetime] = None,
    collection: Optional[Collection] = None
) -> LeitnerEntryDocument:
    """
    Apply one quiz answer to a card and persist the new Leitner entry.

    Raises:
        ConcurrentUpdateError: If the entry kept changing underneath us
    """
    entries = _entries(collection)
    now = ensure_utc(now) if now is not None else utc_now()
    key = entry_key(deck, vocab_id)

    for attempt in range(1, MAX_UPDATE_ATTEMPTS + 1):
        row = entries.find_one({"uid": user_id, "key": key})
        documents = _parse_documents([row]) if row is not None else []
        previous = documents[0] if documents else None
        if previous is not None:
            current = previous.to_entry()
        elif row is not None:
            # Unreadable row: keep its box, treat it as due now
            current = LeitnerEntry(deck=deck, vocab_id=vocab_id, box=row.get("box"), due_at=now)
        else:
            current = None
        updated = update_box_on_quiz(
            current,
            is_correct,
            now=now,
            deck=deck,
            vocab_id=vocab_id,
        )
        document = _to_document(
            user_id,
            updated,
            created_at=(previous.created_at if previous and previous.created_at else now),
            updated_at=now,
            revision=(previous.revision + 1) if previous else 1,
        )

        if row is not None and previous is None:
            logger.warning("Overwriting unreadable Leitner entry %s for %s", key, user_id)
            entries.replace_one({"uid": user_id, "key": key}, document.to_mongo(), upsert=True)
            return document

        if previous is None:
            try:
                entries.insert_one(document.to_mongo())
                return document
            except DuplicateKeyError:
                logger.warning("Leitner entry %s created concurrently (attempt %d)", key, attempt)
                continue

        replaced = entries.replace_one(
            {"uid": user_id, "key": key, **revision_filter(previous.revision)},
            document.to_mongo(),
        )
        if replaced.matched_count == 1:
            return document
        logger.warning("Leitner entry %s changed during update (attempt %d)", key, attempt)

    raise ConcurrentUpdateError(
        f"Leitner entry {key} for {user_id} changed {MAX_UPDATE_ATTEMPTS} times during update"
    )
