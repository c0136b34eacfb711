"""
Pydantic models for the MongoDB scheduling documents.

Field names on disk are camelCase (deck, vocabId, dueAt, ...) so the
documents stay compatible with entries written by the web client.
Scheduling timestamps (dueAt, lastReviewedAt) are stored as ISO-8601
strings; createdAt / updatedAt are BSON dates.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vocadrill.fsrs.constants import CardLifecycle, D_BASELINE, S_MIN
from vocadrill.fsrs.memory_state import MemoryState
from vocadrill.leitner.boxes import LeitnerEntry, clamp_box
from vocadrill.timeutils import parse_iso, to_iso


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_mongo(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# ---- FSRS ----

class MemoryStateDocument(_Document):
    """Nested `state` object of an FSRS entry."""
    stability: Optional[float] = S_MIN
    difficulty: Optional[float] = D_BASELINE
    last_reviewed_at: Optional[str] = Field(default=None, alias="lastReviewedAt")
    state: CardLifecycle = CardLifecycle.NEW

    @field_validator("state", mode="before")
    @classmethod
    def _known_lifecycle(cls, value: Any) -> Any:
        if isinstance(value, CardLifecycle):
            return value
        try:
            return CardLifecycle(value)
        except ValueError:
            return CardLifecycle.NEW

    @field_validator("last_reviewed_at", mode="before")
    @classmethod
    def _iso_or_none(cls, value: Any) -> Any:
        if value is None:
            return None
        parsed = parse_iso(value)
        return to_iso(parsed) if parsed is not None else None

    @classmethod
    def from_state(cls, state: MemoryState) -> "MemoryStateDocument":
        return cls(
            stability=state.stability,
            difficulty=state.difficulty,
            last_reviewed_at=to_iso(state.last_reviewed_at) if state.last_reviewed_at else None,
            state=state.state,
        )

    def to_state(self) -> MemoryState:
        return MemoryState(
            stability=self.stability,
            difficulty=self.difficulty,
            last_reviewed_at=parse_iso(self.last_reviewed_at),
            state=self.state,
        )


class FsrsEntryDocument(_Document):
    """One card on the FSRS track for one user."""
    uid: str
    key: str
    deck: str
    vocab_id: str = Field(alias="vocabId")
    state: MemoryStateDocument = Field(default_factory=MemoryStateDocument)
    next_interval_days: int = Field(default=0, alias="nextIntervalDays")
    due_at: str = Field(alias="dueAt")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    revision: int = 0

    @field_validator("due_at", mode="before")
    @classmethod
    def _normalize_due(cls, value: Any) -> Any:
        parsed = parse_iso(value)
        if parsed is None:
            raise ValueError("dueAt must be an ISO-8601 timestamp")
        return to_iso(parsed)

    @field_validator("revision", mode="before")
    @classmethod
    def _legacy_revision(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def due_datetime(self) -> datetime:
        return parse_iso(self.due_at)


# ---- Leitner ----

class LeitnerEntryDocument(_Document):
    """One card on the Leitner track for one user."""
    uid: str
    key: str
    deck: str
    vocab_id: str = Field(alias="vocabId")
    box: int = 1
    due_at: str = Field(alias="dueAt")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    revision: int = 0

    @field_validator("box", mode="before")
    @classmethod
    def _valid_box(cls, value: Any) -> int:
        return clamp_box(value)

    @field_validator("revision", mode="before")
    @classmethod
    def _legacy_revision(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("due_at", mode="before")
    @classmethod
    def _normalize_due(cls, value: Any) -> Any:
        parsed = parse_iso(value)
        if parsed is None:
            raise ValueError("dueAt must be an ISO-8601 timestamp")
        return to_iso(parsed)

    def to_entry(self) -> LeitnerEntry:
        return LeitnerEntry(
            deck=self.deck,
            vocab_id=self.vocab_id,
            box=self.box,
            due_at=parse_iso(self.due_at),
        )


# ---- Parameters and review events ----

class ParametersDocument(_Document):
    """Per-user FSRS weight vector (validated on use, not on load)."""
    uid: str
    w: list[Any] = Field(default_factory=list)
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class ReviewEventDocument(_Document):
    """Append-only record of one answer."""
    uid: str
    deck: str
    vocab_id: str = Field(alias="vocabId")
    rating: str
    created_at: datetime = Field(alias="createdAt")
