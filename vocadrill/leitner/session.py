"""
Session Selector - weighted quota allocation across Leitner boxes

Creates a study queue from the three boxes:
1. Split the session between boxes by weight (13/8/5 by default)
2. Give backlogged boxes (above their soft capacity) a bounded boost
3. Trim back to the session size, taking from box 3 first
4. Fill each box's quota in due-date order, due cards first

Box 1 is processed before box 2 before box 3.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Mapping, Optional, Sequence

from vocadrill.leitner.boxes import LeitnerEntry
from vocadrill.leitner.constants import (
    BOOST_SESSION_FRACTION,
    BOXES,
    DEFAULT_CAPACITIES,
    DEFAULT_WEIGHTS,
    MIN_BOOST_CAP,
    OVERFLOW_PER_SLOT,
    SESSION_SIZE,
)
from vocadrill.timeutils import ensure_utc, utc_now


def _base_quotas(session_size: int, weights: Mapping[int, float]) -> dict[int, int]:
    total_weight = sum(weights[box] for box in BOXES)
    quotas = {
        box: int(math.floor(session_size * weights[box] / total_weight))
        for box in BOXES
    }

    # Hand out the rounding remainder one slot at a time, heaviest box first
    order = sorted(
        (box for box in BOXES if weights[box] > 0),
        key=lambda box: (-weights[box], box),
    )
    remainder = session_size - sum(quotas.values())
    i = 0
    while remainder > 0:
        quotas[order[i % len(order)]] += 1
        remainder -= 1
        i += 1
    return quotas


def capacity_boost(count: int, capacity: int, session_size: int) -> int:
    """
    Extra slots for a box holding more entries than its soft capacity.

    One slot per 10 entries of overflow, capped at
    max(3, ceil(session_size * 0.25)) so no box takes over the session.
    """
    overflow = count - capacity
    if overflow <= 0:
        return 0
    cap = max(MIN_BOOST_CAP, math.ceil(session_size * BOOST_SESSION_FRACTION))
    return min(math.ceil(overflow / OVERFLOW_PER_SLOT), cap)


def allocate_quotas(
    counts_by_box: Mapping[int, int],
    session_size: int,
    weights: Optional[Mapping[int, float]] = None,
    capacities: Optional[Mapping[int, int]] = None
) -> dict[int, int]:
    """
    Decide how many session slots each box gets.

    Args:
        counts_by_box: Number of entries currently in each box
        session_size: Target number of cards in the session
        weights: Relative share per box (default 13/8/5)
        capacities: Soft capacity per box (default 200/120/80)

    Returns:
        Quota per box; all zero for a non-positive session size or weights
    """
    weights = {box: max(0.0, float((weights or DEFAULT_WEIGHTS).get(box, 0))) for box in BOXES}
    capacities = capacities or DEFAULT_CAPACITIES

    if session_size <= 0 or sum(weights.values()) <= 0:
        return {box: 0 for box in BOXES}

    quotas = _base_quotas(session_size, weights)

    for box in BOXES:
        capacity = capacities.get(box)
        if capacity is None:
            continue
        quotas[box] += capacity_boost(counts_by_box.get(box, 0), capacity, session_size)

    # Trim the excess from box 3 down; box 1 is protected longest
    excess = sum(quotas.values()) - session_size
    for box in reversed(BOXES):
        if excess <= 0:
            break
        taken = min(quotas[box], excess)
        quotas[box] -= taken
        excess -= taken

    return quotas


def _order_box(
    entries: Sequence[LeitnerEntry],
    now: datetime,
    prefer_due: bool
) -> list[LeitnerEntry]:
    ordered = sorted(entries, key=lambda e: e.due_at)
    if not prefer_due:
        return ordered
    due = [e for e in ordered if e.is_due(now)]
    upcoming = [e for e in ordered if not e.is_due(now)]
    return due + upcoming


def select_session(
    entries_by_box: Mapping[int, Sequence[LeitnerEntry]],
    session_size: int = SESSION_SIZE,
    weights: Optional[Mapping[int, float]] = None,
    capacities: Optional[Mapping[int, int]] = None,
    prefer_due: bool = True,
    now: Optional[datetime] = None
) -> list[str]:
    """
    Build an ordered study queue of vocab ids.

    Args:
        entries_by_box: Entries of one deck grouped by box
        session_size: Maximum number of cards to return
        weights: Relative share per box (default 13/8/5)
        capacities: Soft capacity per box (default 200/120/80)
        prefer_due: Fill each quota from due cards before not-yet-due ones
        now: Reference time for "due" (defaults to current UTC time)

    Returns:
        Vocab ids, box 1 first, at most session_size long
    """
    now = ensure_utc(now) if now is not None else utc_now()
    counts = {box: len(entries_by_box.get(box, ())) for box in BOXES}
    quotas = allocate_quotas(counts, session_size, weights, capacities)

    session: list[str] = []
    for box in BOXES:
        if len(session) >= session_size:
            break
        candidates = _order_box(entries_by_box.get(box, ()), now, prefer_due)
        for entry in candidates[:quotas[box]]:
            if len(session) >= session_size:
                break
            session.append(entry.vocab_id)
    return session


def group_by_box(entries: Sequence[LeitnerEntry]) -> dict[int, list[LeitnerEntry]]:
    grouped: dict[int, list[LeitnerEntry]] = {box: [] for box in BOXES}
    for entry in entries:
        grouped[entry.box].append(entry)
    return grouped
