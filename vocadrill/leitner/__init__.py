"""
Leitner - three-box review track and session planning.

Database access lives in vocadrill.leitner.database.
"""

from vocadrill.leitner.boxes import (
    LeitnerEntry,
    clamp_box,
    new_entry,
    next_box,
    update_box_on_quiz,
)
from vocadrill.leitner.constants import BOX_INTERVAL_DAYS, BOXES, SESSION_SIZE
from vocadrill.leitner.session import allocate_quotas, capacity_boost, group_by_box, select_session

__all__ = [
    "LeitnerEntry",
    "clamp_box",
    "new_entry",
    "next_box",
    "update_box_on_quiz",
    "BOX_INTERVAL_DAYS",
    "BOXES",
    "SESSION_SIZE",
    "allocate_quotas",
    "capacity_boost",
    "group_by_box",
    "select_session",
]
