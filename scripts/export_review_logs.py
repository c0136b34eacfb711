"""
Export a user's review history as replay logs (JSON).

Each review event becomes {cardId: "deck:vocabId", reviewTimestamp, userRating}.
Events without a deck, card id or timestamp are skipped; unknown rating
labels are exported as 3 (good).

Usage:
    python -m scripts.export_review_logs --uid USER_ID [--deck DECK] [--out path.json]
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from dotenv import load_dotenv

from vocadrill import config, log_repo

# Load environment
load_dotenv()

# Configuration
DEFAULT_OUT_PATH = Path("review-logs.json")


def export_logs(user_id: str, out_path: Path, deck: str | None = None) -> int:
    """
    Write a user's review logs to a JSON file.

    Returns:
        Number of exported logs
    """
    logs = log_repo.export_review_logs(user_id, deck=deck)
    payload = [log_repo.review_log_to_dict(log) for log in logs]

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    print(f"Exported {len(payload)} logs for uid={user_id} to {out_path}")
    return len(payload)


def main():
    parser = argparse.ArgumentParser(
        description="Export review events as FSRS replay logs"
    )
    parser.add_argument(
        "--uid",
        default=None,
        help="User id (default: DEFAULT_USER_ID from the environment)"
    )
    parser.add_argument(
        "--deck",
        default=None,
        help="Only export one deck (default: all decks)"
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=DEFAULT_OUT_PATH,
        help=f"Output path (default: {DEFAULT_OUT_PATH})"
    )

    args = parser.parse_args()

    export_logs(
        user_id=args.uid or config.get_default_user_id(),
        out_path=args.out,
        deck=args.deck
    )


if __name__ == "__main__":
    main()
