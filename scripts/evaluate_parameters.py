"""
Score FSRS weight vectors against a review history.

Replays the history with each candidate vector and reports the mean
cross-entropy of predicted recall (lower is better). Candidates:
- "default": the built-in FSRS-4.5 vector
- "user": the vector stored for --uid
- a path to a JSON file holding a list of 17 numbers (or {"w": [...]})

Usage:
    python -m scripts.evaluate_parameters --uid USER_ID [--params default --params user]
    python -m scripts.evaluate_parameters --logs review-logs.json --params tuned.json
    python -m scripts.evaluate_parameters --uid USER_ID --params tuned.json --save
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from dotenv import load_dotenv

from vocadrill import log_repo
from vocadrill.fsrs import database as fsrs_db
from vocadrill.fsrs.optimizer import ReviewLog, evaluate_parameters, select_best_parameters
from vocadrill.fsrs.parameters import DEFAULT_PARAMETERS, FsrsParameters

# Load environment
load_dotenv()


def load_logs(user_id: str | None, logs_path: Path | None) -> list[ReviewLog]:
    if logs_path is not None:
        rows = json.loads(logs_path.read_text(encoding="utf-8"))
        if not isinstance(rows, list):
            raise ValueError(f"{logs_path} must contain a JSON list of review logs")
        return log_repo.parse_review_logs(row for row in rows if isinstance(row, dict))
    return log_repo.export_review_logs(user_id)


def resolve_candidate(name: str, user_id: str | None) -> FsrsParameters:
    """
    Turn a --params value into a weight vector.

    Raises:
        ValueError: If "user" is requested without --uid, or a file is malformed
    """
    if name == "default":
        return DEFAULT_PARAMETERS
    if name == "user":
        if not user_id:
            raise ValueError("--params user requires --uid")
        return fsrs_db.get_fsrs_parameters_for_user(user_id)

    raw = json.loads(Path(name).read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = raw.get("w")
    try:
        return FsrsParameters(tuple(raw or ()))
    except TypeError as exc:
        raise ValueError(f"{name} does not hold a list of weights") from exc


def main():
    parser = argparse.ArgumentParser(
        description="Evaluate FSRS parameter vectors by log replay"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--uid", help="Replay the review events stored for this user")
    source.add_argument("--logs", type=Path, help="Replay an exported JSON log file")
    parser.add_argument(
        "--params",
        action="append",
        default=None,
        help='Candidate vector: "default", "user" or a JSON file (repeatable)'
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Store the best candidate as the user's vector (requires --uid)"
    )

    args = parser.parse_args()
    if args.save and not args.uid:
        parser.error("--save requires --uid")

    names = args.params or ["default"]
    try:
        candidates = [resolve_candidate(name, args.uid) for name in names]
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    logs = load_logs(args.uid, args.logs)
    print(f"Replaying {len(logs)} reviews")

    for name, params in zip(names, candidates):
        result = evaluate_parameters(logs, params)
        print(f"  {name:<20} loss={result.loss:.5f} ({result.card_count} cards)")

    best = select_best_parameters(logs, candidates)
    best_name = names[candidates.index(best.parameters)]
    print(f"\nBest: {best_name} (loss={best.loss:.5f})")

    if args.save:
        fsrs_db.set_fsrs_parameters_for_user(args.uid, best.parameters)
        print(f"✓ Saved parameters for uid={args.uid}")


if __name__ == "__main__":
    main()
