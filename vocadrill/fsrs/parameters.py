"""
FSRS parameter vector.

The weights are passed explicitly into the scheduler and the evaluator so
any candidate vector can be tried without touching module state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from vocadrill.fsrs.constants import DEFAULT_WEIGHTS, N_WEIGHTS


@dataclass(frozen=True)
class FsrsParameters:
    """
    Ordered vector of 17 weights (0-indexed) for the FSRS formulas.

    Raises:
        ValueError: If the vector has the wrong length or non-finite values
    """
    w: tuple[float, ...] = DEFAULT_WEIGHTS

    def __post_init__(self):
        weights = tuple(float(x) for x in self.w)
        if len(weights) != N_WEIGHTS:
            raise ValueError(f"FSRS parameters need {N_WEIGHTS} weights, got {len(weights)}")
        if not all(math.isfinite(x) for x in weights):
            raise ValueError("FSRS parameters must be finite numbers")
        object.__setattr__(self, "w", weights)

    @classmethod
    def coerce(cls, raw: Optional[Iterable[object]]) -> "FsrsParameters":
        """
        Build parameters from an untrusted stored vector.

        Absent or malformed input (wrong length, non-numeric or non-finite
        entries) falls back to the default vector.
        """
        if raw is None or isinstance(raw, (str, bytes)):
            return DEFAULT_PARAMETERS
        try:
            weights = tuple(float(x) for x in raw)
            return cls(weights)
        except (TypeError, ValueError):
            return DEFAULT_PARAMETERS

    def to_list(self) -> list[float]:
        return list(self.w)


DEFAULT_PARAMETERS = FsrsParameters(DEFAULT_WEIGHTS)
