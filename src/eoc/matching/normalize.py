from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from .errors import DegenerateRangeError


def normalize(
    scores: np.ndarray,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> Tuple[np.ndarray, float, float]:
    """
    Rescale raw scores to [0, 1] using the grid's own min and max.

    Either bound may be pinned by the caller. Returns (normalized, min, max).
    """
    scores = np.asarray(scores, dtype=np.float64)
    if scores.size == 0:
        raise ValueError("cannot normalize an empty score grid")

    lo = float(scores.min()) if minimum is None else float(minimum)
    hi = float(scores.max()) if maximum is None else float(maximum)
    if not hi > lo:
        raise DegenerateRangeError(lo, hi)

    return (scores - lo) / (hi - lo), lo, hi


__all__ = ["normalize"]
