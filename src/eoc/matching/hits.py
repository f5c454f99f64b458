from __future__ import annotations

from typing import Iterator, List

import numpy as np

from .geometry import Hit, SearchRectangle, coords


def iter_candidates(scores: np.ndarray, rect: SearchRectangle, tolerance: float) -> Iterator[Hit]:
    """
    Yield every cell scoring strictly below ``tolerance``, in raster order.
    """
    if scores.size != rect.size:
        raise ValueError(f"score grid has {scores.size} cells, rectangle needs {rect.size}")
    # flatnonzero returns ascending indices, which is raster order.
    for index in np.flatnonzero(scores < tolerance):
        x, y = coords(rect, int(index))
        yield Hit(x=x, y=y, score=float(scores[index]))


def suppress(candidates: Iterator[Hit], min_dist: int) -> List[Hit]:
    """
    Greedy non-maximum suppression over an ordered candidate stream.

    A candidate is compared with the first accepted hit closer than
    ``min_dist`` only: it replaces that hit when it scores lower and is
    dropped otherwise. ``min_dist <= 0`` accepts every candidate.
    """
    accepted: List[Hit] = []
    for hit in candidates:
        for i, other in enumerate(accepted):
            if other.distance(hit) < min_dist:
                if hit.score < other.score:
                    accepted[i] = hit
                break
        else:
            accepted.append(hit)
    return accepted


def select(
    scores: np.ndarray,
    rect: SearchRectangle,
    tolerance: float,
    min_dist: int,
) -> List[Hit]:
    """
    Threshold a normalized grid and return deduplicated hits, best first.
    """
    if not 0.0 <= tolerance <= 1.0:
        raise ValueError("tolerance must be between 0 and 1")
    hits = suppress(iter_candidates(scores, rect, tolerance), min_dist)
    hits.sort(key=lambda hit: hit.score)
    return hits


__all__ = ["iter_candidates", "select", "suppress"]
