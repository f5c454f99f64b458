from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .correlation import CorrelationEngine, ProgressCallback
from .geometry import Hit, SearchRectangle, apply_offset
from .hits import select
from .normalize import normalize

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MatchResult:
    """
    Hits plus the normalized score grid they were selected from.
    """

    hits: List[Hit]
    scores: np.ndarray
    rect: SearchRectangle
    minimum: float
    maximum: float


@dataclass(slots=True)
class TemplateMatcher:
    """
    Exhaustive SAD template matcher with non-maximum suppression.

    ``min_dist`` of None or below zero falls back to the larger object side.
    Hits are shifted to the object's center when ``center`` is set, then by
    ``offset``.
    """

    tolerance: float = 0.0
    min_dist: Optional[int] = None
    center: bool = True
    offset: Tuple[int, int] = (0, 0)
    max_workers: Optional[int] = None
    progress: Optional[ProgressCallback] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.tolerance <= 1.0:
            raise ValueError("tolerance must be between 0 and 1")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if len(self.offset) != 2:
            raise ValueError("offset must be an (dx, dy) pair")

    def resolve_min_dist(self, obj: np.ndarray) -> int:
        if self.min_dist is None or self.min_dist < 0:
            return max(obj.shape[1], obj.shape[0])
        return self.min_dist

    def match(
        self,
        image: np.ndarray,
        template: np.ndarray,
        search_rect: Optional[SearchRectangle] = None,
    ) -> MatchResult:
        """
        Correlate, normalize and select hits for ``template`` inside ``image``.

        Raises ConfigurationError for an unusable search rectangle and
        DegenerateRangeError when every origin scores the same.
        """
        if image.ndim != 2 or template.ndim != 2:
            raise ValueError("image and template must be single-channel intensity images")

        rect = search_rect
        if rect is None:
            rect = SearchRectangle.for_placement(image.shape, template.shape)
        engine = CorrelationEngine(max_workers=self.max_workers, progress=self.progress)
        raw = engine.compute(image, template, rect)
        scores, minimum, maximum = normalize(raw)

        min_dist = self.resolve_min_dist(template)
        logger.debug("minimum hit distance %d", min_dist)
        hits = select(scores, rect, self.tolerance, min_dist)

        dx, dy = self.offset
        if self.center:
            dx += template.shape[1] // 2
            dy += template.shape[0] // 2
        if dx or dy:
            hits = [apply_offset(hit, dx, dy) for hit in hits]

        logger.info("found %d hit(s) below tolerance %.3f", len(hits), self.tolerance)
        return MatchResult(hits=hits, scores=scores, rect=rect, minimum=minimum, maximum=maximum)


__all__ = ["MatchResult", "TemplateMatcher"]
