from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .errors import ConfigurationError
from .geometry import SearchRectangle

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def validate_search_rectangle(
    field_shape: Tuple[int, ...],
    object_shape: Tuple[int, ...],
    rect: SearchRectangle,
) -> None:
    """
    Raise ConfigurationError unless every origin of ``rect`` places the
    object fully inside the field.
    """
    field_h, field_w = field_shape[:2]
    object_h, object_w = object_shape[:2]
    if object_w <= 0 or object_h <= 0:
        raise ConfigurationError("object image is empty")
    if rect.empty:
        raise ConfigurationError(
            f"search rectangle {rect} is empty for a {object_w}x{object_h} object "
            f"in a {field_w}x{field_h} field"
        )
    if rect.min_x < 0 or rect.min_y < 0:
        raise ConfigurationError(f"search rectangle {rect} starts outside the field")
    if rect.max_x - 1 + object_w > field_w or rect.max_y - 1 + object_h > field_h:
        raise ConfigurationError(
            f"search rectangle {rect} places the {object_w}x{object_h} object "
            f"outside the {field_w}x{field_h} field"
        )


class CorrelationEngine:
    """
    Sum-of-absolute-differences scoring of every origin in a search rectangle.

    Each row of the rectangle is split into column segments that run in a
    thread pool; the engine joins every segment of a row before issuing the
    next one and reports progress at that barrier.
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.max_workers = max_workers or min(32, (os.cpu_count() or 1) + 4)
        self.progress = progress

    def compute(
        self,
        field: np.ndarray,
        obj: np.ndarray,
        rect: SearchRectangle,
    ) -> np.ndarray:
        """
        Return the raw score grid for ``rect`` in raster order.
        """
        if field.ndim != 2 or obj.ndim != 2:
            raise ValueError("field and object must be single-channel intensity images")
        validate_search_rectangle(field.shape, obj.shape, rect)

        field = np.asarray(field, dtype=np.float64)
        obj = np.asarray(obj, dtype=np.float64)
        scores = np.empty(rect.size, dtype=np.float64)
        segments = self._segments(rect.width)

        logger.debug(
            "correlating %dx%d object over %d origins with %d workers",
            obj.shape[1],
            obj.shape[0],
            rect.size,
            self.max_workers,
        )
        start = time.perf_counter()
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for row, v in enumerate(range(rect.min_y, rect.max_y)):
                base = row * rect.width
                futures = [
                    executor.submit(
                        self._score_segment,
                        field,
                        obj,
                        scores,
                        v,
                        rect.min_x + first,
                        rect.min_x + last,
                        base + first,
                    )
                    for first, last in segments
                ]
                # Row barrier: a failed segment aborts the whole computation.
                for future in futures:
                    future.result()

                fraction = (row + 1) / rect.height
                logger.debug("%.2f%% complete", fraction * 100.0)
                if self.progress is not None:
                    self.progress(fraction)

        logger.info("correlation of %d origins took %.2fms", rect.size, (time.perf_counter() - start) * 1000.0)
        return scores

    def _segments(self, width: int) -> List[Tuple[int, int]]:
        count = min(width, self.max_workers)
        bounds = np.linspace(0, width, count + 1).astype(int)
        return [(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:]) if b > a]

    @staticmethod
    def _score_segment(
        field: np.ndarray,
        obj: np.ndarray,
        scores: np.ndarray,
        v: int,
        u_first: int,
        u_last: int,
        index: int,
    ) -> None:
        object_h, object_w = obj.shape
        strip = field[v : v + object_h, u_first : u_last - 1 + object_w]
        windows = sliding_window_view(strip, (object_h, object_w))[0]
        if windows.shape[0] != u_last - u_first:
            raise IndexError(f"object placement at row {v} reads outside the field")
        scores[index : index + (u_last - u_first)] = np.abs(windows - obj).sum(axis=(1, 2))


def grid_to_heatmap(scores: np.ndarray, rect: SearchRectangle) -> np.ndarray:
    """
    View a flat score grid as a (height, width) array.
    """
    if scores.size != rect.size:
        raise ValueError(f"score grid has {scores.size} cells, rectangle needs {rect.size}")
    return scores.reshape(rect.height, rect.width)


__all__ = ["CorrelationEngine", "ProgressCallback", "grid_to_heatmap", "validate_search_rectangle"]
