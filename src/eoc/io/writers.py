from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Union

import cv2
import numpy as np

from ..matching.correlation import grid_to_heatmap
from ..matching.geometry import Hit, SearchRectangle

PathLike = Union[str, Path]


def write_hits_csv(path: PathLike, hits: Iterable[Hit]) -> int:
    """
    Write ``x,y,score`` rows without a header. Returns the row count.
    """
    count = 0
    with Path(path).open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        for hit in hits:
            writer.writerow(hit.as_row())
            count += 1
    return count


def write_heatmap(path: PathLike, scores: np.ndarray, rect: SearchRectangle) -> None:
    """
    Save a normalized score grid as an 8-bit grayscale PNG.
    """
    heatmap = grid_to_heatmap(scores, rect)
    pixels = (np.clip(heatmap, 0.0, 1.0) * 255).astype(np.uint8)
    if not cv2.imwrite(str(path), pixels):
        raise OSError(f"Unable to write heatmap to {path}")
