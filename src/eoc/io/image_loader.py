from __future__ import annotations

from pathlib import Path
from typing import Union

import cv2
import numpy as np

PathLike = Union[str, Path]

MODES = ("gray", "average")


def as_intensity(image: np.ndarray) -> np.ndarray:
    """
    Convert a single-channel array to float64 intensities in [0, 1].
    """
    if image.ndim != 2:
        raise ValueError("image must be a single-channel array")
    if np.issubdtype(image.dtype, np.integer):
        return image.astype(np.float64) / float(np.iinfo(image.dtype).max)
    return image.astype(np.float64)


def load_grayscale(path: PathLike, mode: str = "gray") -> np.ndarray:
    """
    Load an image as intensities suitable for SAD matching.

    ``gray`` uses OpenCV's luminance conversion, ``average`` takes the plain
    mean of every channel including alpha.
    """
    if mode not in MODES:
        raise ValueError(f"mode must be one of {MODES}, got {mode!r}")

    flags = cv2.IMREAD_GRAYSCALE if mode == "gray" else cv2.IMREAD_UNCHANGED
    image = cv2.imread(str(path), flags)
    if image is None:
        raise FileNotFoundError(f"Unable to load image at {path}")

    if image.ndim == 3:
        scale = float(np.iinfo(image.dtype).max) if np.issubdtype(image.dtype, np.integer) else 1.0
        return image.astype(np.float64).mean(axis=2) / scale
    return as_intensity(image)
