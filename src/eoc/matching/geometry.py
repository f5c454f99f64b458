from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, Sequence, Tuple


@dataclass(frozen=True, slots=True)
class SearchRectangle:
    """
    Integer rectangle of candidate origins over the field, max bounds exclusive.
    """

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, x: int, y: int) -> bool:
        return self.min_x <= x < self.max_x and self.min_y <= y < self.max_y

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        for y in range(self.min_y, self.max_y):
            for x in range(self.min_x, self.max_x):
                yield x, y

    @classmethod
    def for_placement(cls, field_shape: Sequence[int], object_shape: Sequence[int]) -> "SearchRectangle":
        """
        Every origin at which the object lies fully inside the field.

        Shapes follow numpy order, (height, width).
        """
        field_h, field_w = field_shape[:2]
        object_h, object_w = object_shape[:2]
        return cls(0, 0, field_w - object_w + 1, field_h - object_h + 1)

    @classmethod
    def from_region(cls, region: Sequence[int], object_shape: Sequence[int]) -> "SearchRectangle":
        """
        Convert a field region (x0, y0, x1, y1) that must contain the whole
        object into the rectangle of origins inside it.
        """
        x0, y0, x1, y1 = region
        object_h, object_w = object_shape[:2]
        return cls(x0, y0, x1 - object_w + 1, y1 - object_h + 1)


@dataclass(frozen=True, slots=True)
class Hit:
    """
    Accepted match origin and its normalized score (lower is better).
    """

    x: int
    y: int
    score: float

    def distance(self, other: "Hit") -> int:
        """Chebyshev (L-inf) distance."""
        return max(abs(self.x - other.x), abs(self.y - other.y))

    def as_row(self) -> Tuple[int, int, str]:
        return self.x, self.y, f"{self.score:f}"


def offset(rect: SearchRectangle, x: int, y: int) -> int:
    """
    Raster-order index of (x, y) inside ``rect``.
    """
    if not rect.contains(x, y):
        raise IndexError(f"({x}, {y}) lies outside {rect}")
    return (x - rect.min_x) + rect.width * (y - rect.min_y)


def coords(rect: SearchRectangle, index: int) -> Tuple[int, int]:
    row, col = divmod(index, rect.width)
    return rect.min_x + col, rect.min_y + row


def apply_offset(hit: Hit, dx: int, dy: int) -> Hit:
    return replace(hit, x=hit.x + dx, y=hit.y + dy)


__all__ = ["Hit", "SearchRectangle", "apply_offset", "coords", "offset"]
