from __future__ import annotations

import pytest

from eoc.matching.geometry import Hit, SearchRectangle, apply_offset, coords, offset


def test_offset_and_coords_round_trip() -> None:
    rect = SearchRectangle(10, 20, 50, 60)

    assert offset(rect, 10, 20) == 0
    assert offset(rect, 49, 59) == rect.width * rect.height - 1
    for x, y in rect:
        assert coords(rect, offset(rect, x, y)) == (x, y)


def test_offset_rejects_points_outside_rectangle() -> None:
    rect = SearchRectangle(10, 20, 50, 60)
    with pytest.raises(IndexError):
        offset(rect, 50, 20)
    with pytest.raises(IndexError):
        offset(rect, 9, 59)


def test_rectangle_iterates_in_raster_order() -> None:
    rect = SearchRectangle(1, 1, 3, 3)
    assert list(rect) == [(1, 1), (2, 1), (1, 2), (2, 2)]
    assert rect.size == 4


def test_placement_rectangle_fits_object() -> None:
    rect = SearchRectangle.for_placement((60, 80), (15, 10))
    assert rect == SearchRectangle(0, 0, 71, 46)

    too_big = SearchRectangle.for_placement((5, 5), (6, 6))
    assert too_big.empty


def test_region_converts_to_origins() -> None:
    rect = SearchRectangle.from_region((10, 10, 40, 30), (5, 8))
    assert rect == SearchRectangle(10, 10, 33, 26)


def test_hit_distance_is_chebyshev() -> None:
    a = Hit(0, 0, 0.1)
    b = Hit(3, -7, 0.2)
    assert a.distance(b) == 7
    assert b.distance(a) == 7


def test_apply_offset_returns_shifted_copy() -> None:
    hit = Hit(4, 5, 0.25)
    moved = apply_offset(hit, 2, -1)
    assert moved == Hit(6, 4, 0.25)
    assert hit == Hit(4, 5, 0.25)
