from __future__ import annotations

import threading
import time

import numpy as np
import pytest

from eoc.matching import ConfigurationError, CorrelationEngine, SearchRectangle, grid_to_heatmap


def brute_force_sad(field: np.ndarray, obj: np.ndarray, rect: SearchRectangle) -> np.ndarray:
    h, w = obj.shape
    return np.array([np.abs(field[v : v + h, u : u + w] - obj).sum() for u, v in rect])


def test_compute_matches_brute_force() -> None:
    rng = np.random.default_rng(3)
    field = rng.random((24, 31))
    obj = rng.random((5, 7))
    rect = SearchRectangle.for_placement(field.shape, obj.shape)

    scores = CorrelationEngine(max_workers=3).compute(field, obj, rect)

    assert scores.shape == (rect.size,)
    np.testing.assert_allclose(scores, brute_force_sad(field, obj, rect))


def test_compute_over_sub_rectangle() -> None:
    rng = np.random.default_rng(4)
    field = rng.random((30, 30))
    obj = rng.random((4, 4))
    rect = SearchRectangle(5, 7, 12, 20)

    scores = CorrelationEngine(max_workers=2).compute(field, obj, rect)

    np.testing.assert_allclose(scores, brute_force_sad(field, obj, rect))


def test_exact_placement_scores_zero() -> None:
    rng = np.random.default_rng(5)
    field = rng.random((40, 40))
    obj = field[12:20, 9:15].copy()
    rect = SearchRectangle.for_placement(field.shape, obj.shape)

    heatmap = grid_to_heatmap(CorrelationEngine().compute(field, obj, rect), rect)

    assert heatmap[12, 9] == 0.0
    assert np.unravel_index(np.argmin(heatmap), heatmap.shape) == (12, 9)


def test_progress_is_reported_after_every_row() -> None:
    reported: list[float] = []
    field = np.zeros((10, 12))
    obj = np.ones((3, 3))
    rect = SearchRectangle.for_placement(field.shape, obj.shape)

    CorrelationEngine(max_workers=4, progress=reported.append).compute(field, obj, rect)

    assert len(reported) == rect.height
    assert reported == sorted(reported)
    assert reported[-1] == pytest.approx(1.0)


def test_compute_does_not_mutate_inputs() -> None:
    rng = np.random.default_rng(6)
    field = rng.random((12, 12))
    obj = rng.random((3, 3))
    field_copy, obj_copy = field.copy(), obj.copy()

    CorrelationEngine().compute(field, obj, SearchRectangle.for_placement(field.shape, obj.shape))

    np.testing.assert_array_equal(field, field_copy)
    np.testing.assert_array_equal(obj, obj_copy)


@pytest.mark.parametrize(
    "rect",
    [
        SearchRectangle(0, 0, 0, 5),
        SearchRectangle(3, 3, 2, 8),
        SearchRectangle(-1, 0, 5, 5),
        SearchRectangle(0, 0, 18, 10),
        SearchRectangle(0, 0, 10, 18),
    ],
)
def test_compute_rejects_out_of_bounds_rectangles(rect: SearchRectangle) -> None:
    field = np.zeros((20, 20))
    obj = np.zeros((4, 4))
    with pytest.raises(ConfigurationError):
        CorrelationEngine().compute(field, obj, rect)


def test_object_larger_than_field_is_a_configuration_error() -> None:
    field = np.zeros((5, 5))
    obj = np.zeros((6, 6))
    with pytest.raises(ConfigurationError):
        CorrelationEngine().compute(field, obj, SearchRectangle.for_placement(field.shape, obj.shape))


def test_worker_failure_aborts_computation() -> None:
    class FailingEngine(CorrelationEngine):
        @staticmethod
        def _score_segment(*args: object) -> None:
            raise RuntimeError("worker failed")

    field = np.zeros((8, 8))
    obj = np.zeros((2, 2))
    with pytest.raises(RuntimeError, match="worker failed"):
        FailingEngine().compute(field, obj, SearchRectangle.for_placement(field.shape, obj.shape))


def test_engine_rejects_invalid_worker_count() -> None:
    with pytest.raises(ValueError):
        CorrelationEngine(max_workers=0)


def test_rows_are_fenced_before_the_next_row_starts() -> None:
    lock = threading.Lock()
    visited: list[int] = []

    class RecordingEngine(CorrelationEngine):
        @staticmethod
        def _score_segment(field, obj, scores, v, u_first, u_last, index) -> None:
            with lock:
                visited.append(v)
            time.sleep(0.002)
            scores[index : index + (u_last - u_first)] = 0.0

    field = np.zeros((30, 40))
    obj = np.zeros((3, 3))
    rect = SearchRectangle.for_placement(field.shape, obj.shape)

    RecordingEngine(max_workers=4).compute(field, obj, rect)

    assert visited == sorted(visited)
    assert visited.count(rect.min_y) == 4
    assert set(visited) == set(range(rect.min_y, rect.max_y))
