from __future__ import annotations

import argparse
import statistics
import time
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

import cv2
import numpy as np

from eoc.io import write_heatmap
from eoc.matching import MatchResult, TemplateMatcher


def parse_arguments() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Measure SAD template matching accuracy and throughput.")
    parser.add_argument("--runs", type=int, default=5, help="Number of random fields to evaluate.")
    parser.add_argument("--field-size", type=int, default=160, help="Width and height of the random field.")
    parser.add_argument("--object-size", type=int, default=12, help="Width and height of the planted object.")
    parser.add_argument("--tolerance", type=float, default=0.2, help="Normalized score tolerance for hits.")
    parser.add_argument("--workers", type=int, default=None, help="Worker threads for correlation.")
    parser.add_argument("--seed", type=int, default=0, help="Seed for the random generator.")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory where score maps will be written. Disabled when omitted.",
    )
    return parser.parse_args()


def plant_object(rng: np.random.Generator, field_size: int, object_size: int) -> tuple[np.ndarray, np.ndarray, tuple[int, int]]:
    field = rng.random((field_size, field_size))
    obj = rng.random((object_size, object_size))
    x = int(rng.integers(0, field_size - object_size + 1))
    y = int(rng.integers(0, field_size - object_size + 1))
    field[y : y + object_size, x : x + object_size] = obj
    return field, obj, (x, y)


def render_visualization(field: np.ndarray, result: MatchResult, object_size: int) -> np.ndarray:
    """
    Outline every hit on the field."""
    annotated = cv2.cvtColor((field * 255).astype(np.uint8), cv2.COLOR_GRAY2BGR)
    for hit in result.hits:
        cv2.rectangle(annotated, (hit.x, hit.y), (hit.x + object_size - 1, hit.y + object_size - 1), (0, 0, 255), 1)
    return annotated


def evaluate() -> None:
    args = parse_arguments()
    rng = np.random.default_rng(args.seed)
    matcher = TemplateMatcher(tolerance=args.tolerance, center=False, max_workers=args.workers)

    durations_ms: list[float] = []
    misses = 0
    if args.output_dir is not None:
        args.output_dir.mkdir(parents=True, exist_ok=True)

    for run in range(args.runs):
        field, obj, target = plant_object(rng, args.field_size, args.object_size)

        start = time.perf_counter()
        result = matcher.match(field, obj)
        end = time.perf_counter()

        duration_ms = (end - start) * 1000.0
        durations_ms.append(duration_ms)
        best = result.hits[0] if result.hits else None
        found = best is not None and (best.x, best.y) == target
        if not found:
            misses += 1

        if args.output_dir is not None:
            write_heatmap(args.output_dir / f"run{run}_scores.png", result.scores, result.rect)
            cv2.imwrite(str(args.output_dir / f"run{run}_hits.png"), render_visualization(field, result, args.object_size))

        best_info = f"best=({best.x:4d},{best.y:4d},{best.score:.4f})" if best else "best=none"
        print(
            f"run {run:3d} | "
            f"target=({target[0]:4d},{target[1]:4d}) | "
            f"{best_info} | "
            f"hits={len(result.hits):3d} | "
            f"time={duration_ms:8.2f}ms"
        )

    print("\nSummary")
    print("-" * 72)
    print(f"Runs evaluated   : {args.runs}")
    print(f"Field / object   : {args.field_size}px / {args.object_size}px")
    print(f"Missed targets   : {misses}")
    print(f"Latency (ms)     : mean={statistics.fmean(durations_ms):.2f}, median={statistics.median(durations_ms):.2f}, min={min(durations_ms):.2f}, max={max(durations_ms):.2f}")


if __name__ == "__main__":
    evaluate()
