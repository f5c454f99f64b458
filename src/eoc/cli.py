from __future__ import annotations

import argparse
import logging
import os
import sys
import threading
from pathlib import Path
from typing import Optional, Sequence, Tuple

import numpy as np

from .io import load_grayscale, write_heatmap, write_hits_csv
from .matching import (
    ConfigurationError,
    DegenerateRangeError,
    SearchRectangle,
    TemplateMatcher,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NO_HITS = 2
EXIT_TIMEOUT = 3


def parse_point(value: str) -> Tuple[int, int]:
    parts = value.split(",")
    try:
        x, y = (int(part) for part in parts)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected x,y but got {value!r}") from exc
    return x, y


def parse_rectangle(value: str) -> Tuple[int, int, int, int]:
    parts = value.split(",")
    try:
        x0, y0, x1, y1 = (int(part) for part in parts)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected x0,y0,x1,y1 but got {value!r}") from exc
    return x0, y0, x1, y1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eoc",
        description="Find occurrences of an object image inside a field image. "
        "Outputs hits (X, Y, normalized score) whose score falls below the tolerance.",
    )
    parser.add_argument("field", type=Path, help="Field image to search in.")
    parser.add_argument("object", type=Path, help="Object image to find.")
    parser.add_argument(
        "--tolerance",
        type=float,
        default=0.0,
        help="Output hits whose normalized score is below this value (0 disables hits).",
    )
    parser.add_argument(
        "--dist",
        type=int,
        default=-1,
        help="Minimum pixel distance between hits. If negative, use the object image size.",
    )
    parser.add_argument(
        "--region",
        type=parse_rectangle,
        default=None,
        help="Field region x0,y0,x1,y1 the object must lie inside. Defaults to the whole field.",
    )
    parser.add_argument(
        "--offset",
        type=parse_point,
        default=(0, 0),
        help="Shift dx,dy added to every output hit.",
    )
    parser.add_argument(
        "--no-center",
        dest="center",
        action="store_false",
        help="Report the object's top-left corner instead of its center.",
    )
    parser.add_argument(
        "--mode",
        choices=("gray", "average"),
        default="gray",
        help="Intensity extraction: luminance grayscale or plain channel average.",
    )
    parser.add_argument("--csv", type=Path, default=Path("out.csv"), help="CSV file receiving the hits.")
    parser.add_argument("--no-csv", dest="csv", action="store_const", const=None, help="Disable CSV output.")
    parser.add_argument("--png", type=Path, default=None, help="Write the normalized score map to this PNG.")
    parser.add_argument("--workers", type=int, default=None, help="Worker threads used for correlation.")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Abort the whole process after this many seconds.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output.")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _abort(timeout: float) -> None:
    logger.error("timed out after %.1f seconds", timeout)
    logging.shutdown()
    os._exit(EXIT_TIMEOUT)


def run(args: argparse.Namespace) -> int:
    if args.tolerance == 0:
        if args.png is None:
            logger.error("--tolerance is 0 and PNG output is disabled: nothing to do")
            return EXIT_ERROR
        logger.warning("--tolerance is 0, so no hits will be output")

    try:
        field = load_grayscale(args.field, mode=args.mode)
        obj = load_grayscale(args.object, mode=args.mode)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return EXIT_ERROR
    logger.debug("loaded %s and %s", args.field, args.object)

    if args.region is not None:
        rect = SearchRectangle.from_region(args.region, obj.shape)
    else:
        rect = SearchRectangle.for_placement(field.shape, obj.shape)

    try:
        matcher = TemplateMatcher(
            tolerance=args.tolerance,
            min_dist=args.dist,
            center=args.center,
            offset=args.offset,
            max_workers=args.workers,
        )
        result = matcher.match(field, obj, rect)
    except DegenerateRangeError as exc:
        logger.warning("%s; skipping hit search", exc)
        if args.png is not None:
            try:
                write_heatmap(args.png, np.zeros(rect.size), rect)
            except OSError as write_exc:
                logger.error("%s", write_exc)
                return EXIT_ERROR
        return EXIT_NO_HITS
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return EXIT_ERROR
    except ValueError as exc:
        logger.error("invalid settings: %s", exc)
        return EXIT_ERROR

    if args.png is not None:
        try:
            write_heatmap(args.png, result.scores, result.rect)
        except OSError as exc:
            logger.error("%s", exc)
            return EXIT_ERROR
        logger.debug("wrote score map to %s", args.png)

    if not result.hits:
        logger.warning("no hits found")
        return EXIT_NO_HITS

    if args.csv is not None:
        try:
            write_hits_csv(args.csv, result.hits)
        except OSError as exc:
            logger.error("failed to write %s: %s", args.csv, exc)
            return EXIT_ERROR
    for hit in result.hits:
        x, y, score = hit.as_row()
        print(f"hit: {x},{y},{score}")
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    timer: Optional[threading.Timer] = None
    if args.timeout is not None and args.timeout > 0:
        timer = threading.Timer(args.timeout, _abort, args=(args.timeout,))
        timer.daemon = True
        timer.start()
    try:
        return run(args)
    finally:
        if timer is not None:
            timer.cancel()


if __name__ == "__main__":
    sys.exit(main())
