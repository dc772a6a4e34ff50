"""Command-line interface for framesampler."""

from __future__ import annotations

import argparse
import sys
from itertools import count
from typing import Iterable, List, Optional

from loguru import logger
from pydantic import ValidationError

from .config import ENV_BACKEND, ENV_SAMPLING_FPS, ReaderSettings
from .errors import FrameReaderError, InvalidConfiguration
from .reader import SamplingFrameReader

SEPARATOR = "*" * 66


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="framesampler",
        description="Read video files and report the frames selected at a sampling frame rate.",
        epilog=f"""
Examples:
  framesampler -i clip.mp4                 # Read every frame
  framesampler -i clip.mp4 --sfps 5        # Sample at 5 frames per second
  framesampler -i a.mp4 b.avi --backend pyav
  framesampler -i clip.mp4 --loop --max-passes 3

Environment:
  {ENV_SAMPLING_FPS}  default for --sfps
  {ENV_BACKEND}       default for --backend
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--input", "-i",
        nargs="+",
        required=True,
        help="Video file(s) to process",
    )
    parser.add_argument(
        "--sfps",
        type=float,
        default=None,
        help="Input sampling frame rate. Default is 0, which reads every frame at the video's own rate",
    )
    parser.add_argument(
        "--backend",
        choices=["opencv", "pyav"],
        default=None,
        help="Capture backend (default: opencv)",
    )
    parser.add_argument(
        "--loop",
        action="store_true",
        help="Loop over the video(s) being processed",
    )
    parser.add_argument(
        "--max-passes",
        type=_non_negative_int,
        default=None,
        help="Stop looping after this many passes (only with --loop)",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Disable logging to console",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every decode retry",
    )
    return parser


def _configure_logging(quiet: bool, verbose: bool):
    logger.remove()
    if quiet:
        return
    logger.enable("framesampler")
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _report(reader: SamplingFrameReader, first_ms: Optional[float], last_ms: Optional[float]):
    print(SEPARATOR)
    print(f"File: {reader.path}")
    print(f"Processed frame count: {reader.frames_returned}")
    print(f"Decoded frame count: {reader.frames_decoded}")
    if first_ms is not None and last_ms is not None:
        print(f"Timestamps: {first_ms:.2f}ms - {last_ms:.2f}ms")
        span_s = (last_ms - first_ms) / 1000.0
        if reader.frames_returned > 1 and span_s > 0:
            print(f"Effective rate: {(reader.frames_returned - 1) / span_s:.2f} fps")
    print(SEPARATOR)


def _process(reader: SamplingFrameReader):
    first_ms = last_ms = None
    for frame in reader:
        if first_ms is None:
            first_ms = frame.timestamp_ms
        last_ms = frame.timestamp_ms
    _report(reader, first_ms, last_ms)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.max_passes is not None and not args.loop:
        parser.error("--max-passes requires --loop")

    _configure_logging(args.quiet, args.verbose)

    try:
        settings = ReaderSettings.from_env(sampling_fps=args.sfps, backend=args.backend)
    except ValidationError as e:
        print(f"ERROR: invalid settings: {e}", file=sys.stderr)
        return 1

    if not args.loop:
        passes: Iterable[int] = range(1)
    elif args.max_passes is None:
        passes = count()
    else:
        passes = range(args.max_passes)

    # Every pass goes over all inputs; an input that fails to open is dropped from later passes.
    inputs = list(args.input)
    failures = 0
    try:
        for _ in passes:
            for path in list(inputs):
                try:
                    with settings.open(path) as reader:
                        _process(reader)
                except InvalidConfiguration as e:
                    print(f"ERROR: {e}", file=sys.stderr)
                    return 1
                except FrameReaderError as e:
                    print(f"ERROR: {e}", file=sys.stderr)
                    inputs.remove(path)
                    failures += 1
            if not inputs:
                break
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130

    if failures and (len(args.input) == 1 or not inputs):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
