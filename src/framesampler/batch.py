"""Sampling across several files and repeated passes."""

from __future__ import annotations

from itertools import count
from typing import Iterable, Iterator, Literal, Optional, Tuple

from loguru import logger

from ._typing import PathLike
from .capture import CaptureBackend
from .errors import OpenFailure, UnsupportedFormat
from .reader import CaptureFactory, SamplingFrameReader
from .types import Frame

# How to handle a file that cannot be opened
OnError = Literal["raise", "warn", "ignore"]


def read_frames(
    path: PathLike,
    sampling_fps: float = 0,
    *,
    backend: CaptureBackend = "opencv",
    capture_factory: Optional[CaptureFactory] = None,
) -> list[Frame]:
    """Read every sampled frame of a single file into a list.

    Raises:
        InvalidConfiguration: If sampling_fps is invalid
        UnsupportedFormat: If the file extension is not supported
        OpenFailure: If the file cannot be opened

    Examples:
        >>> frames = read_frames("video.mp4", sampling_fps=2)
        >>> [f.timestamp_ms for f in frames]
        [0.0, 500.0, 1000.0]
    """
    with SamplingFrameReader(path, sampling_fps, backend=backend, capture_factory=capture_factory) as reader:
        return list(reader)


def sample_frames(
    paths: Iterable[PathLike],
    sampling_fps: float = 0,
    *,
    backend: CaptureBackend = "opencv",
    capture_factory: Optional[CaptureFactory] = None,
    on_error: OnError = "raise",
) -> Iterator[Tuple[PathLike, Frame]]:
    """Yield (path, frame) pairs for each file in order, one reader per file.

    Args:
        paths: Files to read
        sampling_fps: Target sampling rate, 0 to read every frame
        backend: Capture backend
        capture_factory: Optional callable building a capture from a path string
        on_error: How to handle files that are unsupported or fail to open:
            - "raise": Propagate the error (default)
            - "warn": Log a warning and skip the file
            - "ignore": Silently skip the file

    Raises:
        InvalidConfiguration: If sampling_fps is invalid, regardless of on_error
        UnsupportedFormat, OpenFailure: If on_error="raise"
        ValueError: If on_error is not a known policy

    Examples:
        >>> for path, frame in sample_frames(["a.mp4", "b.txt", "c.avi"], 5, on_error="warn"):
        ...     print(path, frame.timestamp_ms)
    """
    if on_error not in ("raise", "warn", "ignore"):
        raise ValueError(f"Unknown on_error policy: {on_error}. Must be 'raise', 'warn' or 'ignore'")

    for path in paths:
        try:
            reader = SamplingFrameReader(path, sampling_fps, backend=backend, capture_factory=capture_factory)
        except (UnsupportedFormat, OpenFailure) as e:
            if on_error == "raise":
                raise
            elif on_error == "warn":
                logger.warning(f"Skipping {path}: {e}")
            continue

        with reader:
            for frame in reader:
                yield path, frame


def iter_passes(
    path: PathLike,
    sampling_fps: float = 0,
    *,
    backend: CaptureBackend = "opencv",
    capture_factory: Optional[CaptureFactory] = None,
    max_passes: Optional[int] = None,
) -> Iterator[SamplingFrameReader]:
    """Yield a fresh reader over the same file for each pass.

    Readers cannot rewind, so looping over a file means opening it again.
    Each yielded reader is released once the caller asks for the next pass.
    With ``max_passes=None`` this loops until the caller stops iterating.

    Raises:
        ValueError: If max_passes is negative
        InvalidConfiguration, UnsupportedFormat, OpenFailure: From reader construction

    Examples:
        >>> for n, reader in enumerate(iter_passes("video.mp4", 5, max_passes=3)):
        ...     print(n, sum(1 for _ in reader))
    """
    if max_passes is not None and max_passes < 0:
        raise ValueError(f"max_passes must be >= 0, got {max_passes}")

    passes = count() if max_passes is None else range(max_passes)
    for pass_index in passes:
        logger.debug(f"Starting pass {pass_index} over {path}")
        with SamplingFrameReader(path, sampling_fps, backend=backend, capture_factory=capture_factory) as reader:
            yield reader


__all__ = ["OnError", "read_frames", "sample_frames", "iter_passes"]
