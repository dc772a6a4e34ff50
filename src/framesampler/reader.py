"""Sampling frame reader over a capture backend."""

import math
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple

import numpy as np
import numpy.typing as npt
from loguru import logger

from ._typing import PathLike
from .capture import BaseCapture, CaptureBackend, get_capture_class
from .errors import InvalidConfiguration, OpenFailure, ReaderClosed, UnsupportedFormat
from .types import MILLISECONDS_PER_SECOND, SUPPORTED_EXTENSIONS, Frame, ReaderState

CaptureFactory = Callable[[str], BaseCapture]


class SamplingFrameReader:
    """Read decoded frames from a video file, sub-sampled to a target rate.

    Frames are returned only when their timestamp is at least one sampling
    interval (``1000 / sampling_fps`` ms) past the last *returned* frame. A
    rate of 0 returns every decoded frame. Frames with a non-positive
    timestamp are never held back by the sampling gate.

    Each raw decode is retried up to ``MAX_RETRY_ATTEMPTS`` extra times, since
    the capture reports the same failure for a bad frame, for the end of the
    file, and for the first read of a still image. A frame that only shows up
    after a retry must have advanced past the position read before the first
    attempt, otherwise the decoder is replaying and the read counts as end of
    stream.

    Args:
        path: Path to a video file with a supported extension
        sampling_fps: Target sampling rate in frames per second, 0 to disable sampling
        backend: Capture backend used when ``capture_factory`` is not given
        capture_factory: Callable building a capture from a path string

    Raises:
        InvalidConfiguration: If sampling_fps is negative or not finite, or backend is unknown
        UnsupportedFormat: If the file extension is not supported
        OpenFailure: If the capture cannot open the file

    Examples:
        >>> with SamplingFrameReader("video.mp4", sampling_fps=5) as reader:
        ...     for frame in reader:
        ...         print(frame.timestamp_ms, frame.image.shape)
    """

    MAX_RETRY_ATTEMPTS = 2

    def __init__(
        self,
        path: PathLike,
        sampling_fps: float = 0,
        *,
        backend: CaptureBackend = "opencv",
        capture_factory: Optional[CaptureFactory] = None,
    ):
        self._state = ReaderState.CLOSED
        self._capture: Optional[BaseCapture] = None

        if not math.isfinite(sampling_fps) or sampling_fps < 0:
            raise InvalidConfiguration(f"Specified sampling rate is < 0 or not finite: {sampling_fps}")

        if capture_factory is None:
            try:
                capture_factory = get_capture_class(backend)
            except ValueError as e:
                raise InvalidConfiguration(str(e)) from e

        extension = Path(path).suffix
        if extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFormat(path, extension)

        self.path = path
        self.sampling_fps = sampling_fps
        self.interval_ms = MILLISECONDS_PER_SECOND / sampling_fps if sampling_fps > 0 else 0.0
        # With sampling, start one interval before zero so the first frame always passes.
        self._last_timestamp_ms = -self.interval_ms if sampling_fps > 0 else -1.0
        self._frames_decoded = 0
        self._frames_returned = 0

        try:
            capture = capture_factory(str(path))
        except Exception as e:
            raise OpenFailure(path, str(e)) from e
        if not capture.is_opened():
            capture.release()
            raise OpenFailure(path)

        self._capture = capture
        self._state = ReaderState.OPEN
        logger.info(f"Opened {path} (sampling_fps={sampling_fps}, interval={self.interval_ms:.3f}ms)")

    # ========== Properties ==========

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def last_timestamp_ms(self) -> float:
        """Timestamp of the last returned frame, or the initial sentinel before any frame."""
        return self._last_timestamp_ms

    @property
    def frames_decoded(self) -> int:
        return self._frames_decoded

    @property
    def frames_returned(self) -> int:
        return self._frames_returned

    # ========== Reading ==========

    def next_frame(self) -> Optional[Frame]:
        """Return the next sampled frame, or None at end of stream.

        Raises:
            ReaderClosed: If the reader has been released
        """
        if self._state is ReaderState.CLOSED:
            raise ReaderClosed(f"Reader for {self.path} is closed")
        if self._state is ReaderState.EXHAUSTED:
            return None

        while True:
            frame = self._decode_frame()
            if frame is None:
                self._state = ReaderState.EXHAUSTED
                logger.info(
                    f"End of stream for {self.path}: "
                    f"returned {self._frames_returned} of {self._frames_decoded} decoded frames"
                )
                return None
            self._frames_decoded += 1
            if self._passes_sampling_gate(frame.timestamp_ms):
                break

        self._last_timestamp_ms = frame.timestamp_ms
        self._frames_returned += 1
        return frame

    def _passes_sampling_gate(self, timestamp_ms: float) -> bool:
        if self.sampling_fps == 0 or timestamp_ms <= 0:
            return True
        return timestamp_ms - self._last_timestamp_ms >= self.interval_ms

    def _decode_frame(self) -> Optional[Frame]:
        """Decode one raw frame, retrying to tell a decode hiccup from the end of the stream."""
        assert self._capture is not None
        capture = self._capture

        prev_timestamp_ms = capture.position_ms
        ok, image = self._grab_and_retrieve()
        timestamp_ms = capture.position_ms

        n_attempts = 0
        while not ok and n_attempts < self.MAX_RETRY_ATTEMPTS:
            n_attempts += 1
            logger.debug(f"Decode failed at {timestamp_ms:.3f}ms in {self.path}, retry {n_attempts}")
            ok, image = self._grab_and_retrieve()
            timestamp_ms = capture.position_ms

        # A frame recovered by retrying must be a new one. Still images need this
        # second read, a stalled decoder hands back the frame it already served.
        if ok and n_attempts > 0 and timestamp_ms <= prev_timestamp_ms:
            logger.debug(
                f"Decoder did not advance in {self.path} "
                f"({timestamp_ms:.3f}ms <= {prev_timestamp_ms:.3f}ms), treating as end of stream"
            )
            ok = False

        if not ok or image is None:
            return None
        return Frame(image=image, timestamp_ms=timestamp_ms)

    def _grab_and_retrieve(self) -> Tuple[bool, Optional[npt.NDArray[np.uint8]]]:
        assert self._capture is not None
        grabbed = self._capture.grab()
        retrieved, image = self._capture.retrieve()
        return grabbed and retrieved, image

    def __iter__(self) -> Iterator[Frame]:
        while True:
            frame = self.next_frame()
            if frame is None:
                return
            yield frame

    # ========== Lifecycle ==========

    def release(self):
        """Release the decode session. Safe to call multiple times."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None
        self._state = ReaderState.CLOSED

    close = release

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: ANN001
        self.release()

    def __del__(self):
        if getattr(self, "_capture", None) is not None:
            self.release()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(path={str(getattr(self, 'path', None))!r}, "
            f"sampling_fps={getattr(self, 'sampling_fps', None)}, state={self._state.value})"
        )


__all__ = ["SamplingFrameReader", "CaptureFactory"]
