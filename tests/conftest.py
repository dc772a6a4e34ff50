"""Shared test fixtures.

ScriptedCapture replays a fixed list of decode outcomes so the retry and
sampling logic can be tested without real media. The video fixtures encode
small clips with PyAV into a temporary directory.
"""

from fractions import Fraction
from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple

import numpy as np
import numpy.typing as npt
import pytest

from framesampler.capture import BaseCapture


class Step(NamedTuple):
    """Outcome of one grab/retrieve pair and the position reported afterwards."""

    timestamp_ms: float
    grabbed: bool = True
    retrieved: bool = True


def ok(timestamp_ms: float) -> Step:
    return Step(timestamp_ms)


def fail(timestamp_ms: float = 0.0) -> Step:
    return Step(timestamp_ms, grabbed=False, retrieved=False)


class ScriptedCapture(BaseCapture):
    """Capture that plays back scripted steps, then reports failure forever."""

    def __init__(self, source: str, steps: List[Step], initial_position_ms: float = 0.0, opened: bool = True):
        super().__init__(source)
        self._steps = list(steps)
        self._position_ms = initial_position_ms
        self._current: Optional[Step] = None
        self._opened = opened
        self.grab_calls = 0
        self.retrieve_calls = 0
        self.released = False

    def is_opened(self) -> bool:
        return self._opened and not self.released

    def grab(self) -> bool:
        self.grab_calls += 1
        if self._steps:
            self._current = self._steps.pop(0)
            self._position_ms = self._current.timestamp_ms
        else:
            self._current = None
            self._position_ms = 0.0
        return self._current is not None and self._current.grabbed

    def retrieve(self) -> Tuple[bool, Optional[npt.NDArray[np.uint8]]]:
        self.retrieve_calls += 1
        if self._current is None or not self._current.retrieved:
            return False, None
        value = int(self._current.timestamp_ms) % 256
        return True, np.full((4, 6, 3), value, dtype=np.uint8)

    @property
    def position_ms(self) -> float:
        return self._position_ms

    def release(self):
        self.released = True


@pytest.fixture
def scripted_capture():
    """Return a factory building a (capture, capture_factory) pair from scripted steps.

    The capture_factory is what SamplingFrameReader expects; the capture is kept
    so tests can inspect call counts.
    """

    def make(steps: List[Step], initial_position_ms: float = 0.0, opened: bool = True):
        capture = ScriptedCapture("scripted", steps, initial_position_ms=initial_position_ms, opened=opened)
        return capture, lambda path: capture

    return make


def _encode_clip(path: Path, num_frames: int, fps: int, size: Tuple[int, int] = (64, 48)) -> List[float]:
    """Encode a clip whose frames get brighter over time; return frame timestamps in ms."""
    av = pytest.importorskip("av")

    width, height = size
    container = av.open(str(path), "w")
    stream = container.add_stream("mpeg4", rate=fps)
    stream.width, stream.height, stream.pix_fmt = width, height, "yuv420p"
    for i in range(num_frames):
        arr = np.full((height, width, 3), (i * 20) % 256, dtype=np.uint8)
        frame = av.VideoFrame.from_ndarray(arr, format="rgb24")
        frame.pts = i
        frame.time_base = Fraction(1, fps)
        for packet in stream.encode(frame):
            container.mux(packet)
    for packet in stream.encode():
        container.mux(packet)
    container.close()
    return [i * 1000.0 / fps for i in range(num_frames)]


@pytest.fixture
def sample_video_file(tmp_path: Path) -> Tuple[Path, List[float]]:
    """Create a 10-frame 25fps mp4 clip (64x48).

    Returns:
        Tuple of (video path, frame timestamps in milliseconds)
    """
    video_path = tmp_path / "sample.mp4"
    timestamps = _encode_clip(video_path, num_frames=10, fps=25)
    return video_path, timestamps


@pytest.fixture
def long_video_file(tmp_path: Path) -> Tuple[Path, List[float]]:
    """Create a 2-second 25fps avi clip (50 frames, 64x48)."""
    video_path = tmp_path / "long.avi"
    timestamps = _encode_clip(video_path, num_frames=50, fps=25)
    return video_path, timestamps
