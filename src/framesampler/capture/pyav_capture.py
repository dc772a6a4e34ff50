"""PyAV-based capture with grab/retrieve semantics."""

import gc
from collections import deque
from typing import Deque, Iterator, Optional, Tuple

import av
import cv2
import numpy as np
import numpy.typing as npt
from loguru import logger

from .._typing import PathLike
from .base import BaseCapture

# Garbage collection interval for PyAV reference cycles
# Reference: https://github.com/pytorch/vision/blob/428a54c96e82226c0d2d8522e9cbfdca64283da0/torchvision/io/video.py#L53-L55
_CALLED_TIMES = 0
_GC_COLLECTION_INTERVAL = 10


def _frame_position_ms(frame: av.VideoFrame) -> Optional[float]:
    """Timestamp of a decoded frame in milliseconds, from pts or else dts.

    Returns None when the frame carries neither. Rational arithmetic keeps
    whole-millisecond timestamps exact.
    """
    if frame.time_base is None:
        return None
    for ts in (frame.pts, frame.dts):
        if ts is not None:
            return float(ts * frame.time_base * 1000)
    return None


class PyAVCapture(BaseCapture):
    """Sequential capture over the first video stream of a PyAV container.

    ``grab`` demuxes and decodes packet by packet and pulls the next decoded
    frame, ``retrieve`` converts it to BGR. Decoder errors and end of stream
    both make ``grab`` return False and reset ``position_ms`` to 0, matching
    OpenCV's reporting. A packet that fails to decode is skipped, so a later
    grab can still return the frames after it.

    Args:
        source: Path to video or image file

    Raises:
        av.error.FFmpegError: If the container cannot be opened
        ValueError: If the container has no video stream
    """

    def __init__(self, source: PathLike, **kwargs):
        """Open the container and prepare the decode iterator."""
        super().__init__(source, **kwargs)

        global _CALLED_TIMES
        _CALLED_TIMES += 1
        if _CALLED_TIMES % _GC_COLLECTION_INTERVAL == 0:
            gc.collect()

        self._container = av.open(str(source), "r")
        if not self._container.streams.video:
            self._container.close()
            raise ValueError(f"No video streams found in {source}")
        self._stream = self._container.streams.video[0]
        self._packets: Iterator[av.Packet] = self._container.demux(self._stream)
        self._pending: Deque[av.VideoFrame] = deque()
        self._grabbed: Optional[av.VideoFrame] = None
        self._position_ms = 0.0
        self._released = False

    def is_opened(self) -> bool:
        return not self._released

    def grab(self) -> bool:
        if self._released:
            return False
        try:
            frame = self._next_frame()
        except av.error.FFmpegError as e:
            # Only this packet is lost; the next grab resumes with the following one.
            logger.debug(f"PyAV decode error in {self.source}: {e}")
            frame = None
        position_ms = _frame_position_ms(frame) if frame is not None else None
        if position_ms is None:
            self._grabbed = None
            self._position_ms = 0.0
            return False
        self._grabbed = frame
        self._position_ms = position_ms
        return True

    def _next_frame(self) -> Optional[av.VideoFrame]:
        """Return the next decoded frame, or None once the demuxer is exhausted.

        Raises:
            av.error.FFmpegError: If the current packet fails to decode
        """
        while not self._pending:
            packet = next(self._packets, None)
            if packet is None:
                return None
            # The final packet demuxed is an empty flush packet, which drains the decoder.
            self._pending.extend(packet.decode())
        return self._pending.popleft()

    def retrieve(self) -> Tuple[bool, Optional[npt.NDArray[np.uint8]]]:
        if self._grabbed is None:
            return False, None
        rgb_array = self._grabbed.to_ndarray(format="rgb24")
        bgr_array: npt.NDArray[np.uint8] = cv2.cvtColor(rgb_array, cv2.COLOR_RGB2BGR)  # type: ignore[assignment]
        return True, bgr_array

    @property
    def position_ms(self) -> float:
        return self._position_ms

    def release(self):
        """Close the container."""
        if hasattr(self, "_container") and not getattr(self, "_released", True):
            self._released = True
            self._grabbed = None
            self._pending.clear()
            self._container.close()


__all__ = ["PyAVCapture"]
