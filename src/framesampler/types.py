"""Type definitions for sampled frame reading."""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet

import cv2
import numpy as np
import numpy.typing as npt
import PIL.Image

# Container/video extensions accepted by SamplingFrameReader.
# Matched exactly (case-sensitive, leading dot included).
SUPPORTED_EXTENSIONS: FrozenSet[str] = frozenset(
    {
        ".avi",
        ".mov",
        ".flv",
        ".webm",
        ".wmv",
        ".mp4",
    }
)

MILLISECONDS_PER_SECOND = 1000.0


class ReaderState(str, Enum):
    """Lifecycle of a reader's decode session.

    CLOSED -> OPEN -> EXHAUSTED -> CLOSED. Nothing leaves EXHAUSTED except
    release; reading the source again needs a new reader.
    """

    CLOSED = "closed"
    OPEN = "open"
    EXHAUSTED = "exhausted"


@dataclass
class Frame:
    """A decoded frame and its presentation timestamp.

    Attributes:
        image: BGR pixel buffer (H, W, 3) with uint8 dtype
        timestamp_ms: Timestamp in milliseconds reported by the capture after decoding

    Examples:
        >>> frame = reader.next_frame()
        >>> print(frame.timestamp_ms, frame.width, frame.height)
        40.0 640 480
        >>> pil_img = frame.to_pil_image()
    """

    image: npt.NDArray[np.uint8] = field(repr=False)
    timestamp_ms: float

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def timestamp_seconds(self) -> float:
        return self.timestamp_ms / MILLISECONDS_PER_SECOND

    def to_rgb_array(self) -> npt.NDArray[np.uint8]:
        """Return the frame as an RGB numpy array (H, W, 3)."""
        rgb_array: npt.NDArray[np.uint8] = cv2.cvtColor(self.image, cv2.COLOR_BGR2RGB)  # type: ignore[assignment]
        return rgb_array

    def to_pil_image(self) -> PIL.Image.Image:
        """Return the frame as an RGB PIL Image."""
        return PIL.Image.fromarray(self.to_rgb_array())


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "MILLISECONDS_PER_SECOND",
    "ReaderState",
    "Frame",
]
