"""Base interface for capture backends."""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np
import numpy.typing as npt

from .._typing import PathLike


class BaseCapture(ABC):
    """Abstract base class defining the two-phase decode interface used by SamplingFrameReader.

    The interface mirrors OpenCV's VideoCapture:
    - grab: advance the read position by one frame
    - retrieve: materialize the pixel buffer for the grabbed position
    - position_ms: timestamp of the current position in milliseconds

    A position of 0 is reserved to mean "unreliable / no frame". Backends must
    never report 0 for a genuinely advanced frame other than the first one.

    Examples:
        >>> with OpenCVCapture("video.mp4") as capture:
        ...     if capture.grab():
        ...         ok, image = capture.retrieve()
        ...         print(capture.position_ms)
    """

    def __init__(self, source: PathLike, **kwargs):
        """Initialize capture.

        Args:
            source: Path to video or image file
            **kwargs: Backend-specific options
        """
        self.source = source

    @abstractmethod
    def is_opened(self) -> bool:
        """Return True if the source was opened successfully and not yet released."""
        pass

    @abstractmethod
    def grab(self) -> bool:
        """Advance to the next frame.

        Returns:
            True if a frame was grabbed. False on decode error or end of stream;
            the two cases are indistinguishable at this level.
        """
        pass

    @abstractmethod
    def retrieve(self) -> Tuple[bool, Optional[npt.NDArray[np.uint8]]]:
        """Decode the grabbed frame.

        Returns:
            Tuple of (success, BGR image). The image is None when success is False.
        """
        pass

    @property
    @abstractmethod
    def position_ms(self) -> float:
        """Timestamp of the current read position in milliseconds."""
        pass

    @abstractmethod
    def release(self):
        """Release capture resources.

        Safe to call multiple times.
        """
        pass

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: ANN001
        """Exit context manager and release resources."""
        self.release()


__all__ = ["BaseCapture"]
