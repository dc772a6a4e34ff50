"""OpenCV VideoCapture backend."""

from typing import Optional, Tuple

import cv2
import numpy as np
import numpy.typing as npt

from .._typing import PathLike
from .base import BaseCapture


class OpenCVCapture(BaseCapture):
    """Capture backed by ``cv2.VideoCapture``.

    OpenCV reports "no new frame" both for a frame it could not decode and for
    the end of the file, and still images only surface data on a second grab.
    SamplingFrameReader compensates for both.

    Args:
        source: Path to video or image file
        api_preference: Optional ``cv2.CAP_*`` backend identifier
    """

    def __init__(self, source: PathLike, api_preference: Optional[int] = None, **kwargs):
        """Open the source with OpenCV."""
        super().__init__(source, **kwargs)
        if api_preference is None:
            self._cap = cv2.VideoCapture(str(source))
        else:
            self._cap = cv2.VideoCapture(str(source), api_preference)

    def is_opened(self) -> bool:
        return bool(self._cap.isOpened())

    def grab(self) -> bool:
        return bool(self._cap.grab())

    def retrieve(self) -> Tuple[bool, Optional[npt.NDArray[np.uint8]]]:
        ok, image = self._cap.retrieve()
        if not ok or image is None:
            return False, None
        return True, image

    @property
    def position_ms(self) -> float:
        return float(self._cap.get(cv2.CAP_PROP_POS_MSEC))

    def release(self):
        """Release the underlying VideoCapture."""
        if hasattr(self, "_cap"):
            self._cap.release()


__all__ = ["OpenCVCapture"]
