"""Capture backends providing the grab/retrieve primitives SamplingFrameReader builds on.

Classes:
    BaseCapture: Abstract base class defining the capture interface
    OpenCVCapture: cv2.VideoCapture backend (default)
    PyAVCapture: PyAV backend

Examples:
    >>> capture_class = get_capture_class("pyav")
    >>> with capture_class("video.mp4") as capture:
    ...     capture.grab()
"""

from typing import Literal, Type

from .base import BaseCapture
from .opencv_capture import OpenCVCapture
from .pyav_capture import PyAVCapture

# Type alias for capture backend selection
CaptureBackend = Literal["opencv", "pyav"]


def get_capture_class(backend: CaptureBackend) -> Type[BaseCapture]:
    """Get capture class for the specified backend."""
    if backend == "opencv":
        return OpenCVCapture
    elif backend == "pyav":
        return PyAVCapture
    else:
        raise ValueError(f"Unknown capture backend: {backend}. Must be 'opencv' or 'pyav'")


__all__ = [
    "BaseCapture",
    "CaptureBackend",
    "OpenCVCapture",
    "PyAVCapture",
    "get_capture_class",
]
