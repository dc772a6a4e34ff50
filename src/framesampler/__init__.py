"""framesampler - Temporally sampled frame reading from video files.

Public API:
    - SamplingFrameReader: Reads decoded frames sub-sampled to a target rate
    - Frame: A decoded BGR image and its timestamp in milliseconds
    - ReaderSettings: Sampling rate and backend, loadable from the environment
    - read_frames / sample_frames / iter_passes: Single-file, multi-file and looping helpers
    - Errors: FrameReaderError, InvalidConfiguration, UnsupportedFormat, OpenFailure, ReaderClosed
"""

from loguru import logger

from .batch import iter_passes, read_frames, sample_frames
from .config import ReaderSettings
from .errors import FrameReaderError, InvalidConfiguration, OpenFailure, ReaderClosed, UnsupportedFormat
from .reader import SamplingFrameReader
from .types import SUPPORTED_EXTENSIONS, Frame, ReaderState

# Disable logging by default, which is best practice for library code
logger.disable("framesampler")

try:
    from importlib.metadata import version

    __version__ = version("framesampler")
except Exception:
    __version__ = "0.0.0.dev0"


__all__ = [
    "SamplingFrameReader",
    "Frame",
    "ReaderState",
    "ReaderSettings",
    "SUPPORTED_EXTENSIONS",
    "read_frames",
    "sample_frames",
    "iter_passes",
    "FrameReaderError",
    "InvalidConfiguration",
    "UnsupportedFormat",
    "OpenFailure",
    "ReaderClosed",
]
