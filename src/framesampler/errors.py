"""Exception hierarchy for frame reading.

Construction-time failures are distinct types so that a caller processing a
batch of files can decide per file whether to abort or skip. End of stream is
never an exception: ``SamplingFrameReader.next_frame`` returns ``None``.
"""

from typing import Optional

from ._typing import PathLike


class FrameReaderError(Exception):
    """Base class for all framesampler errors."""


class InvalidConfiguration(FrameReaderError, ValueError):
    """Raised when a reader is configured with an invalid parameter (e.g. negative sampling rate)."""


class UnsupportedFormat(FrameReaderError, ValueError):
    """Raised when the file extension is not in the supported set.

    Attributes:
        path: The rejected path
        extension: The extension that was looked up, including the leading dot
    """

    def __init__(self, path: PathLike, extension: str):
        self.path = path
        self.extension = extension
        super().__init__(f"Unsupported file extension: {extension!r} ({path})")


class OpenFailure(FrameReaderError, OSError):
    """Raised when the capture backend cannot open the file.

    The underlying backend error, if any, is chained as ``__cause__``.
    """

    def __init__(self, path: PathLike, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"Error opening video/image file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ReaderClosed(FrameReaderError, RuntimeError):
    """Raised when reading from a reader whose session has been released."""


__all__ = [
    "FrameReaderError",
    "InvalidConfiguration",
    "UnsupportedFormat",
    "OpenFailure",
    "ReaderClosed",
]
