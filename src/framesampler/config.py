"""Reader settings.

Settings sources (in order of precedence):
    1. Explicit keyword arguments / command-line options
    2. Environment variables
    3. Default values

Environment Variable Mapping:
    FRAMESAMPLER_SAMPLING_FPS -> sampling_fps
    FRAMESAMPLER_BACKEND      -> backend

Example:
    from framesampler.config import ReaderSettings

    settings = ReaderSettings.from_env()
    with settings.open("video.mp4") as reader:
        ...
"""

import os
from typing import TYPE_CHECKING, Literal, Mapping, Optional

from pydantic import BaseModel, Field

from ._typing import PathLike

if TYPE_CHECKING:
    from .reader import SamplingFrameReader

ENV_SAMPLING_FPS = "FRAMESAMPLER_SAMPLING_FPS"
ENV_BACKEND = "FRAMESAMPLER_BACKEND"


class ReaderSettings(BaseModel):
    """Configuration shared by every reader in a run."""

    sampling_fps: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="Input sampling frame rate; 0 reads every frame at the video's own rate",
    )
    backend: Literal["opencv", "pyav"] = Field(
        default="opencv",
        description="Capture backend used to decode frames",
    )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "ReaderSettings":
        """Build settings from environment variables, then apply non-None overrides.

        Raises:
            pydantic.ValidationError: If a value is invalid
        """
        environ = os.environ if environ is None else environ
        values: dict = {}
        if environ.get(ENV_SAMPLING_FPS):
            values["sampling_fps"] = environ[ENV_SAMPLING_FPS]
        if environ.get(ENV_BACKEND):
            values["backend"] = environ[ENV_BACKEND]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)

    def open(self, path: PathLike) -> "SamplingFrameReader":
        """Open a SamplingFrameReader over path with these settings."""
        from .reader import SamplingFrameReader

        return SamplingFrameReader(path, self.sampling_fps, backend=self.backend)


__all__ = ["ReaderSettings", "ENV_SAMPLING_FPS", "ENV_BACKEND"]
