"""Shared type aliases."""

import os
from typing import Union

PathLike = Union[str, os.PathLike]

__all__ = ["PathLike"]
