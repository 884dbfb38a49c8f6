"""torchcube: cube map filtering with PyTorch."""

from . import (
    color,
    filter,
    io,
    surface,
    texture_mapping,
)
from .surface import CubeSurface

__all__ = [
    "CubeSurface",
    "color",
    "filter",
    "io",
    "surface",
    "texture_mapping",
]

__version__ = "0.1.0"
