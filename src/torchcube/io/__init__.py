"""Cube map container decoding."""

from torchcube.io._direct_draw_surface import (
    DDS_HEADER_DTYPE,
    DDS_HEADER_DXT10_DTYPE,
    DirectDrawSurface,
)
from torchcube.io._exceptions import DirectDrawSurfaceError
from torchcube.io._image import InputFormat, image_from_buffer

__all__ = [
    "DDS_HEADER_DTYPE",
    "DDS_HEADER_DXT10_DTYPE",
    "DirectDrawSurface",
    "DirectDrawSurfaceError",
    "InputFormat",
    "image_from_buffer",
]
