"""Decoding of raw face payloads into float images."""

from typing import Literal

import numpy
import torch
from torch import Tensor

InputFormat = Literal[
    "rgba_16f",
    "rgba_32f",
    "bgra_8ub",
]

_NUMPY_DTYPE = {
    "rgba_16f": numpy.dtype("<f2"),
    "rgba_32f": numpy.dtype("<f4"),
    "bgra_8ub": numpy.dtype("u1"),
}


def bytes_per_pixel(input_format: InputFormat) -> int:
    """Size of one pixel of ``input_format`` in bytes."""
    if input_format not in _NUMPY_DTYPE:
        raise ValueError(f"unsupported input format '{input_format}'")
    return 4 * _NUMPY_DTYPE[input_format].itemsize


def image_from_buffer(
    buffer: bytes,
    input_format: InputFormat,
    width: int,
    height: int,
) -> Tensor:
    """Decode a tightly packed four channel image.

    Parameters
    ----------
    buffer : bytes
        Row-major pixel data, at least ``width * height`` pixels long.
    input_format : {"rgba_16f", "rgba_32f", "bgra_8ub"}
        Pixel layout. ``"bgra_8ub"`` stores blue, green, red and alpha bytes
        and is scaled to ``[0, 1]``.
    width, height : int
        Image size in pixels.

    Returns
    -------
    Tensor
        float32 image of shape ``(4, height, width)`` with channels in
        R, G, B, A order.
    """
    pixel_size = bytes_per_pixel(input_format)
    expected = width * height * pixel_size
    if len(buffer) < expected:
        raise ValueError(
            f"buffer holds {len(buffer)} bytes, expected at least {expected}"
        )

    array = numpy.frombuffer(
        buffer, dtype=_NUMPY_DTYPE[input_format], count=width * height * 4
    )
    array = array.reshape(height, width, 4).astype(numpy.float32)

    if input_format == "bgra_8ub":
        array = array[..., [2, 1, 0, 3]] / numpy.float32(255.0)

    image = torch.from_numpy(numpy.ascontiguousarray(array))
    return image.permute(2, 0, 1).contiguous()
