"""DirectDraw Surface (DDS) container reader."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Union

import numpy

from torchcube.io._exceptions import DirectDrawSurfaceError
from torchcube.io._image import InputFormat, bytes_per_pixel

DDS_HEADER_DTYPE = numpy.dtype(
    [
        ("magic", "<u4"),
        ("size", "<u4"),
        ("flags", "<u4"),
        ("height", "<u4"),
        ("width", "<u4"),
        ("pitch", "<u4"),
        ("depth", "<u4"),
        ("mipmap_count", "<u4"),
        ("reserved", "<u4", (11,)),
        ("pf_size", "<u4"),
        ("pf_flags", "<u4"),
        ("pf_fourcc", "<u4"),
        ("pf_bit_count", "<u4"),
        ("pf_r_mask", "<u4"),
        ("pf_g_mask", "<u4"),
        ("pf_b_mask", "<u4"),
        ("pf_a_mask", "<u4"),
        ("caps", "<u4"),
        ("caps2", "<u4"),
        ("caps3", "<u4"),
        ("caps4", "<u4"),
        ("not_used", "<u4"),
    ]
)

DDS_HEADER_DXT10_DTYPE = numpy.dtype(
    [
        ("dxgi_format", "<u4"),
        ("resource_dimension", "<u4"),
        ("misc_flag", "<u4"),
        ("array_size", "<u4"),
        ("reserved", "<u4"),
    ]
)

FOURCC_DDS = 0x20534444  # "DDS "
FOURCC_DX10 = 0x30315844  # "DX10"

DDSD_MIPMAPCOUNT = 0x00020000
DDPF_FOURCC = 0x00000004
DDSCAPS2_CUBEMAP = 0x00000200
DDSCAPS2_CUBEMAP_ALL_FACES = 0x0000FC00
DDS_RESOURCE_MISC_TEXTURECUBE = 0x00000004

D3DFMT_A16B16G16R16F = 113
D3DFMT_A32B32G32R32F = 116
DXGI_FORMAT_R32G32B32A32_FLOAT = 2
DXGI_FORMAT_R16G16B16A16_FLOAT = 10

_DXGI_INPUT_FORMATS = {
    DXGI_FORMAT_R16G16B16A16_FLOAT: "rgba_16f",
    DXGI_FORMAT_R32G32B32A32_FLOAT: "rgba_32f",
}

_FOURCC_INPUT_FORMATS = {
    D3DFMT_A16B16G16R16F: "rgba_16f",
    D3DFMT_A32B32G32R32F: "rgba_32f",
}


class DirectDrawSurface:
    """Header and payload access for an uncompressed DDS file.

    The whole file is read on construction. Payload surfaces are laid out
    face by face, each face followed by its complete mip chain.

    Parameters
    ----------
    path : str or os.PathLike
        File to read.

    Raises
    ------
    OSError
        If the file cannot be read.
    DirectDrawSurfaceError
        If the file is too short, its magic number, header size or pixel
        format size is wrong, or its width or height is zero.
    """

    def __init__(self, path: Union[str, os.PathLike]):
        self._data = Path(path).read_bytes()

        if len(self._data) < DDS_HEADER_DTYPE.itemsize:
            raise DirectDrawSurfaceError(
                f"{path}: file too short for a DDS header"
            )

        self.header = numpy.frombuffer(
            self._data, dtype=DDS_HEADER_DTYPE, count=1
        )[0]

        if int(self.header["magic"]) != FOURCC_DDS:
            raise DirectDrawSurfaceError(f"{path}: bad DDS magic number")
        if int(self.header["size"]) != 124:
            raise DirectDrawSurfaceError(
                f"{path}: bad DDS header size {int(self.header['size'])}"
            )
        if int(self.header["pf_size"]) != 32:
            raise DirectDrawSurfaceError(
                f"{path}: bad pixel format size {int(self.header['pf_size'])}"
            )
        if self.width == 0 or self.height == 0:
            raise DirectDrawSurfaceError(
                f"{path}: empty surface {self.width}x{self.height}"
            )

        self.header10: Optional[numpy.void] = None
        self._header_size = DDS_HEADER_DTYPE.itemsize

        if self.has_dx10_header:
            end = self._header_size + DDS_HEADER_DXT10_DTYPE.itemsize
            if len(self._data) < end:
                raise DirectDrawSurfaceError(
                    f"{path}: file too short for a DX10 header"
                )
            self.header10 = numpy.frombuffer(
                self._data,
                dtype=DDS_HEADER_DXT10_DTYPE,
                count=1,
                offset=self._header_size,
            )[0]
            self._header_size = end

    @property
    def has_dx10_header(self) -> bool:
        return (int(self.header["pf_flags"]) & DDPF_FOURCC) != 0 and int(
            self.header["pf_fourcc"]
        ) == FOURCC_DX10

    @property
    def width(self) -> int:
        return int(self.header["width"])

    @property
    def height(self) -> int:
        return int(self.header["height"])

    @property
    def fourcc(self) -> int:
        return int(self.header["pf_fourcc"])

    @property
    def bit_count(self) -> int:
        return int(self.header["pf_bit_count"])

    @property
    def dxgi_format(self) -> Optional[int]:
        if self.header10 is None:
            return None
        return int(self.header10["dxgi_format"])

    @property
    def mipmap_count(self) -> int:
        if int(self.header["flags"]) & DDSD_MIPMAPCOUNT:
            return max(1, int(self.header["mipmap_count"]))
        return 1

    def is_texture_cube(self) -> bool:
        if self.header10 is not None:
            return (
                int(self.header10["misc_flag"]) & DDS_RESOURCE_MISC_TEXTURECUBE
            ) != 0
        return (int(self.header["caps2"]) & DDSCAPS2_CUBEMAP) != 0

    def has_all_cube_faces(self) -> bool:
        """Whether all six faces are present.

        DX10 cube maps always store complete cubes; legacy headers flag each
        face in ``caps2``.
        """
        if not self.is_texture_cube():
            return False
        if self.header10 is not None:
            return int(self.header10["array_size"]) >= 1
        caps2 = int(self.header["caps2"])
        return (
            caps2 & DDSCAPS2_CUBEMAP_ALL_FACES
        ) == DDSCAPS2_CUBEMAP_ALL_FACES

    def input_format(self) -> Optional[InputFormat]:
        """Pixel format of the payload, or ``None`` if it is unsupported.

        Supported are 16 and 32 bit float RGBA (DX10 or FourCC tagged) and
        plain 32 bit per pixel layouts, which are read as BGRA bytes.
        """
        if self.header10 is not None:
            return _DXGI_INPUT_FORMATS.get(self.dxgi_format)
        if int(self.header["pf_flags"]) & DDPF_FOURCC:
            return _FOURCC_INPUT_FORMATS.get(self.fourcc)
        if self.bit_count == 32:
            return "bgra_8ub"
        return None

    def surface_width(self, mipmap: int) -> int:
        return max(1, self.width >> mipmap)

    def surface_height(self, mipmap: int) -> int:
        return max(1, self.height >> mipmap)

    def surface_size(self, mipmap: int) -> int:
        """Size in bytes of one face at ``mipmap``."""
        input_format = self.input_format()
        if input_format is None:
            raise DirectDrawSurfaceError("unsupported pixel format")
        return (
            self.surface_width(mipmap)
            * self.surface_height(mipmap)
            * bytes_per_pixel(input_format)
        )

    def read_surface(self, face: int, mipmap: int) -> bytes:
        """Raw bytes of one face at one mip level.

        Raises
        ------
        DirectDrawSurfaceError
            If the indices are out of range or the payload is truncated.
        """
        face_count = 6 if self.is_texture_cube() else 1
        if not 0 <= face < face_count:
            raise DirectDrawSurfaceError(f"face {face} out of range")
        if not 0 <= mipmap < self.mipmap_count:
            raise DirectDrawSurfaceError(f"mipmap {mipmap} out of range")

        face_size = sum(
            self.surface_size(level) for level in range(self.mipmap_count)
        )
        offset = (
            self._header_size
            + face * face_size
            + sum(self.surface_size(level) for level in range(mipmap))
        )
        size = self.surface_size(mipmap)

        if offset + size > len(self._data):
            raise DirectDrawSurfaceError(
                f"payload truncated reading face {face}, mipmap {mipmap}"
            )

        return self._data[offset : offset + size]
