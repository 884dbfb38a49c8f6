"""Test fixtures for cube surface and container tests."""

import numpy
import pytest
import torch

from torchcube.io import DDS_HEADER_DTYPE, DDS_HEADER_DXT10_DTYPE

_DDSD_CAPS = 0x1
_DDSD_HEIGHT = 0x2
_DDSD_WIDTH = 0x4
_DDSD_PIXELFORMAT = 0x1000
_DDSD_MIPMAPCOUNT = 0x20000
_DDPF_FOURCC = 0x4
_DDPF_RGB = 0x40
_DDSCAPS_TEXTURE = 0x1000
_DDSCAPS2_CUBEMAP = 0x200
_DDSCAPS2_CUBEMAP_ALL_FACES = 0xFC00

_FOURCC = {
    "rgba_16f": 113,
    "rgba_32f": 116,
}

_DXGI = {
    "rgba_16f": 10,
    "rgba_32f": 2,
}

_NUMPY_DTYPE = {
    "rgba_16f": numpy.float16,
    "rgba_32f": numpy.float32,
}


def encode_faces(faces: numpy.ndarray, input_format: str) -> bytes:
    """Encode ``(6, H, W, 4)`` RGBA pixel data face by face.

    ``"bgra_8ub"`` expects values in ``[0, 255]`` and stores them as BGRA.
    """
    if input_format == "bgra_8ub":
        return faces[..., [2, 1, 0, 3]].astype(numpy.uint8).tobytes()
    return faces.astype(_NUMPY_DTYPE[input_format]).tobytes()


def dds_bytes(
    mips,
    input_format: str = "rgba_32f",
    *,
    dx10: bool = False,
    cube: bool = True,
    all_faces: bool = True,
    width=None,
    height=None,
    fourcc=None,
    dxgi_format=None,
    bit_count=None,
) -> bytes:
    """Build a DDS file from a list of ``(6, N, N, 4)`` arrays, one per mip.

    Keyword overrides produce malformed or unsupported headers.
    """
    edge_length = mips[0].shape[1]

    header = numpy.zeros(1, dtype=DDS_HEADER_DTYPE)
    header["magic"] = 0x20534444
    header["size"] = 124
    header["flags"] = (
        _DDSD_CAPS
        | _DDSD_HEIGHT
        | _DDSD_WIDTH
        | _DDSD_PIXELFORMAT
        | _DDSD_MIPMAPCOUNT
    )
    header["width"] = edge_length if width is None else width
    header["height"] = edge_length if height is None else height
    header["mipmap_count"] = len(mips)
    header["pf_size"] = 32
    header["caps"] = _DDSCAPS_TEXTURE
    if cube:
        header["caps2"] = _DDSCAPS2_CUBEMAP
        if all_faces:
            header["caps2"] |= _DDSCAPS2_CUBEMAP_ALL_FACES

    header10 = None
    if dx10:
        header["pf_flags"] = _DDPF_FOURCC
        header["pf_fourcc"] = 0x30315844
        header10 = numpy.zeros(1, dtype=DDS_HEADER_DXT10_DTYPE)
        header10["dxgi_format"] = (
            _DXGI.get(input_format, 0) if dxgi_format is None else dxgi_format
        )
        header10["resource_dimension"] = 3
        header10["misc_flag"] = 0x4 if cube else 0
        header10["array_size"] = 1
    elif input_format == "bgra_8ub" or bit_count is not None:
        header["pf_flags"] = _DDPF_RGB
        header["pf_bit_count"] = 32 if bit_count is None else bit_count
        header["pf_r_mask"] = 0x00FF0000
        header["pf_g_mask"] = 0x0000FF00
        header["pf_b_mask"] = 0x000000FF
        header["pf_a_mask"] = 0xFF000000
    else:
        header["pf_flags"] = _DDPF_FOURCC
        header["pf_fourcc"] = (
            _FOURCC[input_format] if fourcc is None else fourcc
        )

    payload = b""
    for face in range(6 if cube else 1):
        for mip in mips:
            payload += encode_faces(mip[face : face + 1], input_format)

    data = header.tobytes()
    if header10 is not None:
        data += header10.tobytes()
    return data + payload


def _random_mips(edge_length: int, count: int, seed: int = 0):
    generator = numpy.random.default_rng(seed)
    sizes = [max(1, edge_length >> level) for level in range(count)]
    return [generator.random((6, size, size, 4)) for size in sizes]


@pytest.fixture
def random_mips():
    """Factory for random ``(6, n, n, 4)`` arrays of a mip chain."""
    return _random_mips


@pytest.fixture
def write_dds(tmp_path):
    """Factory writing a DDS file built by :func:`dds_bytes` into tmp_path."""

    def _write(mips, input_format="rgba_32f", name="cube.dds", **kwargs):
        path = tmp_path / name
        path.write_bytes(dds_bytes(mips, input_format, **kwargs))
        return path

    return _write


@pytest.fixture
def solid_red_cube():
    """4x4 cube whose every texel is (1, 0, 0, 1)."""
    from torchcube import CubeSurface

    faces = torch.zeros(6, 4, 4, 4)
    faces[:, 0] = 1.0
    faces[:, 3] = 1.0
    return CubeSurface.from_faces(faces)


@pytest.fixture
def build_dds():
    """Factory returning DDS file bytes, see :func:`dds_bytes`."""
    return dds_bytes


@pytest.fixture
def encode_pixels():
    """Factory encoding face arrays, see :func:`encode_faces`."""
    return encode_faces
