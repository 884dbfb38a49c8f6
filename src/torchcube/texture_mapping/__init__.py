"""Cube map texel addressing."""

from torchcube.texture_mapping._cube_face_basis import (
    CUBE_FACE_BASIS,
    CubeFaceBasis,
    cube_face_basis_matrices,
)
from torchcube.texture_mapping._cube_mapping import cube_mapping
from torchcube.texture_mapping._cube_texel_direction import (
    cube_texel_direction,
    normalize_fast,
)

__all__ = [
    "CUBE_FACE_BASIS",
    "CubeFaceBasis",
    "cube_face_basis_matrices",
    "cube_mapping",
    "cube_texel_direction",
    "normalize_fast",
]
