"""Canonical cube face basis assignments."""

from typing import NamedTuple, Tuple

import torch
from torch import Tensor


class CubeFaceBasis(NamedTuple):
    """Mapping from face-local ``(u, v, 1)`` to world axes for one face.

    World component ``i`` is ``signs[i] * local[axes[i]]`` where
    ``local = (u, v, 1)``.

    Parameters
    ----------
    axes : tuple of int
        Local component feeding world x, y and z.
    signs : tuple of float
        Sign applied to each world component.
    """

    axes: Tuple[int, int, int]
    signs: Tuple[float, float, float]


# Face order: +X, -X, +Y, -Y, +Z, -Z.
CUBE_FACE_BASIS: Tuple[CubeFaceBasis, ...] = (
    CubeFaceBasis(axes=(2, 1, 0), signs=(1.0, -1.0, -1.0)),
    CubeFaceBasis(axes=(2, 1, 0), signs=(-1.0, -1.0, 1.0)),
    CubeFaceBasis(axes=(0, 2, 1), signs=(1.0, 1.0, 1.0)),
    CubeFaceBasis(axes=(0, 2, 1), signs=(1.0, -1.0, -1.0)),
    CubeFaceBasis(axes=(0, 1, 2), signs=(1.0, -1.0, 1.0)),
    CubeFaceBasis(axes=(0, 1, 2), signs=(-1.0, -1.0, -1.0)),
)


def cube_face_basis_matrices(
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> Tensor:
    """Signed permutation matrices of the six cube faces.

    Returns
    -------
    Tensor
        Shape ``(6, 3, 3)``. ``matrices[f] @ (u, v, 1)`` is the unnormalized
        world direction of face ``f``. Each matrix is orthogonal, so its
        transpose maps world directions back to face-local coordinates.
    """
    matrices = torch.zeros(6, 3, 3, dtype=dtype, device=device)
    for face, basis in enumerate(CUBE_FACE_BASIS):
        for axis, (local, sign) in enumerate(zip(basis.axes, basis.signs)):
            matrices[face, axis, local] = sign
    return matrices
