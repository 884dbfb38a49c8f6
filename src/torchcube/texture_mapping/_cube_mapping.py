"""Cube mapping texture coordinate implementation."""

from typing import Tuple

import torch
from torch import Tensor

from ._cube_face_basis import cube_face_basis_matrices


def cube_mapping(
    direction: Tensor,
) -> Tuple[Tensor, Tensor, Tensor]:
    r"""Compute cube map face and UV coordinates from a direction vector.

    Maps a 3D direction vector to one of the 6 cube faces and computes
    texture coordinates (u, v) within that face. This is the inverse of
    :func:`~torchcube.texture_mapping.cube_texel_direction`.

    Mathematical Definition
    -----------------------
    Given direction vector (x, y, z), the dominant axis determines the face:
    - Face 0 (+X): x > 0 and |x| >= |y| and |x| >= |z|
    - Face 1 (-X): x < 0 and |x| >= |y| and |x| >= |z|
    - Face 2 (+Y): y > 0 and |y| > |x| and |y| >= |z|
    - Face 3 (-Y): y < 0 and |y| > |x| and |y| >= |z|
    - Face 4 (+Z): z > 0 and |z| > |x| and |z| > |y|
    - Face 5 (-Z): z < 0 and |z| > |x| and |z| > |y|

    The direction is rotated into the face-local frame by the transposed face
    basis, giving :math:`(s, t, m)` with :math:`m > 0`. Then
    :math:`u = (s / m + 1) / 2` and :math:`v = (t / m + 1) / 2`.

    Parameters
    ----------
    direction : Tensor
        Direction vectors with shape (..., 3). The last dimension must be 3.
        Does not need to be normalized, but must not be zero.

    Returns
    -------
    face : Tensor
        Face indices (0-5) with shape (...). dtype is int64.
    u : Tensor
        U texture coordinates in [0, 1] with shape (...).
    v : Tensor
        V texture coordinates in [0, 1] with shape (...).

    Examples
    --------
    >>> direction = torch.tensor([[1.0, 0.0, 0.0],   # +X
    ...                           [-1.0, 0.0, 0.0],  # -X
    ...                           [0.0, 1.0, 0.0]])  # +Y
    >>> face, u, v = torchcube.texture_mapping.cube_mapping(direction)
    >>> face
    tensor([0, 1, 2])

    Notes
    -----
    - UV coordinates are in [0, 1] with (0.5, 0.5) at the face center. A
      texel ``(x, y)`` of an ``N x N`` face covers
      ``[x / N, (x + 1) / N) x [y / N, (y + 1) / N)``.
    - This function is not differentiable with respect to the face choice.
    """
    if direction.shape[-1] != 3:
        raise ValueError(
            f"direction must have last dimension 3, got {direction.shape[-1]}"
        )

    magnitude = direction.abs()
    if direction.numel() > 0 and bool((magnitude.amax(dim=-1) == 0).any()):
        raise ValueError("direction must not contain zero-length vectors")

    # argmax returns the first maximum, so ties prefer x, then y.
    axis = magnitude.argmax(dim=-1)
    component = direction.gather(-1, axis.unsqueeze(-1)).squeeze(-1)
    face = 2 * axis + (component < 0).to(torch.int64)

    basis = cube_face_basis_matrices(
        dtype=direction.dtype, device=direction.device
    )[face]
    local = torch.einsum("...ji,...j->...i", basis, direction)

    major = local[..., 2]
    u = (local[..., 0] / major + 1.0) * 0.5
    v = (local[..., 1] / major + 1.0) * 0.5

    return face, u.clamp(0.0, 1.0), v.clamp(0.0, 1.0)
