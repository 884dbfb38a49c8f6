"""Cube texel center to world direction mapping."""

from typing import Union

import torch
from torch import Tensor

from ._cube_face_basis import cube_face_basis_matrices


def _as_index_tensor(
    value: Union[Tensor, int], device: torch.device | None
) -> Tensor:
    if isinstance(value, Tensor):
        return value.to(device=device)
    return torch.as_tensor(value, dtype=torch.int64, device=device)


def normalize_fast(input: Tensor) -> Tensor:
    """Scale vectors along the last dimension to approximately unit length.

    Uses a reciprocal square root instead of a division by the norm, so the
    result may deviate from unit length by a few ULPs.
    """
    return input * torch.rsqrt((input * input).sum(dim=-1, keepdim=True))


def cube_texel_direction(
    face: Union[Tensor, int],
    x: Union[Tensor, int],
    y: Union[Tensor, int],
    inverse_edge_length: float,
    *,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> Tensor:
    r"""World-space direction through the center of a cube map texel.

    Mathematical Definition
    -----------------------
    The texel center is mapped to face coordinates in :math:`[-1, 1]`:

    .. math::
        u = (x + 0.5) \cdot 2 \ell^{-1} - 1, \quad
        v = (y + 0.5) \cdot 2 \ell^{-1} - 1

    where :math:`\ell^{-1}` is the inverse edge length. The face basis maps
    :math:`(u, v, 1)` to world axes:

    ====  ======  ======  ======
    face  x       y       z
    ====  ======  ======  ======
    0     1       -v      -u
    1     -1      -v      u
    2     u       1       v
    3     u       -1      -v
    4     u       -v      1
    5     -u      -v      -1
    ====  ======  ======  ======

    Parameters
    ----------
    face : Tensor or int
        Face index in ``[0, 6)``.
    x, y : Tensor or int
        Texel column and row in ``[0, edge_length)``. ``face``, ``x`` and
        ``y`` are broadcast together.
    inverse_edge_length : float
        ``1 / edge_length`` of the face.
    dtype : torch.dtype, optional
        Floating point dtype of the result. Default is
        ``torch.get_default_dtype()``.
    device : torch.device, optional
        Device of the result.

    Returns
    -------
    Tensor
        Directions with shape ``(*broadcast_shape, 3)``, normalized with
        :func:`normalize_fast`.

    Examples
    --------
    >>> cube_texel_direction(4, 0, 0, 1.0)
    tensor([ 0., -0.,  1.])
    """
    if dtype is None:
        dtype = torch.get_default_dtype()

    face = _as_index_tensor(face, device)
    x = _as_index_tensor(x, device)
    y = _as_index_tensor(y, device)
    device = face.device

    if face.numel() > 0 and (bool((face < 0).any()) or bool((face > 5).any())):
        raise ValueError("face must be in [0, 6)")

    face, x, y = torch.broadcast_tensors(face, x, y)

    scale = 2.0 * inverse_edge_length
    u = (x.to(dtype) + 0.5) * scale - 1.0
    v = (y.to(dtype) + 0.5) * scale - 1.0
    local = torch.stack([u, v, torch.ones_like(u)], dim=-1)

    basis = cube_face_basis_matrices(dtype=dtype, device=device)[face]
    direction = torch.einsum("...ij,...j->...i", basis, local)

    return normalize_fast(direction)
