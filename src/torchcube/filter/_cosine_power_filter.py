"""Cosine power filtering of cube maps."""

from __future__ import annotations

import warnings
from functools import lru_cache
from typing import Optional, Tuple

import torch

from torchcube.filter._solid_angle_table import (
    SolidAngleTable,
    solid_angle_table,
)
from torchcube.filter._vector_table import VectorTable, vector_table
from torchcube.surface import CubeSurface
from torchcube.texture_mapping import cube_texel_direction

# Upper bound on the elements of one chunk's weight matrix.
_CHUNK_ELEMENTS = 1 << 24


@lru_cache(maxsize=8)
def _filter_tables(
    edge_length: int,
    dtype: torch.dtype,
    device: torch.device,
) -> Tuple[SolidAngleTable, VectorTable]:
    return (
        solid_angle_table(edge_length, dtype=dtype, device=device),
        vector_table(edge_length, dtype=dtype, device=device),
    )


def cosine_power_filter(
    input: CubeSurface,
    size: int,
    cosine_power: float,
    *,
    threshold: float = 1e-4,
    chunk_size: Optional[int] = None,
) -> CubeSurface:
    r"""Resample a cube map with a cosine power lobe.

    Every output texel is the solid angle weighted average of all input
    texels, weighted by a cosine lobe around the output texel's direction.

    Mathematical Definition
    -----------------------
    For output direction :math:`\mathbf{n}` and input texels :math:`i` with
    direction :math:`\mathbf{d}_i`, solid angle :math:`\Omega_i` and color
    :math:`c_i`:

    .. math::
        w_i = \Omega_i \cdot
              \operatorname{clamp}(\mathbf{d}_i \cdot \mathbf{n}, 0, 1)^p

    .. math::
        c(\mathbf{n}) = \frac{\sum_i w_i c_i}{\sum_i w_i}

    where terms whose lobe value does not exceed ``threshold`` are dropped.

    Parameters
    ----------
    input : CubeSurface
        Source cube. Must not be null and its edge length must be even.
    size : int
        Edge length of the output cube. Must be positive.
    cosine_power : float
        Lobe exponent :math:`p`. Must be non-negative; larger values give a
        narrower lobe and 0 averages the whole sphere.
    threshold : float, optional
        Lobe values at or below this are skipped. Default is ``1e-4``.
    chunk_size : int, optional
        Number of output texels evaluated together. Default bounds each
        chunk's weight matrix to about :math:`2^{24}` elements.

    Returns
    -------
    CubeSurface
        New cube with edge length ``size`` and the channel count and dtype of
        ``input``. RGB holds the filtered color, other channels are zero.

    Warns
    -----
    RuntimeWarning
        If some output texels receive no contribution above ``threshold``.
        Those texels are left black.

    Examples
    --------
    >>> faces = torch.zeros(6, 4, 4, 4)
    >>> faces[:, 0] = 1.0
    >>> cube = CubeSurface.from_faces(faces)
    >>> filtered = cosine_power_filter(cube, 2, 1.0)
    >>> filtered.face(0)[:3, 0, 0]
    tensor([1., 0., 0.])

    Notes
    -----
    - This is a brute force gather over all ``6 * N^2`` input texels for each
      of the ``6 * size^2`` output texels. Output texels are independent, so
      chunks never share accumulators and torch parallelizes each chunk's
      matrix products across threads.
    - Solid angle and direction tables are built once per source edge length
      and dtype and reused across calls.
    """
    if input.is_null():
        raise ValueError("cosine_power_filter: input cube must not be null")
    if size <= 0:
        raise ValueError(
            f"cosine_power_filter: size must be positive, got {size}"
        )
    if cosine_power < 0:
        raise ValueError(
            f"cosine_power_filter: cosine_power must be non-negative, "
            f"got {cosine_power}"
        )
    if chunk_size is not None and chunk_size <= 0:
        raise ValueError(
            f"cosine_power_filter: chunk_size must be positive, "
            f"got {chunk_size}"
        )

    source = input.faces
    dtype = source.dtype
    device = source.device
    edge_length = input.edge_length

    # Tables are complete before any output texel is gathered.
    solid_angles, vectors = _filter_tables(edge_length, dtype, device)

    input_directions = vectors.directions.reshape(-1, 3)
    input_solid_angles = solid_angles.full_face().reshape(-1).repeat(6)
    input_colors = source[:, :3].permute(0, 2, 3, 1).reshape(-1, 3)

    face = torch.arange(6, device=device)[:, None, None]
    index = torch.arange(size, device=device)
    filter_directions = cube_texel_direction(
        face,
        index[None, None, :],
        index[None, :, None],
        1.0 / size,
        dtype=dtype,
        device=device,
    ).reshape(-1, 3)

    if chunk_size is None:
        chunk_size = max(1, _CHUNK_ELEMENTS // input_directions.shape[0])

    colors = torch.zeros(
        filter_directions.shape[0], 3, dtype=dtype, device=device
    )
    empty_count = 0

    for start in range(0, filter_directions.shape[0], chunk_size):
        stop = start + chunk_size

        cosine = filter_directions[start:stop] @ input_directions.T
        scale = torch.pow(torch.clamp(cosine, 0.0, 1.0), cosine_power)
        weight = torch.where(
            scale > threshold,
            scale * input_solid_angles,
            torch.zeros((), dtype=dtype, device=device),
        )

        total = weight.sum(dim=-1)
        color = weight @ input_colors

        valid = total > 0
        empty_count += int((~valid).sum())

        total = torch.where(valid, total, torch.ones_like(total))
        colors[start:stop] = torch.where(
            valid[:, None],
            color / total[:, None],
            torch.zeros((), dtype=dtype, device=device),
        )

    if empty_count > 0:
        warnings.warn(
            f"{empty_count} output texels received no contribution above "
            f"threshold {threshold} and were left black. Consider a lower "
            f"cosine_power or threshold.",
            RuntimeWarning,
            stacklevel=2,
        )

    output = CubeSurface.allocate(
        size, input.channels, dtype=dtype, device=device
    )
    output.mutable_faces()[:, :3] = colors.reshape(6, size, size, 3).permute(
        0, 3, 1, 2
    )

    return output
