"""Texel direction lookup table for a whole cube."""

from __future__ import annotations

from typing import Union

import torch
from tensordict import tensorclass
from torch import Tensor

from torchcube.texture_mapping import cube_texel_direction


@tensorclass
class VectorTable:
    """Unit direction of every texel of an ``N x N`` cube.

    Use :func:`vector_table` to construct instances.

    Attributes
    ----------
    directions : Tensor
        Texel center directions, shape ``(6, N, N, 3)`` indexed
        ``[face, y, x]``.
    """

    directions: Tensor

    @property
    def edge_length(self) -> int:
        """Edge length ``N`` of the cube faces."""
        return self.directions.shape[-2]

    def lookup(
        self,
        face: Union[Tensor, int],
        x: Union[Tensor, int],
        y: Union[Tensor, int],
    ) -> Tensor:
        """Direction(s) of texel ``(x, y)`` on ``face``, shape ``(..., 3)``."""
        return self.directions[face, y, x]


def vector_table(
    edge_length: int,
    *,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> VectorTable:
    """Precompute the directions of all ``6 * N^2`` texels of a cube.

    Parameters
    ----------
    edge_length : int
        Face edge length ``N``. Must be positive.
    dtype : torch.dtype, optional
        Dtype of the directions. Default is ``torch.get_default_dtype()``.
    device : torch.device, optional
        Device of the directions.

    Returns
    -------
    VectorTable
    """
    if edge_length <= 0:
        raise ValueError(f"edge_length must be positive, got {edge_length}")

    face = torch.arange(6, device=device)[:, None, None]
    index = torch.arange(edge_length, device=device)

    directions = cube_texel_direction(
        face,
        index[None, None, :],
        index[None, :, None],
        1.0 / edge_length,
        dtype=dtype,
        device=device,
    )

    return VectorTable(directions=directions.contiguous(), batch_size=[])
