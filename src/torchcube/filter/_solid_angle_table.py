"""Solid angle lookup table for cube map texels."""

from __future__ import annotations

from typing import Union

import torch
from tensordict import tensorclass
from torch import Tensor


def _area_element(x: Tensor, y: Tensor) -> Tensor:
    # Solid angle of the axis aligned quad from (0, 0, 1) to (x, y, 1).
    return torch.atan2(x * y, torch.sqrt(x * x + y * y + 1.0))


def cube_texel_solid_angle(
    x: Union[Tensor, int],
    y: Union[Tensor, int],
    inverse_edge_length: float,
) -> Tensor:
    r"""Exact solid angle subtended by a cube face texel.

    Mathematical Definition
    -----------------------
    With the texel center at :math:`(u, v)` in :math:`[-1, 1]^2` and half
    width :math:`h = \ell^{-1}`, the texel spans
    :math:`[x_0, x_1] \times [y_0, y_1] = [u - h, u + h] \times [v - h, v + h]`
    and

    .. math::
        \Omega = A(x_0, y_0) - A(x_0, y_1) - A(x_1, y_0) + A(x_1, y_1)

    where :math:`A(x, y) = \operatorname{atan2}(xy, \sqrt{x^2 + y^2 + 1})`
    is the solid angle of the quad from the face center to :math:`(x, y)`.

    Parameters
    ----------
    x, y : Tensor or int
        Texel column and row.
    inverse_edge_length : float
        ``1 / edge_length`` of the face.

    Returns
    -------
    Tensor
        Solid angle in steradians, float64, broadcast shape of ``x`` and ``y``.

    References
    ----------
    .. [1] Derivation of the texel solid angle,
           http://www.fizzmoll11.com/thesis/
    """
    x = torch.as_tensor(x, dtype=torch.float64)
    y = torch.as_tensor(y, dtype=torch.float64)

    u = (x + 0.5) * (2.0 * inverse_edge_length) - 1.0
    v = (y + 0.5) * (2.0 * inverse_edge_length) - 1.0

    x0 = u - inverse_edge_length
    y0 = v - inverse_edge_length
    x1 = u + inverse_edge_length
    y1 = v + inverse_edge_length

    return (
        _area_element(x0, y0)
        - _area_element(x0, y1)
        - _area_element(x1, y0)
        + _area_element(x1, y1)
    )


@tensorclass
class SolidAngleTable:
    """Per-texel solid angles of one cube face, stored for one quadrant.

    Solid angle is symmetric about both face axes, so only the quadrant of
    texels ``[N/2, N) x [N/2, N)`` is stored and every other texel is folded
    onto it. Use :func:`solid_angle_table` to construct instances.

    Attributes
    ----------
    solid_angles : Tensor
        Quadrant values in steradians, shape ``(N/2, N/2)`` indexed
        ``[y, x]``. All values are strictly positive.
    """

    solid_angles: Tensor

    @property
    def quadrant_size(self) -> int:
        """Edge length of the stored quadrant, ``N / 2``."""
        return self.solid_angles.shape[-1]

    @property
    def edge_length(self) -> int:
        """Edge length ``N`` of the face the table describes."""
        return 2 * self.quadrant_size

    def lookup(self, x: Union[Tensor, int], y: Union[Tensor, int]) -> Tensor:
        """Solid angle of texel ``(x, y)`` for any ``x, y`` in ``[0, N)``.

        Indices below ``N/2`` mirror to ``N/2 - i - 1``; indices at or above
        ``N/2`` shift to ``i - N/2``.
        """
        size = self.quadrant_size
        device = self.solid_angles.device
        x = torch.as_tensor(x, dtype=torch.int64, device=device)
        y = torch.as_tensor(y, dtype=torch.int64, device=device)

        x = torch.where(x >= size, x - size, size - x - 1)
        y = torch.where(y >= size, y - size, size - y - 1)

        return self.solid_angles[y, x]

    def full_face(self) -> Tensor:
        """Unfolded solid angles of a whole face, shape ``(N, N)``."""
        index = torch.arange(self.edge_length, device=self.solid_angles.device)
        return self.lookup(index[None, :], index[:, None])


def solid_angle_table(
    edge_length: int,
    *,
    dtype: torch.dtype | None = None,
    device: torch.device | None = None,
) -> SolidAngleTable:
    """Build the solid angle table of a cube face.

    Only ``(N/2)^2`` texels are evaluated. Values are computed in float64
    and cast to ``dtype``.

    Parameters
    ----------
    edge_length : int
        Face edge length ``N``. Must be even and positive.
    dtype : torch.dtype, optional
        Dtype of the stored values. Default is ``torch.get_default_dtype()``.
    device : torch.device, optional
        Device of the stored values.

    Returns
    -------
    SolidAngleTable

    Examples
    --------
    >>> table = solid_angle_table(64)
    >>> table.full_face().sum()  # 4 * pi / 6
    tensor(2.0944)
    """
    if edge_length <= 0 or edge_length % 2 != 0:
        raise ValueError(
            f"edge_length must be even and positive, got {edge_length}"
        )

    if dtype is None:
        dtype = torch.get_default_dtype()

    size = edge_length // 2
    texel = torch.arange(size, size + size, dtype=torch.float64)

    solid_angles = cube_texel_solid_angle(
        texel[None, :], texel[:, None], 1.0 / edge_length
    )

    if not bool((solid_angles > 0).all()):
        raise RuntimeError(
            f"non-positive texel solid angle for edge_length {edge_length}"
        )

    return SolidAngleTable(
        solid_angles=solid_angles.to(dtype=dtype, device=device),
        batch_size=[],
    )
