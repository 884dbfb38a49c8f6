"""Gamma-encoded to linear color conversion."""

import torch
from torch import Tensor


def gamma_to_linear(input: Tensor, gamma: float) -> Tensor:
    r"""Convert gamma-encoded color values to linear values.

    Mathematical Definition
    -----------------------
    For each input value :math:`x`:

    .. math::
        f(x) = \max(x, 0)^{\gamma}

    Parameters
    ----------
    input : Tensor
        Gamma-encoded color values. Can be any shape.
    gamma : float
        Encoding exponent, typically 2.2. Must be positive.

    Returns
    -------
    Tensor
        Linear color values with the same shape as input.

    Examples
    --------
    >>> gamma_to_linear(torch.tensor([0.0, 0.5, 1.0]), 2.0)
    tensor([0.0000, 0.2500, 1.0000])

    Notes
    -----
    - Negative inputs are clamped to zero, since a fractional power of a
      negative base is undefined.

    See Also
    --------
    linear_to_gamma : Inverse conversion.
    """
    if gamma <= 0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    return torch.clamp(input, min=0.0).pow(gamma)
