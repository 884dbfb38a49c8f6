"""Linear to gamma-encoded color conversion."""

import torch
from torch import Tensor


def linear_to_gamma(input: Tensor, gamma: float) -> Tensor:
    r"""Convert linear color values to gamma-encoded values.

    Mathematical Definition
    -----------------------
    .. math::
        f(x) = \max(x, 0)^{1 / \gamma}

    Parameters
    ----------
    input : Tensor
        Linear color values. Can be any shape.
    gamma : float
        Encoding exponent, typically 2.2. Must be positive.

    Returns
    -------
    Tensor
        Gamma-encoded color values with the same shape as input.

    See Also
    --------
    gamma_to_linear : Inverse conversion.
    """
    if gamma <= 0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    return torch.clamp(input, min=0.0).pow(1.0 / gamma)
