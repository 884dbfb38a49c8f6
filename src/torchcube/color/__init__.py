"""Color space conversion functions."""

from torchcube.color._gamma_to_linear import gamma_to_linear
from torchcube.color._linear_to_gamma import linear_to_gamma

__all__ = [
    "gamma_to_linear",
    "linear_to_gamma",
]
