"""Cube surface container."""

from torchcube.surface._cube_surface import CubeLayout, CubeSurface

__all__ = [
    "CubeLayout",
    "CubeSurface",
]
