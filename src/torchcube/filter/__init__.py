"""Directional filtering of cube maps."""

from torchcube.filter._cosine_power_filter import cosine_power_filter
from torchcube.filter._solid_angle_table import (
    SolidAngleTable,
    cube_texel_solid_angle,
    solid_angle_table,
)
from torchcube.filter._vector_table import VectorTable, vector_table

__all__ = [
    "SolidAngleTable",
    "VectorTable",
    "cosine_power_filter",
    "cube_texel_solid_angle",
    "solid_angle_table",
    "vector_table",
]
