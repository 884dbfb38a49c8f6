"""Tests for vector_table."""

import pytest
import torch

from torchcube.filter import VectorTable, vector_table
from torchcube.texture_mapping import cube_texel_direction


class TestVectorTable:
    """Tests for the cube direction table."""

    def test_shape(self):
        """One direction per texel of every face."""
        table = vector_table(5)

        assert isinstance(table, VectorTable)
        assert table.directions.shape == (6, 5, 5, 3)
        assert table.edge_length == 5

    @pytest.mark.parametrize("edge_length", [0, -1])
    def test_invalid_edge_length(self, edge_length):
        """Non-positive edge lengths raise."""
        with pytest.raises(ValueError, match="positive"):
            vector_table(edge_length)

    def test_unit_length(self):
        """Every entry is unit length up to rounding."""
        table = vector_table(16)
        norm = table.directions.norm(dim=-1)
        torch.testing.assert_close(
            norm, torch.ones_like(norm), rtol=0, atol=1e-5
        )

    def test_lookup_matches_texel_direction(self):
        """Entries equal the texel direction of the same texel."""
        table = vector_table(8, dtype=torch.float64)

        for face in range(6):
            for x, y in [(0, 0), (7, 0), (3, 5), (7, 7)]:
                expected = cube_texel_direction(
                    face, x, y, 1.0 / 8, dtype=torch.float64
                )
                torch.testing.assert_close(
                    table.lookup(face, x, y), expected
                )

    def test_lookup_tensor_indices(self):
        """Lookup gathers batches of texels."""
        table = vector_table(4)
        face = torch.tensor([0, 2, 5])
        x = torch.tensor([1, 2, 3])
        y = torch.tensor([0, 0, 3])

        directions = table.lookup(face, x, y)

        assert directions.shape == (3, 3)
        torch.testing.assert_close(directions[1], table.directions[2, 0, 2])

    def test_directions_distinct(self):
        """No two texels share a direction."""
        directions = vector_table(4, dtype=torch.float64).directions
        flat = directions.reshape(-1, 3)
        distance = torch.cdist(flat, flat)
        distance.fill_diagonal_(1.0)
        assert (distance > 1e-3).all()
