"""Tests for solid_angle_table and cube_texel_solid_angle."""

import math

import pytest
import torch

from torchcube.filter import (
    SolidAngleTable,
    cube_texel_solid_angle,
    solid_angle_table,
)


class TestSolidAngleTableConstruction:
    """Tests for construction and validation."""

    def test_shape(self):
        """Only one quadrant is stored."""
        table = solid_angle_table(16)

        assert isinstance(table, SolidAngleTable)
        assert table.solid_angles.shape == (8, 8)
        assert table.quadrant_size == 8
        assert table.edge_length == 16

    def test_dtype(self):
        """Requested dtype is honored."""
        table = solid_angle_table(4, dtype=torch.float64)
        assert table.solid_angles.dtype == torch.float64

    @pytest.mark.parametrize("edge_length", [0, -2, 3, 7])
    def test_invalid_edge_length(self, edge_length):
        """Odd or non-positive edge lengths raise."""
        with pytest.raises(ValueError, match="even and positive"):
            solid_angle_table(edge_length)

    @pytest.mark.parametrize("edge_length", [2, 16, 256])
    def test_positive(self, edge_length):
        """Every stored value is strictly positive."""
        table = solid_angle_table(edge_length, dtype=torch.float64)
        assert (table.solid_angles > 0).all()


class TestSolidAngleTableCorrectness:
    """Tests for numerical correctness."""

    def test_two_by_two_face(self):
        """Four texels split a face evenly."""
        table = solid_angle_table(2, dtype=torch.float64)
        torch.testing.assert_close(
            table.solid_angles,
            torch.full((1, 1), math.pi / 6, dtype=torch.float64),
        )

    @pytest.mark.parametrize("edge_length", [2, 4, 16, 64, 128])
    def test_face_sum(self, edge_length):
        """One face subtends a sixth of the sphere."""
        table = solid_angle_table(edge_length, dtype=torch.float64)
        total = table.full_face().sum().item()
        assert total == pytest.approx(4.0 * math.pi / 6.0, rel=1e-9)

    def test_sphere_sum(self):
        """Six faces cover the sphere."""
        table = solid_angle_table(32)
        total = 6.0 * table.full_face().sum().item()
        assert total == pytest.approx(4.0 * math.pi, rel=1e-3)

    def test_mirror_symmetry(self):
        """Values are symmetric about both face axes and the diagonal."""
        face = solid_angle_table(10, dtype=torch.float64).full_face()

        torch.testing.assert_close(face, face.flip(-1))
        torch.testing.assert_close(face, face.flip(-2))
        torch.testing.assert_close(face, face.T)

    def test_center_larger_than_corner(self):
        """Texels near the face center subtend more than corner texels."""
        table = solid_angle_table(8)
        assert table.lookup(3, 4).item() > table.lookup(0, 0).item()
        assert table.lookup(4, 4).item() > table.lookup(7, 4).item()

    def test_lookup_folding(self):
        """Lookup folds every texel onto the stored quadrant."""
        table = solid_angle_table(8, dtype=torch.float64)
        quadrant = table.solid_angles

        assert table.lookup(4, 4).item() == quadrant[0, 0].item()
        assert table.lookup(3, 3).item() == quadrant[0, 0].item()
        assert table.lookup(0, 7).item() == quadrant[3, 3].item()
        assert table.lookup(6, 1).item() == quadrant[2, 2].item()

    def test_lookup_tensor_indices(self):
        """Lookup accepts broadcast index tensors."""
        table = solid_angle_table(6)
        index = torch.arange(6)
        values = table.lookup(index[None, :], index[:, None])

        assert values.shape == (6, 6)
        torch.testing.assert_close(values, table.full_face())

    def test_matches_direct_evaluation(self):
        """Table entries agree with the per-texel solid angle."""
        edge_length = 12
        table = solid_angle_table(edge_length, dtype=torch.float64)
        index = torch.arange(edge_length)
        direct = cube_texel_solid_angle(
            index[None, :], index[:, None], 1.0 / edge_length
        )
        torch.testing.assert_close(table.full_face(), direct)

    def test_small_texel_approximation(self):
        """Small texels approach pixel area times cos^3 of the center."""
        edge_length = 64
        index = torch.arange(edge_length, dtype=torch.float64)
        u = (index + 0.5) * (2.0 / edge_length) - 1.0
        u, v = u[None, :], u[:, None]

        approximate = (2.0 / edge_length) ** 2 / (1.0 + u * u + v * v) ** 1.5
        exact = solid_angle_table(edge_length, dtype=torch.float64).full_face()

        torch.testing.assert_close(exact, approximate, rtol=5e-3, atol=0)
